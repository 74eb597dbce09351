"""Runtime settings, read from the environment at import time.

    PARSEVIDEO_TIMEOUT          HTTP timeout in seconds (default 15)
    PARSEVIDEO_MAX_RETRIES      attempts per request on transport errors / 429 (default 3)
    PARSEVIDEO_USER_AGENT       User-Agent sent to share hosts and item APIs
    PARSEVIDEO_FALLBACK_API     remote parser endpoint for unknown share hosts
    PARSEVIDEO_FALLBACK_STRICT  "1"/"true" rejects remote responses whose code != 0
    PARSEVIDEO_BATCH_WORKERS    max concurrent ids in a batch parse (default 16)
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("parsevideo")

DESKTOP_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/125.0.0.0 Safari/537.36"
)

DEFAULT_FALLBACK_API = "https://kakadown.com/video/share/url/parse"


@dataclass
class Settings:
    timeout: float = 15.0
    max_retries: int = 3
    user_agent: str = DESKTOP_UA
    fallback_api: str = DEFAULT_FALLBACK_API
    fallback_require_success_code: bool = False
    batch_max_workers: int = 16


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        v = float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} 不是数字, 使用默认值 {default}")
        return default
    return v if v > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        v = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} 不是整数, 使用默认值 {default}")
        return default
    return v if v > 0 else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    return Settings(
        timeout=_env_float("PARSEVIDEO_TIMEOUT", 15.0),
        max_retries=_env_int("PARSEVIDEO_MAX_RETRIES", 3),
        user_agent=os.getenv("PARSEVIDEO_USER_AGENT") or DESKTOP_UA,
        fallback_api=os.getenv("PARSEVIDEO_FALLBACK_API") or DEFAULT_FALLBACK_API,
        fallback_require_success_code=_env_bool("PARSEVIDEO_FALLBACK_STRICT", False),
        batch_max_workers=_env_int("PARSEVIDEO_BATCH_WORKERS", 16),
    )


settings = load_settings()
