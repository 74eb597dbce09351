import logging
import time
from typing import Optional

import httpx

from . import config
from .errors import TransportError

logger = logging.getLogger("parsevideo")

MOBILE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_2 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.0 Mobile/15E148 Safari/604.1"
)


def _headers(mobile: bool = False) -> dict[str, str]:
    return {
        "User-Agent": MOBILE_UA if mobile else config.settings.user_agent,
        "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8",
    }


def new_client(mobile: bool = False, timeout: Optional[float] = None,
               headers: Optional[dict[str, str]] = None) -> httpx.Client:
    """A fresh client per extraction; callers close it when done."""
    h = _headers(mobile)
    if headers:
        h.update(headers)
    return httpx.Client(
        follow_redirects=True,
        timeout=timeout or config.settings.timeout,
        headers=h,
    )


def _request_with_retry(client: httpx.Client, method: str, url: str, allow_status: bool = False,
                        **kwargs) -> httpx.Response:
    """HTTP request with exponential backoff retry.

    Transport errors, timeouts and 429 are retried; any other non-2xx status
    is raised immediately as ``TransportError``. With ``allow_status`` the
    response is returned whatever its status, for APIs that report failures
    in the body.
    """
    max_retries = max(1, config.settings.max_retries)
    last_exc = None
    for attempt in range(max_retries):
        try:
            resp = client.request(method, url, **kwargs)
            if allow_status:
                return resp
            resp.raise_for_status()
            return resp
        except (httpx.TransportError, httpx.TimeoutException) as e:
            last_exc = e
            logger.warning(f"Retry {attempt+1}/{max_retries} for {url}: {e}")
            if attempt + 1 < max_retries:
                time.sleep(2 ** attempt)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                last_exc = e
                logger.warning(f"Rate limited by {url}, attempt {attempt+1}/{max_retries}")
                if attempt + 1 < max_retries:
                    time.sleep(2 ** (attempt + 1))
            else:
                raise TransportError(f"{method} {url} returned HTTP {status}") from e
    raise TransportError(f"{method} {url} failed after {max_retries} attempts: {last_exc}") from last_exc

