import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Iterable, Optional

from . import config
from .errors import InputValidationError, UnsupportedSourceError
from .extractors import BaseExtractor
from .fallback import KakaDownParser
from .models import BatchParseItem, VideoParseInfo
from .registry import get_source_info, resolve_source
from .utils import regexp_match_url_from_string

logger = logging.getLogger("parsevideo")

# ─── 单条解析 ──────────────────────────────────────────────────────────────────


def parse_video_share_url_by_regexp(share_msg: str, timeout: Optional[float] = None) -> VideoParseInfo:
    """Pull the first link out of a pasted share message and parse it."""
    share_url = regexp_match_url_from_string(share_msg)
    return parse_video_share_url(share_url, timeout=timeout)


def parse_video_share_url(share_url: str, timeout: Optional[float] = None) -> VideoParseInfo:
    """Parse a share URL with the matching local extractor.

    Hosts no source recognises go to the remote parser. A recognised source
    whose extractor fails is reported as-is; the remote parser is not tried.
    """
    if not isinstance(share_url, str) or not share_url.strip():
        raise InputValidationError("share url is empty")

    source = resolve_source(share_url)
    if source is None:
        return KakaDownParser().parse_share_url(share_url, timeout=timeout)

    info = get_source_info(source)
    if info is None or info.share_extractor is None:
        raise UnsupportedSourceError(f"source {source} has no video share url parser")

    logger.debug(f"{share_url} → {source}")
    return info.share_extractor.parse_share_url(share_url, timeout=timeout)


def parse_video_id(source: str, video_id: str, timeout: Optional[float] = None) -> VideoParseInfo:
    if not video_id or not source:
        raise InputValidationError("video id or source is empty")
    extractor = _id_extractor(source)
    return extractor.parse_video_id(video_id, timeout=timeout)


def _id_extractor(source: str) -> BaseExtractor:
    info = get_source_info(source)
    if info is None or info.id_extractor is None:
        raise UnsupportedSourceError(f"source {source} has no video id parser")
    return info.id_extractor


# ─── 批量处理 ──────────────────────────────────────────────────────────────────


def batch_parse_video_id(source: str, video_ids: Iterable[str], max_workers: Optional[int] = None,
                         timeout: Optional[float] = None) -> dict[str, BatchParseItem]:
    """Parse many ids of one source concurrently.

    Every distinct id gets an entry, holding either its result or its error;
    one failure never cancels the others. ``max_workers`` caps concurrency
    (default ``settings.batch_max_workers``).
    """
    if isinstance(video_ids, str):
        raise InputValidationError("video ids must be a list of ids, not a single string")
    ids = list(dict.fromkeys(video_ids or []))
    if not ids or not source:
        raise InputValidationError("video ids or source is empty")
    _id_extractor(source)

    workers = max_workers or config.settings.batch_max_workers
    workers = max(1, min(workers, len(ids)))
    logger.info(f"批量解析 {source}: {len(ids)} 个 id, 并发 {workers}")

    results: dict[str, BatchParseItem] = {}
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="parsevideo") as pool:
        futures = {pool.submit(parse_video_id, source, vid, timeout): vid for vid in ids}
        for fut in as_completed(futures):
            vid = futures[fut]
            try:
                results[vid] = BatchParseItem(parse_info=fut.result())
            except Exception as e:
                logger.warning(f"批量解析失败 [{source}:{vid}]: {e}")
                results[vid] = BatchParseItem(error=e)
    return results
