from abc import ABC
from typing import Optional

from ..errors import EmptyResultError, UnsupportedSourceError
from ..models import VideoParseInfo


class BaseExtractor(ABC):
    """Base class for all platform extractors.

    Subclasses override one or both of ``parse_share_url`` and
    ``parse_video_id``. Extractors keep no state between calls, so a single
    instance is shared by every thread.
    """

    source: str = ""

    def parse_share_url(self, share_url: str, timeout: Optional[float] = None) -> VideoParseInfo:
        raise UnsupportedSourceError(f"source {self.source} has no video share url parser")

    def parse_video_id(self, video_id: str, timeout: Optional[float] = None) -> VideoParseInfo:
        raise UnsupportedSourceError(f"source {self.source} has no video id parser")

    def _ensure_media(self, info: VideoParseInfo) -> VideoParseInfo:
        if not info.has_media():
            raise EmptyResultError(f"{self.source}: no video url or images found")
        return info
