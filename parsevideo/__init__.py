"""parsevideo - 短视频/闲鱼分享链接解析

Turns share messages, share URLs or ``(source, video_id)`` pairs into a
uniform ``VideoParseInfo`` record.
"""

from .errors import (
    ParseVideoError,
    InputValidationError,
    UnsupportedSourceError,
    TransportError,
    ParseSchemaError,
    UpstreamError,
    EmptyResultError,
)
from .models import Author, ImgInfo, VideoParseInfo, BatchParseItem
from .registry import SOURCE_DOUYIN, SOURCE_XIANYU, SOURCE_REGISTRY, SourceInfo, resolve_source
from .parser import (
    parse_video_share_url_by_regexp,
    parse_video_share_url,
    parse_video_id,
    batch_parse_video_id,
)

__version__ = "1.0.0"

__all__ = [
    "ParseVideoError",
    "InputValidationError",
    "UnsupportedSourceError",
    "TransportError",
    "ParseSchemaError",
    "UpstreamError",
    "EmptyResultError",
    "Author",
    "ImgInfo",
    "VideoParseInfo",
    "BatchParseItem",
    "SOURCE_DOUYIN",
    "SOURCE_XIANYU",
    "SOURCE_REGISTRY",
    "SourceInfo",
    "resolve_source",
    "parse_video_share_url_by_regexp",
    "parse_video_share_url",
    "parse_video_id",
    "batch_parse_video_id",
]
