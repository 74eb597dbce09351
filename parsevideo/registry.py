from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .extractors import BaseExtractor, DouyinExtractor, XianyuExtractor

SOURCE_DOUYIN = "douyin"
SOURCE_XIANYU = "xianyu"


@dataclass(frozen=True)
class SourceInfo:
    share_host_patterns: tuple[str, ...]
    share_extractor: Optional[BaseExtractor] = None
    id_extractor: Optional[BaseExtractor] = None


_douyin = DouyinExtractor()

# Order matters: the first source with a matching pattern wins.
SOURCE_REGISTRY: Mapping[str, SourceInfo] = MappingProxyType({
    SOURCE_DOUYIN: SourceInfo(
        share_host_patterns=("v.douyin.com", "www.iesdouyin.com", "www.douyin.com", "m.douyin.com"),
        share_extractor=_douyin,
        id_extractor=_douyin,
    ),
    SOURCE_XIANYU: SourceInfo(
        share_host_patterns=("m.tb.cn", "goofish.com"),
        share_extractor=XianyuExtractor(),
    ),
})


def get_source_info(source: str, registry: Optional[Mapping[str, SourceInfo]] = None) -> Optional[SourceInfo]:
    if registry is None:
        registry = SOURCE_REGISTRY
    return registry.get(source)


def resolve_source(url: str, registry: Optional[Mapping[str, SourceInfo]] = None) -> Optional[str]:
    """Map a share URL to a source key by substring match, or None if unknown.

    Patterns are plain substrings of the whole URL (scheme and query string
    included), not host comparisons.
    """
    if not url:
        return None
    if registry is None:
        registry = SOURCE_REGISTRY
    for source, info in registry.items():
        if any(p in url for p in info.share_host_patterns):
            return source
    return None
