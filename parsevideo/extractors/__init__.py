from .base import BaseExtractor
from .douyin import DouyinExtractor
from .xianyu import XianyuExtractor

__all__ = ["BaseExtractor", "DouyinExtractor", "XianyuExtractor"]
