from dataclasses import dataclass, field, asdict
from typing import Optional

from .errors import ParseSchemaError

# ─── 数据结构 ───────────────────────────────────────────────────────────────────


@dataclass
class Author:
    uid: str = ""
    name: str = ""
    avatar: str = ""


@dataclass
class ImgInfo:
    url: str = ""


@dataclass
class VideoParseInfo:
    title: str = ""
    author: Author = field(default_factory=Author)
    video_url: str = ""
    music_url: str = ""
    cover_url: str = ""
    images: list[ImgInfo] = field(default_factory=list)

    def has_media(self) -> bool:
        return bool(self.video_url) or len(self.images) > 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload) -> "VideoParseInfo":
        """Decode the wire shape produced by ``to_dict``.

        Missing or null fields become empty values; a field holding the wrong
        JSON type raises ``ParseSchemaError``. Image entries may be either
        ``{"url": ...}`` objects or bare strings.
        """
        if not isinstance(payload, dict):
            raise ParseSchemaError(f"expected JSON object, got {type(payload).__name__}")

        author_raw = payload.get("author") or {}
        if not isinstance(author_raw, dict):
            raise ParseSchemaError("field 'author' is not an object")

        images_raw = payload.get("images") or []
        if not isinstance(images_raw, list):
            raise ParseSchemaError("field 'images' is not an array")
        images = []
        for img in images_raw:
            if isinstance(img, dict):
                images.append(ImgInfo(url=_text(img, "url")))
            elif isinstance(img, str):
                images.append(ImgInfo(url=img))
            else:
                raise ParseSchemaError("image entry is neither an object nor a string")

        return cls(
            title=_text(payload, "title"),
            author=Author(
                uid=_text(author_raw, "uid"),
                name=_text(author_raw, "name"),
                avatar=_text(author_raw, "avatar"),
            ),
            video_url=_text(payload, "video_url"),
            music_url=_text(payload, "music_url"),
            cover_url=_text(payload, "cover_url"),
            images=images,
        )


@dataclass
class BatchParseItem:
    parse_info: Optional[VideoParseInfo] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "parse_info": self.parse_info.to_dict() if self.parse_info else None,
            "error": str(self.error) if self.error else None,
        }


def _text(obj: dict, key: str) -> str:
    v = obj.get(key)
    if v is None:
        return ""
    if not isinstance(v, str):
        raise ParseSchemaError(f"field '{key}' is not a string")
    return v
