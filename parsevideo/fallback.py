"""Remote parser used when no local extractor recognises a share URL.

The service answers either with an envelope::

    {"code": 0, "msg": "", "data": {"author": {...}, "title": "...",
     "video_url": "...", "music_url": "...", "cover_url": "...",
     "images": ["..."]}}

or, for older deployments, with the bare record (``VideoParseInfo.to_dict``
shape). The envelope is tried first and its decode error is the one reported
when neither shape fits.
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote_plus

from . import config
from .errors import EmptyResultError, ParseSchemaError, ParseVideoError, UpstreamError
from .http import new_client, _request_with_retry
from .models import ImgInfo, VideoParseInfo

logger = logging.getLogger("parsevideo")


@dataclass
class KakaDownResponse:
    code: int
    msg: str
    data: Optional[VideoParseInfo]


def decode_envelope(payload) -> KakaDownResponse:
    if not isinstance(payload, dict):
        raise ParseSchemaError(f"expected JSON object, got {type(payload).__name__}")

    code = payload.get("code", 0)
    if code is None:
        code = 0
    if isinstance(code, bool) or not isinstance(code, int):
        raise ParseSchemaError(f"field 'code' is not an integer: {code!r}")

    msg = payload.get("msg") or ""
    if not isinstance(msg, str):
        raise ParseSchemaError(f"field 'msg' is not a string: {msg!r}")

    raw = payload.get("data")
    if raw is None:
        return KakaDownResponse(code=code, msg=msg, data=None)
    if not isinstance(raw, dict):
        raise ParseSchemaError("field 'data' is not an object")

    images = raw.get("images") or []
    if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
        raise ParseSchemaError("field 'data.images' is not an array of strings")

    # Same field names as the bare record, except images are plain strings.
    info = VideoParseInfo.from_dict({**raw, "images": []})
    info.images = [ImgInfo(url=i) for i in images]
    return KakaDownResponse(code=code, msg=msg, data=info)


def _decode_legacy(payload) -> Optional[VideoParseInfo]:
    try:
        info = VideoParseInfo.from_dict(payload)
    except ParseVideoError:
        return None
    return info if info.has_media() else None


class KakaDownParser:
    def __init__(self, api: Optional[str] = None, require_success_code: Optional[bool] = None):
        self.api = api or config.settings.fallback_api
        if require_success_code is None:
            require_success_code = config.settings.fallback_require_success_code
        self.require_success_code = require_success_code

    def build_url(self, share_url: str) -> str:
        return f"{self.api}?url={quote_plus(share_url, safe='')}"

    def parse_share_url(self, share_url: str, timeout: Optional[float] = None) -> VideoParseInfo:
        api_url = self.build_url(share_url)
        logger.info(f"未识别的分享链接, 使用远程解析: {share_url}")
        client = new_client(timeout=timeout)
        try:
            resp = _request_with_retry(client, "GET", api_url, allow_status=True)
            body = resp.content
            if resp.is_error:
                logger.warning(f"kakadown 返回 HTTP {resp.status_code}, 按响应内容判断结果")
        finally:
            client.close()
        return self.parse_body(body)

    def parse_body(self, body: bytes) -> VideoParseInfo:
        payload = None
        try:
            payload = json.loads(body)
            envelope = decode_envelope(payload)
        except ValueError as first_err:
            legacy = _decode_legacy(payload) if payload is not None else None
            if legacy is None:
                raise ParseSchemaError(f"error unmarshalling response from kakadown: {first_err}") from first_err
            logger.debug("kakadown: 使用旧版响应格式")
            return legacy

        if envelope.data is not None:
            if self.require_success_code and envelope.code != 0:
                raise UpstreamError(f"kakadown returned code {envelope.code}: {envelope.msg}")
            if not envelope.data.has_media():
                raise EmptyResultError(f"kakadown: no video url or images in response (code={envelope.code})")
            return envelope.data

        legacy = _decode_legacy(payload)
        if legacy is not None:
            logger.debug("kakadown: data 为空, 按旧版响应格式解析成功")
            return legacy
        raise UpstreamError(f"kakadown response data is nil (code={envelope.code}, msg={envelope.msg})")
