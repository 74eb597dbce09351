import logging
import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from ..errors import EmptyResultError, ParseSchemaError, UpstreamError
from ..http import new_client, _request_with_retry
from ..models import Author, ImgInfo, VideoParseInfo
from ..utils import json_get, str_or_empty
from .base import BaseExtractor

logger = logging.getLogger("parsevideo")

DETAIL_API = "https://h5api.m.goofish.com/h5/mtop.taobao.idle.pc.detail/1.0/"

# Without a cookie header the mtop gateway answers with a bot wall.
_MTOP_COOKIE = "1=1;"

_FINAL_URL_RE = re.compile(r"var url = '(.*?)';")


class XianyuExtractor(BaseExtractor):
    """闲鱼 listing extractor.

    share page → ``var url = '...'`` → item detail API → images / seller.
    Listings carry no video, so only ``images`` satisfies the media check.
    """

    source = "xianyu"

    def parse_share_url(self, share_url: str, timeout: Optional[float] = None) -> VideoParseInfo:
        client = new_client(timeout=timeout)
        try:
            resp = _request_with_retry(client, "GET", share_url)
            m = _FINAL_URL_RE.search(resp.text)
            if not m:
                raise ParseSchemaError("xianyu: final URL not found in share page")
            final_url = m.group(1)
            logger.debug(f"闲鱼: 分享页跳转地址 {final_url}")

            if "goofish.com" not in final_url:
                raise UpstreamError(f"not a goofish.com url: {final_url}")

            return self._fetch_item(client, final_url)
        finally:
            client.close()

    def parse_item_url(self, item_url: str, timeout: Optional[float] = None) -> VideoParseInfo:
        """Skip the share page for an already resolved goofish.com item link."""
        client = new_client(timeout=timeout)
        try:
            return self._fetch_item(client, item_url)
        finally:
            client.close()

    def _fetch_item(self, client, item_url: str) -> VideoParseInfo:
        query = parse_qs(urlparse(item_url).query)
        item_id = (query.get("id") or [""])[0]
        if not item_id:
            raise ParseSchemaError(f"xianyu: item ID not found in URL: {item_url}")

        resp = _request_with_retry(
            client, "POST", DETAIL_API,
            content=f'data={{"itemId":"{item_id}"}}',
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Cookie": _MTOP_COOKIE,
            },
        )
        try:
            data = resp.json()
        except ValueError as e:
            raise ParseSchemaError(f"xianyu: detail API returned non-JSON body: {e}") from e

        ret0 = str_or_empty(json_get(data, "ret.0"))
        if not ret0.startswith("SUCCESS"):
            raise UpstreamError(f"xianyu API error: {ret0}")

        item = json_get(data, "data.itemDO")
        if not isinstance(item, dict):
            raise ParseSchemaError("xianyu: item data not found in API response")

        seller = json_get(data, "data.sellerDO")
        seller = seller if isinstance(seller, dict) else {}

        images = self._collect_images(item.get("imageInfos"), "url")
        if not images:
            logger.debug(f"闲鱼: imageInfos 为空, 改用 shareData 图片 ({item_id})")
            images = self._collect_images(
                json_get(item, "shareData.contentParams.mainParams.images"), "image")
        if not images:
            raise EmptyResultError(f"xianyu: no images found for item {item_id}")

        return self._ensure_media(VideoParseInfo(
            title=str_or_empty(item.get("title")),
            author=Author(
                name=str_or_empty(seller.get("nick")),
                avatar=str_or_empty(seller.get("portraitUrl")),
            ),
            images=images,
        ))

    @staticmethod
    def _collect_images(entries, key: str) -> list[ImgInfo]:
        if not isinstance(entries, list):
            return []
        images = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            url = str_or_empty(entry.get(key))
            if url:
                images.append(ImgInfo(url=url))
        return images
