import json
import logging
import re
from typing import Optional

from ..errors import ParseSchemaError, UpstreamError
from ..http import new_client, _request_with_retry
from ..models import Author, ImgInfo, VideoParseInfo
from ..utils import json_get, str_or_empty
from .base import BaseExtractor

logger = logging.getLogger("parsevideo")

SHARE_PAGE = "https://www.iesdouyin.com/share/video/{video_id}/"

_ROUTER_DATA_RE = re.compile(r"window\._ROUTER_DATA\s*=\s*(.*?)</script>", re.DOTALL)
_VIDEO_ID_RES = (
    re.compile(r"/(?:video|note|slides)/(\d+)"),
    re.compile(r"[?&](?:modal_id|aweme_id)=(\d+)"),
)


class DouyinExtractor(BaseExtractor):
    source = "douyin"

    def parse_share_url(self, share_url: str, timeout: Optional[float] = None) -> VideoParseInfo:
        client = new_client(mobile=True, timeout=timeout)
        try:
            # Resolve short link → get video_id
            resp = _request_with_retry(client, "GET", share_url)
            video_id = self._video_id_from_url(str(resp.url))
            logger.debug(f"抖音: {share_url} → video_id={video_id}")
            return self._parse_share_page(client, video_id)
        finally:
            client.close()

    def parse_video_id(self, video_id: str, timeout: Optional[float] = None) -> VideoParseInfo:
        client = new_client(mobile=True, timeout=timeout)
        try:
            return self._parse_share_page(client, video_id)
        finally:
            client.close()

    @staticmethod
    def _video_id_from_url(final_url: str) -> str:
        last = final_url.split("?")[0].strip("/").split("/")[-1]
        if last.isdigit():
            return last
        for pattern in _VIDEO_ID_RES:
            m = pattern.search(final_url)
            if m:
                return m.group(1)
        raise ParseSchemaError(f"douyin: video id not found in {final_url}")

    def _parse_share_page(self, client, video_id: str) -> VideoParseInfo:
        resp = _request_with_retry(client, "GET", SHARE_PAGE.format(video_id=video_id))

        m = _ROUTER_DATA_RE.search(resp.text)
        if not m:
            raise ParseSchemaError("douyin: window._ROUTER_DATA not found in share page")
        try:
            router = json.loads(m.group(1).strip())
        except ValueError as e:
            raise ParseSchemaError(f"douyin: router data is not valid JSON: {e}") from e

        loader = router.get("loaderData") if isinstance(router, dict) else None
        if not isinstance(loader, dict):
            raise ParseSchemaError("douyin: loaderData missing")

        page_data = None
        for key, value in loader.items():
            if "page" in key and isinstance(value, dict):
                page_data = value
                break
        if not page_data:
            raise ParseSchemaError("douyin: page data not found in loaderData")

        video_info_res = page_data.get("videoInfoRes") or {}
        if not isinstance(video_info_res, dict):
            raise ParseSchemaError("douyin: videoInfoRes is not an object")
        item_list = video_info_res.get("item_list") or []
        if not isinstance(item_list, list):
            raise ParseSchemaError("douyin: item_list is not an array")
        if not item_list:
            reason = str_or_empty(json_get(video_info_res, "filter_list.0.detail_msg")) or \
                str_or_empty(json_get(video_info_res, "filter_list.0.filter_reason"))
            if reason:
                raise UpstreamError(f"douyin: video {video_id} unavailable: {reason}")
            raise ParseSchemaError(f"douyin: item_list is empty for video {video_id}")
        item = item_list[0]
        if not isinstance(item, dict):
            raise ParseSchemaError("douyin: item_list[0] is not an object")

        return self._ensure_media(self._item_to_info(item))

    @staticmethod
    def _item_to_info(item: dict) -> VideoParseInfo:
        a = item.get("author") or {}
        if not isinstance(a, dict):
            raise ParseSchemaError("douyin: author is not an object")
        author = Author(
            uid=str_or_empty(a.get("sec_uid")),
            name=str_or_empty(a.get("nickname")),
            avatar=str_or_empty(json_get(a, "avatar_thumb.url_list.0")),
        )

        # Image posts (图集) still carry a placeholder play_addr; ignore it.
        images = []
        for img in item.get("images") or []:
            img_url = str_or_empty(json_get(img, "url_list.0"))
            if img_url:
                images.append(ImgInfo(url=img_url))

        video_url = ""
        if not images:
            video_url = str_or_empty(json_get(item, "video.play_addr.url_list.0")).replace("playwm", "play")

        music_url = str_or_empty(json_get(item, "music.play_url.uri"))
        if not music_url.startswith("http"):
            music_url = str_or_empty(json_get(item, "music.play_url.url_list.0"))

        return VideoParseInfo(
            title=str_or_empty(item.get("desc")),
            author=author,
            video_url=video_url,
            music_url=music_url,
            cover_url=str_or_empty(json_get(item, "video.cover.url_list.0")),
            images=images,
        )
