import json

import httpx
import pytest

from parsevideo import config, errors
from parsevideo.fallback import KakaDownParser, decode_envelope
from parsevideo.models import Author, ImgInfo, VideoParseInfo

SHARE_URL = "https://example.test/x"
API_URL = "https://kakadown.com/video/share/url/parse?url=https%3A%2F%2Fexample.test%2Fx"

ENVELOPE_OK = {
    "code": 0, "msg": "",
    "data": {
        "author": {"uid": "u1", "name": "N", "avatar": "a"},
        "title": "T", "video_url": "v", "music_url": "m", "cover_url": "c",
        "images": ["i1", "i2"],
    },
}


@pytest.fixture
def kakadown(mock_httpx_client, make_response):
    def _serve(body, status=200):
        raw = body if isinstance(body, bytes) else json.dumps(body).encode()
        return mock_httpx_client({("GET", API_URL): make_response("GET", API_URL, content=raw, status=status)})
    return _serve


@pytest.mark.unit
class Describe_KakaDownParser:
    def test_should_percent_encode_share_url(self):
        """分享链接应整体 URL 编码后作为 url 参数。"""
        assert KakaDownParser().build_url(SHARE_URL) == API_URL
        assert KakaDownParser().build_url("https://a.test/p?x=1&y=2 z").endswith(
            "url=https%3A%2F%2Fa.test%2Fp%3Fx%3D1%26y%3D2+z")

    def test_should_use_configured_api(self, monkeypatch):
        """应可通过配置替换远程解析地址。"""
        monkeypatch.setattr(config.settings, "fallback_api", "https://mirror.test/parse")
        assert KakaDownParser().build_url(SHARE_URL).startswith("https://mirror.test/parse?url=")

    def test_given_envelope_should_translate_record(self, kakadown):
        """带 data 的响应应转换为 VideoParseInfo，图片保持顺序。"""
        client = kakadown(ENVELOPE_OK)
        r = KakaDownParser().parse_share_url(SHARE_URL)
        assert r == VideoParseInfo(
            title="T", video_url="v", music_url="m", cover_url="c",
            author=Author(uid="u1", name="N", avatar="a"),
            images=[ImgInfo(url="i1"), ImgInfo(url="i2")],
        )
        assert [(c[0], c[1]) for c in client.calls] == [("GET", API_URL)]
        assert client.closed

    def test_given_null_data_should_raise(self, kakadown):
        """data 为 null 时应报错。"""
        kakadown({"code": 404, "msg": "not found", "data": None})
        with pytest.raises(errors.UpstreamError, match="kakadown response data is nil"):
            KakaDownParser().parse_share_url(SHARE_URL)

    def test_given_null_data_with_error_status_should_read_body(self, kakadown):
        """HTTP 状态码非 2xx 时仍应按响应内容判断结果。"""
        kakadown({"code": 404, "msg": "not found", "data": None}, status=404)
        with pytest.raises(errors.UpstreamError, match="kakadown response data is nil"):
            KakaDownParser().parse_share_url(SHARE_URL)

    def test_given_data_with_error_status_should_succeed(self, kakadown):
        """HTTP 5xx 但 data 非空时应返回解析结果。"""
        client = kakadown(ENVELOPE_OK, status=502)
        assert KakaDownParser().parse_share_url(SHARE_URL).title == "T"
        assert len(client.calls) == 1

    def test_given_null_data_with_ok_code_should_still_raise(self, kakadown):
        """即使 code 为 0，data 为 null 仍应报错。"""
        kakadown({"code": 0, "msg": "ok", "data": None})
        with pytest.raises(errors.UpstreamError, match="kakadown response data is nil"):
            KakaDownParser().parse_share_url(SHARE_URL)

    def test_given_legacy_body_should_return_record(self, kakadown):
        """旧版服务直接返回 VideoParseInfo 时应兼容解析。"""
        legacy = VideoParseInfo(title="L", video_url="https://v/1",
                                images=[ImgInfo(url="https://i/1")]).to_dict()
        kakadown(legacy)
        r = KakaDownParser().parse_share_url(SHARE_URL)
        assert r.title == "L" and r.video_url == "https://v/1"
        assert [i.url for i in r.images] == ["https://i/1"]

    def test_given_garbage_should_report_first_decode_error(self, kakadown):
        """两种格式都解析失败时，应报告第一次解析的错误。"""
        kakadown(b"<html>502 Bad Gateway</html>")
        with pytest.raises(errors.ParseSchemaError, match="error unmarshalling response from kakadown") as exc:
            KakaDownParser().parse_share_url(SHARE_URL)
        assert isinstance(exc.value.__cause__, json.JSONDecodeError)

    def test_given_wrong_envelope_types_should_prefer_envelope_error(self, kakadown):
        """信封字段类型错误且旧格式也无媒体时，错误信息来自信封解析。"""
        kakadown({"code": "zero", "msg": "", "data": None})
        with pytest.raises(errors.ParseSchemaError, match="field 'code' is not an integer"):
            KakaDownParser().parse_share_url(SHARE_URL)

    def test_given_wrong_envelope_types_but_legacy_record_should_return_it(self, kakadown):
        """信封解析失败但旧格式可用时应返回旧格式结果。"""
        kakadown({"code": "legacy", "title": "L", "video_url": "https://v/1"})
        assert KakaDownParser().parse_share_url(SHARE_URL).video_url == "https://v/1"

    def test_default_policy_should_ignore_code(self, kakadown):
        """默认策略下 code 非 0 但有 data 仍视为成功。"""
        kakadown({**ENVELOPE_OK, "code": 500, "msg": "partial"})
        assert KakaDownParser().parse_share_url(SHARE_URL).title == "T"

    def test_strict_policy_should_reject_non_zero_code(self, kakadown):
        """严格策略下 code 非 0 应报错。"""
        kakadown({**ENVELOPE_OK, "code": 500, "msg": "partial"})
        with pytest.raises(errors.UpstreamError, match="code 500"):
            KakaDownParser(require_success_code=True).parse_share_url(SHARE_URL)

    def test_given_data_without_media_should_raise(self, kakadown):
        """data 中没有视频也没有图片时不应返回空壳结果。"""
        kakadown({"code": 0, "msg": "", "data": {"title": "T", "images": []}})
        with pytest.raises(errors.EmptyResultError):
            KakaDownParser().parse_share_url(SHARE_URL)

    def test_given_http_error_should_raise_transport(self, mock_httpx_client):
        """远程服务连接失败时应抛出 TransportError。"""
        mock_httpx_client({("GET", API_URL): httpx.ConnectError("refused")})
        with pytest.raises(errors.TransportError):
            KakaDownParser().parse_share_url(SHARE_URL)


@pytest.mark.unit
class Describe_decode_envelope:
    def test_given_non_string_images_should_raise(self):
        """data.images 必须是字符串数组。"""
        with pytest.raises(errors.ParseSchemaError):
            decode_envelope({"code": 0, "data": {"images": [{"url": "x"}]}})

    def test_given_missing_code_should_default_to_zero(self):
        """缺少 code 时按 0 处理。"""
        resp = decode_envelope({"data": None})
        assert resp.code == 0 and resp.msg == "" and resp.data is None
