import json
from pathlib import Path
from typing import Any

import httpx
import pytest

import parsevideo
from parsevideo import config
from parsevideo import http as pv_http


@pytest.fixture
def fixture_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture(fixture_dir):
    def _loader(name: str) -> Any:
        with open(fixture_dir / name, "r", encoding="utf-8") as f:
            return json.load(f)
    return _loader


@pytest.fixture
def xianyu_detail(load_fixture):
    return load_fixture("xianyu_detail.json")


@pytest.fixture
def douyin_router(load_fixture):
    return load_fixture("douyin_router_data.json")


@pytest.fixture
def douyin_page(douyin_router):
    def _page(router=None) -> str:
        data = json.dumps(douyin_router if router is None else router, ensure_ascii=False)
        return f"<html><script>window._ROUTER_DATA = {data}</script></html>"
    return _page


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    """Default settings, and no real sleeping between retries."""
    monkeypatch.setattr(config, "settings", config.Settings())
    monkeypatch.setattr(pv_http.time, "sleep", lambda s: None)


class MockHTTPXClient:
    def __init__(self, routes: dict[tuple[str, str], Any] | None = None):
        self.routes = routes or {}
        self.calls: list[tuple[str, str, dict]] = []
        self.closed = False
        self.headers = {}
        self.init_kwargs = {}

    def request(self, method: str, url: str, **kwargs):
        key = (method.upper(), url)
        self.calls.append((method.upper(), url, kwargs))
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, request=httpx.Request(method, url), json={})
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(method, url, **kwargs)
        return route

    def get(self, url: str, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self.request("POST", url, **kwargs)

    def close(self):
        self.closed = True


@pytest.fixture
def mock_httpx_client(monkeypatch):
    """Replace ``httpx.Client`` with one shared recording fake."""
    holder = {"instance": None}

    def _factory(routes=None):
        inst = MockHTTPXClient(routes=routes)
        holder["instance"] = inst

        def _new(*a, **k):
            inst.init_kwargs = k
            inst.headers = dict(k.get("headers") or {})
            return inst

        monkeypatch.setattr(pv_http.httpx, "Client", _new)
        return inst

    return _factory


def _make_response(method: str, url: str, *, text: str | None = None, json_body: Any = None,
       content: bytes | None = None, final_url: str | None = None, status: int = 200) -> httpx.Response:
    """Build a canned response; ``final_url`` simulates where redirects ended."""
    request = httpx.Request(method, final_url or url)
    if json_body is not None:
        return httpx.Response(status, request=request, json=json_body)
    if content is not None:
        return httpx.Response(status, request=request, content=content)
    return httpx.Response(status, request=request, text=text or "")


@pytest.fixture
def make_response():
    return _make_response
