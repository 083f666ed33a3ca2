from __future__ import annotations

import asyncio
import json

import pytest

from tikgrab import browser
from tikgrab.browser import extract_video_url, pick_video_url, play_addr_from_next_data
from tikgrab.config import BrowserSettings, IPHONE_USER_AGENT
from tikgrab.errors import ExtractionError

PLAY_ADDR = "https://v16-webapp.tiktok.com/abc/video.mp4?a=1"


def _next_data(play_addr=PLAY_ADDR) -> str:
    return json.dumps({
        "props": {"pageProps": {"videoData": {"itemInfo": {"itemStruct": {
            "id": "123",
            "video": {"playAddr": play_addr},
        }}}}},
    })


class TestNextData:
    def test_play_addr(self):
        assert play_addr_from_next_data(_next_data()) == PLAY_ADDR

    @pytest.mark.parametrize("text", [None, "", "{not json", "[]", "null", '{"props": {}}'])
    def test_missing_or_malformed(self, text):
        assert play_addr_from_next_data(text) is None

    def test_empty_play_addr(self):
        assert play_addr_from_next_data(_next_data("")) is None

    def test_partial_path(self):
        text = json.dumps({"props": {"pageProps": {"videoData": {"itemInfo": {"itemStruct": {}}}}}})
        assert play_addr_from_next_data(text) is None


class TestPickVideoUrl:
    def test_video_src_wins(self):
        assert pick_video_url("https://cdn.example/v.mp4", _next_data()) == "https://cdn.example/v.mp4"

    def test_falls_back_to_next_data(self):
        assert pick_video_url(None, _next_data()) == PLAY_ADDR

    def test_nothing_found(self):
        with pytest.raises(ExtractionError, match="Could not retrieve video source"):
            pick_video_url(None, None)

    def test_non_http_candidate_rejected(self):
        with pytest.raises(ExtractionError):
            pick_video_url(None, _next_data("/relative/path.mp4"))


class _FakeElement:
    def __init__(self, text):
        self._text = text

    async def text_content(self):
        return self._text


class _FakePage:
    def __init__(self, video_src, next_data, fail_on_goto=False):
        self.video_src = video_src
        self.next_data = next_data
        self.fail_on_goto = fail_on_goto
        self.visited = []
        self.waited = []
        self.url = "about:blank"

    async def goto(self, url, wait_until=None, timeout=None):
        if self.fail_on_goto:
            raise RuntimeError("navigation timeout")
        self.visited.append((url, wait_until, timeout))
        self.url = url

    async def wait_for_selector(self, selector, timeout=None):
        self.waited.append((selector, timeout))

    async def get_attribute(self, selector, name):
        return self.video_src

    async def query_selector(self, selector):
        return _FakeElement(self.next_data) if self.next_data is not None else None


class _FakeContext:
    def __init__(self, page):
        self.page = page
        self.init_scripts = []

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def new_page(self):
        return self.page


class _FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False
        self.context_kwargs = None
        self.context = None

    async def new_context(self, **kwargs):
        self.context_kwargs = kwargs
        self.context = _FakeContext(self.page)
        return self.context

    async def close(self):
        self.closed = True


class _FakeChromium:
    def __init__(self, browser_):
        self.browser = browser_
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        return self.browser


class _FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return None


@pytest.fixture
def fake_browser(monkeypatch):
    def install(page):
        b = _FakeBrowser(page)
        chromium = _FakeChromium(b)
        monkeypatch.setattr(browser, "async_playwright", lambda: _FakePlaywright(chromium))
        return chromium

    return install


def test_extract_uses_video_src(fake_browser):
    page = _FakePage("https://cdn.example/v.mp4", None)
    chromium = fake_browser(page)
    settings = BrowserSettings(proxy="http://127.0.0.1:8080")

    url = asyncio.run(extract_video_url("https://www.tiktok.com/@u/video/1", settings))

    assert url == "https://cdn.example/v.mp4"
    assert chromium.browser.closed
    assert "--proxy-server=http://127.0.0.1:8080" in chromium.launch_kwargs["args"]
    assert chromium.browser.context_kwargs["is_mobile"] is True
    assert chromium.browser.context_kwargs["viewport"] == {"width": 375, "height": 667}
    assert page.visited == [("https://www.tiktok.com/@u/video/1", "domcontentloaded", 90_000)]


def test_extract_falls_back_to_next_data(fake_browser):
    chromium = fake_browser(_FakePage(None, _next_data()))
    assert asyncio.run(extract_video_url("https://www.tiktok.com/@u/video/1")) == PLAY_ADDR
    assert chromium.browser.closed


def test_extract_failure_closes_browser(fake_browser):
    chromium = fake_browser(_FakePage(None, "{broken"))
    with pytest.raises(ExtractionError):
        asyncio.run(extract_video_url("https://www.tiktok.com/@u/video/1"))
    assert chromium.browser.closed


def test_navigation_error_closes_browser(fake_browser):
    chromium = fake_browser(_FakePage(None, None, fail_on_goto=True))
    with pytest.raises(RuntimeError, match="navigation timeout"):
        asyncio.run(extract_video_url("https://www.tiktok.com/@u/video/1"))
    assert chromium.browser.closed


def test_relative_video_src_is_made_absolute(fake_browser):
    fake_browser(_FakePage("/v/abc.mp4", None))
    url = asyncio.run(extract_video_url("https://www.tiktok.com/@u/video/1"))
    assert url == "https://www.tiktok.com/v/abc.mp4"


def test_mobile_context_and_timeouts(fake_browser):
    page = _FakePage("https://cdn.example/v.mp4", None)
    chromium = fake_browser(page)
    settings = BrowserSettings(selector_timeout_ms=12_000, user_agent="test-agent/1.0")

    asyncio.run(extract_video_url("https://www.tiktok.com/@u/video/1", settings))

    kwargs = chromium.browser.context_kwargs
    assert kwargs["ignore_https_errors"] is True
    assert kwargs["user_agent"] == "test-agent/1.0"
    assert chromium.launch_kwargs["headless"] is True
    assert page.waited == [("video", 12_000)]
    assert chromium.browser.context.init_scripts == [browser._STEALTH_SCRIPT]
    assert "navigator, 'webdriver'" in browser._STEALTH_SCRIPT


def test_default_selector_timeout_and_user_agent(fake_browser):
    page = _FakePage("https://cdn.example/v.mp4", None)
    chromium = fake_browser(page)

    asyncio.run(extract_video_url("https://www.tiktok.com/@u/video/1"))

    assert page.waited == [("video", 30_000)]
    assert chromium.browser.context_kwargs["user_agent"] == IPHONE_USER_AGENT
