from __future__ import annotations

import json
from typing import Any, Optional
from urllib.parse import urljoin

from playwright.async_api import async_playwright, Page

from tikgrab.config import BrowserSettings
from tikgrab.errors import ExtractionError
from tikgrab.logging import get_logger

log = get_logger(__name__)

NEXT_DATA_SELECTOR = "script#__NEXT_DATA__"

_PLAY_ADDR_PATH = ("props", "pageProps", "videoData", "itemInfo", "itemStruct", "video", "playAddr")

# Hide the most obvious automation markers before any page script runs.
_STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
"""


def play_addr_from_next_data(text: Optional[str]) -> Optional[str]:
    """Pull ``...itemStruct.video.playAddr`` out of a ``__NEXT_DATA__`` blob.

    Returns None for empty input, malformed JSON or a missing path.
    """
    if not text:
        return None
    try:
        node: Any = json.loads(text)
    except ValueError:
        log.debug("__NEXT_DATA__ is not valid JSON")
        return None
    for key in _PLAY_ADDR_PATH:
        if not isinstance(node, dict) or not node.get(key):
            return None
        node = node[key]
    return node if isinstance(node, str) else None


def pick_video_url(video_src: Optional[str], next_data_text: Optional[str]) -> str:
    """Apply the fallback chain: ``<video src>`` first, then ``__NEXT_DATA__``."""
    candidate = video_src or play_addr_from_next_data(next_data_text)
    if not candidate or "http" not in candidate:
        raise ExtractionError("Could not retrieve video source")
    return candidate


async def _read_sources(page: Page) -> tuple[Optional[str], Optional[str]]:
    video_src = await page.get_attribute("video", "src")
    if video_src:
        # The DOM property is absolute; the raw attribute may be relative.
        return urljoin(page.url, video_src), None
    script = await page.query_selector(NEXT_DATA_SELECTOR)
    next_data = await script.text_content() if script else None
    return None, next_data


async def extract_video_url(page_url: str, settings: Optional[BrowserSettings] = None) -> str:
    """Open ``page_url`` in a headless mobile Chromium and return the media URL."""
    settings = settings or BrowserSettings()
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=settings.headless, args=settings.launch_args())
        try:
            context = await browser.new_context(
                user_agent=settings.user_agent,
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                is_mobile=True,
                ignore_https_errors=True,
            )
            await context.add_init_script(_STEALTH_SCRIPT)
            page = await context.new_page()

            log.debug(f"Opening {page_url}")
            await page.goto(page_url, wait_until="domcontentloaded", timeout=settings.navigation_timeout_ms)
            await page.wait_for_selector("video", timeout=settings.selector_timeout_ms)

            video_src, next_data = await _read_sources(page)
        finally:
            await browser.close()

    video_url = pick_video_url(video_src, next_data)
    log.debug(f"Video source: {video_url}")
    return video_url
