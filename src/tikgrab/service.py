from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tikgrab.browser import extract_video_url
from tikgrab.config import Settings
from tikgrab.download import download_file
from tikgrab.errors import InvalidURLError
from tikgrab.logging import get_logger
from tikgrab.paths import output_path
from tikgrab.resolve import resolve_redirect

log = get_logger(__name__)

NOTE_NO_WATERMARK = "Tried downloading without watermark"
NOTE_WATERMARK = "Watermarked version"


@dataclass
class FetchResult:
    source_url: str
    resolved_url: str
    video_url: str
    path: Path
    no_watermark: bool

    @property
    def note(self) -> str:
        return NOTE_NO_WATERMARK if self.no_watermark else NOTE_WATERMARK


def validate_url(url: Optional[str]) -> str:
    if not url or "tiktok.com" not in url:
        raise InvalidURLError("Invalid or missing TikTok URL")
    return url


def fetch_video(
    url: Optional[str],
    no_watermark: bool = False,
    settings: Optional[Settings] = None,
    progress: bool = False,
) -> FetchResult:
    """Resolve, extract and download one video.

    ``no_watermark`` only affects the file name and the reported note; the
    same media URL is fetched either way.
    """
    settings = settings or Settings()
    url = validate_url(url)

    resolved = resolve_redirect(url, timeout=settings.download.resolve_timeout)
    log.info(f"Extracting video from {resolved}")
    video_url = asyncio.run(extract_video_url(resolved, settings.browser))

    dst = output_path(settings.server.output_dir, no_watermark)
    download_file(
        video_url,
        dst,
        chunk_size=settings.download.chunk_size,
        timeout=settings.download.timeout,
        progress=progress,
    )
    log.info(f"Downloaded {dst.name}")
    return FetchResult(
        source_url=url,
        resolved_url=resolved,
        video_url=video_url,
        path=dst,
        no_watermark=no_watermark,
    )
