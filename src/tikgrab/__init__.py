from __future__ import annotations

from .errors import (
    TikgrabError,
    InvalidURLError,
    ResolveError,
    ExtractionError,
    DownloadError,
)
from .service import FetchResult, fetch_video

__all__ = [
    "TikgrabError",
    "InvalidURLError",
    "ResolveError",
    "ExtractionError",
    "DownloadError",
    "FetchResult",
    "fetch_video",
]

__version__ = "0.1.0"
