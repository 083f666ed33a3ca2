from __future__ import annotations

import time
from pathlib import Path

def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path

def video_filename(no_watermark: bool, now_ms: int | None = None) -> str:
    """``tiktok_<epoch-millis>_nowm.mp4`` or ``tiktok_<epoch-millis>_wm.mp4``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "_nowm" if no_watermark else "_wm"
    return f"tiktok_{now_ms}{suffix}.mp4"

def output_path(out_dir: Path, no_watermark: bool, now_ms: int | None = None) -> Path:
    return ensure_dir(out_dir).resolve() / video_filename(no_watermark, now_ms)
