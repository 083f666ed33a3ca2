from __future__ import annotations

from pathlib import Path
from typing import Optional

import httpx
from rich.progress import (
    Progress,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
    SpinnerColumn,
)

from tikgrab.errors import DownloadError
from tikgrab.logging import console, get_logger

log = get_logger(__name__)


class DownloadProgress:
    """A progress bar for file downloads with Rich."""

    def __init__(self, filename: str, total_size: Optional[int] = None):
        self.filename = filename
        self.total_size = total_size
        self.downloaded = 0

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=console(),
            transient=True,
        )
        self.task_id = self.progress.add_task(f"Downloading {filename}", total=total_size)

    def update(self, chunk_size: int) -> None:
        self.downloaded += chunk_size
        self.progress.update(self.task_id, completed=self.downloaded)

    def set_total(self, total_size: int) -> None:
        self.total_size = total_size
        self.progress.update(self.task_id, total=total_size)

    def __enter__(self):
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()


class _NoProgress:
    def update(self, chunk_size: int) -> None:
        pass

    def set_total(self, total_size: int) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return None


def download_file(
    url: str,
    output_path: Path,
    *,
    client: Optional[httpx.Client] = None,
    chunk_size: int = 8192,
    timeout: float = 30.0,
    progress: bool = False,
) -> Path:
    """
    Stream ``url`` to ``output_path``.

    Args:
        url: Media URL to fetch
        output_path: Destination file, parent directories are created
        client: Optional httpx client (tests inject a mock transport)
        chunk_size: Size of chunks to write
        timeout: Request timeout in seconds
        progress: Render a rich progress bar while downloading

    Raises:
        DownloadError: on a non-200 answer or a transport failure. No partial
            file is left behind in either case.
    """
    own_client = client is None
    c = client or httpx.Client(follow_redirects=True, timeout=timeout)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with c.stream("GET", url) as response:
            if response.status_code != 200:
                raise DownloadError(f"Download failed. Status code: {response.status_code}")

            bar = DownloadProgress(output_path.name) if progress else _NoProgress()
            with bar:
                if "content-length" in response.headers:
                    bar.set_total(int(response.headers["content-length"]))
                with open(output_path, "wb") as f:
                    for chunk in response.iter_bytes(chunk_size=chunk_size):
                        f.write(chunk)
                        bar.update(len(chunk))
    except httpx.HTTPError as exc:
        output_path.unlink(missing_ok=True)
        raise DownloadError(f"Download failed: {exc}") from exc
    except BaseException:
        output_path.unlink(missing_ok=True)
        raise
    finally:
        if own_client:
            c.close()

    log.debug(f"Saved {url} -> {output_path}")
    return output_path


def format_file_size(size_bytes: float) -> str:
    """Format file size in human readable format."""
    if size_bytes == 0:
        return "0B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while size_bytes >= 1024 and i < len(size_names) - 1:
        size_bytes /= 1024.0
        i += 1

    return f"{size_bytes:.1f}{size_names[i]}"
