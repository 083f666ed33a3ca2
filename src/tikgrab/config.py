from __future__ import annotations

from pydantic import BaseModel, Field
from pathlib import Path

IPHONE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_0 like Mac OS X) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko) Version/14.0 Mobile/15E148 Safari/604.1"
)

class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    output_dir: Path = Field(default_factory=Path.cwd)

class BrowserSettings(BaseModel):
    headless: bool = True
    # e.g. "http://127.0.0.1:8080"; empty means direct
    proxy: str = ""
    user_agent: str = IPHONE_USER_AGENT
    viewport_width: int = 375
    viewport_height: int = 667
    navigation_timeout_ms: int = 90_000
    selector_timeout_ms: int = 30_000
    extra_args: list[str] = Field(default_factory=list)

    def launch_args(self) -> list[str]:
        args = [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--no-zygote",
            "--disable-gpu",
            f"--window-size={self.viewport_width},{self.viewport_height}",
        ]
        if self.proxy:
            args.append(f"--proxy-server={self.proxy}")
        args.extend(self.extra_args)
        return args

class DownloadSettings(BaseModel):
    chunk_size: int = 8192
    timeout: float = 30.0
    resolve_timeout: float = 15.0

class Settings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    download: DownloadSettings = Field(default_factory=DownloadSettings)
