from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from tikgrab.config import Settings, ServerSettings, BrowserSettings
from tikgrab.download import format_file_size
from tikgrab.errors import TikgrabError
from tikgrab.logging import console, set_verbose
from tikgrab.resolve import resolve_redirect
from tikgrab.server import DownloadServer
from tikgrab import service

app = typer.Typer(
    name="tikgrab",
    add_completion=False,
    no_args_is_help=True,
    help="tikgrab: fetch TikTok videos through a headless browser.",
)

@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", envvar="TIKGRAB_VERBOSE", help="Enable verbose logs."),
) -> None:
    set_verbose(verbose)

def _settings(out: Optional[Path], proxy: str, host: str = "0.0.0.0", port: int = 3000) -> Settings:
    return Settings(
        server=ServerSettings(host=host, port=port, output_dir=out or ServerSettings().output_dir),
        browser=BrowserSettings(proxy=proxy),
    )

@app.command("serve")
def serve_cmd(
    host: str = typer.Option("0.0.0.0", "--host", envvar="TIKGRAB_HOST", help="Host to bind to."),
    port: int = typer.Option(3000, "--port", "-p", envvar="TIKGRAB_PORT", help="Port to listen on."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", envvar="TIKGRAB_OUTPUT_DIR", help="Directory for downloaded videos."),
    proxy: str = typer.Option("", "--proxy", envvar="TIKGRAB_PROXY", help="Browser proxy, e.g. http://127.0.0.1:8080."),
) -> None:
    """Serve GET /download?url=...&nowm=true."""
    server = DownloadServer(_settings(out, proxy, host, port))
    try:
        server.start()
    except KeyboardInterrupt:
        console().print("\nStopping server...")

@app.command("fetch")
def fetch_cmd(
    url: str = typer.Argument(..., help="TikTok video URL (short links are fine)."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", envvar="TIKGRAB_OUTPUT_DIR", help="Output directory."),
    nowm: bool = typer.Option(False, "--nowm", envvar="TIKGRAB_NOWM", help="Label the file as a no-watermark attempt."),
    proxy: str = typer.Option("", "--proxy", envvar="TIKGRAB_PROXY", help="Browser proxy."),
) -> None:
    """
    Download a single TikTok video without starting the server.
    """
    console().print("[blue]Downloading TikTok video...[/blue]")
    try:
        result = service.fetch_video(url, nowm, _settings(out, proxy), progress=True)
    except Exception as e:
        console().print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    size = format_file_size(result.path.stat().st_size)
    console().print(f"[green]✓ Video saved to {result.path} ({size})[/green]")
    console().print(result.note)

@app.command("resolve")
def resolve_cmd(
    url: str = typer.Argument(..., help="URL to resolve."),
) -> None:
    """Print where a (short) link redirects to, one hop only."""
    try:
        console().print(resolve_redirect(url))
    except TikgrabError as e:
        console().print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

if __name__ == "__main__":
    app()
