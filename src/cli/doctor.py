"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, get_user_env_file

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings, url: str, params: dict[str, str] | None = None) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        return False, f"{exc.__class__.__name__}: {exc}"
    return response.is_success, f"HTTP {response.status_code}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="NASA Explorer Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    has_key = bool(settings.api_key and settings.api_key.strip())
    if has_key:
        table.add_row("API key", "OK", "NASA_EXPLORER_API_KEY is set")
    else:
        table.add_row("API key", "MISSING", f"Set NASA_EXPLORER_API_KEY (env, .env or {get_user_env_file()})")
    table.add_row("API base_url", "OK", settings.api_base_url)
    table.add_row("Images API base_url", "OK", settings.images_api_base_url)

    # Connectivity (best-effort)
    ok_images, detail_images = asyncio.run(
        _check_http(settings, f"{settings.images_api_base_url}/search", {"q": "apollo", "page_size": "1"})
    )
    table.add_row("Images API", "OK" if ok_images else "FAIL", detail_images)

    ok_key = False
    if has_key:
        assert settings.api_key is not None
        ok_key, detail_key = asyncio.run(
            _check_http(settings, f"{settings.api_base_url}/planetary/apod", {"api_key": settings.api_key.strip()})
        )
        table.add_row("API key accepted", "OK" if ok_key else "FAIL", detail_key)

    _console.print(table)

    if not has_key:
        _console.print(
            "\n[yellow]Note:[/yellow] a free key is available at https://api.nasa.gov "
            "(`DEMO_KEY` works with low rate limits)."
        )
    elif not ok_key:
        _console.print("\n[yellow]Note:[/yellow] the gateway rejected the key or is unreachable.")
