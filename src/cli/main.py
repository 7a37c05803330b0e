"""NASA Explorer command line.

One command per adapter operation. Commands only build a
`CredentialContext`, call the adapter and render the `FetchResult`; every
upstream detail stays in `adapters.nasa_sources`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.logging import RichHandler

from adapters.nasa_sources import (
    DailyImageAdapter,
    EarthImageryAdapter,
    MediaSearchAdapter,
    NeoDetailAdapter,
    NeoFeedAdapter,
    RoverPhotosAdapter,
    TechTransferAdapter,
)
from cli import doctor
from cli.ui_components import (
    build_daily_image_panel,
    build_daily_image_table,
    build_earth_panel,
    build_epic_dates_table,
    build_epic_table,
    build_media_panel,
    build_media_table,
    build_neo_feed_table,
    build_neo_panel,
    build_outcome_panel,
    build_rover_table,
    build_techtransfer_table,
    print_banner,
)
from core.config import AppSettings
from core.credentials import CredentialContext
from core.domain.errors import ValidationError
from core.domain.models import EarthImageAsset, MediaSearchResult
from core.domain.results import FetchResult
from core.domain.sources import EpicImageKind, MediaKind, Rover, SourceKind, TechTransferCategory
from core.services.epic_session import EpicSession
from core.services.resolver import resolve

app = typer.Typer(no_args_is_help=True, help="Browse NASA open APIs from the terminal.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

JsonOption = typer.Option(False, "--json", help="Print the normalized result as JSON.")


@dataclass
class _State:
    settings: AppSettings
    credential: CredentialContext


def configure_logging(level: str) -> None:
    value = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=value if isinstance(value, int) else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@app.callback()
def main(
    ctx: typer.Context,
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="api.nasa.gov key (defaults to NASA_EXPLORER_API_KEY)."
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING..."),
    banner: bool = typer.Option(False, "--banner", help="Show the welcome banner."),
) -> None:
    settings = AppSettings()
    configure_logging(log_level or settings.log_level)
    if banner:
        print_banner(_console)
    ctx.obj = _State(settings=settings, credential=CredentialContext(api_key or settings.api_key))


def _state(ctx: typer.Context) -> _State:
    return ctx.obj


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def _emit(result: FetchResult[Any], render: Callable[[Any], Any], as_json: bool) -> None:
    """Print a result and exit non-zero on failure."""

    if as_json:
        payload: dict[str, Any] = {
            "source": result.source.value,
            "state": result.state.value,
            "message": result.message(),
            "data": _jsonable(result.data),
        }
        if result.error is not None:
            payload["error"] = {"kind": result.error.kind.value, "message": result.error.message}
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    elif result.ok:
        _console.print(render(result.data))
    else:
        if result.data is not None and result.is_failed:
            _console.print(render(result.data))
        _console.print(build_outcome_panel(result))

    if result.is_failed:
        raise typer.Exit(code=1)


@app.command()
def apod(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(None, help="Single date YYYY-MM-DD (default: today)."),
    start: Optional[str] = typer.Option(None, "--start", help="Range start YYYY-MM-DD."),
    end: Optional[str] = typer.Option(None, "--end", help="Range end YYYY-MM-DD."),
    thumbs: bool = typer.Option(False, "--thumbs", help="Ask for video thumbnails."),
    as_json: bool = JsonOption,
) -> None:
    """Astronomy Picture of the Day, for one date or a range."""

    state = _state(ctx)
    adapter = DailyImageAdapter(state.settings)
    result = asyncio.run(
        adapter.fetch(state.credential, date=date, start_date=start, end_date=end, thumbs=thumbs)
    )

    def render(data: Any) -> Any:
        return build_daily_image_table(data) if isinstance(data, tuple) else build_daily_image_panel(data)

    _emit(result, render, as_json)


@app.command(name="neo-feed")
def neo_feed(
    ctx: typer.Context,
    start: Optional[str] = typer.Option(None, "--start", help="Window start YYYY-MM-DD."),
    end: Optional[str] = typer.Option(None, "--end", help="Window end YYYY-MM-DD (max 7 days after start)."),
    date: Optional[str] = typer.Option(None, help="Single day window."),
    as_json: bool = JsonOption,
) -> None:
    """Near earth objects grouped by close-approach date."""

    state = _state(ctx)
    adapter = NeoFeedAdapter(state.settings)
    result = asyncio.run(adapter.fetch(state.credential, start_date=start, end_date=end, date=date))
    _emit(result, build_neo_feed_table, as_json)


@app.command()
def neo(
    ctx: typer.Context,
    asteroid_id: str = typer.Argument(..., help="NEO reference id (e.g. 3542519)."),
    as_json: bool = JsonOption,
) -> None:
    """Details of one near earth object."""

    state = _state(ctx)
    result = asyncio.run(NeoDetailAdapter(state.settings).fetch(state.credential, asteroid_id))
    _emit(result, build_neo_panel, as_json)


@app.command()
def rover(
    ctx: typer.Context,
    sol: str = typer.Option(..., help="Martian sol (non-negative integer)."),
    name: Rover = typer.Option(Rover.CURIOSITY, "--rover", help="Rover name."),
    camera: str = typer.Option("", help="Camera code (FHAZ, NAVCAM...); empty for all."),
    page: Optional[int] = typer.Option(None, min=1, help="Results page."),
    as_json: bool = JsonOption,
) -> None:
    """Mars rover photos for a sol."""

    state = _state(ctx)
    adapter = RoverPhotosAdapter(state.settings)
    result = asyncio.run(adapter.fetch(state.credential, sol=sol, rover=name, camera=camera, page=page))
    _emit(result, build_rover_table, as_json)


@app.command()
def earth(
    ctx: typer.Context,
    lat: float = typer.Option(1.5, help="Latitude."),
    lon: float = typer.Option(100.75, help="Longitude."),
    date: str = typer.Option(..., help="Date YYYY-MM-DD."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save the image bytes here."),
    as_json: bool = JsonOption,
) -> None:
    """Landsat imagery and asset metadata for a point."""

    state = _state(ctx)
    result = asyncio.run(EarthImageryAdapter(state.settings).fetch(state.credential, lat=lat, lon=lon, date=date))

    saved_to: str | None = None
    asset = result.data if isinstance(result.data, EarthImageAsset) else None
    if output and asset is not None and asset.image_blob is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(asset.image_blob.read())
        saved_to = str(output)

    try:
        _emit(result, lambda data: build_earth_panel(data, saved_to=saved_to), as_json)
    finally:
        # Rendered; the bytes are no longer needed.
        if asset is not None and asset.image_blob is not None:
            asset.image_blob.revoke()


@app.command(name="epic-dates")
def epic_dates(
    ctx: typer.Context,
    kind: EpicImageKind = typer.Option(EpicImageKind.NATURAL, help="natural or enhanced."),
    as_json: bool = JsonOption,
) -> None:
    """Dates with EPIC imagery, most recent first."""

    state = _state(ctx)
    session = EpicSession(state.credential, state.settings)
    result = asyncio.run(session.select_kind(kind))
    _emit(
        result,
        lambda data: build_epic_dates_table(data, kind=session.image_kind.value, selected=session.selected_date),
        as_json,
    )


async def _epic_frames(
    session: EpicSession,
    credential: CredentialContext,
    kind: EpicImageKind,
    date: Optional[str],
    *,
    settings: AppSettings,
) -> FetchResult[Any]:
    listed = await session.select_kind(kind)
    if listed.is_failed or listed.is_empty:
        return listed
    if date:
        try:
            session.select_date(date)
        except ValidationError as exc:
            return FetchResult.failed(SourceKind.EPIC_IMAGERY, exc)
    frames = await session.fetch_frames()
    if not frames.ok:
        return frames

    resolved = []
    for frame in frames.data or ():
        outcome = await resolve(frame, SourceKind.EPIC_IMAGERY, credential, settings=settings)
        resolved.append(outcome.data if outcome.ok else frame)
    return FetchResult.succeeded(SourceKind.EPIC_IMAGERY, tuple(resolved))


@app.command()
def epic(
    ctx: typer.Context,
    kind: EpicImageKind = typer.Option(EpicImageKind.NATURAL, help="natural or enhanced."),
    date: Optional[str] = typer.Option(None, help="One of the available dates (default: most recent)."),
    as_json: bool = JsonOption,
) -> None:
    """EPIC frames for a date, with their archive image URLs."""

    state = _state(ctx)
    session = EpicSession(state.credential, state.settings)
    result = asyncio.run(_epic_frames(session, state.credential, kind, date, settings=state.settings))
    _emit(result, build_epic_table, as_json)


@app.command()
def media(
    ctx: typer.Context,
    q: str = typer.Argument(..., help="Search term."),
    media_type: MediaKind = typer.Option(MediaKind.IMAGE, "--media-type", help="image, video or audio."),
    page: Optional[int] = typer.Option(None, min=1, help="Results page."),
    as_json: bool = JsonOption,
) -> None:
    """Search the NASA image and video library (no asset lookups)."""

    state = _state(ctx)
    adapter = MediaSearchAdapter(state.settings)
    result = asyncio.run(adapter.search(state.credential, q, media_type=media_type, page=page))
    _emit(result, build_media_table, as_json)


@app.command(name="media-resolve")
def media_resolve(
    ctx: typer.Context,
    nasa_id: str = typer.Argument(..., help="nasa_id of a search result."),
    media_type: MediaKind = typer.Option(MediaKind.VIDEO, "--media-type", help="video or audio."),
    as_json: bool = JsonOption,
) -> None:
    """Resolve the playable file of one video/audio item."""

    state = _state(ctx)
    item = MediaSearchResult(id=nasa_id, media_kind=media_type)
    result = asyncio.run(resolve(item, SourceKind.MEDIA_SEARCH, state.credential, settings=state.settings))
    _emit(result, build_media_panel, as_json)


@app.command()
def techtransfer(
    ctx: typer.Context,
    term: str = typer.Argument(..., help="Search term."),
    category: TechTransferCategory = typer.Option(TechTransferCategory.PATENT, help="Index to search."),
    as_json: bool = JsonOption,
) -> None:
    """Search NASA patents, software and spinoffs."""

    state = _state(ctx)
    result = asyncio.run(TechTransferAdapter(state.settings).search(state.credential, term, category=category))
    _emit(result, build_techtransfer_table, as_json)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
