"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.

Nota: solo consumen modelos normalizados; nunca ven URLs de petición ni
envelopes upstream.
"""

from __future__ import annotations

from typing import Any, Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import (
    DailyImageEntry,
    EarthImageAsset,
    EpicFrame,
    MediaSearchResult,
    NearEarthObject,
    NeoFeedByDate,
    RoverPhoto,
    TechTransferResult,
)
from core.domain.results import FetchResult


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("NASA Explorer", style="bold cyan")
    subtitle = Text("APOD • NEO • Mars • Earth • EPIC • Media • Tech transfer", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_outcome_panel(result: FetchResult[Any]) -> Panel:
    """Panel para "sin resultados" o para un fallo (textos distintos)."""

    if result.is_empty:
        return Panel(Text(result.message(), style="yellow"), title="No results", border_style="yellow")
    body = Text(result.message(), style="red")
    if result.error is not None:
        body.append(f"\n\nkind: {result.error.kind.value}", style="dim")
    return Panel(body, title=f"{result.source.label()} failed", border_style="red")


def build_daily_image_panel(entry: DailyImageEntry) -> Panel:
    body = Text()
    body.append(f"{entry.date} • {entry.media_kind.value}\n", style="dim")
    body.append(entry.explanation.strip() + "\n\n")
    body.append(f"URL: {entry.media_url}\n", style="magenta")
    if entry.high_res_url:
        body.append(f"HD:  {entry.high_res_url}\n", style="magenta")
    if entry.thumbnail_url:
        body.append(f"Thumbnail: {entry.thumbnail_url}\n", style="magenta")
    if entry.attribution:
        body.append(f"\n© {entry.attribution}", style="dim")
    return Panel(body, title=Text(entry.title, style="bold cyan"), border_style="cyan")


def build_daily_image_table(entries: Iterable[DailyImageEntry]) -> Table:
    table = Table(title="Astronomy Picture of the Day")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Kind", style="green")
    table.add_column("URL", style="magenta")
    for entry in entries:
        table.add_row(entry.date, entry.title, entry.media_kind.value, entry.media_url)
    return table


def format_diameter(neo: NearEarthObject) -> str:
    if neo.estimated_diameter_km_min is None or neo.estimated_diameter_km_max is None:
        return "Unknown"
    return f"{neo.estimated_diameter_km_min:.2f} - {neo.estimated_diameter_km_max:.2f} km"


def build_neo_feed_table(feed: NeoFeedByDate) -> Table:
    table = Table(title=f"Near Earth Objects {feed.start_date} → {feed.end_date} ({feed.element_count})")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("ID", style="white", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("H", style="green", justify="right")
    table.add_column("Diameter", style="green")
    table.add_column("Hazardous", style="red")
    for day in feed.dates():
        for neo in feed.near_earth_objects[day]:
            table.add_row(
                day,
                neo.id,
                neo.name,
                f"{neo.absolute_magnitude:.2f}",
                format_diameter(neo),
                "yes" if neo.hazardous else "",
            )
    return table


def build_neo_panel(neo: NearEarthObject) -> Panel:
    body = Text()
    body.append(f"ID: {neo.id}\n")
    body.append(f"Absolute magnitude: {neo.absolute_magnitude:.2f}\n")
    body.append(f"Estimated diameter: {format_diameter(neo)}\n")
    body.append(f"Potentially hazardous: {'Yes' if neo.hazardous else 'No'}\n")
    if neo.close_approaches:
        body.append("\nClose approaches:\n", style="bold")
        for approach in neo.close_approaches:
            miss = f"{approach.miss_distance_km:,.0f} km" if approach.miss_distance_km is not None else "?"
            speed = (
                f"{approach.relative_velocity_km_h:,.0f} km/h"
                if approach.relative_velocity_km_h is not None
                else "?"
            )
            body.append(f"- {approach.date}: {miss} at {speed}\n")
    if neo.nasa_jpl_url:
        body.append(f"\n{neo.nasa_jpl_url}", style="dim")
    return Panel(body, title=Text(neo.name or neo.id, style="bold yellow"), border_style="yellow")


def build_rover_table(photos: Iterable[RoverPhoto]) -> Table:
    table = Table(title="Mars Rover Photos")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Rover", style="white")
    table.add_column("Camera", style="white")
    table.add_column("Earth date", style="green", no_wrap=True)
    table.add_column("Image", style="magenta")
    for photo in photos:
        table.add_row(str(photo.id), photo.rover_name, photo.camera_full_name, photo.earth_date, photo.image_url)
    return table


def build_earth_panel(asset: EarthImageAsset, *, saved_to: str | None = None) -> Panel:
    body = Text()
    if asset.image_blob is not None and not asset.image_blob.revoked:
        body.append(f"Image: {asset.image_blob.content_type}, {asset.image_blob.size} bytes\n")
    else:
        body.append("Image: unavailable\n", style="red")
    body.append(f"Asset date: {asset.asset_date or 'unavailable'}\n")
    body.append(f"Asset ID: {asset.asset_id or 'unavailable'}\n")
    if saved_to:
        body.append(f"\nSaved to {saved_to}", style="green")
    return Panel(body, title="Earth Imagery", border_style="cyan")


def build_epic_dates_table(dates: Iterable[str], *, kind: str, selected: str | None = None) -> Table:
    table = Table(title=f"EPIC {kind} dates")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("", style="green")
    for day in dates:
        table.add_row(day, "selected" if day == selected else "")
    return table


def build_epic_table(frames: Iterable[EpicFrame]) -> Table:
    table = Table(title="EPIC Imagery")
    table.add_column("Taken", style="cyan", no_wrap=True)
    table.add_column("Centroid", style="white", no_wrap=True)
    table.add_column("Caption", style="white")
    table.add_column("Image", style="magenta")
    for frame in frames:
        centroid = (
            f"{frame.centroid_lat:.2f}, {frame.centroid_lon:.2f}"
            if frame.centroid_lat is not None and frame.centroid_lon is not None
            else "?"
        )
        table.add_row(frame.date, centroid, frame.caption, frame.image_url or "")
    return table


def build_media_table(results: Iterable[MediaSearchResult]) -> Table:
    table = Table(title="NASA Media Library")
    table.add_column("NASA ID", style="cyan", no_wrap=True)
    table.add_column("Kind", style="green")
    table.add_column("Title", style="white")
    table.add_column("Center", style="white")
    table.add_column("Created", style="dim", no_wrap=True)
    for item in results:
        table.add_row(item.id, item.media_kind.value, item.title, item.center or "", (item.date_created or "")[:10])
    return table


def build_media_panel(item: MediaSearchResult) -> Panel:
    body = Text()
    body.append(item.description.strip() + "\n\n")
    body.append(f"Kind: {item.media_kind.value}\n")
    if item.date_created:
        body.append(f"Created: {item.date_created}\n")
    if item.center:
        body.append(f"Center: {item.center}\n")
    if item.photographer:
        body.append(f"Photographer: {item.photographer}\n")
    if item.keywords:
        body.append(f"Keywords: {', '.join(sorted(item.keywords))}\n")
    if item.resolved_media_url:
        body.append(f"\nMedia: {item.resolved_media_url}", style="magenta")
    return Panel(body, title=Text(item.title or item.id, style="bold cyan"), border_style="cyan")


def build_techtransfer_table(results: Iterable[TechTransferResult]) -> Table:
    table = Table(title="Tech Transfer")
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Category", style="green")
    table.add_column("Center", style="white", no_wrap=True)
    table.add_column("Image", style="magenta")
    for result in results:
        table.add_row(result.code, result.title, result.category, result.center, result.image_url or "")
    return table
