"""Stateful EPIC browsing: kind -> available dates -> frames of one date.

Rules:
- Changing the image kind re-lists the available dates and resets the
  selected date to the first (most recent) one. Dates of the previous kind
  are cleared immediately so they can never reach the per-date endpoint.
- Every call takes a sequence number when it STARTS. When it completes, its
  result is applied only if no later call of the same operation has started
  since; otherwise it is discarded. Start order wins, not completion order.
"""

from __future__ import annotations

import datetime as dt
import logging

import httpx

from adapters.nasa_sources.epic import EpicAdapter
from core.config import AppSettings
from core.credentials import CredentialContext
from core.domain.errors import InvalidParameterError, NasaExplorerError, ValidationError
from core.domain.models import EpicFrame
from core.domain.results import FetchResult
from core.domain.sources import EpicImageKind, SourceKind
from core.requests import parse_choice, parse_iso_date
from core.services.pipeline import AdapterHooks

log = logging.getLogger("nasa-explorer")


class EpicSession:
    def __init__(
        self,
        credential: CredentialContext,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        hooks: AdapterHooks | None = None,
    ) -> None:
        self._credential = credential
        self._adapter = EpicAdapter(settings, transport=transport, hooks=hooks)
        self.image_kind: EpicImageKind = EpicImageKind.default()
        self.available_dates: tuple[str, ...] = ()
        self.selected_date: str | None = None
        self.frames: tuple[EpicFrame, ...] = ()
        self.last_error: NasaExplorerError | None = None
        self._dates_seq = 0
        self._frames_seq = 0

    async def select_kind(self, kind: EpicImageKind | str) -> FetchResult[tuple[str, ...]]:
        """Switch kind and reload its dates (first date becomes selected)."""

        try:
            image_kind = parse_choice(kind, EpicImageKind, field="kind")
        except ValidationError as exc:
            return FetchResult.failed(SourceKind.EPIC_DATES, exc)

        self._dates_seq += 1
        seq = self._dates_seq
        # A frames call of the previous kind must not land after the switch.
        self._frames_seq += 1
        self.image_kind = image_kind
        self.available_dates = ()
        self.selected_date = None
        self.frames = ()

        result = await self._adapter.fetch_dates(self._credential, image_kind)
        if seq != self._dates_seq:
            log.debug("discarding stale EPIC dates for %s (call %d, latest %d)", image_kind.value, seq, self._dates_seq)
            return result

        self.last_error = result.error
        if not result.is_failed:
            self.available_dates = result.data or ()
            self.selected_date = self.available_dates[0] if self.available_dates else None
        return result

    async def refresh_dates(self) -> FetchResult[tuple[str, ...]]:
        return await self.select_kind(self.image_kind)

    def select_date(self, date: str | dt.date) -> str:
        """Pick one of the available dates. Raises `InvalidParameterError` otherwise."""

        day = parse_iso_date(date, field="date").isoformat()
        if day not in self.available_dates:
            raise InvalidParameterError(
                f"{day} is not an available {self.image_kind.value} date.", field="date"
            )
        if day != self.selected_date:
            self._frames_seq += 1
            self.frames = ()
        self.selected_date = day
        return day

    async def fetch_frames(self) -> FetchResult[tuple[EpicFrame, ...]]:
        """Frames of the selected date, for the current kind."""

        if self.selected_date is None:
            return FetchResult.failed(
                SourceKind.EPIC_IMAGERY, InvalidParameterError("Please select a date", field="date")
            )

        self._frames_seq += 1
        seq = self._frames_seq
        result = await self._adapter.fetch_frames(self._credential, self.selected_date, self.image_kind)
        if seq != self._frames_seq:
            log.debug("discarding stale EPIC frames (call %d, latest %d)", seq, self._frames_seq)
            return result

        self.last_error = result.error
        if not result.is_failed:
            self.frames = result.data or ()
        return result
