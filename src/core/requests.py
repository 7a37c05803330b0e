"""Descriptor de petición y validación de input.

Los builders de cada fuente son funciones puras: reciben input crudo (strings
de formularios, enums, fechas) y devuelven un `RequestDescriptor` o lanzan un
`ValidationError`. Aquí viven las piezas compartidas.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar
from urllib.parse import quote, urlencode

from core.domain.errors import InvalidParameterError, InvalidRangeError
from core.domain.sources import SourceKind

E = TypeVar("E", bound=Enum)

_REDACTED = "***"


class ResponseFormat(str, Enum):
    JSON = "json"
    BINARY = "binary"


@dataclass(frozen=True)
class RequestDescriptor:
    """URL + query de una petición GET, totalmente resuelta.

    `bare_query` es una clave sin valor que va primero en la query
    (tech transfer espera `?<term>&api_key=...`).
    """

    source: SourceKind
    url: str
    params: tuple[tuple[str, str], ...] = ()
    bare_query: str | None = None
    response_format: ResponseFormat = ResponseFormat.JSON

    @property
    def query(self) -> dict[str, str]:
        return dict(self.params)

    def _query_string(self, params: tuple[tuple[str, str], ...]) -> str:
        parts: list[str] = []
        if self.bare_query:
            parts.append(quote(self.bare_query, safe=""))
        if params:
            parts.append(urlencode(params))
        return "&".join(parts)

    @property
    def full_url(self) -> str:
        query = self._query_string(self.params)
        return f"{self.url}?{query}" if query else self.url

    def redacted_url(self) -> str:
        """`full_url` con la api_key oculta (para logs)."""

        params = tuple((k, _REDACTED if k == "api_key" else v) for k, v in self.params)
        query = self._query_string(params)
        return f"{self.url}?{query}" if query else self.url


def optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_text(value: object, *, field: str) -> str:
    text = optional_text(value)
    if text is None:
        raise InvalidParameterError(f"{field} is required.", field=field)
    return text


def parse_iso_date(value: object, *, field: str) -> dt.date:
    """Acepta `date` o string `YYYY-MM-DD`."""

    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = require_text(value, field=field)
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        raise InvalidParameterError(
            f"{field} must be an ISO date (YYYY-MM-DD), got {text!r}.", field=field
        ) from None


def parse_date_window(
    start: object,
    end: object,
    *,
    max_span_days: int | None = None,
) -> tuple[dt.date, dt.date]:
    """Valida un rango inclusivo [start, end].

    - start > end => `InvalidRangeError`.
    - end - start > max_span_days => `InvalidRangeError`.
    """

    start_date = parse_iso_date(start, field="start_date")
    end_date = parse_iso_date(end, field="end_date")
    if start_date > end_date:
        raise InvalidRangeError(
            f"End date cannot be earlier than start date ({start_date} > {end_date})."
        )
    if max_span_days is not None and (end_date - start_date).days > max_span_days:
        raise InvalidRangeError(
            f"Date range cannot exceed {max_span_days} days "
            f"({start_date} to {end_date} is {(end_date - start_date).days})."
        )
    return start_date, end_date


def iter_dates(start: dt.date, end: dt.date) -> list[dt.date]:
    return [start + dt.timedelta(days=offset) for offset in range((end - start).days + 1)]


def parse_float(
    value: object,
    *,
    field: str,
    minimum: float | None = None,
    maximum: float | None = None,
) -> float:
    if isinstance(value, bool):
        raise InvalidParameterError(f"{field} must be a number.", field=field)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = require_text(value, field=field)
        try:
            number = float(text)
        except ValueError:
            raise InvalidParameterError(f"{field} must be a number, got {text!r}.", field=field) from None
    if number != number:  # NaN
        raise InvalidParameterError(f"{field} must be a number.", field=field)
    if minimum is not None and number < minimum:
        raise InvalidParameterError(f"{field} must be >= {minimum}.", field=field)
    if maximum is not None and number > maximum:
        raise InvalidParameterError(f"{field} must be <= {maximum}.", field=field)
    return number


def parse_non_negative_int(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidParameterError(f"{field} must be an integer.", field=field)
    if isinstance(value, int):
        number = value
    else:
        text = require_text(value, field=field)
        try:
            number = int(text)
        except ValueError:
            raise InvalidParameterError(f"{field} must be an integer, got {text!r}.", field=field) from None
    if number < 0:
        raise InvalidParameterError(f"{field} must be >= 0.", field=field)
    return number


def parse_choice(value: object, enum_cls: type[E], *, field: str) -> E:
    """Resuelve un enum por valor o por nombre, sin distinguir mayúsculas."""

    if isinstance(value, enum_cls):
        return value
    text = require_text(value, field=field)
    lowered = text.lower()
    for member in enum_cls:
        if str(member.value).lower() == lowered or member.name.lower() == lowered:
            return member
    allowed = ", ".join(str(m.value) for m in enum_cls)
    raise InvalidParameterError(f"{field} must be one of: {allowed} (got {text!r}).", field=field)
