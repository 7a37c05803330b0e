"""Base común de los adaptadores NASA.

Implementa las partes por defecto del contrato `SourceAdapter`
(una petición JSON, nunca vacío) y la invocación vía el pipeline.
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, TypeVar

import httpx

from adapters.http_client import fetch_json
from core.config import AppSettings
from core.credentials import CredentialContext
from core.domain.errors import MalformedEnvelopeError
from core.domain.results import FetchResult
from core.domain.sources import SourceKind
from core.interfaces.source_adapter import SourceAdapter
from core.services.pipeline import AdapterHooks, execute

P = TypeVar("P")
T = TypeVar("T")


class NasaSourceAdapter(SourceAdapter[P, T], Generic[P, T]):
    source: ClassVar[SourceKind]

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        hooks: AdapterHooks | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._hooks = hooks

    @property
    def settings(self) -> AppSettings:
        return self._settings

    async def fetch_raw(self, client: httpx.AsyncClient, request: Any) -> Any:
        return await fetch_json(client, request)

    def is_empty(self, value: T) -> bool:
        return False

    async def _run(self, params: P, credential: CredentialContext) -> FetchResult[T]:
        return await execute(
            self,
            params,
            credential,
            settings=self._settings,
            transport=self._transport,
            hooks=self._hooks,
        )


def require_mapping(payload: Any, *, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise MalformedEnvelopeError(f"expected a JSON object for {what}, got {type(payload).__name__}")
    return payload


def require_list(payload: Any, *, what: str) -> list[Any]:
    if not isinstance(payload, list):
        raise MalformedEnvelopeError(f"expected a JSON array for {what}, got {type(payload).__name__}")
    return payload


def text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def float_or_none(value: Any) -> float | None:
    """Números upstream llegan como number o como string ('12345.67')."""

    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
