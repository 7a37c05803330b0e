"""Adapter composition shared by every source.

One invocation walks ``Idle -> Validating -> InFlight -> {Succeeded,
EmptyResult, Failed}`` and always ends in exactly one terminal state. The
request is built (and validated) before a client is even created, so a
validation failure never reaches the network. Errors from the taxonomy are
converted into a `FetchResult` here and nowhere else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

import httpx
import pydantic

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.credentials import CredentialContext
from core.domain.errors import MalformedEnvelopeError, NasaExplorerError, PartialFailureError, ValidationError
from core.domain.results import AdapterState, FetchResult
from core.domain.sources import SourceKind
from core.interfaces.source_adapter import SourceAdapter

log = logging.getLogger("nasa-explorer")

P = TypeVar("P")
T = TypeVar("T")


@dataclass
class AdapterHooks:
    """Optional callbacks for hosting layers (spinners, tracing)."""

    state_changed: Callable[[SourceKind, AdapterState], None] | None = None


def _emit(hooks: AdapterHooks, source: SourceKind, state: AdapterState) -> None:
    if hooks.state_changed:
        hooks.state_changed(source, state)


def _finish(hooks: AdapterHooks, result: FetchResult[T]) -> FetchResult[T]:
    _emit(hooks, result.source, result.state)
    if result.error is not None:
        log.debug("%s failed (%s): %s", result.source.value, result.error.kind.value, result.error.message)
    return result


def normalize_body(adapter: SourceAdapter[P, T], raw: Any, params: P) -> T:
    """`adapter.normalize`, with model constraint violations reported as `MalformedEnvelopeError`."""

    try:
        return adapter.normalize(raw, params)
    except pydantic.ValidationError as exc:
        raise MalformedEnvelopeError(f"{adapter.source.label()} response breaks the entity shape: {exc}") from exc


async def execute(
    adapter: SourceAdapter[P, T],
    params: P,
    credential: CredentialContext,
    *,
    settings: AppSettings,
    transport: httpx.AsyncBaseTransport | None = None,
    hooks: AdapterHooks | None = None,
) -> FetchResult[T]:
    """Run one adapter invocation end to end."""

    hooks = hooks or AdapterHooks()
    source = adapter.source

    _emit(hooks, source, AdapterState.IDLE)
    _emit(hooks, source, AdapterState.VALIDATING)
    try:
        request: Any = adapter.build_request(params, credential)
    except ValidationError as exc:
        return _finish(hooks, FetchResult.failed(source, exc))

    _emit(hooks, source, AdapterState.IN_FLIGHT)
    try:
        async with build_async_client(settings, transport=transport) as client:
            raw = await adapter.fetch_raw(client, request)
        value = normalize_body(adapter, raw, params)
    except PartialFailureError as exc:
        return _finish(hooks, FetchResult.failed(source, exc, data=exc.partial))
    except NasaExplorerError as exc:
        return _finish(hooks, FetchResult.failed(source, exc))

    if adapter.is_empty(value):
        return _finish(hooks, FetchResult.empty(source, value))
    return _finish(hooks, FetchResult.succeeded(source, value))
