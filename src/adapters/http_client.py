"""Wrapper de httpx.

- Estandariza timeouts, headers y logging de todas las fuentes.
- Clasifica las respuestas upstream en la taxonomía del Core:
  status no-2xx, error embebido en un 2xx, cuerpo ilegible.
- Facilita testeo: se puede inyectar un `transport` (p.ej. `httpx.MockTransport`).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from bs4 import BeautifulSoup

from core.config import AppSettings
from core.domain.errors import MalformedEnvelopeError, TransportError, UpstreamError
from core.domain.models import ImageBlobRef
from core.requests import RequestDescriptor

log = logging.getLogger("nasa-explorer")


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Centraliza timeouts/headers para que todas las fuentes se comporten igual.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json, image/*;q=0.9, */*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


async def send(client: httpx.AsyncClient, request: RequestDescriptor) -> httpx.Response:
    """GET de un descriptor. Fallos de red => `TransportError(status_code=None)`."""

    log.debug("GET %s (%s)", request.redacted_url(), request.source.value)
    try:
        return await client.get(request.full_url)
    except httpx.HTTPError as exc:
        log.debug("network failure for %s: %r", request.source.value, exc)
        raise TransportError(f"network error: {exc.__class__.__name__}: {exc}") from exc


def extract_upstream_message(payload: object) -> str | None:
    """Busca un mensaje de error en los distintos dialectos upstream.

    - gateway api.nasa.gov: {"error": {"code": ..., "message": ...}}
    - imagen del día:       {"code": 400, "msg": ...}
    - índice de medios:     {"reason": ...}
    """

    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
        code = error.get("code")
        if isinstance(code, str) and code.strip():
            return code.strip()
    if isinstance(error, str) and error.strip():
        return error.strip()
    msg = payload.get("msg")
    if isinstance(msg, str) and msg.strip() and "code" in payload:
        return msg.strip()
    reason = payload.get("reason")
    if isinstance(reason, str) and reason.strip():
        return reason.strip()
    return None


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedEnvelopeError(f"response body is not valid JSON: {exc}") from exc


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    message: str | None = None
    try:
        message = extract_upstream_message(response.json())
    except ValueError:
        message = None
    reason = message or response.reason_phrase or "HTTP error"
    raise TransportError(f"HTTP {response.status_code}: {reason}", status_code=response.status_code)


def read_json_envelope(response: httpx.Response) -> Any:
    """Devuelve el cuerpo JSON decodificado de una respuesta exitosa.

    Lanza `TransportError`, `UpstreamError` o `MalformedEnvelopeError`.
    """

    _raise_for_status(response)
    payload = _decode_json(response)
    message = extract_upstream_message(payload)
    if message is not None:
        raise UpstreamError(message)
    return payload


def read_binary(response: httpx.Response) -> ImageBlobRef:
    """Bytes de imagen tal cual, o el error que venga en su lugar."""

    _raise_for_status(response)
    content_type = response.headers.get("Content-Type", "application/octet-stream")
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type == "application/json" or media_type.endswith("+json"):
        payload = _decode_json(response)
        message = extract_upstream_message(payload)
        if message is not None:
            raise UpstreamError(message)
        raise MalformedEnvelopeError("expected image bytes, got a JSON document")
    if not response.content:
        raise MalformedEnvelopeError("image response has an empty body")
    return ImageBlobRef(response.content, content_type=media_type)


async def fetch_json(client: httpx.AsyncClient, request: RequestDescriptor) -> Any:
    response = await send(client, request)
    return read_json_envelope(response)


async def fetch_binary(client: httpx.AsyncClient, request: RequestDescriptor) -> ImageBlobRef:
    response = await send(client, request)
    return read_binary(response)


def strip_markup(fragment: str | None) -> str:
    """Texto plano de un fragmento HTML (tags fuera, espacios colapsados)."""

    if not fragment:
        return ""
    text = BeautifulSoup(fragment, "html.parser").get_text()
    return " ".join(text.split())
