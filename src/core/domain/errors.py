"""Taxonomía de errores compartida por todos los adaptadores.

Reglas:
- Validación, transporte y normalización lanzan subclases de
  `NasaExplorerError`; el pipeline las convierte UNA sola vez en un
  `FetchResult` fallido.
- `EmptyResult` no es un error: vive en `AdapterState`, no aquí.
- Cada error tiene un `kind` estable para que el llamador pueda distinguirlo
  y un `message` legible.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    INVALID_RANGE = "invalid_range"
    INVALID_PARAMETER = "invalid_parameter"
    TRANSPORT = "transport"
    UPSTREAM = "upstream"
    MALFORMED_ENVELOPE = "malformed_envelope"
    PARTIAL_FAILURE = "partial_failure"
    RESOLUTION_UNAVAILABLE = "resolution_unavailable"

    @property
    def is_validation(self) -> bool:
        return self in _VALIDATION_KINDS


_VALIDATION_KINDS = frozenset(
    {ErrorKind.MISSING_CREDENTIAL, ErrorKind.INVALID_RANGE, ErrorKind.INVALID_PARAMETER}
)


class NasaExplorerError(Exception):
    """Base de la taxonomía."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NasaExplorerError):
            return NotImplemented
        return type(self) is type(other) and self.message == other.message

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class ValidationError(NasaExplorerError):
    """Fallo detectado antes de emitir cualquier petición."""


class MissingCredentialError(ValidationError):
    kind = ErrorKind.MISSING_CREDENTIAL

    def __init__(self, message: str = "An API key is required.") -> None:
        super().__init__(message)


class InvalidRangeError(ValidationError):
    kind = ErrorKind.INVALID_RANGE


class InvalidParameterError(ValidationError):
    kind = ErrorKind.INVALID_PARAMETER

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class TransportError(NasaExplorerError):
    """Status HTTP no-2xx, o fallo de red (`status_code=None`)."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransportError):
            return NotImplemented
        return self.message == other.message and self.status_code == other.status_code

    def __hash__(self) -> int:
        return hash((type(self), self.message, self.status_code))


class UpstreamError(NasaExplorerError):
    """Respuesta 2xx que trae un objeto de error embebido."""

    kind = ErrorKind.UPSTREAM


class MalformedEnvelopeError(NasaExplorerError):
    kind = ErrorKind.MALFORMED_ENVELOPE


class PartialFailureError(NasaExplorerError):
    """Una de dos sub-llamadas obligatorias falló.

    `succeeded_half` nombra la mitad que SÍ funcionó; `cause` es el error de
    la otra mitad; `partial` es el valor construido con la mitad buena.
    """

    kind = ErrorKind.PARTIAL_FAILURE

    def __init__(
        self,
        *,
        succeeded_half: str,
        cause: NasaExplorerError,
        partial: object | None = None,
    ) -> None:
        super().__init__(f"only the {succeeded_half} request succeeded: {cause.message}")
        self.succeeded_half = succeeded_half
        self.cause = cause
        self.partial = partial

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PartialFailureError):
            return NotImplemented
        return self.succeeded_half == other.succeeded_half and self.cause == other.cause

    def __hash__(self) -> int:
        return hash((type(self), self.succeeded_half, self.cause))


class ResolutionUnavailableError(NasaExplorerError):
    kind = ErrorKind.RESOLUTION_UNAVAILABLE
