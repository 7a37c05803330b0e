"""Resultado de una invocación de adaptador.

Every adapter operation returns exactly one `FetchResult`, whose `state` is
one of the three terminal states of `AdapterState`. `EMPTY_RESULT` is a
success that carries zero entities; only `FAILED` carries an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from core.domain.errors import NasaExplorerError
from core.domain.sources import SourceKind

T = TypeVar("T")

NO_RESULTS_MESSAGE = "no results for these parameters"


class AdapterState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    EMPTY_RESULT = "empty_result"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (AdapterState.SUCCEEDED, AdapterState.EMPTY_RESULT, AdapterState.FAILED)


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    source: SourceKind
    state: AdapterState
    data: T | None = None
    error: NasaExplorerError | None = None

    def __post_init__(self) -> None:
        if not self.state.is_terminal:
            raise ValueError(f"FetchResult requires a terminal state, got {self.state.value}")
        if (self.state is AdapterState.FAILED) != (self.error is not None):
            raise ValueError("an error is present if and only if the state is FAILED")

    @classmethod
    def succeeded(cls, source: SourceKind, data: T) -> "FetchResult[T]":
        return cls(source=source, state=AdapterState.SUCCEEDED, data=data)

    @classmethod
    def empty(cls, source: SourceKind, data: T | None = None) -> "FetchResult[T]":
        return cls(source=source, state=AdapterState.EMPTY_RESULT, data=data)

    @classmethod
    def failed(
        cls,
        source: SourceKind,
        error: NasaExplorerError,
        data: T | None = None,
    ) -> "FetchResult[T]":
        return cls(source=source, state=AdapterState.FAILED, data=data, error=error)

    @property
    def ok(self) -> bool:
        return self.state is AdapterState.SUCCEEDED

    @property
    def is_empty(self) -> bool:
        return self.state is AdapterState.EMPTY_RESULT

    @property
    def is_failed(self) -> bool:
        return self.state is AdapterState.FAILED

    def message(self) -> str:
        """User-visible text for this outcome."""

        if self.state is AdapterState.EMPTY_RESULT:
            return NO_RESULTS_MESSAGE
        if self.error is not None:
            return f"request failed: {self.error.message}"
        return "ok"

    def unwrap(self) -> T:
        """Return the data of a successful (or empty) result, raise the error otherwise."""

        if self.error is not None:
            raise self.error
        return self.data  # type: ignore[return-value]
