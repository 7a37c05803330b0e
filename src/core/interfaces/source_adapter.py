"""Contrato de adaptadores de fuente.

Reglas de diseño:
- Un adaptador por `SourceKind`; todo lo específico de un upstream vive ahí.
- `build_request` es puro y valida ANTES de cualquier I/O.
- `fetch_raw` es asíncrono (HTTP) y devuelve el cuerpo ya clasificado.
- `normalize` es puro: cuerpo crudo -> entidad(es) o `NasaExplorerError`.
- No guardan estado entre llamadas.
"""

from __future__ import annotations

from typing import Any, ClassVar, Protocol, TypeVar, runtime_checkable

import httpx

from core.credentials import CredentialContext
from core.domain.sources import SourceKind

P = TypeVar("P", contravariant=True)
T = TypeVar("T")


@runtime_checkable
class SourceAdapter(Protocol[P, T]):
    """Contrato mínimo para una fuente upstream."""

    source: ClassVar[SourceKind]

    def build_request(self, params: P, credential: CredentialContext) -> Any:
        """Valida `params` y devuelve el/los `RequestDescriptor` a emitir."""

        ...

    async def fetch_raw(self, client: httpx.AsyncClient, request: Any) -> Any:
        """Emite la(s) petición(es) y devuelve el cuerpo clasificado."""

        ...

    def normalize(self, raw: Any, params: P) -> T:
        """Convierte el cuerpo crudo en la forma interna."""

        ...

    def is_empty(self, value: T) -> bool:
        """`True` si el resultado es semánticamente vacío (no es un error)."""

        ...
