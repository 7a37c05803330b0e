"""Contexto de credencial.

Un único string opaco, aportado por quien hospeda el Core (CLI, app...).
Solo se comprueba su presencia; el formato lo valida el upstream.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.domain.errors import MissingCredentialError


@dataclass(frozen=True)
class CredentialContext:
    api_key: str | None = None

    @property
    def present(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def require(self) -> str:
        """Devuelve la credencial o lanza `MissingCredentialError`."""

        if not self.present:
            raise MissingCredentialError()
        assert self.api_key is not None
        return self.api_key.strip()

    def __repr__(self) -> str:
        # Nunca imprimir la key.
        return f"CredentialContext(present={self.present})"
