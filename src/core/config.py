"""Configuración del Core.

- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP) lean config de forma consistente.

Nota:
- La credencial NO se lee aquí para el Core: cada operación la recibe
  explícitamente (`CredentialContext`). `api_key` solo lo usa la CLI.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "nasa-explorer"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "nasa-explorer"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "nasa-explorer"
    return Path.home() / ".config" / "nasa-explorer"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Un único contrato de configuración para CLI/adapters, validado en el
    borde (env vars / `.env`).
    """

    model_config = SettingsConfigDict(
        env_prefix="NASA_EXPLORER_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="nasa-explorer/0.1 (+https://api.nasa.gov)",
        min_length=1,
        description="User-Agent para las peticiones a las APIs.",
    )

    api_base_url: str = Field(
        default="https://api.nasa.gov",
        min_length=8,
        description="Gateway de las fuentes que requieren api_key.",
    )
    images_api_base_url: str = Field(
        default="https://images-api.nasa.gov",
        min_length=8,
        description="Índice de medios (búsqueda + lookup de assets).",
    )
    epic_archive_base_url: str = Field(
        default="https://epic.gsfc.nasa.gov/archive",
        min_length=8,
        description="Archivo PNG de EPIC (URLs derivadas).",
    )

    earth_dim_degrees: float = Field(
        default=0.15,
        gt=0,
        le=1.0,
        description="Ancho/alto (grados) del recorte pedido a earth imagery.",
    )
    neo_max_span_days: int = Field(
        default=7,
        ge=1,
        le=7,
        description="Ventana máxima (días) aceptada por el feed NEO.",
    )

    api_key: str | None = Field(
        default=None,
        description="Credencial para la CLI (el Core la recibe explícitamente).",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging de la CLI.",
    )

    @field_validator("api_base_url", "images_api_base_url", "epic_archive_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
