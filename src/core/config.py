"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que el codec y los adaptadores (data_readers, JSON) lean la misma
  configuración de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.policy import UnknownTagPolicy
from core.domain.records import DEFAULT_NAMESPACE

DATA_READERS_FILENAME = "data_readers.edn"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "edn-tags"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "edn-tags"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "edn-tags"
    return Path.home() / ".config" / "edn-tags"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class CodecSettings(BaseSettings):
    """Configuración central del codec.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="EDN_TAGS_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    default_namespace: str = Field(
        default=DEFAULT_NAMESPACE,
        min_length=1,
        pattern=r"^[A-Za-z*!_?$%&=<>][A-Za-z0-9*!_?$%&=<>.+\-]*$",
        description="Namespace para records que no declaran `edn_namespace`.",
    )
    unknown_tags: UnknownTagPolicy = Field(
        default_factory=UnknownTagPolicy.default,
        description="Qué hacer con tags sin reader (error/preserve).",
    )
    max_depth: int = Field(
        default=200,
        ge=1,
        le=400,
        description="Profundidad máxima de anidamiento aceptada por el reader.",
    )
    readers_path: Path | None = Field(
        default=None,
        description="Ruta a un data_readers.edn (tag -> módulo:callable).",
    )
    indent_json: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentación de la exportación JSON.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging de la CLI (DEBUG, INFO, WARNING...).",
    )


def find_data_readers_file(settings: CodecSettings | None = None) -> Path | None:
    """Busca el archivo de readers en ubicaciones comunes.

    Orden:
    1) `readers_path` de la configuración (si está definido, aunque no exista)
    2) ./data_readers.edn (cwd)
    3) <user_config_dir>/data_readers.edn
    """

    settings = settings or CodecSettings()
    if settings.readers_path is not None:
        return settings.readers_path

    candidates = [
        Path.cwd() / DATA_READERS_FILENAME,
        get_user_config_dir() / DATA_READERS_FILENAME,
    ]
    for p in candidates:
        if p.exists() and p.is_file():
            return p
    return None
