"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``TINYNOTES_*`` prefix
  3. TOML file    — ``tinynotes.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`tinynotes.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tinynotes.config.discovery import find_config
from tinynotes.config.models import NotesConfig, StorageConfig

DEFAULT_DATA_DIRNAME = "data"


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``tinynotes.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class NotesSettings(BaseSettings):
    """Unified settings for the tinynotes CLI and store.

    Attributes:
        base_dir: Directory relative storage paths are anchored to (parent
            of ``tinynotes.toml``, or CWD if no config found).
        data_dir: Explicit storage directory override (``--data-dir`` or
            ``TINYNOTES_DATA_DIR``). Wins over ``[storage] data_dir``.
        user: Trusted, already-authenticated user identifier.
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TINYNOTES_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved paths ---
    base_dir: Path = Field(default_factory=Path.cwd)
    data_dir: Path | None = None
    config_path: Path | None = None

    # --- Identity (supplied by the caller's auth layer) ---
    user: str | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    storage: StorageConfig = Field(default_factory=StorageConfig)
    notes: NotesConfig = Field(default_factory=NotesConfig)

    @property
    def storage_root(self) -> Path:
        """Absolute directory holding one subdirectory per user."""
        chosen = self.data_dir or self.storage.data_dir or Path(DEFAULT_DATA_DIRNAME)
        if not chosen.is_absolute():
            chosen = self.base_dir / chosen
        return chosen.absolute()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> NotesSettings:
        """Construct settings from CLI invocation.

        Discovers ``tinynotes.toml`` via walk-up from *start* (or uses the
        explicit *config_path*), anchors relative paths at the config
        file's directory, and merges CLI flags as highest-priority
        overrides. Flags passed as ``None`` are dropped so env vars and
        TOML values still apply.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        base_dir = toml_path.parent if toml_path else (start or Path.cwd())
        overrides = {k: v for k, v in cli_flags.items() if v is not None}

        _tls.toml_path = toml_path
        try:
            return cls(
                base_dir=base_dir,
                config_path=toml_path,
                **overrides,
            )
        except ValidationError as exc:
            where = f" in {toml_path}" if toml_path else ""
            msg = f"Invalid configuration{where}:\n{exc}"
            raise click.ClickException(msg) from exc
        finally:
            _tls.toml_path = None
