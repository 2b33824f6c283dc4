from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from shopify_sitemap.config.errors import ConfigError, ConfigNotFoundError
from shopify_sitemap.config.loader import load_config
from shopify_sitemap.observability.diagnostics import NULL_SINK

if TYPE_CHECKING:
    from pathlib import Path

    from shopify_sitemap.config.models import AppConfig
    from shopify_sitemap.observability.diagnostics import DiagnosticSink


class ConfigProvider(Protocol):
    def get(self) -> AppConfig: ...


@dataclass(slots=True)
class StaticConfigProvider:
    config: AppConfig

    def get(self) -> AppConfig:
        return self.config


class FileConfigProvider:
    """Serve the config file, re-reading it whenever its mtime changes.

    A broken edit keeps the last config that loaded; only the first load
    propagates the error.
    """

    def __init__(self, path: Path, *, sink: DiagnosticSink = NULL_SINK) -> None:
        self._path = path
        self._sink = sink
        self._loaded_mtime: float | None = None
        self._current: AppConfig | None = None

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> AppConfig:
        try:
            mtime = self._path.stat().st_mtime
        except FileNotFoundError as exc:
            raise ConfigNotFoundError(self._path) from exc

        if self._current is not None and self._loaded_mtime == mtime:
            return self._current

        try:
            config = load_config(self._path)
        except ConfigError as exc:
            if self._current is None:
                raise
            self._sink.warning("config_reload_failed", path=str(self._path), error=str(exc))
            return self._current

        if self._current is not None:
            self._sink.info("config_reloaded", path=str(self._path))
        self._current = config
        self._loaded_mtime = mtime
        return config
