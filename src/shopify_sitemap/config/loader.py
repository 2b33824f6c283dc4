from __future__ import annotations

import os
import tomllib
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from .errors import ConfigError
from .models import AppConfig

if TYPE_CHECKING:
    from pathlib import Path

DOMAIN_ENV_VAR = "SHOPIFY_SITEMAP_DOMAIN"


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    domain = os.environ.get(DOMAIN_ENV_VAR)
    if not domain:
        return data
    source = data.get("source")
    if source is None:
        source = {}
    if not isinstance(source, dict):
        msg = "source must be a table"
        raise ConfigError(msg)
    return {**data, "source": {**source, "domain": domain}}


def load_config(path: Path) -> AppConfig:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = "toml parse error"
        raise ConfigError(msg, path=path) from exc
    except OSError as exc:
        msg = f"config not readable: {path}"
        raise ConfigError(msg, path=path) from exc

    data = _apply_env_overrides(data)

    try:
        return AppConfig.from_raw(data)
    except ValidationError as exc:
        msg = f"invalid config: {path}"
        raise ConfigError(msg, path=path) from exc
