from .errors import ConfigError, ConfigNotFoundError
from .loader import load_config
from .models import AppConfig, OutputConfig, SourceConfig, UpdateFrequency, sanitize_domain
from .provider import ConfigProvider, FileConfigProvider, StaticConfigProvider

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigProvider",
    "FileConfigProvider",
    "OutputConfig",
    "SourceConfig",
    "StaticConfigProvider",
    "UpdateFrequency",
    "load_config",
    "sanitize_domain",
]
