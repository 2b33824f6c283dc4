from __future__ import annotations

import os
import re
import sys
from typing import TYPE_CHECKING, Any, TextIO, cast

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping

LEVEL_ENV_VAR = "LOG_LEVEL"
FORMAT_ENV_VAR = "LOG_FORMAT"
DEFAULT_LEVEL = "INFO"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

MASK = "***"
_SECRET_KEY_PATTERN = re.compile(r"(token|api_key|apikey|authorization|cookie|secret|password)", re.IGNORECASE)
# Signed CDN links and private-app tokens can end up in sitemap URLs.
_SECRET_QUERY_PATTERN = re.compile(r"([?&](?:token|access_token|api_key|apikey|signature|sig))=([^&#\s]+)", re.IGNORECASE)
_USERINFO_PATTERN = re.compile(r"(https?://)[^/\s@]+@", re.IGNORECASE)
_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x1f\x7f]")
_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}
_MAX_VALUE_LENGTH = 4000


def _escape_control_char(match: re.Match[str]) -> str:
    char = match.group(0)
    return _ESCAPES.get(char, f"\\x{ord(char):02x}")


def _sanitize_text(text: str) -> str:
    text = _CONTROL_CHARS_PATTERN.sub(_escape_control_char, text)
    text = _SECRET_QUERY_PATTERN.sub(rf"\1={MASK}", text)
    text = _USERINFO_PATTERN.sub(rf"\1{MASK}@", text)
    if len(text) > _MAX_VALUE_LENGTH:
        return text[:_MAX_VALUE_LENGTH] + "..."
    return text


def sanitize_value(value: object) -> object:
    """Make ``value`` safe for a single log line."""
    if isinstance(value, str):
        return _sanitize_text(value)
    if isinstance(value, (int, float, bool)) or value is None:
        return value
    if isinstance(value, dict):
        return {key: sanitize_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [sanitize_value(val) for val in value]
    return _sanitize_text(str(value))


def sanitize_event(_: object, __: object, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    return {
        key: MASK if _SECRET_KEY_PATTERN.search(key) else sanitize_value(value)
        for key, value in event_dict.items()
    }


def parse_level(value: str | None = None) -> str:
    level = (value or os.environ.get(LEVEL_ENV_VAR) or DEFAULT_LEVEL).upper()
    return level if level in LEVELS else DEFAULT_LEVEL


def configure_logging(
    *,
    level: str | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """Configure structlog for the CLI.

    Logs go to stderr by default so that ``render --stdout`` keeps stdout for
    the XML document. ``level`` and ``fmt`` fall back to ``LOG_LEVEL`` and
    ``LOG_FORMAT``.
    """
    format_hint = (fmt or os.environ.get(FORMAT_ENV_VAR) or "json").lower()

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        sanitize_event,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
    ]
    if format_hint == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(parse_level(level)),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )

    return cast("structlog.BoundLogger", structlog.get_logger())


def get_logger(name: str) -> structlog.BoundLogger:
    return cast("structlog.BoundLogger", structlog.get_logger(name))
