"""Diagnostic sink accepted by the pipeline components.

The components never log on their own. They report through a sink whose
surface matches a structlog bound logger, so the application can pass
``get_logger(...)`` directly while library callers get silence by default.
"""

from __future__ import annotations

from typing import Protocol


class DiagnosticSink(Protocol):
    def debug(self, event: str, **fields: object) -> object: ...
    def info(self, event: str, **fields: object) -> object: ...
    def warning(self, event: str, **fields: object) -> object: ...


class NullSink:
    def debug(self, event: str, **fields: object) -> None:
        _ = event, fields

    def info(self, event: str, **fields: object) -> None:
        _ = event, fields

    def warning(self, event: str, **fields: object) -> None:
        _ = event, fields


NULL_SINK = NullSink()
