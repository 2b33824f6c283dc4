from __future__ import annotations

import re
from datetime import timedelta
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from collections.abc import Mapping

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_FILENAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def sanitize_domain(value: str) -> str:
    """Reduce user input such as ``https://shop.example.com/`` to a bare host."""
    domain = _SCHEME_RE.sub("", value.strip())
    domain = domain.rstrip("/")
    return domain.split("/", 1)[0]


class UpdateFrequency(StrEnum):
    HOURLY = "hourly"
    TWICEDAILY = "twicedaily"
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def interval(self) -> timedelta:
        return _FREQUENCY_INTERVALS[self]


_FREQUENCY_INTERVALS = {
    UpdateFrequency.HOURLY: timedelta(hours=1),
    UpdateFrequency.TWICEDAILY: timedelta(hours=12),
    UpdateFrequency.DAILY: timedelta(days=1),
    UpdateFrequency.WEEKLY: timedelta(weeks=1),
}


class SourceConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    domain: str = ""
    remote_path: str = "sitemap.xml"
    flatten: bool = False
    frequency: UpdateFrequency = UpdateFrequency.DAILY
    max_refs: int = Field(default=500, gt=0)
    deadline_seconds: float = Field(default=300.0, gt=0)

    @field_validator("domain")
    @classmethod
    def _sanitize_domain(cls, value: str) -> str:
        return sanitize_domain(value)

    @field_validator("remote_path")
    @classmethod
    def _validate_remote_path(cls, value: str) -> str:
        path = value.strip().lstrip("/")
        if path == "":
            msg = "is required"
            raise ValueError(msg)
        return path

    @property
    def cache_ttl(self) -> timedelta:
        return self.frequency.interval

    @property
    def sitemap_url(self) -> str:
        return f"https://{self.domain}/{self.remote_path}"


class OutputConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    filename: str = "store.xml"
    max_urls_per_page: int = Field(default=2000, gt=0)
    manual_update_interval_seconds: float = Field(default=30.0, ge=0)

    @field_validator("filename")
    @classmethod
    def _validate_filename(cls, value: str) -> str:
        if not _FILENAME_RE.match(value):
            msg = "must be a bare file name"
            raise ValueError(msg)
        return value


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    site_url: str
    source: SourceConfig = SourceConfig()
    output: OutputConfig = OutputConfig()

    @field_validator("site_url")
    @classmethod
    def _validate_site_url(cls, value: str) -> str:
        if not _is_valid_url(value):
            msg = "must be a valid URL"
            raise ValueError(msg)
        return value

    @property
    def public_sitemap_url(self) -> str:
        return f"{self.site_url.rstrip('/')}/{self.output.filename}"

    @classmethod
    def from_raw(cls, data: Mapping[str, object]) -> AppConfig:
        return cls.model_validate(data)
