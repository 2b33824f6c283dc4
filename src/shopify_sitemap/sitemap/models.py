from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


class SitemapKind(StrEnum):
    FLAT = "flat"
    INDEX = "index"


@dataclass(frozen=True, slots=True)
class SitemapEntry:
    location: str
    last_modified: str | None = None
    change_frequency: str | None = None
    priority: str | None = None

    def __post_init__(self) -> None:
        if not self.location:
            msg = "location cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class SitemapIndexEntry:
    location: str
    last_modified: str | None = None

    def __post_init__(self) -> None:
        if not self.location:
            msg = "location cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class FlatPayload:
    entries: tuple[SitemapEntry, ...] = ()

    @property
    def kind(self) -> SitemapKind:
        return SitemapKind.FLAT

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class IndexPayload:
    refs: tuple[SitemapIndexEntry, ...] = ()

    @property
    def kind(self) -> SitemapKind:
        return SitemapKind.INDEX

    def __len__(self) -> int:
        return len(self.refs)


SitemapPayload = FlatPayload | IndexPayload


def payload_to_dict(payload: SitemapPayload) -> dict[str, Any]:
    if isinstance(payload, IndexPayload):
        return {
            "kind": payload.kind.value,
            "items": [{"location": ref.location, "last_modified": ref.last_modified} for ref in payload.refs],
        }
    return {
        "kind": payload.kind.value,
        "items": [
            {
                "location": entry.location,
                "last_modified": entry.last_modified,
                "change_frequency": entry.change_frequency,
                "priority": entry.priority,
            }
            for entry in payload.entries
        ],
    }


def payload_from_dict(data: dict[str, Any]) -> SitemapPayload:
    kind = SitemapKind(data["kind"])
    items = data.get("items") or []
    if kind is SitemapKind.INDEX:
        return IndexPayload(refs=tuple(SitemapIndexEntry(**item) for item in items))
    return FlatPayload(entries=tuple(SitemapEntry(**item) for item in items))
