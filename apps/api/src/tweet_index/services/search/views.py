from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from tweet_index.services.importer.types import Record

# Twitter API style first, then the archive export ("Grailbird") style.
_CREATED_AT_FORMATS = (
    "%a %b %d %H:%M:%S %z %Y",
    "%Y-%m-%d %H:%M:%S %z",
)
_DISPLAY_FORMAT = "%d %b %Y %H:%M"


def parse_created_at(value: str) -> datetime | None:
    for fmt in _CREATED_AT_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
    return None


def _expanded_urls(record: dict[str, Any]) -> tuple[str, ...]:
    entities = record.get("entities")
    urls = entities.get("urls") if isinstance(entities, dict) else None
    if not isinstance(urls, list):
        return ()

    expanded: list[str] = []
    for entry in urls:
        if not isinstance(entry, dict):
            continue
        url = entry.get("expanded_url") or entry.get("url")
        if isinstance(url, str) and url:
            expanded.append(url)
    return tuple(expanded)


@dataclass(frozen=True)
class TweetView:
    """Read-only accessors over an opaque tweet record."""

    created_at: str | None
    text: str | None
    urls: tuple[str, ...]

    @classmethod
    def from_record(cls, record: Record) -> TweetView:
        if not isinstance(record, dict):
            return cls(created_at=None, text=None, urls=())

        created_at = record.get("created_at")
        text = record.get("text")
        return cls(
            created_at=created_at if isinstance(created_at, str) else None,
            text=text if isinstance(text, str) else None,
            urls=_expanded_urls(record),
        )

    @property
    def created_at_display(self) -> str | None:
        if self.created_at is None:
            return None
        parsed = parse_created_at(self.created_at)
        if parsed is None:
            return self.created_at
        return parsed.strftime(_DISPLAY_FORMAT)

    @property
    def first_url(self) -> str | None:
        return self.urls[0] if self.urls else None
