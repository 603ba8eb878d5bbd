from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Inclusive [start_ms, end_ms] interval in UTC epoch milliseconds."""

    start_ms: int
    end_ms: int

    def __post_init__(self) -> None:
        if int(self.start_ms) > int(self.end_ms):
            raise ValueError(f"Window start {self.start_ms} is after end {self.end_ms}")

    def contains(self, timestamp_ms: int) -> bool:
        return self.start_ms <= timestamp_ms <= self.end_ms

    @property
    def midpoint_ms(self) -> int:
        return (self.start_ms + self.end_ms) // 2

    def widened(self, margin_ms: int) -> "TimeWindow":
        margin = max(0, int(margin_ms))
        return TimeWindow(self.start_ms - margin, self.end_ms + margin)

    @property
    def start_utc(self) -> datetime:
        return datetime.fromtimestamp(self.start_ms / 1000, tz=timezone.utc)

    @property
    def end_utc(self) -> datetime:
        return datetime.fromtimestamp(self.end_ms / 1000, tz=timezone.utc)


@dataclass(frozen=True, slots=True)
class RemoteRecord:
    id: int
    author_id: int
    author_name: str
    content: str
    created_at_ms: int


@dataclass(slots=True)
class RetrievalResult:
    records: list[RemoteRecord] = field(default_factory=list)
    truncated: bool = False
    boundary_timestamp_ms: int | None = None
    call_count: int = 0
    elapsed_ms: int = 0
    strategy: str = "none"
    used_fallback: bool = False
    error: str | None = None

    @property
    def boundary_utc(self) -> datetime | None:
        if self.boundary_timestamp_ms is None:
            return None
        return datetime.fromtimestamp(self.boundary_timestamp_ms / 1000, tz=timezone.utc)


def sort_and_dedupe(records: Iterable[RemoteRecord]) -> list[RemoteRecord]:
    """First occurrence of each ID wins; output is ascending by (created_at_ms, id)."""
    seen: set[int] = set()
    out: list[RemoteRecord] = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        out.append(record)
    out.sort(key=lambda r: (r.created_at_ms, r.id))
    return out


def record_to_index_entry(record: RemoteRecord) -> dict[str, Any]:
    return {
        "id": str(record.id),
        "author": {
            "id": str(record.author_id),
            "username": record.author_name,
        },
        "content": record.content,
        "createdTimestamp": int(record.created_at_ms),
    }


def record_from_index_entry(entry: Any) -> RemoteRecord | None:
    if not isinstance(entry, dict):
        return None
    author = entry.get("author") if isinstance(entry.get("author"), dict) else {}
    try:
        return RemoteRecord(
            id=int(entry["id"]),
            author_id=int(author.get("id") or 0),
            author_name=str(author.get("username") or ""),
            content=str(entry.get("content") or ""),
            created_at_ms=int(entry["createdTimestamp"]),
        )
    except (KeyError, TypeError, ValueError):
        return None
