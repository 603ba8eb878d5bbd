from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path

from retrieval.errors import IndexIOError
from retrieval.models import RemoteRecord, TimeWindow
from retrieval.models import record_from_index_entry
from retrieval.models import record_to_index_entry


def _utc_year_month(timestamp_ms: int) -> tuple[int, int]:
    dt = datetime.fromtimestamp(int(timestamp_ms) / 1000, tz=timezone.utc)
    return (dt.year, dt.month)


def month_keys_for_window(window: TimeWindow) -> list[tuple[int, int]]:
    year, month = _utc_year_month(window.start_ms)
    end_key = _utc_year_month(window.end_ms)
    out: list[tuple[int, int]] = []
    while (year, month) <= end_key:
        out.append((year, month))
        month += 1
        if month > 12:
            year += 1
            month = 1
    return out


def index_file_path(root: str | Path, channel_id: int | str, year: int, month: int) -> Path:
    return Path(root) / str(channel_id) / f"{int(year):04d}" / f"{int(month):02d}.jsonl"


def append_record_sync(root: str | Path, channel_id: int | str, record: RemoteRecord) -> Path:
    year, month = _utc_year_month(record.created_at_ms)
    path = index_file_path(root, channel_id, year, month)
    line = json.dumps(record_to_index_entry(record), ensure_ascii=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
    except OSError as exc:
        raise IndexIOError(f"Append to {path} failed: {exc}") from exc
    return path


def read_month_sync(path: Path, window: TimeWindow) -> tuple[list[RemoteRecord], int]:
    """Return (in-window records, skipped line count). Missing files read as empty."""
    records: list[RemoteRecord] = []
    skipped = 0
    try:
        with path.open("r", encoding="utf-8", errors="replace") as fh:
            for raw in fh:
                line = raw.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    skipped += 1
                    continue
                record = record_from_index_entry(entry)
                if record is None:
                    skipped += 1
                    continue
                if window.contains(record.created_at_ms):
                    records.append(record)
    except FileNotFoundError:
        return ([], 0)
    except OSError as exc:
        print(f"[Index] Could not read {path}: {exc}")
        return ([], 0)
    return (records, skipped)


def query_range_sync(root: str | Path, channel_id: int | str, window: TimeWindow) -> list[RemoteRecord]:
    out: list[RemoteRecord] = []
    skipped_total = 0
    for year, month in month_keys_for_window(window):
        records, skipped = read_month_sync(index_file_path(root, channel_id, year, month), window)
        out.extend(records)
        skipped_total += skipped
    if skipped_total:
        print(f"[Index] Skipped {skipped_total} unreadable line(s) for channel {channel_id}")
    out.sort(key=lambda r: (r.created_at_ms, r.id))
    return out


class MessageIndex:
    """
    Append-only JSONL log per (channel, UTC year, UTC month).

    Appends to the same month file are serialized through a per-file asyncio lock;
    readers never lock and may or may not observe a line being written concurrently.
    """

    def __init__(self, root: str | Path, *, enabled: bool = True):
        self.root = Path(root)
        self.enabled = bool(enabled)
        self._locks: dict[Path, asyncio.Lock] = {}

    def path_for(self, channel_id: int | str, created_at_ms: int) -> Path:
        year, month = _utc_year_month(created_at_ms)
        return index_file_path(self.root, channel_id, year, month)

    def _lock_for(self, path: Path) -> asyncio.Lock:
        lock = self._locks.get(path)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[path] = lock
        return lock

    async def append(self, channel_id: int | str, record: RemoteRecord) -> None:
        if not self.enabled:
            return
        path = self.path_for(channel_id, record.created_at_ms)
        async with self._lock_for(path):
            await asyncio.to_thread(append_record_sync, self.root, channel_id, record)

    async def append_many(self, channel_id: int | str, records: list[RemoteRecord]) -> int:
        count = 0
        for record in records:
            await self.append(channel_id, record)
            count += 1
        return count if self.enabled else 0

    async def query_range(self, channel_id: int | str, window: TimeWindow) -> list[RemoteRecord]:
        if not self.enabled:
            return []
        try:
            return await asyncio.to_thread(query_range_sync, self.root, channel_id, window)
        except OSError as exc:
            raise IndexIOError(f"Index query failed for channel {channel_id}: {exc}") from exc

    async def known_ids(self, channel_id: int | str, window: TimeWindow) -> set[int]:
        return {r.id for r in await self.query_range(channel_id, window)}

    async def append_missing(self, channel_id: int | str, window: TimeWindow, records: list[RemoteRecord]) -> int:
        """Append records whose IDs are not yet logged for window; returns how many were written."""
        if not self.enabled:
            return 0
        known = await self.known_ids(channel_id, window)
        fresh = []
        for record in records:
            if record.id in known:
                continue
            known.add(record.id)
            fresh.append(record)
        return await self.append_many(channel_id, fresh)
