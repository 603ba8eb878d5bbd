from __future__ import annotations

from retrieval.models import RemoteRecord, RetrievalResult, TimeWindow, sort_and_dedupe
from retrieval.remote_store import RemoteStore


class RecordCollector:
    """Per-call dedupe set with the max-count cutoff."""

    def __init__(self, limit: int):
        self.limit = max(1, int(limit))
        self.records: dict[int, RemoteRecord] = {}
        self.last_accepted: RemoteRecord | None = None
        self.truncated = False

    def accept(self, record: RemoteRecord) -> bool:
        """Add record; returns True once the limit is reached."""
        if record.id not in self.records:
            self.records[record.id] = record
            self.last_accepted = record
            if len(self.records) >= self.limit:
                self.truncated = True
        return self.truncated

    def result(self, *, strategy: str, boundary_ms: int | None) -> RetrievalResult:
        if self.truncated and self.last_accepted is not None:
            boundary_ms = self.last_accepted.created_at_ms
        return RetrievalResult(
            records=sort_and_dedupe(self.records.values()),
            truncated=self.truncated,
            boundary_timestamp_ms=boundary_ms,
            strategy=strategy,
        )


async def _walk_backward(
    store: RemoteStore,
    start_id: int,
    window: TimeWindow,
    collector: RecordCollector,
    *,
    batch_size: int,
) -> int | None:
    """Walk older pages from start_id; returns the first timestamp seen below the window."""
    cursor = int(start_id)
    while not collector.truncated:
        batch = await store.fetch_before(cursor, batch_size)
        if not batch:
            return None
        batch = sorted(batch, key=lambda r: r.id, reverse=True)
        for record in batch:
            if record.created_at_ms < window.start_ms:
                return record.created_at_ms
            if record.created_at_ms > window.end_ms:
                continue
            if collector.accept(record):
                return None
        oldest_id = batch[-1].id
        if oldest_id >= cursor:
            # store did not move past the cursor; stop instead of looping
            return None
        cursor = oldest_id
    return None


async def _walk_forward(
    store: RemoteStore,
    start_id: int,
    window: TimeWindow,
    collector: RecordCollector,
    *,
    batch_size: int,
) -> None:
    cursor = int(start_id)
    while not collector.truncated:
        batch = await store.fetch_after(cursor, batch_size)
        if not batch:
            return
        batch = sorted(batch, key=lambda r: r.id)
        for record in batch:
            if record.created_at_ms > window.end_ms:
                return
            if record.created_at_ms < window.start_ms:
                continue
            if collector.accept(record):
                return
        newest_id = batch[-1].id
        if newest_id <= cursor:
            return
        cursor = newest_id


async def expand_from_anchor(
    store: RemoteStore,
    anchor: RemoteRecord,
    window: TimeWindow,
    *,
    max_records: int,
    batch_size: int = 100,
) -> RetrievalResult:
    """
    Collect every in-window record reachable from anchor by paging outward.

    The anchor seeds the result only when it lies inside the window. The older side
    is walked first, then the newer side; hitting max_records halts both.
    """
    collector = RecordCollector(max_records)
    if window.contains(anchor.created_at_ms):
        collector.accept(anchor)

    boundary_ms = None
    if not collector.truncated:
        boundary_ms = await _walk_backward(store, anchor.id, window, collector, batch_size=batch_size)
    if not collector.truncated:
        await _walk_forward(store, anchor.id, window, collector, batch_size=batch_size)

    return collector.result(strategy="anchored", boundary_ms=boundary_ms)
