from __future__ import annotations

from retrieval.expander import RecordCollector
from retrieval.models import RetrievalResult, TimeWindow
from retrieval.remote_store import RemoteStore


async def linear_fetch(
    store: RemoteStore,
    window: TimeWindow,
    *,
    max_records: int,
    batch_size: int = 100,
) -> RetrievalResult:
    """
    Page backward from the newest record until the window's start is passed.

    Visits everything newer than the window first, so it costs more calls than the
    anchored path, but it needs no anchor and never skips an in-window record.
    """
    collector = RecordCollector(max_records)
    boundary_ms = None
    cursor: int | None = None

    while not collector.truncated:
        batch = await store.fetch_before(cursor, batch_size)
        if not batch:
            break
        batch = sorted(batch, key=lambda r: r.id, reverse=True)
        passed_start = False
        for record in batch:
            if record.created_at_ms < window.start_ms:
                boundary_ms = record.created_at_ms
                passed_start = True
                break
            if record.created_at_ms > window.end_ms:
                continue
            if collector.accept(record):
                break
        if passed_start or collector.truncated:
            break
        oldest_id = batch[-1].id
        if cursor is not None and oldest_id >= cursor:
            break
        cursor = oldest_id

    return collector.result(strategy="linear", boundary_ms=boundary_ms)
