from __future__ import annotations

from retrieval.models import RemoteRecord, TimeWindow
from retrieval.remote_store import RemoteStore
from retrieval.snowflake import timestamp_to_snowflake


DAY_MS = 86_400_000


async def fetch_near_midpoint(store: RemoteStore, window: TimeWindow, *, batch_size: int) -> list[RemoteRecord]:
    mid_id = timestamp_to_snowflake(window.midpoint_ms)
    return await store.fetch_around(mid_id, batch_size)


def pick_in_window(batch: list[RemoteRecord], window: TimeWindow) -> RemoteRecord | None:
    for record in batch:
        if window.contains(record.created_at_ms):
            return record
    return None


def pick_nearest_edge(batch: list[RemoteRecord], window: TimeWindow) -> RemoteRecord | None:
    if not batch:
        return None

    def _distance(record: RemoteRecord) -> tuple[int, int]:
        ts = record.created_at_ms
        return (min(abs(ts - window.start_ms), abs(ts - window.end_ms)), record.id)

    return min(batch, key=_distance)


async def find_anchor(store: RemoteStore, window: TimeWindow, *, batch_size: int = 100) -> RemoteRecord | None:
    batch = await fetch_near_midpoint(store, window, batch_size=batch_size)
    return pick_in_window(batch, window)


async def search_anchor(
    store: RemoteStore,
    window: TimeWindow,
    *,
    batch_size: int = 100,
    retries: int = 2,
    widen_ms: int = DAY_MS,
) -> RemoteRecord | None:
    """
    Locate a record to start expansion from with a single fetch_around call.

    Widening is symmetric, so it never moves the midpoint ID; retry k only re-checks the
    same batch against the window widened by k * widen_ms on each side. Once retries
    run out the record closest to either window edge is returned as a navigation-only
    anchor; None means fetch_around came back empty.
    """
    batch = await fetch_near_midpoint(store, window, batch_size=batch_size)
    if not batch:
        print("[Anchor] Empty batch around midpoint; no history near window")
        return None

    for attempt in range(max(0, int(retries)) + 1):
        anchor = pick_in_window(batch, window.widened(int(widen_ms) * attempt))
        if anchor is not None:
            if attempt:
                print(f"[Anchor] Found anchor {anchor.id} after widening by {attempt} step(s)")
            return anchor

    anchor = pick_nearest_edge(batch, window)
    if anchor is not None:
        print(f"[Anchor] No record near window; navigating from nearest record {anchor.id}")
    return anchor
