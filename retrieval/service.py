from __future__ import annotations

import time
from typing import Any

from retrieval.anchor import DAY_MS, search_anchor
from retrieval.errors import IndexIOError, RetrievalError
from retrieval.expander import expand_from_anchor
from retrieval.linear import linear_fetch
from retrieval.models import RetrievalResult, TimeWindow, sort_and_dedupe
from retrieval.remote_store import CallMeter, RemoteStore


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def result_from_index(records: list, max_records: int) -> RetrievalResult:
    limit = max(1, int(max_records))
    unique = sort_and_dedupe(records)
    truncated = len(unique) > limit
    if truncated:
        unique = unique[:limit]
    return RetrievalResult(
        records=unique,
        truncated=truncated,
        boundary_timestamp_ms=unique[-1].created_at_ms if truncated else None,
        strategy="index",
    )


def describe_result(result: RetrievalResult) -> str:
    line = (
        f"strategy={result.strategy} records={len(result.records)} calls={result.call_count} "
        f"elapsed={result.elapsed_ms}ms truncated={result.truncated}"
    )
    if result.used_fallback:
        line += " fallback=1"
    if result.error:
        line += f" error={result.error!r}"
    return line


async def retrieve_window(
    channel_id: int,
    window: TimeWindow,
    *,
    store: RemoteStore,
    index: Any = None,
    max_records: int = 1000,
    batch_size: int = 100,
    anchor_retries: int = 2,
    anchor_widen_ms: int = DAY_MS,
    use_index: bool = True,
    backfill_index: bool = False,
) -> RetrievalResult:
    """
    Fetch every record of channel_id inside window, cheapest source first.

    Order: local index (any hit is treated as complete), then anchor search plus
    bidirectional expansion, then the linear backward walk. A failure anywhere in the
    anchored path is logged and answered by the linear walk; only a failure of the
    linear walk itself raises RetrievalError.
    """
    started = time.perf_counter()

    if use_index and index is not None and getattr(index, "enabled", False):
        try:
            cached = await index.query_range(channel_id, window)
        except IndexIOError as exc:
            print(f"[Index] Unavailable for channel {channel_id}, using remote history: {exc}")
            cached = []
        if cached:
            result = result_from_index(cached, max_records)
            result.elapsed_ms = _elapsed_ms(started)
            print(f"[Retrieve] channel={channel_id} {describe_result(result)}")
            return result

    meter = CallMeter(store)
    result: RetrievalResult | None = None
    error_text: str | None = None
    try:
        anchor = await search_anchor(
            meter,
            window,
            batch_size=batch_size,
            retries=anchor_retries,
            widen_ms=anchor_widen_ms,
        )
        if anchor is not None:
            result = await expand_from_anchor(
                meter,
                anchor,
                window,
                max_records=max_records,
                batch_size=batch_size,
            )
    except Exception as e:
        error_text = f"{type(e).__name__}: {e}"
        print(f"[Retrieve] Anchored fetch failed in channel {channel_id}: {error_text}; falling back to linear walk")

    if result is None:
        try:
            result = await linear_fetch(meter, window, max_records=max_records, batch_size=batch_size)
        except Exception as e:
            print(f"[Retrieve] Linear fallback failed in channel {channel_id}: {e}")
            raise RetrievalError(f"Retrieval failed after fallback in channel {channel_id}: {e}") from e
        result.used_fallback = True
        result.error = error_text

    result.call_count = meter.calls
    result.elapsed_ms = _elapsed_ms(started)

    if backfill_index and index is not None and result.records and not result.truncated:
        try:
            written = await index.append_missing(channel_id, window, result.records)
            if written:
                print(f"[Index] Backfilled {written} record(s) for channel {channel_id}")
        except IndexIOError as exc:
            print(f"[Index] Backfill skipped for channel {channel_id}: {exc}")

    print(f"[Retrieve] channel={channel_id} {describe_result(result)}")
    return result
