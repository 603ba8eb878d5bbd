from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from retrieval.anchor import DAY_MS
from retrieval.errors import IndexIOError
from retrieval.models import TimeWindow
from retrieval.remote_store import RemoteStore
from retrieval.service import retrieve_window


@dataclass(frozen=True, slots=True)
class IndexSummary:
    count: int
    fetched: int
    from_utc: str
    to_utc: str
    elapsed_ms: int
    truncated: bool = False


async def log_message(
    message: Any,
    *,
    index,
    record_from_message,
) -> None:
    if index is None or not index.enabled:
        return
    record = record_from_message(message)
    try:
        await index.append(message.channel.id, record)
    except IndexIOError as e:
        print(f"[Ingest] Could not log message {record.id} in channel {message.channel.id}: {e}")


async def index_history(
    channel_id: int,
    window: TimeWindow,
    *,
    store: RemoteStore,
    index,
    max_records: int,
    batch_size: int = 100,
    anchor_retries: int = 2,
    anchor_widen_ms: int = DAY_MS,
) -> IndexSummary:
    """Pull a window from remote history and log every record the index does not have yet."""
    from_utc = window.start_utc.isoformat()
    to_utc = window.end_utc.isoformat()
    if index is None or not index.enabled:
        return IndexSummary(count=0, fetched=0, from_utc=from_utc, to_utc=to_utc, elapsed_ms=0)

    started = time.perf_counter()
    print(f"[Ingest] Indexing channel {channel_id} from {from_utc} to {to_utc}")
    result = await retrieve_window(
        channel_id,
        window,
        store=store,
        index=index,
        max_records=max_records,
        batch_size=batch_size,
        anchor_retries=anchor_retries,
        anchor_widen_ms=anchor_widen_ms,
        use_index=False,
    )
    written = await index.append_missing(channel_id, window, result.records)
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    print(
        f"[Ingest] Done channel {channel_id}. Fetched {len(result.records)} records, "
        f"wrote {written} new in {elapsed_ms}ms"
    )
    return IndexSummary(
        count=written,
        fetched=len(result.records),
        from_utc=from_utc,
        to_utc=to_utc,
        elapsed_ms=elapsed_ms,
        truncated=result.truncated,
    )
