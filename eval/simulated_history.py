from __future__ import annotations

import bisect
import random

from retrieval.errors import RemoteCallError
from retrieval.models import RemoteRecord
from retrieval.snowflake import timestamp_to_snowflake


def build_history(timestamps_ms: list[int], *, author_count: int = 5) -> list[RemoteRecord]:
    records: list[RemoteRecord] = []
    for i, ts in enumerate(sorted(int(t) for t in timestamps_ms)):
        author_id = 1000 + (i % max(1, author_count))
        records.append(
            RemoteRecord(
                # low bits stand in for the worker/increment fields
                id=timestamp_to_snowflake(ts) + (i % 4096),
                author_id=author_id,
                author_name=f"user{author_id}",
                content=f"message {i}",
                created_at_ms=ts,
            )
        )
    return records


def build_uniform_history(count: int, start_ms: int, end_ms: int, **kwargs) -> list[RemoteRecord]:
    count = max(0, int(count))
    if count == 0:
        return []
    if count == 1:
        return build_history([start_ms], **kwargs)
    step = (int(end_ms) - int(start_ms)) / (count - 1)
    return build_history([int(start_ms + i * step) for i in range(count)], **kwargs)


class SimulatedHistoryStore:
    """
    In-memory channel history with Discord's pagination semantics.

    overlap re-serves that many records from the previous page at the cursor edge, and
    shuffle returns each page out of order, to mimic a store that repeats and reorders
    records across calls. Methods named in fail_on raise RemoteCallError.
    """

    def __init__(
        self,
        records: list[RemoteRecord],
        *,
        overlap: int = 0,
        shuffle: bool = False,
        fail_on: set[str] | None = None,
        seed: int = 7,
    ):
        self.records = sorted(records, key=lambda r: r.id)
        self._ids = [r.id for r in self.records]
        self.overlap = max(0, int(overlap))
        self.shuffle = bool(shuffle)
        self.fail_on = set(fail_on or set())
        self._rng = random.Random(seed)
        self.calls: dict[str, int] = {"before": 0, "after": 0, "around": 0}

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def _check(self, method: str) -> None:
        self.calls[method] += 1
        if method in self.fail_on:
            raise RemoteCallError(f"simulated {method} failure")

    def _emit(self, page: list[RemoteRecord]) -> list[RemoteRecord]:
        out = sorted(page, key=lambda r: r.id, reverse=True)
        if self.shuffle:
            self._rng.shuffle(out)
        return out

    async def fetch_before(self, cursor_id: int | None, limit: int) -> list[RemoteRecord]:
        self._check("before")
        end = len(self._ids) if cursor_id is None else bisect.bisect_left(self._ids, int(cursor_id))
        end = min(len(self._ids), end + self.overlap) if cursor_id is not None else end
        start = max(0, end - int(limit) - self.overlap)
        return self._emit(self.records[start:end])

    async def fetch_after(self, cursor_id: int, limit: int) -> list[RemoteRecord]:
        self._check("after")
        start = bisect.bisect_right(self._ids, int(cursor_id))
        start = max(0, start - self.overlap)
        return self._emit(self.records[start : start + int(limit)])

    async def fetch_around(self, approx_id: int, limit: int) -> list[RemoteRecord]:
        self._check("around")
        idx = bisect.bisect_left(self._ids, int(approx_id))
        half = int(limit) // 2
        start = max(0, idx - half)
        end = min(len(self._ids), start + int(limit))
        start = max(0, end - int(limit))
        return self._emit(self.records[start:end])
