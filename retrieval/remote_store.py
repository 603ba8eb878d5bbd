from __future__ import annotations

from typing import Protocol

from retrieval.models import RemoteRecord


class RemoteStore(Protocol):
    """Cursor-paginated view of one channel's history. Every batch is newest-first."""

    async def fetch_before(self, cursor_id: int | None, limit: int) -> list[RemoteRecord]:
        ...

    async def fetch_after(self, cursor_id: int, limit: int) -> list[RemoteRecord]:
        ...

    async def fetch_around(self, approx_id: int, limit: int) -> list[RemoteRecord]:
        ...


class CallMeter:
    """Counts every call made through a RemoteStore for diagnostics."""

    def __init__(self, store: RemoteStore):
        self.store = store
        self.calls = 0

    async def fetch_before(self, cursor_id: int | None, limit: int) -> list[RemoteRecord]:
        self.calls += 1
        return await self.store.fetch_before(cursor_id, limit)

    async def fetch_after(self, cursor_id: int, limit: int) -> list[RemoteRecord]:
        self.calls += 1
        return await self.store.fetch_after(cursor_id, limit)

    async def fetch_around(self, approx_id: int, limit: int) -> list[RemoteRecord]:
        self.calls += 1
        return await self.store.fetch_around(approx_id, limit)
