from __future__ import annotations

from typing import Any

import discord

from retrieval.errors import RemoteCallError
from retrieval.models import RemoteRecord
from retrieval.snowflake import snowflake_to_timestamp


def record_from_message(message: Any) -> RemoteRecord:
    created_at = getattr(message, "created_at", None)
    if created_at is not None:
        created_ms = int(round(created_at.timestamp() * 1000))
    else:
        created_ms = snowflake_to_timestamp(int(message.id))
    author = message.author
    return RemoteRecord(
        id=int(message.id),
        author_id=int(getattr(author, "id", 0) or 0),
        author_name=str(getattr(author, "name", None) or getattr(author, "id", "unknown")),
        content=message.content or "",
        created_at_ms=int(created_ms),
    )


class DiscordHistoryStore:
    """RemoteStore over a discord.py Messageable's `history()` iterator."""

    def __init__(self, channel: Any, *, max_limit: int = 100):
        self.channel = channel
        self.max_limit = max(1, int(max_limit))

    def _limit(self, limit: int) -> int:
        return max(1, min(int(limit), self.max_limit))

    async def _collect(self, **kwargs) -> list[RemoteRecord]:
        try:
            messages = [m async for m in self.channel.history(oldest_first=False, **kwargs)]
        except discord.DiscordException as exc:
            raise RemoteCallError(f"History fetch failed in channel {getattr(self.channel, 'id', '?')}: {exc}") from exc
        return [record_from_message(m) for m in messages]

    async def fetch_before(self, cursor_id: int | None, limit: int) -> list[RemoteRecord]:
        before = discord.Object(id=int(cursor_id)) if cursor_id is not None else None
        return await self._collect(limit=self._limit(limit), before=before)

    async def fetch_after(self, cursor_id: int, limit: int) -> list[RemoteRecord]:
        return await self._collect(limit=self._limit(limit), after=discord.Object(id=int(cursor_id)))

    async def fetch_around(self, approx_id: int, limit: int) -> list[RemoteRecord]:
        return await self._collect(limit=self._limit(limit), around=discord.Object(id=int(approx_id)))
