from __future__ import annotations

import unittest
from datetime import datetime, timezone
from types import SimpleNamespace

try:
    import discord
    from retrieval.discord_store import DiscordHistoryStore
    from retrieval.discord_store import record_from_message
except ModuleNotFoundError:
    discord = None
    DiscordHistoryStore = None
    record_from_message = None

from retrieval.errors import RemoteCallError
from retrieval.snowflake import snowflake_to_timestamp


def _message(message_id: int, *, with_created_at=True):
    msg = SimpleNamespace(
        id=message_id,
        author=SimpleNamespace(id=55, name="ana"),
        content="hello",
    )
    if with_created_at:
        msg.created_at = datetime(2024, 1, 10, 15, 4, 5, 123000, tzinfo=timezone.utc)
    return msg


class FakeChannel:
    id = 321

    def __init__(self, messages=None, error=None):
        self.messages = messages or []
        self.error = error
        self.calls: list[dict] = []

    def history(self, **kwargs):
        self.calls.append(kwargs)
        return self._iterate()

    async def _iterate(self):
        if self.error is not None:
            raise self.error
        for m in self.messages:
            yield m


@unittest.skipIf(DiscordHistoryStore is None, "discord.py not installed")
class DiscordHistoryStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_fetch_before_clamps_limit_and_maps_records(self):
        channel = FakeChannel([_message(175928847299117063)])
        store = DiscordHistoryStore(channel, max_limit=100)

        records = await store.fetch_before(None, 500)

        self.assertEqual(channel.calls[0]["limit"], 100)
        self.assertIsNone(channel.calls[0]["before"])
        self.assertFalse(channel.calls[0]["oldest_first"])
        self.assertEqual(records[0].id, 175928847299117063)
        self.assertEqual(records[0].author_name, "ana")
        self.assertEqual(records[0].created_at_ms, 1704899045123)

    async def test_cursors_are_passed_as_objects(self):
        channel = FakeChannel()
        store = DiscordHistoryStore(channel)

        await store.fetch_after(111, 10)
        await store.fetch_around(222, 10)

        self.assertIsInstance(channel.calls[0]["after"], discord.Object)
        self.assertEqual(channel.calls[0]["after"].id, 111)
        self.assertEqual(channel.calls[1]["around"].id, 222)

    async def test_discord_errors_become_remote_call_errors(self):
        store = DiscordHistoryStore(FakeChannel(error=discord.DiscordException("boom")))
        with self.assertRaises(RemoteCallError):
            await store.fetch_before(123, 10)

    def test_record_timestamp_falls_back_to_snowflake(self):
        record = record_from_message(_message(175928847299117063, with_created_at=False))
        self.assertEqual(record.created_at_ms, snowflake_to_timestamp(175928847299117063))


if __name__ == "__main__":
    unittest.main()
