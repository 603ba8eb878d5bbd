from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import mock

try:
    from misc.discord_gates import context_in_allowed_channels
    from misc.discord_gates import message_in_allowed_channels
except ModuleNotFoundError:
    context_in_allowed_channels = None
    message_in_allowed_channels = None


class FakeThread:
    def __init__(self, channel_id: int, parent_id: int):
        self.id = int(channel_id)
        self.parent = SimpleNamespace(id=int(parent_id))


@unittest.skipIf(message_in_allowed_channels is None, "discord.py not installed")
class MessageGateTests(unittest.TestCase):
    def test_dm_is_allowed_with_channel_allowlist(self):
        message = SimpleNamespace(guild=None, channel=SimpleNamespace(id=999))
        self.assertTrue(message_in_allowed_channels(message, allowed_channel_ids={123}))

    def test_allowed_channel_is_allowed(self):
        message = SimpleNamespace(guild=SimpleNamespace(id=1), channel=SimpleNamespace(id=123))
        self.assertTrue(message_in_allowed_channels(message, allowed_channel_ids={123}))

    def test_disallowed_channel_is_blocked(self):
        message = SimpleNamespace(guild=SimpleNamespace(id=1), channel=SimpleNamespace(id=999))
        self.assertFalse(message_in_allowed_channels(message, allowed_channel_ids={123}))

    def test_empty_allowlist_allows_every_channel(self):
        message = SimpleNamespace(guild=SimpleNamespace(id=1), channel=SimpleNamespace(id=999))
        self.assertTrue(message_in_allowed_channels(message, allowed_channel_ids=set()))

    def test_thread_parent_allowlist_is_honored(self):
        message = SimpleNamespace(guild=SimpleNamespace(id=1), channel=FakeThread(channel_id=777, parent_id=123))
        with mock.patch("misc.discord_gates.discord.Thread", FakeThread):
            self.assertTrue(message_in_allowed_channels(message, allowed_channel_ids={123}))
            self.assertFalse(message_in_allowed_channels(message, allowed_channel_ids={456}))


@unittest.skipIf(context_in_allowed_channels is None, "discord.py not installed")
class ContextGateTests(unittest.TestCase):
    def test_guild_channel_follows_allowlist(self):
        ctx = SimpleNamespace(guild=SimpleNamespace(id=1), channel=SimpleNamespace(id=123))
        self.assertTrue(context_in_allowed_channels(ctx, {123}))
        self.assertFalse(context_in_allowed_channels(ctx, {456}))

    def test_dm_context_blocked_once_allowlist_is_set(self):
        ctx = SimpleNamespace(guild=None, channel=SimpleNamespace(id=999))
        self.assertFalse(context_in_allowed_channels(ctx, {123}))
        self.assertTrue(context_in_allowed_channels(ctx, set()))

    def test_missing_channel_is_blocked(self):
        self.assertFalse(context_in_allowed_channels(SimpleNamespace(guild=None), set()))


if __name__ == "__main__":
    unittest.main()
