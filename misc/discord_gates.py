from __future__ import annotations

from typing import Any

import discord


def channel_is_allowed(channel: Any, allowed_channel_ids: set[int]) -> bool:
    # An empty allowlist means every channel the bot can see.
    if not allowed_channel_ids:
        return True
    if int(getattr(channel, "id", 0) or 0) in allowed_channel_ids:
        return True
    # threads inherit their parent's access
    parent = channel.parent if isinstance(channel, discord.Thread) else None
    return parent is not None and int(parent.id) in allowed_channel_ids


def message_in_allowed_channels(message: discord.Message, allowed_channel_ids: set[int]) -> bool:
    if getattr(message, "guild", None) is None:
        return True
    return channel_is_allowed(message.channel, allowed_channel_ids)


def context_in_allowed_channels(ctx: Any, allowed_channel_ids: set[int]) -> bool:
    channel = getattr(ctx, "channel", None)
    if channel is None:
        return False
    if getattr(ctx, "guild", None) is None and allowed_channel_ids:
        # history commands need a guild channel once an allowlist is set
        return False
    return channel_is_allowed(channel, allowed_channel_ids)
