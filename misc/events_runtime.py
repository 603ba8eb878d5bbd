from __future__ import annotations

import discord
from discord.ext import commands

from misc.discord_gates import message_in_allowed_channels
from misc.mention_routes import handle_summary_mention
from misc.runtime_deps import RuntimeBootDeps
from misc.runtime_deps import RuntimeDeps


def register_runtime_events(
    bot: commands.Bot,
    *,
    deps: RuntimeDeps,
    boot: RuntimeBootDeps,
) -> None:
    @bot.event
    async def on_ready():
        print(f"Recap is online as {bot.user}")
        print(
            f"[Index] enabled={deps.index.enabled if deps.index is not None else False} "
            f"path={getattr(deps.index, 'root', None)}"
        )

    @bot.event
    async def on_message(message: discord.Message):
        if not message_in_allowed_channels(message, boot.allowed_channel_ids):
            return

        if message.author.bot:
            return

        if (message.content or "").lstrip().startswith("!"):
            ctx = await bot.get_context(message)
            if ctx.valid:
                await bot.invoke(ctx)
                return

        if bot.user and bot.user in message.mentions:
            try:
                await handle_summary_mention(message, deps=deps, bot_user_id=bot.user.id)
            except discord.DiscordException as e:
                print(f"[Mention] Discord error while replying in channel {message.channel.id}: {e}")

        # the request is logged only after its own summary has been served
        await deps.log_message_func(message)
