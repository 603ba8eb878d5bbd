from __future__ import annotations

from discord.ext import commands

from misc.commands.command_deps import CommandDeps
from misc.commands.command_deps import CommandGates
from retrieval.date_range import format_window_label
from retrieval.date_range import parse_date_range
from retrieval.errors import RetrievalError
from retrieval.models import TimeWindow
from retrieval.service import describe_result
from retrieval.snowflake import DISCORD_EPOCH_MS


def register(
    bot: commands.Bot,
    *,
    deps: CommandDeps,
    gates: CommandGates,
) -> None:
    @bot.command(name="index")
    async def cmd_index(ctx: commands.Context, *, raw: str = ""):
        if not gates.in_allowed_channel(ctx):
            return
        if deps.index is None or not deps.index.enabled:
            await ctx.send("Message indexing is disabled.")
            return

        now = deps.now_ms()
        window = parse_date_range(raw, now_ms=now, tz=deps.settings.civil_timezone)
        if window is None:
            if raw.strip():
                await ctx.send("Couldn't read that date range. Use {MM/DD/YYYY} or {MM/DD/YYYY - MM/DD/YYYY}.")
                return
            window = TimeWindow(DISCORD_EPOCH_MS, now)

        store = deps.store_factory(ctx.channel)
        try:
            summary = await deps.index_history_func(ctx.channel.id, window, store)
        except RetrievalError as e:
            print(f"[Ingest] Index command failed in channel {ctx.channel.id}: {e}")
            await ctx.send(f"Indexing failed: {e}")
            return

        await ctx.send(
            f"Indexed {summary.count} messages from {summary.from_utc} to {summary.to_utc} in {summary.elapsed_ms}ms.\n"
            f"Logs saved for date range: {summary.from_utc} to {summary.to_utc}"
        )

    @bot.command(name="window")
    async def cmd_window(ctx: commands.Context, *, raw: str = ""):
        if not gates.in_allowed_channel(ctx):
            return
        tz = deps.settings.civil_timezone
        window = parse_date_range(raw, now_ms=deps.now_ms(), tz=tz)
        if window is None:
            await ctx.send("Usage: !window {MM/DD/YYYY} or !window {MM/DD/YYYY - MM/DD/YYYY}")
            return

        store = deps.store_factory(ctx.channel)
        try:
            result = await deps.retrieve_func(ctx.channel.id, window, store)
        except RetrievalError as e:
            await ctx.send(f"Retrieval failed: {e}")
            return

        lines = [
            f"Window {format_window_label(window, tz)}",
            f"UTC {window.start_utc.isoformat()} -> {window.end_utc.isoformat()}",
            describe_result(result),
        ]
        if result.truncated and result.boundary_utc is not None:
            lines.append(f"Stopped at limit; boundary {result.boundary_utc.isoformat()}")
        await deps.send_chunked(ctx.channel, "```\n" + "\n".join(lines) + "\n```")
