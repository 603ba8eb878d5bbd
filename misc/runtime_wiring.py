from __future__ import annotations

from misc.commands.command_deps import CommandDeps
from misc.commands.command_deps import CommandGates
from misc.commands.commands_index import register as register_index
from misc.discord_gates import context_in_allowed_channels
from misc.runtime_deps import RuntimeBootDeps
from misc.runtime_deps import RuntimeDeps
from misc.events_runtime import register_runtime_events


def wire_bot_runtime(
    bot,
    *,
    allowed_channel_ids: set[int],
    settings,
    index,
    send_chunked,
    now_ms,
    store_factory,
    retrieve_func,
    index_history_func,
    log_message_func,
    client,
    openai_model: str,
    default_prompt: str,
    ai_channel_name: str,
) -> None:
    def in_allowed_channel(ctx) -> bool:
        return context_in_allowed_channels(ctx, allowed_channel_ids)

    command_deps = CommandDeps(
        settings=settings,
        index=index,
        send_chunked=send_chunked,
        now_ms=now_ms,
        store_factory=store_factory,
        retrieve_func=retrieve_func,
        index_history_func=index_history_func,
    )
    gates = CommandGates(
        in_allowed_channel=in_allowed_channel,
        allowed_channel_ids=allowed_channel_ids,
    )
    register_index(bot, deps=command_deps, gates=gates)

    runtime_deps = RuntimeDeps(
        settings=settings,
        index=index,
        send_chunked=send_chunked,
        now_ms=now_ms,
        store_factory=store_factory,
        retrieve_func=retrieve_func,
        log_message_func=log_message_func,
        client=client,
        openai_model=openai_model,
        default_prompt=default_prompt,
        ai_channel_name=ai_channel_name,
    )
    register_runtime_events(
        bot,
        deps=runtime_deps,
        boot=RuntimeBootDeps(allowed_channel_ids=allowed_channel_ids),
    )
