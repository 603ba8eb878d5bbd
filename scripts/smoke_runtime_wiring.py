from __future__ import annotations

import importlib
from types import SimpleNamespace


class _DummyCompletions:
    def create(self, *args, **kwargs):
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="recap"))]
        )


class _DummyClient:
    def __init__(self):
        self.chat = SimpleNamespace(completions=_DummyCompletions())


async def _noop_async(*args, **kwargs):
    return None


def _try_import_or_skip(module_name: str, pip_name: str | None = None) -> bool:
    try:
        importlib.import_module(module_name)
        return True
    except ModuleNotFoundError:
        install_name = pip_name or module_name
        print(
            f"Smoke wiring check skipped: missing dependency '{module_name}'. "
            f"Install the project and retry (e.g. `pip install {install_name}` "
            f"or `pip install -e .`)."
        )
        return False


def _main() -> int:
    if not _try_import_or_skip("discord", "discord.py"):
        return 0

    import discord
    from discord.ext import commands

    from config.retrieval_settings import RetrievalSettings
    from eval.simulated_history import SimulatedHistoryStore
    from misc.runtime_wiring import wire_bot_runtime

    intents = discord.Intents.none()
    bot = commands.Bot(command_prefix="!", intents=intents)

    wire_bot_runtime(
        bot,
        allowed_channel_ids={123456789012345678},
        settings=RetrievalSettings(index_enabled=False),
        index=SimpleNamespace(enabled=False, root=None),
        send_chunked=_noop_async,
        now_ms=lambda: 1767225600000,
        store_factory=lambda channel: SimulatedHistoryStore([]),
        retrieve_func=_noop_async,
        index_history_func=_noop_async,
        log_message_func=_noop_async,
        client=_DummyClient(),
        openai_model="gpt-5.1",
        default_prompt="Summarize the conversation.",
        ai_channel_name="ai",
    )

    expected_commands = {"index", "window"}
    existing_commands = set(bot.all_commands.keys())
    missing = sorted(expected_commands - existing_commands)
    if missing:
        raise RuntimeError(f"Missing expected commands: {missing}")

    registered = {
        name
        for name in ("on_ready", "on_message")
        if "register_runtime_events" in getattr(getattr(bot, name, None), "__qualname__", "")
    }
    if registered != {"on_ready", "on_message"}:
        raise RuntimeError("Runtime events were not registered")

    print("Smoke wiring check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
