import os
import re
import time

import discord
from discord.ext import commands
from openai import OpenAI

from config.defaults import DEFAULT_AI_CHANNEL
from config.defaults import DEFAULT_OPENAI_MODEL
from config.defaults import DEFAULT_USER_PROMPT
from config.defaults import INDEX_MAX_RECORDS
from config.retrieval_settings import apply_env_overrides
from config.retrieval_settings import load_retrieval_settings
from ingestion.service import index_history as index_history_service
from ingestion.service import log_message as log_message_service
from ingestion.store import MessageIndex
from misc.chunking import chunk_text
from misc.runtime_wiring import wire_bot_runtime
from retrieval.discord_store import DiscordHistoryStore
from retrieval.discord_store import record_from_message
from retrieval.service import retrieve_window

# =========================
# ENV
# =========================
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

if not DISCORD_TOKEN:
    raise RuntimeError("Missing DISCORD_TOKEN env var")
if not OPENAI_API_KEY:
    raise RuntimeError("Missing OPENAI_API_KEY env var")

OPENAI_MODEL = os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL)
AI_CHANNEL_NAME = os.getenv("RECAP_AI_CHANNEL", DEFAULT_AI_CHANNEL).strip()


def parse_id_set(raw: str | None) -> set[int]:
    if not raw:
        return set()
    out: set[int] = set()
    for tok in re.split(r"[\s,;]+", raw.strip()):
        if not tok:
            continue
        if re.fullmatch(r"\d{8,22}", tok):
            out.add(int(tok))
    return out


# Empty allowlist: listen everywhere the bot can read.
ALLOWED_CHANNEL_IDS = parse_id_set(os.getenv("RECAP_ALLOWED_CHANNEL_IDS"))

# =========================
# RETRIEVAL SETTINGS
# =========================
SETTINGS_PATH = os.getenv(
    "RECAP_SETTINGS_PATH",
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "config", "retrieval.yml"),
)
SETTINGS, SETTINGS_WARNING = load_retrieval_settings(SETTINGS_PATH)
SETTINGS = apply_env_overrides(SETTINGS, dict(os.environ))
if SETTINGS_WARNING:
    print(f"[CFG] {SETTINGS_WARNING}")

print(
    f"[CFG] max_fetch={SETTINGS.max_messages_fetch} batch={SETTINGS.batch_size} "
    f"anchor_retries={SETTINGS.anchor_retries} widen_days={SETTINGS.anchor_widen_days} "
    f"tz_offset={SETTINGS.tz_standard_offset_minutes} dst={SETTINGS.tz_observe_dst} "
    f"index={SETTINGS.index_enabled} index_path={SETTINGS.index_path} "
    f"backfill_on_fetch={SETTINGS.backfill_index_on_fetch} "
    f"allowed_channels={len(ALLOWED_CHANNEL_IDS) or 'all'}"
)

client = OpenAI(api_key=OPENAI_API_KEY)
message_index = MessageIndex(SETTINGS.index_path, enabled=SETTINGS.index_enabled)


def now_ms() -> int:
    return int(time.time() * 1000)


async def send_chunked(channel: discord.abc.Messageable, text: str):
    first = None
    for part in chunk_text(text):
        sent = await channel.send(part)
        if first is None:
            first = sent
    return first


def store_for_channel(channel) -> DiscordHistoryStore:
    return DiscordHistoryStore(channel, max_limit=SETTINGS.batch_size)


async def retrieve(channel_id: int, window, store):
    return await retrieve_window(
        channel_id,
        window,
        store=store,
        index=message_index,
        max_records=SETTINGS.max_messages_fetch,
        batch_size=SETTINGS.batch_size,
        anchor_retries=SETTINGS.anchor_retries,
        anchor_widen_ms=SETTINGS.anchor_widen_ms,
        backfill_index=SETTINGS.backfill_index_on_fetch,
    )


async def index_history(channel_id: int, window, store):
    return await index_history_service(
        channel_id,
        window,
        store=store,
        index=message_index,
        max_records=INDEX_MAX_RECORDS,
        batch_size=SETTINGS.batch_size,
        anchor_retries=SETTINGS.anchor_retries,
        anchor_widen_ms=SETTINGS.anchor_widen_ms,
    )


async def log_message(message):
    await log_message_service(message, index=message_index, record_from_message=record_from_message)


intents = discord.Intents.default()
intents.message_content = True
intents.guilds = True
intents.messages = True

bot = commands.Bot(command_prefix="!", intents=intents)

wire_bot_runtime(
    bot,
    allowed_channel_ids=ALLOWED_CHANNEL_IDS,
    settings=SETTINGS,
    index=message_index,
    send_chunked=send_chunked,
    now_ms=now_ms,
    store_factory=store_for_channel,
    retrieve_func=retrieve,
    index_history_func=index_history,
    log_message_func=log_message,
    client=client,
    openai_model=OPENAI_MODEL,
    default_prompt=DEFAULT_USER_PROMPT,
    ai_channel_name=AI_CHANNEL_NAME,
)


bot.run(DISCORD_TOKEN)
