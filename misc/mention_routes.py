from __future__ import annotations

import asyncio
import re
from datetime import datetime, timezone
from typing import Any

from retrieval.date_range import format_window_label
from retrieval.date_range import parse_date_range
from retrieval.date_range import strip_range_token
from retrieval.errors import RetrievalError
from retrieval.models import RemoteRecord, RetrievalResult, TimeWindow, sort_and_dedupe


def extract_user_prompt(content: str, bot_user_id: int | None, default_prompt: str) -> str:
    text = strip_range_token(content or "")
    if bot_user_id is not None:
        text = re.sub(rf"<@!?\s*{int(bot_user_id)}\s*>", "", text)
    text = text.strip()
    return text or default_prompt


def format_record_line(record: RemoteRecord) -> str:
    when = datetime.fromtimestamp(record.created_at_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")
    who = record.author_name or str(record.author_id) or "unknown"
    return f"[{who} @ {when}] {record.content}"


def build_summary_messages(records: list[RemoteRecord], prompt: str, *, max_chars: int = 60000) -> list[dict]:
    """System message carries the prompt; each record becomes one user turn. Records past max_chars are left out."""
    lines: list[str] = []
    total = 0
    for record in records:
        line = format_record_line(record)
        if total + len(line) > max_chars:
            break
        lines.append(line)
        total += len(line)
    out = [{"role": "system", "content": prompt}]
    out.extend({"role": "user", "content": line} for line in lines)
    return out


def generate_preview(text: str, limit: int = 250) -> str:
    first_paragraph = (text or "").split("\n", 1)[0]
    if len(first_paragraph) > limit:
        return first_paragraph[: limit - 1] + "…"
    return first_paragraph


def limit_warning(window: TimeWindow, result: RetrievalResult, max_records: int) -> str:
    start = window.start_utc.strftime("%Y-%m-%d %H:%M UTC")
    boundary = result.boundary_utc
    end = boundary.strftime("%Y-%m-%d %H:%M UTC") if boundary else "unknown time"
    return (
        f"Hit {max_records} message limit. "
        f"Collected messages from {start} to {end}. "
        "Please use a smaller date range."
    )


def _find_ai_channel(guild: Any, name: str) -> Any | None:
    if guild is None or not name:
        return None
    for channel in getattr(guild, "text_channels", None) or []:
        if getattr(channel, "name", None) == name:
            return channel
    return None


async def deliver_answer(message: Any, answer: str, *, deps) -> None:
    ai_channel = _find_ai_channel(getattr(message, "guild", None), deps.ai_channel_name)
    if ai_channel is None or getattr(ai_channel, "id", None) == message.channel.id:
        await deps.send_chunked(message.channel, answer)
        return

    first = await deps.send_chunked(ai_channel, answer)
    jump = getattr(first, "jump_url", "") if first is not None else ""
    preview = generate_preview(answer)
    await message.channel.send(f"{preview}\n↪️ full answer in <#{ai_channel.id}>: {jump}".rstrip())


async def handle_summary_mention(message: Any, *, deps, bot_user_id: int | None) -> None:
    content = message.content or ""
    prompt = extract_user_prompt(content, bot_user_id, deps.default_prompt)
    settings = deps.settings
    tz = settings.civil_timezone
    window = parse_date_range(content, now_ms=deps.now_ms(), tz=tz)
    store = deps.store_factory(message.channel)

    result: RetrievalResult | None = None
    try:
        if window is not None:
            result = await deps.retrieve_func(message.channel.id, window, store)
            records = result.records
            if not records:
                await message.reply(f"No messages found for {format_window_label(window, tz)}.")
                return
        else:
            batch = await store.fetch_before(message.id, settings.default_context_messages)
            records = sort_and_dedupe(batch)
    except RetrievalError as e:
        print(f"[Mention] History fetch failed in channel {message.channel.id}: {e}")
        await message.reply("I couldn't fetch the conversation history for that request.")
        return

    chat_messages = build_summary_messages(records, prompt)
    try:
        resp = await asyncio.to_thread(
            deps.client.chat.completions.create,
            model=deps.openai_model,
            messages=chat_messages,
        )
        answer = (resp.choices[0].message.content or "(no output)").strip()
    except Exception as e:
        print(f"[Mention] LLM error: {e}")
        await message.reply("There was an error processing your request.")
        return

    await deliver_answer(message, answer, deps=deps)

    if result is not None and window is not None and result.truncated:
        await message.reply(limit_warning(window, result, settings.max_messages_fetch))
