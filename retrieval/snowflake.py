"""Conversion between UTC millisecond timestamps and Discord snowflake IDs.

A snowflake keeps milliseconds since DISCORD_EPOCH_MS in its high 42 bits; the low 22
bits (worker, process, increment) are zero for IDs built here, so an encoded timestamp
sorts before every real ID created in the same millisecond.
"""

from __future__ import annotations

from retrieval.errors import EncodingError


DISCORD_EPOCH_MS = 1420070400000
SNOWFLAKE_TIMESTAMP_SHIFT = 22
_MAX_TIMESTAMP_DELTA = (1 << 42) - 1


def timestamp_to_snowflake(timestamp_ms: int) -> int:
    try:
        ms = int(timestamp_ms)
    except Exception as exc:
        raise EncodingError(f"Invalid timestamp: {timestamp_ms!r}") from exc
    delta = ms - DISCORD_EPOCH_MS
    if delta < 0:
        raise EncodingError(f"Timestamp {ms} predates the snowflake epoch ({DISCORD_EPOCH_MS})")
    if delta > _MAX_TIMESTAMP_DELTA:
        raise EncodingError(f"Timestamp {ms} overflows the 42-bit snowflake timestamp field")
    return delta << SNOWFLAKE_TIMESTAMP_SHIFT


def snowflake_to_timestamp(snowflake: int | str) -> int:
    value = int(snowflake)
    if value < 0:
        raise EncodingError(f"Invalid snowflake: {snowflake!r}")
    return (value >> SNOWFLAKE_TIMESTAMP_SHIFT) + DISCORD_EPOCH_MS
