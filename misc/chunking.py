from __future__ import annotations

from config.defaults import DISCORD_MAX_MESSAGE_LEN, DISCORD_MESSAGE_LIMIT


# paragraph, then line, then word
_SEPARATORS = ("\n\n", "\n", " ")


def _split_point(text: str, limit: int) -> int:
    for sep in _SEPARATORS:
        at = text.rfind(sep, 0, limit)
        if at > 0:
            return at
    return limit


def chunk_text(text: str, limit: int = DISCORD_MAX_MESSAGE_LEN) -> list[str]:
    """
    Split a summary into pieces Discord will accept as separate messages.

    limit is capped at DISCORD_MESSAGE_LIMIT. Pieces are stripped, so whitespace at a
    split point is dropped; a run with no whitespace is cut hard at limit.
    """
    if limit <= 0:
        raise ValueError(f"chunk limit must be positive, got {limit}")
    limit = min(int(limit), DISCORD_MESSAGE_LIMIT)

    remaining = text or ""
    if len(remaining) <= limit:
        return [remaining]

    chunks: list[str] = []
    while len(remaining) > limit:
        at = _split_point(remaining, limit)
        head, remaining = remaining[:at].strip(), remaining[at:].strip()
        if head:
            chunks.append(head)
    if remaining:
        chunks.append(remaining)
    return chunks
