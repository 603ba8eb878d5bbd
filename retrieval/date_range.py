from __future__ import annotations

import re
import time
from datetime import date, datetime

from retrieval.civil_time import CivilTimezone
from retrieval.civil_time import end_of_local_day_ms
from retrieval.civil_time import start_of_local_day_ms
from retrieval.civil_time import utc_ms_to_local
from retrieval.errors import ParseError
from retrieval.models import TimeWindow


_LITERAL = r"(?:today|\d[\d/\-+.:T]*\d)"
RANGE_TOKEN_PATTERN = re.compile(rf"\{{\s*({_LITERAL})(?:\s*-\s*({_LITERAL}))?\s*\}}", re.I)
_COMPACT_SLASH_RANGE = re.compile(r"^(\d{1,2}/\d{1,2}/\d{4})-(\d{1,2}/\d{1,2}/\d{4})$")
_ISO_DAY = r"\d{4}-\d{2}-\d{2}(?:T[\d:.]+)?"
_COMPACT_ISO_RANGE = re.compile(rf"^({_ISO_DAY})-({_ISO_DAY})$", re.I)
_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def _is_today(literal: str) -> bool:
    return literal.strip().lower() == "today"


def find_range_token(text: str) -> tuple[str, str | None] | None:
    match = RANGE_TOKEN_PATTERN.search(text or "")
    if not match:
        return None
    left = match.group(1)
    right = match.group(2)
    if right is None:
        # "{01/10/2024-01/12/2024}" and "{2024-01-10-2024-01-12}" are captured greedily as one literal
        compact = _COMPACT_SLASH_RANGE.match(left) or _COMPACT_ISO_RANGE.match(left)
        if compact:
            left, right = compact.group(1), compact.group(2)
    return (left, right)


def strip_range_token(text: str) -> str:
    return RANGE_TOKEN_PATTERN.sub("", text or "", count=1)


def parse_date_literal(literal: str) -> date:
    """
    Parse a calendar date literal.

    ISO-8601 first, then MM/DD/YYYY. A first field above 12 can only be a day,
    so the slash form is re-read as DD/MM/YYYY in that case.
    """
    text = (literal or "").strip()
    if not text:
        raise ParseError("Empty date literal")
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass

    m = _SLASH_DATE.match(text)
    if not m:
        raise ParseError(f"Unrecognized date literal: {text!r}")
    first, second, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
    month, day = (second, first) if first > 12 else (first, second)
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ParseError(f"Invalid calendar date: {text!r}") from exc


def _resolve_day(literal: str, *, now_ms: int, tz: CivilTimezone) -> date:
    if _is_today(literal):
        return utc_ms_to_local(now_ms, tz).date()
    return parse_date_literal(literal)


def parse_date_range(
    text: str,
    *,
    now_ms: int | None = None,
    tz: CivilTimezone | None = None,
) -> TimeWindow | None:
    """
    Resolve the first {A} / {A - B} token in text to an absolute UTC window.

    Days are civil days in tz. A right edge of "today" ends at now_ms rather than
    end of day, for both {Today} and {X - Today}.
    """
    token = find_range_token(text)
    if token is None:
        return None
    left, right = token
    now = int(time.time() * 1000) if now_ms is None else int(now_ms)
    zone = tz or CivilTimezone()

    right_literal = right if right is not None else left
    try:
        start_ms = start_of_local_day_ms(_resolve_day(left, now_ms=now, tz=zone), zone)
        if _is_today(right_literal):
            end_ms = now
        else:
            end_ms = end_of_local_day_ms(_resolve_day(right_literal, now_ms=now, tz=zone), zone)
    except ParseError as exc:
        print(f"[Range] Could not parse {text!r}: {exc}")
        return None

    if start_ms > end_ms:
        return None
    return TimeWindow(start_ms, end_ms)


def format_window_label(window: TimeWindow, tz: CivilTimezone | None = None) -> str:
    zone = tz or CivilTimezone()
    start = utc_ms_to_local(window.start_ms, zone).date()
    end = utc_ms_to_local(window.end_ms, zone).date()

    def _fmt(d: date) -> str:
        return f"{d.month}/{d.day}/{d.year}"

    if start == end:
        return _fmt(start)
    return f"{_fmt(start)} - {_fmt(end)}"
