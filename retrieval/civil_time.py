"""Fixed-rule civil timezone math for the channel's home timezone.

Daylight saving follows the US rule in force since 2007: it starts on the second
Sunday of March at 02:00 local standard time and ends on the first Sunday of November
at 02:00 local daylight time. Wall-clock times inside the spring-forward gap are read
as daylight time; times in the repeated autumn hour resolve to the first (daylight)
occurrence.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone


_UTC_EPOCH = datetime(1970, 1, 1)


@dataclass(frozen=True, slots=True)
class CivilTimezone:
    standard_offset_minutes: int = -300
    observe_dst: bool = True

    def offset_minutes(self, local_dt: datetime) -> int:
        if self.observe_dst and is_daylight_saving(local_dt):
            return self.standard_offset_minutes + 60
        return self.standard_offset_minutes


def _nth_sunday(year: int, month: int, n: int) -> date:
    first = date(year, month, 1)
    # weekday(): Monday=0 .. Sunday=6
    first_sunday = first + timedelta(days=(6 - first.weekday()) % 7)
    return first_sunday + timedelta(days=7 * (n - 1))


def dst_bounds_local(year: int) -> tuple[datetime, datetime]:
    """Return naive local wall-clock (start, end) of daylight saving for year."""
    start_day = _nth_sunday(year, 3, 2)
    end_day = _nth_sunday(year, 11, 1)
    return (
        datetime(start_day.year, start_day.month, start_day.day, 2, 0),
        datetime(end_day.year, end_day.month, end_day.day, 2, 0),
    )


def is_daylight_saving(local_dt: datetime | date) -> bool:
    if not isinstance(local_dt, datetime):
        local_dt = datetime(local_dt.year, local_dt.month, local_dt.day)
    start, end = dst_bounds_local(local_dt.year)
    naive = local_dt.replace(tzinfo=None)
    return start <= naive < end


def is_daylight_saving_utc(utc_ms: int, tz: CivilTimezone) -> bool:
    if not tz.observe_dst:
        return False
    year = utc_ms_to_datetime(utc_ms).year
    start_local, end_local = dst_bounds_local(year)
    start_utc = _naive_to_ms(start_local) - tz.standard_offset_minutes * 60_000
    end_utc = _naive_to_ms(end_local) - (tz.standard_offset_minutes + 60) * 60_000
    return start_utc <= int(utc_ms) < end_utc


def _naive_to_ms(naive: datetime) -> int:
    delta = naive.replace(tzinfo=None) - _UTC_EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def utc_ms_to_datetime(utc_ms: int) -> datetime:
    return datetime.fromtimestamp(int(utc_ms) / 1000, tz=timezone.utc)


def local_to_utc_ms(local_dt: datetime, tz: CivilTimezone) -> int:
    """Interpret a naive wall-clock datetime in tz and return UTC epoch milliseconds."""
    return _naive_to_ms(local_dt) - tz.offset_minutes(local_dt) * 60_000


def utc_ms_to_local(utc_ms: int, tz: CivilTimezone) -> datetime:
    """Return the naive wall-clock datetime in tz for a UTC instant."""
    offset = tz.standard_offset_minutes
    if is_daylight_saving_utc(utc_ms, tz):
        offset += 60
    return _UTC_EPOCH + timedelta(milliseconds=int(utc_ms) + offset * 60_000)


def start_of_local_day_ms(day: date, tz: CivilTimezone) -> int:
    return local_to_utc_ms(datetime(day.year, day.month, day.day), tz)


def end_of_local_day_ms(day: date, tz: CivilTimezone) -> int:
    return local_to_utc_ms(datetime(day.year, day.month, day.day, 23, 59, 59, 999000), tz)
