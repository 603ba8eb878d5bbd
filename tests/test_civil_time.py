from __future__ import annotations

import unittest
from datetime import date, datetime, timezone

from retrieval.civil_time import CivilTimezone
from retrieval.civil_time import dst_bounds_local
from retrieval.civil_time import end_of_local_day_ms
from retrieval.civil_time import is_daylight_saving
from retrieval.civil_time import local_to_utc_ms
from retrieval.civil_time import start_of_local_day_ms
from retrieval.civil_time import utc_ms_to_local


def _utc_ms(y, mo, d, h=0, mi=0, s=0, ms=0) -> int:
    return int(datetime(y, mo, d, h, mi, s, tzinfo=timezone.utc).timestamp()) * 1000 + ms


class CivilTimeTests(unittest.TestCase):
    def setUp(self):
        self.tz = CivilTimezone()

    def test_dst_bounds_follow_us_rule(self):
        self.assertEqual(
            dst_bounds_local(2024),
            (datetime(2024, 3, 10, 2, 0), datetime(2024, 11, 3, 2, 0)),
        )
        self.assertEqual(
            dst_bounds_local(2023),
            (datetime(2023, 3, 12, 2, 0), datetime(2023, 11, 5, 2, 0)),
        )

    def test_dst_edges_are_half_open(self):
        self.assertFalse(is_daylight_saving(datetime(2024, 3, 10, 1, 59)))
        self.assertTrue(is_daylight_saving(datetime(2024, 3, 10, 2, 0)))
        self.assertTrue(is_daylight_saving(datetime(2024, 11, 3, 1, 59)))
        self.assertFalse(is_daylight_saving(datetime(2024, 11, 3, 2, 0)))
        self.assertTrue(is_daylight_saving(date(2024, 7, 4)))
        self.assertFalse(is_daylight_saving(date(2024, 1, 10)))

    def test_local_to_utc_in_winter_and_summer(self):
        self.assertEqual(local_to_utc_ms(datetime(2024, 1, 10), self.tz), _utc_ms(2024, 1, 10, 5))
        self.assertEqual(local_to_utc_ms(datetime(2024, 6, 1, 9), self.tz), _utc_ms(2024, 6, 1, 13))

    def test_utc_to_local_around_spring_forward(self):
        switch = _utc_ms(2024, 3, 10, 7)
        self.assertEqual(utc_ms_to_local(switch - 1, self.tz), datetime(2024, 3, 10, 1, 59, 59, 999000))
        self.assertEqual(utc_ms_to_local(switch, self.tz), datetime(2024, 3, 10, 3, 0))

    def test_utc_to_local_around_fall_back(self):
        switch = _utc_ms(2024, 11, 3, 6)
        self.assertEqual(utc_ms_to_local(switch - 1, self.tz), datetime(2024, 11, 3, 1, 59, 59, 999000))
        self.assertEqual(utc_ms_to_local(switch, self.tz), datetime(2024, 11, 3, 1, 0))

    def test_day_bounds(self):
        day = date(2024, 1, 10)
        self.assertEqual(start_of_local_day_ms(day, self.tz), _utc_ms(2024, 1, 10, 5))
        self.assertEqual(end_of_local_day_ms(day, self.tz), _utc_ms(2024, 1, 11, 4, 59, 59, 999))

    def test_spring_forward_day_is_23_hours(self):
        day = date(2024, 3, 10)
        start = start_of_local_day_ms(day, self.tz)
        end = end_of_local_day_ms(day, self.tz)
        self.assertEqual(start, _utc_ms(2024, 3, 10, 5))
        self.assertEqual(end, _utc_ms(2024, 3, 11, 3, 59, 59, 999))

    def test_fixed_offset_without_dst(self):
        tz = CivilTimezone(standard_offset_minutes=60, observe_dst=False)
        self.assertEqual(local_to_utc_ms(datetime(2024, 7, 1, 12), tz), _utc_ms(2024, 7, 1, 11))
        self.assertEqual(utc_ms_to_local(_utc_ms(2024, 7, 1, 11), tz), datetime(2024, 7, 1, 12))


if __name__ == "__main__":
    unittest.main()
