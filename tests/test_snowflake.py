from __future__ import annotations

import unittest

from retrieval.errors import EncodingError
from retrieval.snowflake import DISCORD_EPOCH_MS
from retrieval.snowflake import snowflake_to_timestamp
from retrieval.snowflake import timestamp_to_snowflake


class SnowflakeTests(unittest.TestCase):
    def test_epoch_encodes_to_zero(self):
        self.assertEqual(timestamp_to_snowflake(DISCORD_EPOCH_MS), 0)

    def test_known_discord_id_decodes(self):
        self.assertEqual(snowflake_to_timestamp(175928847299117063), 1462015105796)
        self.assertEqual(snowflake_to_timestamp("175928847299117063"), 1462015105796)

    def test_encode_then_decode_is_identity(self):
        for ts in (DISCORD_EPOCH_MS + 1, 1462015105796, 1704862800000, 1735689599999):
            self.assertEqual(snowflake_to_timestamp(timestamp_to_snowflake(ts)), ts)

    def test_encoded_ids_preserve_time_order(self):
        earlier = timestamp_to_snowflake(1704862800000)
        later = timestamp_to_snowflake(1704862800001)
        self.assertLess(earlier, later)

    def test_encoded_id_sorts_before_same_millisecond_ids(self):
        real_id = 175928847299117063
        floor_id = timestamp_to_snowflake(snowflake_to_timestamp(real_id))
        self.assertLessEqual(floor_id, real_id)
        self.assertEqual(real_id - floor_id, real_id & ((1 << 22) - 1))

    def test_pre_epoch_timestamp_raises(self):
        with self.assertRaises(EncodingError):
            timestamp_to_snowflake(DISCORD_EPOCH_MS - 1)
        with self.assertRaises(ValueError):
            timestamp_to_snowflake(0)

    def test_overflow_raises(self):
        with self.assertRaises(EncodingError):
            timestamp_to_snowflake(DISCORD_EPOCH_MS + (1 << 42))

    def test_non_numeric_timestamp_raises(self):
        with self.assertRaises(EncodingError):
            timestamp_to_snowflake("soon")


if __name__ == "__main__":
    unittest.main()
