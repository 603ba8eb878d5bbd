from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from config.retrieval_settings import RetrievalSettings
from config.retrieval_settings import apply_env_overrides
from config.retrieval_settings import load_retrieval_settings
from retrieval.civil_time import CivilTimezone


def _write(tmp: str, text: str) -> Path:
    path = Path(tmp) / "retrieval.yml"
    path.write_text(text, encoding="utf-8")
    return path


class RetrievalSettingsLoadTests(unittest.TestCase):
    def test_shipped_file_matches_defaults(self):
        path = Path(__file__).resolve().parents[1] / "config" / "retrieval.yml"
        settings, warning = load_retrieval_settings(path)
        self.assertIsNone(warning)
        self.assertEqual(settings, RetrievalSettings())

    def test_missing_path_uses_defaults_with_warning(self):
        settings, warning = load_retrieval_settings(None)
        self.assertEqual(settings, RetrievalSettings())
        self.assertIn("missing", warning)

        settings, warning = load_retrieval_settings("/nonexistent/retrieval.yml")
        self.assertEqual(settings, RetrievalSettings())
        self.assertIn("not found", warning)

    def test_values_are_read_and_clamped(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(
                tmp,
                "batch_size: 500\n"
                "max_messages_fetch: 200\n"
                "anchor_retries: -3\n"
                "tz_observe_dst: false\n"
                "index_path: /var/recap\n",
            )
            settings, warning = load_retrieval_settings(path)

        self.assertIsNone(warning)
        self.assertEqual(settings.batch_size, 100)
        self.assertEqual(settings.max_messages_fetch, 200)
        self.assertEqual(settings.anchor_retries, 0)
        self.assertFalse(settings.tz_observe_dst)
        self.assertEqual(settings.index_path, "/var/recap")
        self.assertEqual(settings.default_context_messages, RetrievalSettings().default_context_messages)

    def test_empty_file_is_clean_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings, warning = load_retrieval_settings(_write(tmp, ""))
        self.assertIsNone(warning)
        self.assertEqual(settings, RetrievalSettings())

    def test_non_mapping_payload_warns(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings, warning = load_retrieval_settings(_write(tmp, "- a\n- b\n"))
        self.assertEqual(settings, RetrievalSettings())
        self.assertIn("Invalid", warning)

    def test_malformed_yaml_warns(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings, warning = load_retrieval_settings(_write(tmp, "batch_size: [unclosed\n"))
        self.assertEqual(settings, RetrievalSettings())
        self.assertIn("Failed", warning)


class RetrievalSettingsEnvTests(unittest.TestCase):
    def test_env_overrides(self):
        settings = apply_env_overrides(
            RetrievalSettings(),
            {
                "RECAP_MAX_MESSAGES_FETCH": "50",
                "RECAP_INDEX_ENABLED": "false",
                "RECAP_INDEX_PATH": " /tmp/idx ",
                "RECAP_INDEX_BACKFILL_ON_FETCH": "yes",
            },
        )
        self.assertEqual(settings.max_messages_fetch, 50)
        self.assertFalse(settings.index_enabled)
        self.assertEqual(settings.index_path, "/tmp/idx")
        self.assertTrue(settings.backfill_index_on_fetch)

    def test_no_env_returns_same_settings(self):
        base = RetrievalSettings()
        self.assertIs(apply_env_overrides(base, {}), base)

    def test_bad_env_value_keeps_current(self):
        settings = apply_env_overrides(RetrievalSettings(max_messages_fetch=300), {"RECAP_MAX_MESSAGES_FETCH": "lots"})
        self.assertEqual(settings.max_messages_fetch, 300)

    def test_derived_values(self):
        settings = RetrievalSettings(anchor_widen_days=2, tz_standard_offset_minutes=60, tz_observe_dst=False)
        self.assertEqual(settings.anchor_widen_ms, 2 * 86_400_000)
        self.assertEqual(settings.civil_timezone, CivilTimezone(standard_offset_minutes=60, observe_dst=False))


if __name__ == "__main__":
    unittest.main()
