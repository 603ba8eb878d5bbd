from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from config.defaults import ANCHOR_RETRIES
from config.defaults import ANCHOR_WIDEN_DAYS
from config.defaults import BACKFILL_INDEX_ON_FETCH
from config.defaults import BATCH_SIZE
from config.defaults import DEFAULT_CONTEXT_MESSAGES
from config.defaults import DEFAULT_INDEX_PATH
from config.defaults import INDEX_ENABLED
from config.defaults import MAX_MESSAGES_FETCH
from config.defaults import TZ_OBSERVE_DST
from config.defaults import TZ_STANDARD_OFFSET_MINUTES
from retrieval.anchor import DAY_MS
from retrieval.civil_time import CivilTimezone


@dataclass(frozen=True, slots=True)
class RetrievalSettings:
    batch_size: int = BATCH_SIZE
    max_messages_fetch: int = MAX_MESSAGES_FETCH
    default_context_messages: int = DEFAULT_CONTEXT_MESSAGES
    anchor_retries: int = ANCHOR_RETRIES
    anchor_widen_days: int = ANCHOR_WIDEN_DAYS
    tz_standard_offset_minutes: int = TZ_STANDARD_OFFSET_MINUTES
    tz_observe_dst: bool = TZ_OBSERVE_DST
    index_enabled: bool = INDEX_ENABLED
    index_path: str = DEFAULT_INDEX_PATH
    backfill_index_on_fetch: bool = BACKFILL_INDEX_ON_FETCH

    @property
    def civil_timezone(self) -> CivilTimezone:
        return CivilTimezone(
            standard_offset_minutes=self.tz_standard_offset_minutes,
            observe_dst=self.tz_observe_dst,
        )

    @property
    def anchor_widen_ms(self) -> int:
        return self.anchor_widen_days * DAY_MS


def _as_int(value: Any, default: int, *, lo: int | None = None, hi: int | None = None) -> int:
    try:
        out = int(value)
    except Exception:
        out = int(default)
    if lo is not None:
        out = max(lo, out)
    if hi is not None:
        out = min(hi, out)
    return out


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off"}:
        return False
    return default


def settings_from_mapping(payload: dict[str, Any], base: RetrievalSettings | None = None) -> RetrievalSettings:
    d = base or RetrievalSettings()
    return RetrievalSettings(
        batch_size=_as_int(payload.get("batch_size"), d.batch_size, lo=1, hi=100),
        max_messages_fetch=_as_int(payload.get("max_messages_fetch"), d.max_messages_fetch, lo=1),
        default_context_messages=_as_int(payload.get("default_context_messages"), d.default_context_messages, lo=1, hi=100),
        anchor_retries=_as_int(payload.get("anchor_retries"), d.anchor_retries, lo=0, hi=10),
        anchor_widen_days=_as_int(payload.get("anchor_widen_days"), d.anchor_widen_days, lo=0),
        tz_standard_offset_minutes=_as_int(
            payload.get("tz_standard_offset_minutes"),
            d.tz_standard_offset_minutes,
            lo=-14 * 60,
            hi=14 * 60,
        ),
        tz_observe_dst=_as_bool(payload.get("tz_observe_dst"), d.tz_observe_dst),
        index_enabled=_as_bool(payload.get("index_enabled"), d.index_enabled),
        index_path=str(payload.get("index_path") or d.index_path),
        backfill_index_on_fetch=_as_bool(payload.get("backfill_index_on_fetch"), d.backfill_index_on_fetch),
    )


def load_retrieval_settings(path: str | Path | None) -> tuple[RetrievalSettings, str | None]:
    """
    Returns (settings, warning_message). warning_message is None on clean load.
    """
    defaults = RetrievalSettings()
    if not path:
        return (defaults, "Retrieval settings path missing; using built-in defaults.")

    p = Path(path)
    if not p.exists():
        return (defaults, f"Retrieval settings file not found at {p}; using built-in defaults.")

    try:
        payload = yaml.safe_load(p.read_text(encoding="utf-8"))
    except Exception as exc:
        return (defaults, f"Failed to read retrieval settings from {p}: {exc}; using built-in defaults.")

    if payload is None:
        return (defaults, None)
    if not isinstance(payload, dict):
        return (defaults, f"Invalid retrieval settings format in {p}; using built-in defaults.")

    return (settings_from_mapping(payload, defaults), None)


def apply_env_overrides(settings: RetrievalSettings, environ: dict[str, str]) -> RetrievalSettings:
    overrides: dict[str, Any] = {}
    raw_max = environ.get("RECAP_MAX_MESSAGES_FETCH")
    if raw_max is not None and raw_max.strip():
        overrides["max_messages_fetch"] = _as_int(raw_max.strip(), settings.max_messages_fetch, lo=1)
    raw_enabled = environ.get("RECAP_INDEX_ENABLED")
    if raw_enabled is not None:
        overrides["index_enabled"] = _as_bool(raw_enabled, settings.index_enabled)
    raw_path = environ.get("RECAP_INDEX_PATH")
    if raw_path is not None and raw_path.strip():
        overrides["index_path"] = raw_path.strip()
    raw_backfill = environ.get("RECAP_INDEX_BACKFILL_ON_FETCH")
    if raw_backfill is not None:
        overrides["backfill_index_on_fetch"] = _as_bool(raw_backfill, settings.backfill_index_on_fetch)
    if not overrides:
        return settings
    return replace(settings, **overrides)
