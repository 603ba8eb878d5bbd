from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from typing import Any

from eval.simulated_history import SimulatedHistoryStore
from eval.simulated_history import build_uniform_history
from retrieval.linear import linear_fetch
from retrieval.models import TimeWindow
from retrieval.service import retrieve_window


def _utc_ms(value: str) -> int:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def default_call_budget_fixture() -> dict[str, Any]:
    return {
        "history": {"count": 5000, "start": "2023-01-01T00:00:00", "end": "2023-12-31T23:59:59"},
        "cases": [
            {
                "name": "one_day_mid_year",
                "window": ["2023-07-01T00:00:00", "2023-07-01T23:59:59.999"],
                "max_records": 10000,
                "max_anchored_calls": 6,
            },
            {
                "name": "one_week_spring",
                "window": ["2023-03-10T00:00:00", "2023-03-16T23:59:59.999"],
                "max_records": 10000,
                "max_anchored_calls": 8,
            },
            {
                "name": "truncated_quarter",
                "window": ["2023-04-01T00:00:00", "2023-06-30T23:59:59.999"],
                "max_records": 50,
                "max_anchored_calls": 4,
            },
        ],
    }


def load_call_budget_fixture(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError("call budget fixture must be a JSON object")
    return data


async def _run_case(records, case: dict[str, Any]) -> dict[str, Any]:
    start_raw, end_raw = case["window"]
    window = TimeWindow(_utc_ms(start_raw), _utc_ms(end_raw))
    max_records = int(case.get("max_records") or 1000)
    budget = int(case.get("max_anchored_calls") or 10)

    anchored_store = SimulatedHistoryStore(records)
    anchored = await retrieve_window(0, window, store=anchored_store, index=None, max_records=max_records)

    linear_store = SimulatedHistoryStore(records)
    linear = await linear_fetch(linear_store, window, max_records=max_records)

    reasons: list[str] = []
    if anchored.used_fallback:
        reasons.append("anchored path fell back to linear walk")
    if anchored.call_count > budget:
        reasons.append(f"anchored calls {anchored.call_count} > budget {budget}")
    if not anchored.truncated and not linear.truncated:
        if [r.id for r in anchored.records] != [r.id for r in linear.records]:
            reasons.append("anchored and linear record sets differ")
    if any(not window.contains(r.created_at_ms) for r in anchored.records):
        reasons.append("anchored result contains out-of-window records")

    return {
        "name": str(case.get("name") or "case"),
        "passed": not reasons,
        "reasons": reasons,
        "records": len(anchored.records),
        "truncated": anchored.truncated,
        "anchored_calls": anchored.call_count,
        "linear_calls": linear_store.total_calls,
    }


async def run_call_budget_eval(fixture: dict[str, Any] | None = None) -> dict[str, Any]:
    data = fixture or default_call_budget_fixture()
    history = data.get("history") or {}
    records = build_uniform_history(
        int(history.get("count") or 0),
        _utc_ms(str(history.get("start"))),
        _utc_ms(str(history.get("end"))),
    )

    results = []
    for case in data.get("cases") or []:
        results.append(await _run_case(records, case))

    failed = sum(1 for row in results if not row["passed"])
    return {
        "passed": failed == 0,
        "failed": failed,
        "total": len(results),
        "results": results,
    }


if __name__ == "__main__":
    report = asyncio.run(run_call_budget_eval())
    print(json.dumps(report, indent=2))
