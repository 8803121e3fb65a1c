"""
Consultation history — every report the runner produces, appended to one
JSON file (.cache/reports.json), newest last.
"""
from __future__ import annotations

import json

from cache.quote_cache import cache_dir
from state.models import ConsultationReport

_FILENAME = "reports.json"


def append(report: ConsultationReport) -> None:
    path = cache_dir() / _FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    reports = [r.model_dump(mode="json") for r in load()]
    reports.append(report.model_dump(mode="json"))
    with open(path, "w") as f:
        json.dump(reports, f, indent=2)


def load(owner: str | None = None) -> list[ConsultationReport]:
    """All saved reports, optionally only one owner's. An unreadable file reads as empty."""
    path = cache_dir() / _FILENAME
    if not path.exists():
        return []
    try:
        with open(path) as f:
            raw = json.load(f)
        reports = [ConsultationReport(**r) for r in raw]
    except (OSError, ValueError, TypeError) as e:
        print(f"  [WARN] report history {path} unreadable: {e}")
        return []
    if owner is not None:
        reports = [r for r in reports if r.owner == owner]
    return reports
