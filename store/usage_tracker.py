"""
Usage tracker — daily quota for consultant runs, persisted as JSON.

Kinds and daily limits:
  portfolio_analysis   10/day   (also counted in the lifetime total)
  stock_query          50/day

A new calendar day resets the daily counters; total_consultations is kept.
The consultant itself never touches this. The runner tracks a run after
the analysis has succeeded.
"""
from __future__ import annotations

import json
import os
from collections.abc import Callable
from datetime import date
from pathlib import Path

from state.models import UsageData

LIMITS: dict[str, int] = {
    "portfolio_analysis": 10,
    "stock_query": 50,
}

_FIELDS = {
    "portfolio_analysis": "portfolio_analyses",
    "stock_query": "stock_queries",
}


def _field(kind: str) -> str:
    try:
        return _FIELDS[kind]
    except KeyError:
        raise ValueError(f"Unknown usage kind: {kind!r} (expected one of {sorted(_FIELDS)})") from None


class UsageTracker:
    def __init__(
        self,
        path: str | os.PathLike | None = None,
        today: Callable[[], date] = date.today,
        limits: dict[str, int] | None = None,
    ):
        self.path = Path(path or os.environ.get("CONSULTANT_USAGE_PATH", ".cache/usage.json"))
        self.limits = dict(limits or LIMITS)
        self._today = today
        self._usage = self._read()
        self.reset_if_new_day()

    def _read(self) -> UsageData:
        if not self.path.exists():
            return UsageData(last_reset_date=self._today())
        try:
            with open(self.path) as f:
                return UsageData(**json.load(f))
        except (OSError, ValueError) as e:
            print(f"  [WARN] usage file {self.path} unreadable ({e}) — starting fresh")
            return UsageData(last_reset_date=self._today())

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._usage.model_dump(mode="json"), f, indent=2)

    def get(self) -> UsageData:
        return self._usage.model_copy()

    def reset_if_new_day(self) -> bool:
        """Zero the daily counters when the date has moved on. Returns True if reset."""
        today = self._today()
        if self._usage.last_reset_date == today:
            return False
        self._usage = self._usage.model_copy(update={
            "portfolio_analyses": 0,
            "stock_queries": 0,
            "last_reset_date": today,
        })
        self._save()
        return True

    def reset_daily(self) -> None:
        self._usage = self._usage.model_copy(update={
            "portfolio_analyses": 0,
            "stock_queries": 0,
            "last_reset_date": self._today(),
        })
        self._save()

    def can_use(self, kind: str) -> bool:
        self.reset_if_new_day()
        return getattr(self._usage, _field(kind)) < self.limits[kind]

    def track(self, kind: str) -> bool:
        """
        Count one use. At the limit the call is a no-op.

        Returns:
            True if the use was counted
        """
        field = _field(kind)
        if not self.can_use(kind):
            return False
        update = {field: getattr(self._usage, field) + 1}
        if kind == "portfolio_analysis":
            update["total_consultations"] = self._usage.total_consultations + 1
        self._usage = self._usage.model_copy(update=update)
        self._save()
        return True

    def remaining(self, kind: str) -> int:
        field = _field(kind)
        self.reset_if_new_day()
        return self.limits[kind] - getattr(self._usage, field)

    def usage_percentage(self, kind: str) -> float:
        self.reset_if_new_day()
        return getattr(self._usage, _field(kind)) / self.limits[kind] * 100
