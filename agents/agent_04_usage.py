"""
Agent 4 — Usage

Counts a finished analysis against the daily quota. Runs after Agent 3 so
that only successful analyses are counted; the consultant never sees the
tracker. An empty portfolio is never counted.

Produces: state["usage_tracked"] = bool
"""
from __future__ import annotations

from store.usage_tracker import UsageTracker


def run(state: dict, tracker: UsageTracker) -> dict:
    if not state.get("holdings") or not state.get("analysis"):
        print("  [WARN] no holdings analysed — usage not counted")
        return {**state, "usage_tracked": False}

    tracked = tracker.track("portfolio_analysis")
    if not tracked:
        print("  [WARN] analysis not counted — daily quota reached")
    return {**state, "usage_tracked": tracked}
