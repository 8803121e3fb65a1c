"""
Agent 3 — Consultant

Runs the rule-based consultant (analysis/consultant.py) over the holdings
and the quote snapshot already in state. No I/O here.

Produces: state["analysis"] = AnalysisResult
"""
from __future__ import annotations

from analysis.consultant import analyze


def run(state: dict) -> dict:
    analysis = analyze(state["holdings"], state.get("quotes") or {})
    print(f"[Consultant] risk: {analysis.risk_level.value}  |  "
          f"diversification: {analysis.diversification_score}/100")
    return {**state, "analysis": analysis}
