"""
Agent 5 — Report & Delivery

Wraps the consultant's AnalysisResult in a timestamped ConsultationReport,
prints a plain-text report to the console and appends the report to the
history file (cache/report_history.py).

Report sections (in order):
  1. Header                 (owner, date)
  2. Data warnings          (cache fallbacks, unknown symbols)
  3. Market indices         (if supplied)
  4. Holdings table         (from analysis/portfolio_summary.py)
  5. Portfolio summary      (value, P/L, sectors)
  6. Consultant view        (risk, score, overview)
  7. Recommendations
  8. Disclaimer
"""
from __future__ import annotations

import time
from datetime import datetime

from analysis.portfolio_summary import PortfolioSummary, format_currency, summarize
from cache import report_history
from state.models import AnalysisResult, ConsultationReport, Holding, MarketIndex

_RULE = "=" * 70

_RISK_BADGE = {
    "low":    "LOW    ✓",
    "medium": "MEDIUM !",
    "high":   "HIGH   ✗",
}


def build_report(owner: str, holdings: list[Holding], analysis: AnalysisResult) -> ConsultationReport:
    return ConsultationReport(
        id=str(time.time_ns()),
        timestamp=datetime.now(),
        owner=owner,
        portfolio=[h.model_copy() for h in holdings],
        analysis=analysis.overview,
        recommendations=list(analysis.recommendations),
        risk_level=analysis.risk_level,
        diversification_score=analysis.diversification_score,
    )


# ── Text block builders ──────────────────────────────────────────────────────

def _header(owner: str, when: datetime) -> str:
    return f"{_RULE}\nPortfolio Consultant — {owner} — {when:%B %d, %Y %H:%M}\n{_RULE}"


def _warnings_block(warnings: list[str]) -> str:
    if not warnings:
        return ""
    return "DATA NOTICE\n" + "\n".join(f"  - {w}" for w in warnings)


def _indices_block(indices: list[MarketIndex]) -> str:
    rows = [
        f"  {i.name:<10} {i.value:>12,.2f}  {i.change_percent:+.2f}%"
        for i in indices
    ]
    return "MARKETS\n" + "\n".join(rows)


def _holdings_table(summary: PortfolioSummary) -> str:
    header = (f"  {'Symbol':<14} {'Qty':>8} {'Price':>10} {'Value':>14} "
              f"{'P/L':>14} {'Weight':>7}")
    rows = []
    for line in summary.lines:
        sign = "+" if line.gain_loss >= 0 else ""
        rows.append(
            f"  {line.symbol:<14} {line.quantity:>8,.2f} {line.current_price:>10,.2f} "
            f"{format_currency(line.current_value):>14} "
            f"{sign + format_currency(line.gain_loss):>14} {line.weight:>6.1f}%"
        )
    return "HOLDINGS\n" + header + "\n  " + "-" * 72 + "\n" + "\n".join(rows)


def _consultant_block(report: ConsultationReport) -> str:
    return (
        "CONSULTANT VIEW\n"
        f"  Risk level:      {_RISK_BADGE[report.risk_level.value]}\n"
        f"  Diversification: {report.diversification_score}/100\n\n"
        f"  {report.analysis}"
    )


def _recommendations_block(recommendations: list[str]) -> str:
    return "RECOMMENDATIONS\n" + "\n".join(
        f"  {i}. {r}" for i, r in enumerate(recommendations, 1)
    )


def _footer() -> str:
    return (
        "This analysis is rule-based and for informational purposes only; it is not "
        "financial advice."
    )


def render(
    report: ConsultationReport,
    summary: PortfolioSummary,
    warnings: list[str] | None = None,
    indices: list[MarketIndex] | None = None,
) -> str:
    blocks = [
        _header(report.owner, report.timestamp),
        _warnings_block(warnings or []),
        _indices_block(indices) if indices else "",
        _holdings_table(summary) if summary.lines else "",
        summary.summary(),
        _consultant_block(report),
        _recommendations_block(report.recommendations),
        _footer(),
    ]
    return "\n\n".join(b for b in blocks if b)


# ── LangGraph node ────────────────────────────────────────────────────────────

def run(state: dict, indices: list[MarketIndex] | None = None, save: bool = True) -> dict:
    """
    LangGraph node — builds, prints and (optionally) saves the report.
    indices are injected from main.py.
    """
    holdings = state["holdings"]
    report = build_report(state["owner"], holdings, state["analysis"])
    summary = summarize(holdings, state.get("quotes") or {})

    print("\n" + render(report, summary, state.get("data_warnings"), indices) + "\n")

    if save:
        report_history.append(report)
        print(f"[Report] saved ({len(report_history.load(report.owner))} reports for {report.owner})")

    return {**state, "report": report}
