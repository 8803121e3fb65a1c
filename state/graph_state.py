"""
LangGraph state for the consultant pipeline.
"""
from __future__ import annotations

from typing import Optional
from typing_extensions import TypedDict

from state.models import AnalysisResult, ConsultationReport, Holding, Quote


class AdvisorState(TypedDict, total=False):
    # Input: whose portfolio we're looking at
    owner: str

    # Agent 1 output
    holdings: list[Holding]

    # Agent 2 output: snapshot copy, dict[symbol, Quote]
    quotes: dict[str, Quote]

    # Data freshness warnings from Agent 2 (cache fallbacks, missing symbols)
    data_warnings: list[str]

    # Agent 3 output
    analysis: Optional[AnalysisResult]

    # Agent 4 output: whether the run counted against today's quota
    usage_tracked: bool

    # Agent 5 output
    report: Optional[ConsultationReport]
