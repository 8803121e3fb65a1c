"""
Rule-based portfolio consultant — pure, deterministic, no I/O.

Input:  holdings (ordered) + a quote snapshot (mapping symbol → Quote, or any
        iterable of Quote; first match per symbol wins)
Output: AnalysisResult(overview, recommendations, risk_level, diversification_score)

Pipeline:
  1. enrich()              — stage 1: current value per holding + portfolio total
                             stage 2: weight per holding (needs the total)
  2. sector_allocation()   — current value summed per sector (static table)
  3. _classify_risk()      — ordered rules, escalation only (low < medium < high)
  4. diversification_score()
  5. _overview() / _recommendations()

Nothing here raises for odd inputs: unknown symbols price at 0, a zero total
gives zero weights, unknown sectors fall into "Other".
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Union

from state.models import AnalysisResult, Holding, Quote, RiskLevel

QuoteLookup = Union[Mapping[str, Quote], Iterable[Quote]]

# ── Static sector table ──────────────────────────────────────────────────────

OTHER_SECTOR = "Other"

SECTORS: Mapping[str, str] = MappingProxyType({
    "AAPL": "Technology",
    "MSFT": "Technology",
    "GOOGL": "Technology",
    "NVDA": "Technology",
    "META": "Technology",
    "AMZN": "Consumer Discretionary",
    "TSLA": "Consumer Discretionary",
    "V": "Financial Services",
})

# ── Policy thresholds ────────────────────────────────────────────────────────

HIGH_STOCK_WEIGHT = 50.0
MODERATE_STOCK_WEIGHT = 30.0
HEAVY_SECTOR_WEIGHT = 70.0
SECTOR_WEIGHT = 50.0
MIN_HOLDINGS = 3
VOLATILE_MOVE_PCT = 3.0
OVERWEIGHT_PCT = 25.0
TARGET_HOLDINGS = 5
GAINER_PCT = 2.0
LOSER_PCT = -2.0
MAX_RECOMMENDATIONS = 4

EMPTY_OVERVIEW = "No portfolio data available for analysis."
EMPTY_RECOMMENDATION = "Add stocks to your portfolio to get personalized advice."

GENERIC_RECOMMENDATIONS = (
    "Your portfolio looks well-balanced. Continue monitoring your holdings and rebalance quarterly.",
    "Consider setting stop-loss orders at 15-20% below your purchase price to limit downside risk.",
)


@dataclass
class EnrichedHolding:
    symbol: str
    quantity: float
    purchase_price: Optional[float]
    quote: Optional[Quote]          # None when the quote source doesn't know the symbol
    current_value: float
    weight: float = 0.0             # % of total, set in stage 2


# ── Lookups ──────────────────────────────────────────────────────────────────

def sector_for(symbol: str, table: Mapping[str, str] = SECTORS) -> str:
    """Exact-symbol lookup; anything not in the table is "Other"."""
    return table.get(symbol, OTHER_SECTOR)


def index_quotes(quotes: QuoteLookup) -> Mapping[str, Quote]:
    if isinstance(quotes, Mapping):
        return quotes
    indexed: dict[str, Quote] = {}
    for q in quotes:
        indexed.setdefault(q.symbol, q)
    return indexed


# ── Stage 1 + 2: values, then weights ────────────────────────────────────────

def enrich(holdings: Iterable[Holding], quotes: QuoteLookup) -> tuple[list[EnrichedHolding], float]:
    """
    Join holdings with quotes.

    Returns:
        (enriched holdings in input order, total current value)
    """
    lookup = index_quotes(quotes)

    enriched = []
    for h in holdings:
        quote = lookup.get(h.symbol)
        enriched.append(EnrichedHolding(
            symbol=h.symbol,
            quantity=h.quantity,
            purchase_price=h.purchase_price,
            quote=quote,
            current_value=quote.price * h.quantity if quote else 0.0,
        ))
    total_value = sum(e.current_value for e in enriched)

    for e in enriched:
        e.weight = e.current_value / total_value * 100 if total_value > 0 else 0.0

    return enriched, total_value


def sector_allocation(
    enriched: Iterable[EnrichedHolding],
    table: Mapping[str, str] = SECTORS,
) -> dict[str, float]:
    """Current value per sector, in first-seen order."""
    allocation: dict[str, float] = {}
    for e in enriched:
        sector = sector_for(e.symbol, table)
        allocation[sector] = allocation.get(sector, 0.0) + e.current_value
    return allocation


# ── Scoring ──────────────────────────────────────────────────────────────────

def diversification_score(holding_count: int, max_stock_weight: float, sector_count: int) -> int:
    if holding_count >= 5:
        count_score = 30
    elif holding_count >= 3:
        count_score = 20
    else:
        count_score = 10

    if max_stock_weight < 30:
        concentration_score = 30
    elif max_stock_weight < 50:
        concentration_score = 20
    else:
        concentration_score = 10

    if sector_count >= 3:
        breadth_score = 40
    elif sector_count >= 2:
        breadth_score = 25
    else:
        breadth_score = 10

    return max(0, min(count_score + concentration_score + breadth_score, 100))


def diversification_label(score: int) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 60:
        return "Good"
    if score >= 40:
        return "Fair"
    return "Poor"


def _classify_risk(
    enriched: list[EnrichedHolding],
    max_stock_weight: float,
    max_sector_weight: float,
) -> tuple[RiskLevel, list[str]]:
    level = RiskLevel.LOW
    factors: list[str] = []

    if max_stock_weight > HIGH_STOCK_WEIGHT:
        level = level.escalate(RiskLevel.HIGH)
        factors.append("high concentration in single stock")
    elif max_stock_weight > MODERATE_STOCK_WEIGHT:
        level = level.escalate(RiskLevel.MEDIUM)
        factors.append("moderate concentration risk")

    if max_sector_weight > HEAVY_SECTOR_WEIGHT:
        level = level.escalate(RiskLevel.HIGH)
        factors.append("heavy sector concentration")
    elif max_sector_weight > SECTOR_WEIGHT:
        level = level.escalate(RiskLevel.MEDIUM)
        factors.append("sector concentration")

    if len(enriched) < MIN_HOLDINGS:
        level = level.escalate(RiskLevel.MEDIUM)
        factors.append("insufficient diversification")

    volatile = [
        e for e in enriched
        if e.quote is not None and abs(e.quote.change_percent) > VOLATILE_MOVE_PCT
    ]
    if len(volatile) > len(enriched) * 0.5:
        level = level.escalate(level.bump())
        factors.append("high-volatility holdings")

    return level, factors


# ── Text ─────────────────────────────────────────────────────────────────────

def _overview(holding_count: int, total_value: float, score: int, risk_factors: list[str]) -> str:
    parts = [
        f"Your portfolio contains {holding_count} holdings with a total value of ${total_value:,.2f}."
    ]
    if score >= 80:
        parts.append("You have excellent diversification across stocks and sectors.")
    elif score >= 60:
        parts.append("Your portfolio shows good diversification, but there's room for improvement.")
    else:
        parts.append("Your portfolio needs better diversification to reduce risk.")

    if risk_factors:
        parts.append(f"Key risk factors include: {', '.join(risk_factors)}.")
    return " ".join(parts)


def _recommendations(enriched: list[EnrichedHolding], allocation: dict[str, float]) -> list[str]:
    recs: list[str] = []

    overweight = next((e for e in enriched if e.weight > OVERWEIGHT_PCT), None)
    if overweight:
        recs.append(
            f"{overweight.symbol} makes up {overweight.weight:.1f}% of your portfolio. "
            f"Consider reducing this to below 25% to lower concentration risk."
        )

    if len(enriched) < TARGET_HOLDINGS:
        recs.append(
            "Consider adding more stocks to your portfolio. "
            "Aim for at least 5-10 different holdings for better diversification."
        )

    if len(allocation) < 3:
        # max() keeps the first sector on ties
        dominant = max(allocation, key=allocation.get)
        if dominant == "Technology":
            recs.append(
                "Your portfolio is heavily weighted in Technology. Consider adding stocks "
                "from Healthcare, Financial Services, or Consumer Goods for balance."
            )
        else:
            recs.append(
                f"Consider diversifying beyond {dominant} by adding stocks from other "
                f"sectors like Technology, Healthcare, or Financial Services."
            )

    gainer = next((e for e in enriched if e.quote and e.quote.change_percent > GAINER_PCT), None)
    if gainer:
        recs.append(
            f"{gainer.symbol} is showing strong performance (+{gainer.quote.change_percent:.1f}%). "
            f"Consider taking some profits if it becomes overweight."
        )

    loser = next((e for e in enriched if e.quote and e.quote.change_percent < LOSER_PCT), None)
    if loser:
        recs.append(
            f"{loser.symbol} is down {abs(loser.quote.change_percent):.1f}%. "
            f"Review the fundamentals before deciding to hold or sell."
        )

    if not recs:
        recs.extend(GENERIC_RECOMMENDATIONS)

    return recs[:MAX_RECOMMENDATIONS]


# ── Main entry point ─────────────────────────────────────────────────────────

def analyze(holdings: Iterable[Holding], quotes: QuoteLookup) -> AnalysisResult:
    """
    Analyze a portfolio against a quote snapshot.

    Args:
        holdings: portfolio line items; order decides recommendation tie-breaks
        quotes:   symbol → Quote mapping (or iterable of Quote)

    Returns:
        a fresh, frozen AnalysisResult
    """
    holdings = list(holdings)
    if not holdings:
        return AnalysisResult(
            overview=EMPTY_OVERVIEW,
            recommendations=(EMPTY_RECOMMENDATION,),
            risk_level=RiskLevel.LOW,
            diversification_score=0,
        )

    enriched, total_value = enrich(holdings, quotes)
    allocation = sector_allocation(enriched)

    sector_count = len(allocation)
    max_sector_weight = max(allocation.values()) / total_value * 100 if total_value > 0 else 0.0
    max_stock_weight = max(e.weight for e in enriched)

    risk_level, risk_factors = _classify_risk(enriched, max_stock_weight, max_sector_weight)
    score = diversification_score(len(enriched), max_stock_weight, sector_count)

    return AnalysisResult(
        overview=_overview(len(enriched), total_value, score, risk_factors),
        recommendations=tuple(_recommendations(enriched, allocation)),
        risk_level=risk_level,
        diversification_score=score,
    )
