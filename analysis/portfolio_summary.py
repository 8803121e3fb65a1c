"""
Portfolio summary — value, cost basis, gain/loss and sector breakdown.

Shares the join and weight logic with analysis.consultant. The sector
breakdown uses its own table of Indian symbols.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from analysis.consultant import (
    QuoteLookup,
    diversification_label,
    diversification_score,
    enrich,
    sector_allocation,
)
from state.models import Holding

# Sector breakdown for the summary panel (Indian large caps, exact symbols).
SUMMARY_SECTORS: Mapping[str, str] = MappingProxyType({
    "RELIANCE": "Oil & Gas",
    "TCS": "Technology",
    "HDFCBANK": "Banking & Financial Services",
    "INFY": "Technology",
    "ICICIBANK": "Banking & Financial Services",
    "BHARTIARTL": "Telecommunications",
    "SBIN": "Banking & Financial Services",
    "WIPRO": "Technology",
    "LT": "Construction & Engineering",
    "AXISBANK": "Banking & Financial Services",
})


@dataclass
class HoldingLine:
    symbol: str
    name: str
    quantity: float
    current_price: float
    purchase_price: float       # 0 when unknown
    current_value: float
    purchase_value: float
    gain_loss: float
    gain_loss_percent: float
    weight: float


@dataclass
class SectorSlice:
    sector: str
    value: float
    percentage: float


@dataclass
class PortfolioSummary:
    lines: list[HoldingLine]
    sectors: list[SectorSlice]
    total_value: float
    total_purchase_value: float
    total_gain_loss: float
    total_gain_loss_percent: float
    diversification_score: int

    @property
    def diversification_label(self) -> str:
        return diversification_label(self.diversification_score)

    def summary(self) -> str:
        """Short text block for the console report."""
        if not self.lines:
            return "No holdings yet."
        sign = "+" if self.total_gain_loss >= 0 else ""
        text = [
            f"Total value: {format_currency(self.total_value)}  |  "
            f"Invested: {format_currency(self.total_purchase_value)}  |  "
            f"P/L: {sign}{format_currency(self.total_gain_loss)} "
            f"({sign}{self.total_gain_loss_percent:.2f}%)",
            f"Diversification: {self.diversification_score}/100 ({self.diversification_label})",
        ]
        text.append("Sectors: " + ", ".join(f"{s.sector} {s.percentage:.1f}%" for s in self.sectors))
        return "\n".join(text)


def _pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def summarize(holdings: Iterable[Holding], quotes: QuoteLookup) -> PortfolioSummary:
    enriched, total_value = enrich(holdings, quotes)

    lines = []
    for e in enriched:
        purchase_value = e.purchase_price * e.quantity if e.purchase_price else e.current_value
        gain_loss = e.current_value - purchase_value
        lines.append(HoldingLine(
            symbol=e.symbol,
            name=e.quote.name if e.quote else e.symbol,
            quantity=e.quantity,
            current_price=e.quote.price if e.quote else 0.0,
            purchase_price=e.purchase_price or 0.0,
            current_value=e.current_value,
            purchase_value=purchase_value,
            gain_loss=gain_loss,
            gain_loss_percent=_pct(gain_loss, purchase_value),
            weight=e.weight,
        ))

    allocation = sector_allocation(enriched, SUMMARY_SECTORS)
    sectors = [
        SectorSlice(sector=name, value=value, percentage=_pct(value, total_value))
        for name, value in allocation.items()
    ]

    total_purchase = sum(l.purchase_value for l in lines)
    total_gain_loss = sum(l.gain_loss for l in lines)
    score = (
        diversification_score(len(lines), max(l.weight for l in lines), len(allocation))
        if lines else 0
    )

    return PortfolioSummary(
        lines=lines,
        sectors=sectors,
        total_value=total_value,
        total_purchase_value=total_purchase,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=_pct(total_gain_loss, total_purchase),
        diversification_score=score,
    )


# ── Formatting ───────────────────────────────────────────────────────────────

def _group_indian(integer_part: str) -> str:
    """12345678 → 1,23,45,678 (last three digits, then pairs)."""
    if len(integer_part) <= 3:
        return integer_part
    head, tail = integer_part[:-3], integer_part[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_currency(value: float | None) -> str:
    """
    INR formatting: crores and lakhs for large values, Indian grouping otherwise.

      format_currency(25_000_000) → "₹2.50 Cr"
      format_currency(250_000)    → "₹2.50 L"
      format_currency(1234.5)     → "₹1,234.5"
    """
    if value is None:
        return "-"
    if value >= 10_000_000:
        return f"₹{value / 10_000_000:.2f} Cr"
    if value >= 100_000:
        return f"₹{value / 100_000:.2f} L"

    sign = "-" if value < 0 else ""
    text = f"{abs(value):.2f}".rstrip("0").rstrip(".")
    integer_part, _, fraction = text.partition(".")
    grouped = _group_indian(integer_part)
    return f"{sign}₹{grouped}.{fraction}" if fraction else f"{sign}₹{grouped}"
