"""
Pydantic models for holdings, quotes and consultant output.
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)

    def escalate(self, other: RiskLevel) -> RiskLevel:
        """Return the higher of the two levels."""
        return other if other.rank > self.rank else self

    def bump(self) -> RiskLevel:
        """One level up, saturating at HIGH."""
        return _RISK_ORDER[min(self.rank + 1, len(_RISK_ORDER) - 1)]


_RISK_ORDER = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH)


class Holding(BaseModel):
    symbol: str
    quantity: float = Field(gt=0)
    purchase_price: Optional[float] = Field(default=None, ge=0)   # cost basis per share

    @field_validator("symbol")
    @classmethod
    def _normalise_symbol(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("symbol must not be empty")
        return v


class Quote(BaseModel):
    symbol: str
    name: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    volume: int = 0
    market_cap: float = 0.0
    last_updated: datetime = Field(default_factory=datetime.now)


class MarketIndex(BaseModel):
    symbol: str
    name: str
    value: float
    change: float = 0.0
    change_percent: float = 0.0
    region: str = "India"
    last_updated: datetime = Field(default_factory=datetime.now)


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    overview: str
    recommendations: tuple[str, ...]            # at most 4, priority order
    risk_level: RiskLevel
    diversification_score: int = Field(ge=0, le=100)

    def to_payload(self) -> dict:
        """Wire form used by the presentation layer."""
        return {
            "overview": self.overview,
            "recommendations": list(self.recommendations),
            "riskLevel": self.risk_level.value,
            "diversificationScore": self.diversification_score,
        }


class ConsultationReport(BaseModel):
    id: str
    timestamp: datetime
    owner: str
    portfolio: list[Holding]
    analysis: str                   # overview text
    recommendations: list[str]
    risk_level: RiskLevel
    diversification_score: int


class UsageData(BaseModel):
    portfolio_analyses: int = 0
    stock_queries: int = 0
    total_consultations: int = 0    # lifetime, survives daily resets
    last_reset_date: date = Field(default_factory=date.today)
