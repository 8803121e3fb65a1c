import numpy as np
import pytest
from pydantic import ValidationError

from analysis.consultant import (
    EMPTY_OVERVIEW,
    EMPTY_RECOMMENDATION,
    GENERIC_RECOMMENDATIONS,
    analyze,
    diversification_score,
    enrich,
    sector_for,
)
from state.models import Holding, RiskLevel


def _book(quote, *rows):
    """rows: (symbol, quantity, price, change_percent)"""
    holdings = [Holding(symbol=s, quantity=q) for s, q, _, _ in rows]
    quotes = {s: quote(s, p, cp) for s, _, p, cp in rows}
    return holdings, quotes


def test_empty_portfolio_is_fixed_result():
    result = analyze([], {})
    assert result.overview == EMPTY_OVERVIEW
    assert result.recommendations == (EMPTY_RECOMMENDATION,)
    assert result.risk_level == RiskLevel.LOW
    assert result.diversification_score == 0


def test_unknown_symbol_does_not_divide_by_zero():
    result = analyze([Holding(symbol="ZZZZ", quantity=10)], {})

    enriched, total = enrich([Holding(symbol="ZZZZ", quantity=10)], {})
    assert total == 0
    assert enriched[0].current_value == 0
    assert enriched[0].weight == 0

    # 1 holding (10) + weight 0 < 30 (30) + one "Other" sector (10)
    assert result.diversification_score == 50
    assert result.risk_level == RiskLevel.MEDIUM
    assert "$0.00" in result.overview
    assert any("beyond Other" in r for r in result.recommendations)


def test_single_stock_is_high_risk(quote):
    holdings, quotes = _book(quote, ("AAPL", 10, 189.84, 0.6))
    result = analyze(holdings, quotes)

    assert result.risk_level == RiskLevel.HIGH
    assert result.recommendations[0].startswith("AAPL makes up 100.0% of your portfolio")
    assert "high concentration in single stock" in result.overview


def test_balanced_portfolio_scores_100(quote):
    holdings, quotes = _book(
        quote,
        ("AAPL", 10, 100, 0.5),
        ("MSFT", 10, 100, -0.5),
        ("AMZN", 10, 100, 1.0),
        ("TSLA", 10, 100, -1.0),
        ("V",    10, 100, 0.2),
    )
    result = analyze(holdings, quotes)

    assert result.diversification_score == 100
    assert result.risk_level == RiskLevel.LOW
    assert "excellent diversification" in result.overview
    assert "Key risk factors" not in result.overview
    assert result.recommendations == GENERIC_RECOMMENDATIONS


def test_technology_dominant_uses_technology_wording(quote):
    holdings, quotes = _book(quote, ("AAPL", 10, 100, 0.1), ("MSFT", 5, 100, 0.1))
    recs = analyze(holdings, quotes).recommendations
    assert any("heavily weighted in Technology" in r for r in recs)


def test_other_dominant_sector_is_named(quote):
    holdings, quotes = _book(quote, ("AMZN", 10, 100, 0.1), ("TSLA", 5, 100, 0.1))
    recs = analyze(holdings, quotes).recommendations
    assert any("Consider diversifying beyond Consumer Discretionary" in r for r in recs)
    assert not any("heavily weighted in Technology" in r for r in recs)


def test_heavy_sector_overrides_moderate_stock_risk(quote):
    holdings, quotes = _book(
        quote,
        ("AAPL", 4.0, 100, 0.1),   # 40%
        ("MSFT", 3.5, 100, 0.1),   # 35% -> Technology 75%
        ("V",    2.5, 100, 0.1),
    )
    result = analyze(holdings, quotes)
    assert result.risk_level == RiskLevel.HIGH
    assert "moderate concentration risk, heavy sector concentration" in result.overview


def test_sector_concentration_reason_without_escalation(quote):
    holdings, quotes = _book(
        quote,
        ("AAPL", 35, 10, 0.1),
        ("MSFT", 20, 10, 0.1),     # Technology 55%
        ("AMZN", 25, 10, 0.1),
        ("V",    20, 10, 0.1),
    )
    result = analyze(holdings, quotes)
    assert result.risk_level == RiskLevel.MEDIUM
    assert "moderate concentration risk, sector concentration" in result.overview


def test_volatility_escalates_one_level_from_low(quote):
    holdings, quotes = _book(
        quote,
        ("AAPL", 10, 100, 4.0),
        ("MSFT", 10, 100, -4.0),
        ("AMZN", 10, 100, 3.5),
        ("V",    10, 100, 0.1),
    )
    result = analyze(holdings, quotes)
    assert result.risk_level == RiskLevel.MEDIUM
    assert "Key risk factors include: high-volatility holdings." in result.overview


def test_volatility_escalates_medium_to_high(quote):
    holdings, quotes = _book(
        quote,
        ("AAPL", 10, 100, 4.0),
        ("AMZN", 10, 100, 4.0),
        ("V",    10, 100, -4.0),
    )
    assert analyze(holdings, quotes).risk_level == RiskLevel.HIGH


def test_first_overweight_holding_wins_over_global_max(quote):
    holdings, quotes = _book(
        quote,
        ("AAPL", 3, 100, 0.1),     # 30%
        ("AMZN", 4, 100, 0.1),     # 40%
        ("V",    3, 100, 0.1),
    )
    recs = analyze(holdings, quotes).recommendations
    assert recs[0].startswith("AAPL makes up 30.0%")


def test_recommendations_truncated_to_four(quote):
    holdings, quotes = _book(quote, ("AAPL", 5, 100, 2.5), ("MSFT", 5, 100, -3.5))
    recs = analyze(holdings, quotes).recommendations

    assert len(recs) == 4
    assert "AAPL is showing strong performance (+2.5%)" in recs[3]
    assert not any("MSFT is down" in r for r in recs)


def test_loser_recommendation_cites_move(quote):
    holdings, quotes = _book(
        quote,
        ("AAPL", 10, 100, 0.1),
        ("MSFT", 10, 100, -3.5),
        ("AMZN", 10, 100, -2.5),
        ("TSLA", 10, 100, 0.1),
        ("V",    10, 100, 0.1),
    )
    recs = analyze(holdings, quotes).recommendations
    assert recs == ("MSFT is down 3.5%. Review the fundamentals before deciding to hold or sell.",)


def test_quote_iterable_first_match_wins(quote):
    holdings = [Holding(symbol="AAPL", quantity=1)]
    enriched, total = enrich(holdings, [quote("AAPL", 50), quote("AAPL", 999)])
    assert total == 50


def test_inputs_untouched_and_repeatable(quote):
    holdings, quotes = _book(quote, ("AAPL", 10, 100, 0.1), ("V", 10, 100, 5.0))
    before = [h.model_copy() for h in holdings]

    first = analyze(holdings, quotes)
    second = analyze(holdings, quotes)

    assert first == second
    assert holdings == before


def test_result_is_frozen():
    result = analyze([], {})
    with pytest.raises(ValidationError):
        result.risk_level = RiskLevel.HIGH


def test_payload_uses_wire_keys(quote):
    holdings, quotes = _book(quote, ("AAPL", 1, 100, 0.1))
    payload = analyze(holdings, quotes).to_payload()
    assert set(payload) == {"overview", "recommendations", "riskLevel", "diversificationScore"}
    assert payload["riskLevel"] == "high"


def test_random_portfolios_stay_in_bounds(quote):
    rng = np.random.default_rng(7)
    symbols = ["AAPL", "MSFT", "AMZN", "V", "TCS.BSE", "RELIANCE.BSE", "ZZZZ"]
    for _ in range(200):
        n = int(rng.integers(1, len(symbols) + 1))
        picked = [str(s) for s in rng.choice(symbols, size=n, replace=False)]
        holdings = [Holding(symbol=s, quantity=float(rng.integers(1, 100))) for s in picked]
        quotes = {
            s: quote(s, float(rng.uniform(1, 500)), float(rng.uniform(-6, 6)))
            for s in picked if s != "ZZZZ"
        }
        result = analyze(holdings, quotes)
        enriched, total = enrich(holdings, quotes)

        assert 0 <= result.diversification_score <= 100
        assert 1 <= len(result.recommendations) <= 4
        if total > 0:
            assert sum(e.weight for e in enriched) == pytest.approx(100.0)


def test_diversification_bands():
    assert diversification_score(5, 29.9, 3) == 100
    assert diversification_score(3, 30, 2) == 20 + 20 + 25
    assert diversification_score(2, 50, 1) == 30


def test_sector_lookup():
    assert sector_for("AAPL") == "Technology"
    assert sector_for("V") == "Financial Services"
    assert sector_for("TCS.BSE") == "Other"
    assert sector_for("TCS") == "Other"
    assert sector_for("XYZ") == "Other"


def test_indian_symbols_fall_into_other(quote):
    holdings, quotes = _book(quote, ("TCS.BSE", 1, 3800, 0.1), ("INFY.BSE", 2, 1500, 0.1))
    result = analyze(holdings, quotes)

    assert "heavy sector concentration" in result.overview
    assert any("Consider diversifying beyond Other" in r for r in result.recommendations)
    assert not any("heavily weighted in Technology" in r for r in result.recommendations)


def test_thresholds_are_strict(quote):
    # every stock exactly 25%, Technology exactly 50%, 2 of 4 volatile
    holdings, quotes = _book(
        quote,
        ("AAPL", 10, 100, 4.0),
        ("MSFT", 10, 100, -4.0),
        ("AMZN", 10, 100, 0.5),
        ("V",    10, 100, 0.1),
    )
    result = analyze(holdings, quotes)

    assert result.risk_level == RiskLevel.LOW
    assert "Key risk factors" not in result.overview
    assert not any("makes up" in r for r in result.recommendations)


def test_sector_weight_of_exactly_seventy_is_not_heavy(quote):
    holdings, quotes = _book(
        quote,
        ("AAPL", 35, 10, 0.1),
        ("MSFT", 35, 10, 0.1),     # Technology 70%
        ("AMZN", 30, 10, 0.1),
    )
    result = analyze(holdings, quotes)

    assert result.risk_level == RiskLevel.MEDIUM
    assert "heavy sector concentration" not in result.overview
    assert "moderate concentration risk, sector concentration" in result.overview


def test_risk_level_only_escalates():
    assert RiskLevel.HIGH.escalate(RiskLevel.MEDIUM) == RiskLevel.HIGH
    assert RiskLevel.LOW.escalate(RiskLevel.MEDIUM) == RiskLevel.MEDIUM
    assert RiskLevel.LOW.bump() == RiskLevel.MEDIUM
    assert RiskLevel.HIGH.bump() == RiskLevel.HIGH
