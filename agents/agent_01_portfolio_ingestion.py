"""
Agent 1 — Portfolio Ingestion

Loads the owner's holdings from the portfolio store (store/portfolio_store.py).
If the state already carries holdings (e.g. --sample without saving),
those are used as-is.

Produces: state["holdings"] = list[Holding]
"""
from __future__ import annotations

from state.models import Holding
from store.portfolio_store import PortfolioStore


def fetch(store: PortfolioStore, owner: str) -> list[Holding]:
    holdings = store.load(owner)
    print(f"[Portfolio] {owner}: {len(holdings)} holdings")
    return holdings


def run(state: dict, portfolio_store: PortfolioStore) -> dict:
    """LangGraph node — portfolio_store is injected from main.py."""
    if state.get("holdings"):
        return state
    return {**state, "holdings": fetch(portfolio_store, state["owner"])}
