#!/usr/bin/env python3
"""
Portfolio Consultant — Runner
=============================
Portfolio store (JSON)
  → Agent 1 (holdings for the owner)
  → Agent 2 (quote snapshot: yfinance live, or mock)
  → Agent 3 (rule-based consultant — risk, diversification, recommendations)
  → Agent 4 (daily usage quota)
  → Agent 5 (console report + history)

Usage:
  python main.py --mock                          # offline quotes
  python main.py --mock --sample                 # analyse the sample portfolio
  python main.py --add AAPL 10 --price 180       # upsert a holding, then analyse
  python main.py --remove AAPL
  python main.py --mock --watch 3                # 3 refresh ticks before analysing
  python main.py --history                       # list saved reports

Environment (.env is loaded):
  CONSULTANT_OWNER, CONSULTANT_STORE_PATH, CONSULTANT_USAGE_PATH, CONSULTANT_CACHE_DIR
"""
import argparse
import asyncio
import os
import sys
from functools import partial

from dotenv import load_dotenv
from langgraph.graph import END, START, StateGraph

from agents import (
    agent_01_portfolio_ingestion,
    agent_02_quotes,
    agent_03_consultant,
    agent_04_usage,
    agent_05_report_delivery,
)
from agents.agent_02_quotes import QuoteSource
from state.graph_state import AdvisorState
from state.models import Holding, MarketIndex
from store.portfolio_store import PortfolioStore, PortfolioStoreError
from store.usage_tracker import UsageTracker

load_dotenv()

DEFAULT_OWNER = "local"


def build_graph(
    store: PortfolioStore,
    source: QuoteSource,
    tracker: UsageTracker,
    indices: list[MarketIndex] | None = None,
    save_report: bool = True,
):
    graph = StateGraph(AdvisorState)
    graph.add_node("portfolio", partial(agent_01_portfolio_ingestion.run, portfolio_store=store))
    graph.add_node("quotes", partial(agent_02_quotes.run, source=source))
    graph.add_node("consultant", agent_03_consultant.run)
    graph.add_node("usage", partial(agent_04_usage.run, tracker=tracker))
    graph.add_node("report", partial(agent_05_report_delivery.run, indices=indices, save=save_report))
    graph.add_edge(START, "portfolio")
    graph.add_edge("portfolio", "quotes")
    graph.add_edge("quotes", "consultant")
    graph.add_edge("consultant", "usage")
    graph.add_edge("usage", "report")
    graph.add_edge("report", END)
    return graph.compile()


def _print_history(owner: str) -> None:
    from cache import report_history

    reports = report_history.load(owner)
    if not reports:
        print(f"No saved reports for {owner}.")
        return
    for r in reports:
        print(f"{r.timestamp:%Y-%m-%d %H:%M}  risk={r.risk_level.value:<6}  "
              f"score={r.diversification_score:>3}  holdings={len(r.portfolio)}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Portfolio Consultant")
    parser.add_argument("--owner",      default=os.environ.get("CONSULTANT_OWNER", DEFAULT_OWNER))
    parser.add_argument("--mock",       action="store_true",
                        help="Use the offline quote table instead of live yfinance data")
    parser.add_argument("--add",        nargs=2, metavar=("SYMBOL", "QTY"),
                        help="Add shares (existing symbols are topped up)")
    parser.add_argument("--price",      type=float,
                        help="Purchase price for --add (defaults to the current quote)")
    parser.add_argument("--remove",     metavar="SYMBOL")
    parser.add_argument("--clear",      action="store_true", help="Remove all holdings for the owner")
    parser.add_argument("--sample",     action="store_true",
                        help="Analyse the sample portfolio instead of the stored one")
    parser.add_argument("--watch",      type=int, default=1, metavar="N",
                        help="Refresh quotes N times (at the feed's cadence) before analysing")
    parser.add_argument("--history",    action="store_true", help="List saved reports and exit")
    parser.add_argument("--no-save",    action="store_true", help="Don't append the report to history")
    parser.add_argument("--store",      default=None, help="Portfolio store JSON path")
    parser.add_argument("--usage-file", default=None, help="Usage tracker JSON path")
    args = parser.parse_args(argv)

    if args.history:
        _print_history(args.owner)
        return 0

    store = PortfolioStore(args.store)
    tracker = UsageTracker(args.usage_file)
    source = QuoteSource(live=not args.mock)

    print(f"\n=== Portfolio Consultant ===")
    print(f"Owner: {args.owner}  |  Quotes: {'MOCK' if args.mock else 'LIVE (yfinance)'}")

    # ── Portfolio edits ──────────────────────────────────────────────────────
    try:
        if args.clear:
            store.clear(args.owner)
            print(f"Cleared portfolio for {args.owner}")
        if args.remove:
            removed = store.remove(args.owner, args.remove)
            print(f"{args.remove.upper()}: {'removed' if removed else 'not in portfolio'}")
        if args.add:
            symbol, qty = args.add
            holding = Holding(symbol=symbol, quantity=float(qty), purchase_price=args.price)
            if source.live and args.price is None:
                source.track([holding.symbol])
                source.refresh()
            quote = source.get(holding.symbol)
            saved = store.add(args.owner, holding, default_price=quote.price if quote else None)
            print(f"{saved.symbol}: now {saved.quantity:g} shares")
    except PortfolioStoreError as e:
        print(f"[ERROR] {e}")
        return 1
    except ValueError as e:
        print(f"[ERROR] invalid holding: {e}")
        return 2

    # ── Quota ────────────────────────────────────────────────────────────────
    if not tracker.can_use("portfolio_analysis"):
        print(f"Daily analysis limit reached ({tracker.limits['portfolio_analysis']}/day). "
              f"Try again tomorrow.")
        return 3
    print(f"Analyses left today: {tracker.remaining('portfolio_analysis')}")

    # ── Quotes ───────────────────────────────────────────────────────────────
    initial_state: AdvisorState = {
        "owner": args.owner,
        "holdings": [],
        "data_warnings": [],
    }
    if args.sample:
        from mock_data import SAMPLE_HOLDINGS
        initial_state["holdings"] = list(SAMPLE_HOLDINGS)

    if args.watch > 1:
        try:
            watched = initial_state["holdings"] or store.load(args.owner)
        except PortfolioStoreError as e:
            print(f"[ERROR] {e}")
            return 1
        source.track([h.symbol for h in watched])
        print(f"Refreshing quotes {args.watch}x every {source.interval}s...", flush=True)
        initial_state["data_warnings"] = asyncio.run(
            agent_02_quotes.refresh_loop(source, ticks=args.watch - 1)
        )
    indices = agent_02_quotes.fetch_indices(live=not args.mock)

    # ── Run LangGraph ────────────────────────────────────────────────────────
    try:
        app = build_graph(store, source, tracker, indices=indices, save_report=not args.no_save)
        app.invoke(initial_state)
    except PortfolioStoreError as e:
        print(f"[ERROR] {e}")
        return 1

    print(f"Analyses left today: {tracker.remaining('portfolio_analysis')}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
