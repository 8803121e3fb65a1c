"""
Agent 2 — Quotes

Owns the quote snapshot the consultant reads. The snapshot is replaced
wholesale on each refresh, and the consultant only ever gets a copy.

Source waterfall:
  LIVE:  yfinance batch download (tools/yfinance_client.py), cached on success
  CACHE: last good live snapshot on disk (cache/quote_cache.py)
  LAST:  whatever snapshot we already hold (initially the mock table)

Mock mode skips the network entirely and random-walks the mock prices on
every refresh tick, like the dashboard's offline feed.

Produces: state["quotes"] = dict[symbol, Quote]
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime

import numpy as np

from cache.quote_cache import load as cache_load, save as cache_save
from mock_data import DEFAULT_SYMBOLS, MOCK_INDICES, MOCK_QUOTES
from state.models import MarketIndex, Quote
from tools.yfinance_client import fetch_index_quotes, fetch_quotes

# Refresh cadence (seconds)
MOCK_STOCK_INTERVAL = 5
LIVE_INTERVAL = 60


class QuoteSource:
    def __init__(
        self,
        live: bool = False,
        symbols: list[str] | None = None,
        fetcher: Callable[[list[str]], dict[str, Quote]] = fetch_quotes,
        rng: np.random.Generator | None = None,
    ):
        self.live = live
        self.symbols = list(symbols or DEFAULT_SYMBOLS)
        self._fetcher = fetcher
        self._rng = rng or np.random.default_rng()
        self._snapshot: dict[str, Quote] = {q.symbol: q for q in MOCK_QUOTES}

    @property
    def interval(self) -> int:
        return LIVE_INTERVAL if self.live else MOCK_STOCK_INTERVAL

    def get(self, symbol: str) -> Quote | None:
        """Quote for a symbol, or None when the source doesn't know it."""
        return self._snapshot.get(symbol)

    def snapshot(self) -> dict[str, Quote]:
        return dict(self._snapshot)

    def track(self, symbols: list[str]) -> None:
        """Add symbols (e.g. from a portfolio) to the live watch list."""
        for s in symbols:
            if s not in self.symbols:
                self.symbols.append(s)

    # ── Refresh ──────────────────────────────────────────────────────────────

    def _tick_mock(self) -> None:
        now = datetime.now()
        self._snapshot = {
            symbol: q.model_copy(update={
                "price": max(0.01, q.price + (self._rng.random() - 0.5) * 5),
                "change_percent": (self._rng.random() - 0.5) * 1,
                "last_updated": now,
            })
            for symbol, q in self._snapshot.items()
        }

    def _from_cache(self) -> tuple[dict[str, Quote], str] | None:
        cached = cache_load("stocks")
        if cached is None:
            return None
        dicts, fetched_at = cached
        quotes = {}
        for d in dicts:
            try:
                q = Quote(**d)
            except ValueError:
                continue
            quotes[q.symbol] = q
        return (quotes, fetched_at) if quotes else None

    def refresh(self) -> list[str]:
        """
        Replace the snapshot from the best available source.

        Returns:
            data_warnings — human-readable notes about any fallback taken
        """
        if not self.live:
            self._tick_mock()
            return []

        warnings: list[str] = []
        try:
            fresh = self._fetcher(self.symbols)
        except Exception as e:
            print(f"  [WARN] live quote fetch failed: {e}")
            fresh = {}

        if fresh:
            print(f"[Quotes] {len(fresh)}/{len(self.symbols)} symbols refreshed")
            self._snapshot = {**self._snapshot, **fresh}
            cache_save("stocks", [q.model_dump(mode="json") for q in fresh.values()])
            missing = [s for s in self.symbols if s not in fresh]
            if missing:
                warnings.append(f"No live quote for: {', '.join(missing)}.")
            return warnings

        cached = self._from_cache()
        if cached:
            quotes, fetched_at = cached
            msg = f"Quotes from cache (last fetched: {fetched_at}) — live fetch failed."
            print(f"  [FALLBACK] {msg}")
            self._snapshot = {**self._snapshot, **quotes}
        else:
            msg = "Live quote fetch failed and no cache available — using last known prices."
            print(f"  [FALLBACK] {msg}")
        warnings.append(msg)
        return warnings


async def refresh_loop(source: QuoteSource, interval: float | None = None, ticks: int = 1) -> list[str]:
    """
    Timer-driven refresh. Each tick is independent: a failed tick just
    leaves the previous snapshot in place until the next one.

    Returns:
        the warnings from the last tick
    """
    interval = source.interval if interval is None else interval
    warnings: list[str] = []
    for i in range(ticks):
        if i:
            await asyncio.sleep(interval)
        warnings = source.refresh()
    return warnings


# ── Indices ──────────────────────────────────────────────────────────────────

def fetch_indices(live: bool = False, rng: np.random.Generator | None = None) -> list[MarketIndex]:
    """Nifty 50 + Sensex — live if possible, mock (with a small random tick) otherwise."""
    if live:
        try:
            indices = fetch_index_quotes([i.symbol for i in MOCK_INDICES])
        except Exception as e:
            print(f"  [WARN] index fetch failed: {e}")
            indices = []
        if indices:
            return indices
        print("  [FALLBACK] indices from mock table")
        return list(MOCK_INDICES)

    rng = rng or np.random.default_rng()
    return [
        idx.model_copy(update={
            "value": idx.value + (rng.random() - 0.5) * 50,
            "change_percent": (rng.random() - 0.5) * 0.5,
            "last_updated": datetime.now(),
        })
        for idx in MOCK_INDICES
    ]


# ── LangGraph node ────────────────────────────────────────────────────────────

def run(state: dict, source: QuoteSource) -> dict:
    """
    LangGraph node — refreshes the source once and hands a snapshot copy
    to the rest of the pipeline. source is injected from main.py.
    """
    source.track([h.symbol for h in state["holdings"]])
    warnings = source.refresh() if source.live else []
    return {
        **state,
        "quotes": source.snapshot(),
        "data_warnings": (state.get("data_warnings") or []) + warnings,
    }
