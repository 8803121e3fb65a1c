"""
yfinance client — batch OHLCV download turned into quote snapshots.

Design decisions:
- Single yf.download() call for all symbols (1 API hit, not N)
- A quote is derived from the last two daily bars: price = last close,
  change = last close − previous close
- Symbols yfinance couldn't fetch are omitted — callers treat absence as
  "unknown symbol"
"""
from __future__ import annotations

from datetime import datetime

import pandas as pd
import yfinance as yf

from state.models import MarketIndex, Quote

# Dashboard symbols use Alpha Vantage style ".BSE" suffixes; Yahoo wants ".BO"
_YAHOO_SUFFIX = {".BSE": ".BO", ".NSE": ".NS"}

INDEX_NAMES = {"^NSEI": "Nifty 50", "^BSESN": "Sensex"}


def to_yahoo(symbol: str) -> str:
    for suffix, yahoo in _YAHOO_SUFFIX.items():
        if symbol.endswith(suffix):
            return symbol[: -len(suffix)] + yahoo
    return symbol


def fetch_price_history(
    tickers: list[str],
    period: str = "5d",
) -> dict[str, pd.DataFrame]:
    """
    Batch-download recent daily OHLCV for all tickers in a single API call.

    Returns:
        { "TICKER": DataFrame(columns=[Open, High, Low, Close, Volume], index=DatetimeIndex) }
        Tickers that yfinance couldn't fetch are omitted silently.
    """
    if not tickers:
        return {}

    raw = yf.download(
        tickers,
        period=period,
        auto_adjust=True,
        progress=False,
        threads=True,
    )

    result: dict[str, pd.DataFrame] = {}

    # yfinance 1.x always returns MultiIndex columns: (field, ticker)
    for ticker in tickers:
        try:
            df = raw.xs(ticker, level=1, axis=1)[["Open", "High", "Low", "Close", "Volume"]].dropna()
            if not df.empty:
                result[ticker] = df
        except KeyError:
            pass  # ticker not in response (delisted, typo, etc.)

    return result


def quote_from_history(symbol: str, df: pd.DataFrame, name: str | None = None) -> Quote:
    """Build a Quote from daily bars (needs at least one row)."""
    close = df["Close"].astype(float)
    price = float(close.iloc[-1])
    prev = float(close.iloc[-2]) if len(close) > 1 else price
    change = price - prev
    return Quote(
        symbol=symbol,
        name=name or symbol,
        price=price,
        change=change,
        change_percent=change / prev * 100 if prev else 0.0,
        volume=int(df["Volume"].iloc[-1]) if "Volume" in df else 0,
        last_updated=datetime.now(),
    )


def fetch_quotes(symbols: list[str]) -> dict[str, Quote]:
    """
    Live quotes for the given dashboard symbols.

    Returns:
        { symbol: Quote } keyed by the caller's symbol (not the Yahoo one)
    """
    yahoo = {to_yahoo(s): s for s in symbols}
    history = fetch_price_history(list(yahoo))
    return {
        yahoo[ticker]: quote_from_history(yahoo[ticker], df)
        for ticker, df in history.items()
    }


def fetch_index_quotes(symbols: list[str] | None = None) -> list[MarketIndex]:
    symbols = symbols or list(INDEX_NAMES)
    history = fetch_price_history(symbols)
    indices = []
    for symbol in symbols:
        if symbol not in history:
            continue
        q = quote_from_history(symbol, history[symbol])
        indices.append(MarketIndex(
            symbol=symbol,
            name=INDEX_NAMES.get(symbol, symbol),
            value=q.price,
            change=q.change,
            change_percent=q.change_percent,
        ))
    return indices
