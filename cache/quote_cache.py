"""
Quote snapshot cache — one JSON file per feed.

Used as fallback when a live quote fetch fails.
Feed: "stocks"

Cache files: .cache/stocks_quotes.json
Each file: { "fetched_at": "2026-02-27T10:30:00", "quotes": [...] }
"""
from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path


def cache_dir() -> Path:
    return Path(os.environ.get("CONSULTANT_CACHE_DIR", ".cache"))


def _path(feed: str) -> Path:
    directory = cache_dir()
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"{feed}_quotes.json"


def save(feed: str, quote_dicts: list[dict]) -> None:
    """Persist a successful fetch to disk."""
    data = {
        "fetched_at": datetime.now().isoformat(timespec="seconds"),
        "quotes": quote_dicts,
    }
    with open(_path(feed), "w") as f:
        json.dump(data, f, indent=2, default=str)


def load(feed: str) -> tuple[list[dict], str] | None:
    """
    Load the last cached snapshot for a feed.

    Returns:
        (quote_dicts, fetched_at_str)  if cache exists
        None                           if no cache file or it can't be parsed
    """
    p = _path(feed)
    if not p.exists():
        return None
    try:
        with open(p) as f:
            data = json.load(f)
        return data["quotes"], data["fetched_at"]
    except (OSError, ValueError, KeyError) as e:
        print(f"  [WARN] quote cache {p} unreadable: {e}")
        return None
