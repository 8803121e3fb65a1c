"""
Portfolio store — holdings per owner in a single JSON file.

File layout:
  { "owners": { "<owner>": [ {symbol, quantity, purchase_price}, ... ] } }

Rows are keyed by (owner, symbol). Adding a symbol the owner already holds
increments its quantity instead of creating a second row; the original
purchase price is kept.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from state.models import Holding


class PortfolioStoreError(RuntimeError):
    """Reading or writing the store file failed."""


class PortfolioStore:
    def __init__(self, path: str | os.PathLike | None = None):
        self.path = Path(path or os.environ.get("CONSULTANT_STORE_PATH", "portfolio.json"))

    # ── File I/O ─────────────────────────────────────────────────────────────

    def _read(self) -> dict[str, list[dict]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PortfolioStoreError(f"Could not read portfolio store {self.path}: {e}") from e
        return data.get("owners", {})

    def _write(self, owners: dict[str, list[dict]]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp, "w") as f:
                json.dump({"owners": owners}, f, indent=2)
            tmp.replace(self.path)
        except OSError as e:
            raise PortfolioStoreError(f"Could not write portfolio store {self.path}: {e}") from e

    # ── Public API ───────────────────────────────────────────────────────────

    def owners(self) -> list[str]:
        return list(self._read())

    def load(self, owner: str) -> list[Holding]:
        """Owner's holdings in the order they were first added."""
        return [Holding(**row) for row in self._read().get(owner, [])]

    def add(self, owner: str, holding: Holding, default_price: Optional[float] = None) -> Holding:
        """
        Upsert one holding.

        Args:
            owner:         portfolio owner id
            holding:       symbol + quantity to add
            default_price: purchase price for a new row when the holding has none
                           (usually the current quote)

        Returns:
            the stored row after the upsert
        """
        owners = self._read()
        rows = owners.setdefault(owner, [])

        for i, row in enumerate(rows):
            if row["symbol"] == holding.symbol:
                updated = Holding(
                    symbol=holding.symbol,
                    quantity=row["quantity"] + holding.quantity,
                    purchase_price=row.get("purchase_price"),
                )
                rows[i] = updated.model_dump()
                break
        else:
            updated = holding
            if updated.purchase_price is None and default_price is not None:
                updated = holding.model_copy(update={"purchase_price": default_price})
            rows.append(updated.model_dump())

        self._write(owners)
        return updated

    def remove(self, owner: str, symbol: str) -> bool:
        """Delete the owner's row for a symbol. Returns False if there was none."""
        owners = self._read()
        rows = owners.get(owner, [])
        symbol = symbol.strip().upper()
        kept = [row for row in rows if row["symbol"] != symbol]
        if len(kept) == len(rows):
            return False
        owners[owner] = kept
        self._write(owners)
        return True

    def clear(self, owner: str) -> None:
        owners = self._read()
        if owners.pop(owner, None) is not None:
            self._write(owners)
