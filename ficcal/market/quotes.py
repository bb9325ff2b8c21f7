"""
Market data snapshot consumed by calibration: quotes, FX rates and fixings.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Dict, Mapping, Optional

from ficcal.errors import MissingMarketData

from .fx import FxMatrix


class MarketData:
    """Quotes by identifier, FX spot rates and historic index fixings as of one date."""

    def __init__(
        self,
        valuation_date: date,
        quotes: Mapping[str, float],
        fx_rates: Optional[FxMatrix] = None,
        time_series: Optional[Mapping[str, Mapping[date, float]]] = None,
    ):
        self.valuation_date = valuation_date
        self._quotes: Dict[str, float] = {}
        for quote_id, value in quotes.items():
            value = float(value)
            if not math.isfinite(value):
                raise ValueError(f"Quote {quote_id} is not finite: {value}")
            self._quotes[quote_id] = value
        self.fx_rates = fx_rates or FxMatrix()
        self.time_series: Dict[str, Dict[date, float]] = {
            name: dict(series) for name, series in (time_series or {}).items()
        }

    @property
    def quote_ids(self):
        return tuple(self._quotes)

    def quote(self, quote_id: str) -> float:
        if quote_id not in self._quotes:
            raise MissingMarketData(quote_id, f"valuation date {self.valuation_date}")
        return self._quotes[quote_id]

    def has_quote(self, quote_id: str) -> bool:
        return quote_id in self._quotes

    def fx_rate(self, base: str, counter: str) -> float:
        try:
            return self.fx_rates.fx_rate(base, counter)
        except ValueError as exc:
            raise MissingMarketData(f"{base}/{counter}", "FX rate") from exc

    def with_quote(self, quote_id: str, value: float) -> "MarketData":
        """Copy with one quote replaced, used for bump-and-recalibrate."""
        if quote_id not in self._quotes:
            raise MissingMarketData(quote_id)
        quotes = dict(self._quotes)
        quotes[quote_id] = value
        return MarketData(self.valuation_date, quotes, self.fx_rates, self.time_series)

    def __repr__(self) -> str:
        return f"MarketData({self.valuation_date}, {len(self._quotes)} quotes)"
