"""
Currency amounts and FX rates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple


@dataclass(frozen=True)
class CurrencyAmount:
    """An amount in a single currency."""

    currency: str
    amount: float

    def plus(self, other: "CurrencyAmount") -> "CurrencyAmount":
        if other.currency != self.currency:
            raise ValueError(f"Cannot add {other.currency} to {self.currency}")
        return CurrencyAmount(self.currency, self.amount + other.amount)

    def multiplied_by(self, factor: float) -> "CurrencyAmount":
        return CurrencyAmount(self.currency, self.amount * factor)

    def converted_to(self, currency: str, fx: "FxMatrix") -> "CurrencyAmount":
        if currency == self.currency:
            return self
        return CurrencyAmount(currency, self.amount * fx.fx_rate(self.currency, currency))


class MultiCurrencyAmount:
    """Amounts in several currencies, kept separate until converted."""

    def __init__(self, amounts: Mapping[str, float] | None = None):
        self._amounts: Dict[str, float] = dict(amounts or {})

    @classmethod
    def of(cls, amounts: Iterable[CurrencyAmount]) -> "MultiCurrencyAmount":
        totals: Dict[str, float] = {}
        for item in amounts:
            totals[item.currency] = totals.get(item.currency, 0.0) + item.amount
        return cls(totals)

    @property
    def currencies(self) -> Tuple[str, ...]:
        return tuple(sorted(self._amounts))

    def get_amount(self, currency: str) -> CurrencyAmount:
        return CurrencyAmount(currency, self._amounts.get(currency, 0.0))

    def plus(self, other: "MultiCurrencyAmount | CurrencyAmount") -> "MultiCurrencyAmount":
        totals = dict(self._amounts)
        items = [other] if isinstance(other, CurrencyAmount) else \
            [other.get_amount(c) for c in other.currencies]
        for item in items:
            totals[item.currency] = totals.get(item.currency, 0.0) + item.amount
        return MultiCurrencyAmount(totals)

    def converted_to(self, currency: str, fx: "FxMatrix") -> CurrencyAmount:
        total = 0.0
        for ccy, amount in self._amounts.items():
            total += amount * fx.fx_rate(ccy, currency)
        return CurrencyAmount(currency, total)

    def __repr__(self) -> str:
        body = ", ".join(f"{c} {a:.2f}" for c, a in sorted(self._amounts.items()))
        return f"MultiCurrencyAmount({body})"


class FxMatrix:
    """Spot FX rates keyed by currency pair, quoted as counter per unit of base.

    Rates are looked up directly, inverted, or crossed through a single
    intermediate currency.
    """

    def __init__(self, rates: Mapping[Tuple[str, str], float] | None = None):
        self._rates: Dict[Tuple[str, str], float] = {}
        for (base, counter), rate in (rates or {}).items():
            if rate <= 0:
                raise ValueError(f"FX rate {base}/{counter} must be positive, got {rate}")
            self._rates[(base.upper(), counter.upper())] = float(rate)

    @classmethod
    def parse(cls, quotes: Mapping[str, float]) -> "FxMatrix":
        """Build from pair strings such as 'EUR/USD'."""
        rates = {}
        for pair, rate in quotes.items():
            base, _, counter = pair.partition("/")
            if not counter:
                raise ValueError(f"FX pair must look like 'EUR/USD', got {pair!r}")
            rates[(base, counter)] = rate
        return cls(rates)

    @property
    def pairs(self) -> Tuple[Tuple[str, str], ...]:
        return tuple(self._rates)

    def _direct(self, base: str, counter: str):
        if (base, counter) in self._rates:
            return self._rates[(base, counter)]
        if (counter, base) in self._rates:
            return 1.0 / self._rates[(counter, base)]
        return None

    def fx_rate(self, base: str, counter: str) -> float:
        """Units of counter currency for one unit of base currency."""
        if base == counter:
            return 1.0
        rate = self._direct(base, counter)
        if rate is not None:
            return rate
        currencies = {c for pair in self._rates for c in pair}
        for via in sorted(currencies - {base, counter}):
            first = self._direct(base, via)
            second = self._direct(via, counter)
            if first is not None and second is not None:
                return first * second
        raise ValueError(f"No FX rate available for {base}/{counter}")

    def merged_with(self, other: "FxMatrix") -> "FxMatrix":
        combined = dict(self._rates)
        combined.update(other._rates)
        return FxMatrix(combined)

    def __repr__(self) -> str:
        return f"FxMatrix({self._rates})"
