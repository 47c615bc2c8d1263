"""Records flowing into and out of the cycle engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence, Union

Period = Union[int, float, str]


@dataclass(frozen=True)
class HistoricalRecord:
    """One period of market data.

    Returns and inflation are decimal fractions (``0.07`` for 7 %).
    """

    date: Period
    equities: float
    inflation: float
    bonds: float = 0.0

    def period_return(self, equity_weight: float = 1.0, fees: float = 0.0) -> float:
        """Blended portfolio return for the period, net of ``fees`` (a percentage)."""
        blended = equity_weight * self.equities + (1.0 - equity_weight) * self.bonds
        return blended - fees / 100.0


@dataclass(frozen=True)
class YearState:
    """Simulation state for one year of a cycle.

    ``spending`` stays ``None`` until the spending policy has run for the
    year.  A missing ``cumulative_inflation`` is read as 1.  The engine
    writes a completed year with ``dataclasses.replace``; instances are never
    modified in place.
    """

    portfolio_start: float
    spending: Optional[float] = None
    cumulative_inflation: Optional[float] = None
    date: Optional[Period] = None
    market_return: Optional[float] = None
    inflation: Optional[float] = None
    portfolio_end: Optional[float] = None

    @property
    def inflation_factor(self) -> float:
        return 1.0 if self.cumulative_inflation is None else self.cumulative_inflation


@dataclass(frozen=True)
class Cycle:
    """One simulated retirement starting at ``start_index`` of the dataset.

    While the engine builds a cycle ``years`` is a list that grows one year at
    a time; a completed cycle holds a tuple.
    """

    start_index: int = 0
    years: Sequence[YearState] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.years)

    def __getitem__(self, year_index: int) -> YearState:
        return self.years[year_index]

    def __iter__(self) -> Iterator[YearState]:
        return iter(self.years)

    @property
    def start_date(self) -> Optional[Period]:
        return self.years[0].date if self.years else None

    @property
    def terminal_portfolio(self) -> float:
        if not self.years:
            return 0.0
        last = self.years[-1]
        return last.portfolio_start if last.portfolio_end is None else last.portfolio_end

    @property
    def failed(self) -> bool:
        return self.terminal_portfolio < 0.0


__all__ = ["HistoricalRecord", "YearState", "Cycle", "Period"]
