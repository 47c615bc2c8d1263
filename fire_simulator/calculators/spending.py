"""Spending policies.

Each policy computes one year's withdrawal for a cycle that is being built.
All of them share the signature

    policy(config, cycles, cycle_index, year_index) -> float

where ``cycles[cycle_index]`` is the in-progress cycle: years before
``year_index`` are complete, and year ``year_index`` has its portfolio start
value and cumulative inflation but no spending yet.

Floors and ceilings are expressed in retirement-start dollars and scaled by
the year's cumulative inflation.  A bound whose value is missing is simply not
applied; ``validate_configuration`` is responsible for rejecting such
configurations before a simulation starts.

Example
-------

>>> from fire_simulator.config import Configuration, SpendingSettings, SpendingPolicyName
>>> from fire_simulator.models import Cycle, YearState
>>> cfg = Configuration(2025, 2026, spending=SpendingSettings(
...     policy=SpendingPolicyName.VARIABLE, initial=40000, variable_spending_z_value=0.5))
>>> sim = [Cycle(years=[YearState(1000000), YearState(1100000, cumulative_inflation=1.0)])]
>>> round(calc_spending(cfg, sim, 0, 1), 2)
42000.0
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from ..config import (
    BoundType,
    Configuration,
    ConfigurationError,
    PercentOfPortfolioType,
    PortfolioBoundType,
    SpendingPolicyName,
)
from ..models import Cycle, YearState

SpendingPolicy = Callable[[Configuration, Optional[Sequence[Cycle]], int, int], float]


def apply_floor(spending: float, floor: Optional[float]) -> float:
    """Raise ``spending`` to ``floor``; ``None`` means no floor."""
    if floor is None:
        return spending
    return max(spending, floor)


def apply_ceiling(spending: float, ceiling: Optional[float]) -> float:
    """Lower ``spending`` to ``ceiling``; ``None`` means no ceiling."""
    if ceiling is None:
        return spending
    return min(spending, ceiling)


def _defined_value_bound(kind: Optional[BoundType], value: Optional[float], inflation: float) -> Optional[float]:
    if kind is not BoundType.DEFINED_VALUE or value is None:
        return None
    return value * inflation


def _portfolio_bound(
    kind: Optional[PortfolioBoundType],
    percentage: Optional[float],
    last_year: YearState,
    this_year: YearState,
) -> Optional[float]:
    if kind is None or percentage is None:
        return None
    if kind is PortfolioBoundType.PERCENTAGE_OF_PORTFOLIO:
        return last_year.portfolio_start * (percentage / 100) * this_year.inflation_factor
    if kind is PortfolioBoundType.PERCENTAGE_OF_PREVIOUS_YEAR:
        if last_year.spending is None:
            return None
        return last_year.spending * (percentage / 100)
    raise ConfigurationError(f"unrecognized percentage of portfolio bound type: {kind!r}")


def fixed_spending(config: Configuration, cycles: Optional[Sequence[Cycle]], cycle_index: int, year_index: int) -> float:
    """Constant real spending: the initial amount grown by cumulative inflation."""
    initial = config.spending.initial
    if year_index == 0:
        return initial
    this_year = cycles[cycle_index][year_index]
    return initial * this_year.inflation_factor


def variable_spending(config: Configuration, cycles: Optional[Sequence[Cycle]], cycle_index: int, year_index: int) -> float:
    """Spending adjusted by a fraction of the portfolio's real performance.

    The portfolio's value relative to the start of retirement, after removing
    inflation, is turned into an adjustment factor damped by the z-value:

        ratio      = start_j / (start_0 * inflation_j)
        adjustment = (ratio - 1) * z + 1
        spending   = adjustment * initial * inflation_j

    The result is then clamped by the optional ``definedValue`` floor and
    ceiling, floor first.
    """
    spending_cfg = config.spending
    if year_index == 0:
        return spending_cfg.initial

    cycle = cycles[cycle_index]
    first_year = cycle[0]
    this_year = cycle[year_index]
    inflation = this_year.inflation_factor

    z_value = spending_cfg.variable_spending_z_value
    portfolio_ratio = this_year.portfolio_start / (first_year.portfolio_start * inflation)
    adjustment = (portfolio_ratio - 1) * z_value + 1
    spending = adjustment * spending_cfg.initial * inflation

    spending = apply_floor(
        spending, _defined_value_bound(spending_cfg.floor, spending_cfg.floor_value, inflation)
    )
    spending = apply_ceiling(
        spending, _defined_value_bound(spending_cfg.ceiling, spending_cfg.ceiling_value, inflation)
    )
    return spending


def percent_of_portfolio(config: Configuration, cycles: Optional[Sequence[Cycle]], cycle_index: int, year_index: int) -> float:
    """Spend a fixed percentage of the portfolio's start-of-year value.

    With ``withFloorAndCeiling`` the amount is clamped against the previous
    year, either as a percentage of last year's portfolio (inflation adjusted)
    or as a percentage of last year's spending.
    """
    spending_cfg = config.spending
    cycle = cycles[cycle_index]
    this_year = cycle[year_index]
    spending = this_year.portfolio_start * (spending_cfg.percentage_of_portfolio_percentage / 100)

    if spending_cfg.percentage_of_portfolio_type is PercentOfPortfolioType.CONSTANT:
        return spending
    if year_index == 0:
        return spending

    last_year = cycle[year_index - 1]
    floor = _portfolio_bound(
        spending_cfg.percentage_of_portfolio_floor_type,
        spending_cfg.percentage_of_portfolio_floor_percentage,
        last_year,
        this_year,
    )
    ceiling = _portfolio_bound(
        spending_cfg.percentage_of_portfolio_ceiling_type,
        spending_cfg.percentage_of_portfolio_ceiling_percentage,
        last_year,
        this_year,
    )
    return apply_ceiling(apply_floor(spending, floor), ceiling)


SPENDING_POLICIES: Dict[SpendingPolicyName, SpendingPolicy] = {
    SpendingPolicyName.FIXED: fixed_spending,
    SpendingPolicyName.VARIABLE: variable_spending,
    SpendingPolicyName.PERCENT_OF_PORTFOLIO: percent_of_portfolio,
}


def get_spending_policy(name) -> SpendingPolicy:
    """Look up a policy by tag, accepting either the enum or its form value."""
    try:
        return SPENDING_POLICIES[SpendingPolicyName(name)]
    except (KeyError, ValueError):
        raise ConfigurationError(f"unrecognized spending policy: {name!r}") from None


def calc_spending(config: Configuration, cycles: Optional[Sequence[Cycle]], cycle_index: int, year_index: int) -> float:
    """Spending for ``cycles[cycle_index][year_index]`` under the configured policy."""
    policy = get_spending_policy(config.spending.policy)
    return policy(config, cycles, cycle_index, year_index)


__all__ = [
    "SpendingPolicy",
    "SPENDING_POLICIES",
    "apply_floor",
    "apply_ceiling",
    "fixed_spending",
    "variable_spending",
    "percent_of_portfolio",
    "get_spending_policy",
    "calc_spending",
]
