"""Rolling-window cycle engine.

Every full-length window of the historical dataset becomes one simulated
retirement ("cycle").  Within a cycle the years are built in order because
each year's portfolio and inflation state follow from the previous year:

    start_j      = (start_{j-1} - spending_{j-1}) * (1 + return_{j-1})
    inflation_j  = inflation_{j-1} * (1 + cpi_{j-1})

Year 0 starts from the configured initial portfolio with an inflation factor
of 1.  A dataset shorter than one window yields no cycles.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from ..config import Configuration, validate_configuration
from ..models import Cycle, HistoricalRecord, YearState
from .spending import calc_spending

logger = logging.getLogger(__name__)


def cycle_count(window_length: int, dataset_length: int) -> int:
    """Number of full windows of ``window_length`` that fit in the dataset."""
    return max(0, dataset_length - window_length + 1)


def _first_year(config: Configuration, record: HistoricalRecord) -> YearState:
    return YearState(
        portfolio_start=config.initial_portfolio,
        cumulative_inflation=1.0,
        date=record.date,
        market_return=record.period_return(config.equity_allocation, config.fees),
        inflation=record.inflation,
    )


def _next_year(config: Configuration, last_year: YearState, record: HistoricalRecord) -> YearState:
    return YearState(
        portfolio_start=last_year.portfolio_end,
        cumulative_inflation=last_year.cumulative_inflation * (1.0 + last_year.inflation),
        date=record.date,
        market_return=record.period_return(config.equity_allocation, config.fees),
        inflation=record.inflation,
    )


def _build_cycle(
    config: Configuration,
    window: Sequence[HistoricalRecord],
    cycles: List[Cycle],
    start_index: int,
) -> Cycle:
    cycle_index = len(cycles)
    years: List[YearState] = []
    cycles.append(Cycle(start_index=start_index, years=years))
    for year_index, record in enumerate(window):
        if year_index == 0:
            year = _first_year(config, record)
        else:
            year = _next_year(config, years[year_index - 1], record)
        years.append(year)

        spending = calc_spending(config, cycles, cycle_index, year_index)
        years[year_index] = replace(
            year,
            spending=spending,
            portfolio_end=(year.portfolio_start - spending) * (1.0 + year.market_return),
        )

    cycle = Cycle(start_index=start_index, years=tuple(years))
    cycles[cycle_index] = cycle
    return cycle


def run_simulation(config: Configuration, dataset: Sequence[HistoricalRecord]) -> List[Cycle]:
    """Simulate one cycle per valid start offset of ``dataset``.

    Parameters
    ----------
    config : Configuration
        Validated before any cycle is built; an invalid configuration raises
        ``ConfigurationError`` and no simulation work is done.
    dataset : sequence of HistoricalRecord
        Chronologically ordered market data.

    Returns
    -------
    list of Cycle
        Ordered by ascending start offset.  Empty when the dataset is shorter
        than the retirement window.
    """
    validate_configuration(config)

    window_length = config.window_length
    n_cycles = cycle_count(window_length, len(dataset))
    if n_cycles == 0:
        logger.info(
            "Dataset has %d periods, fewer than the %d-year retirement window; no cycles simulated.",
            len(dataset),
            window_length,
        )
        return []

    logger.debug(
        "Simulating %d cycles of %d years with %s spending",
        n_cycles,
        window_length,
        config.spending.policy.value,
    )
    cycles: List[Cycle] = []
    for start in range(n_cycles):
        _build_cycle(config, dataset[start:start + window_length], cycles, start)
    return cycles


__all__ = ["cycle_count", "run_simulation"]
