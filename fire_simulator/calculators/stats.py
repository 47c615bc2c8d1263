"""Summaries of simulated cycles for the reporting layer.

Nothing here feeds back into the simulation; these helpers turn the list of
cycles into plain dicts and DataFrames, and turn a caller-supplied DataFrame of
market data into ``HistoricalRecord``s.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from ..models import Cycle, HistoricalRecord

_REQUIRED_COLUMNS = ("date", "equities", "inflation")

FRAME_COLUMNS = [
    "cycle",
    "year",
    "date",
    "portfolio_start",
    "spending",
    "cumulative_inflation",
    "market_return",
    "inflation",
    "portfolio_end",
]


def records_from_frame(frame: pd.DataFrame) -> List[HistoricalRecord]:
    """Convert a market-data DataFrame into records, keeping row order.

    The frame needs ``date``, ``equities`` and ``inflation`` columns; a
    ``bonds`` column is optional and defaults to zero returns.
    """
    missing = [col for col in _REQUIRED_COLUMNS if col not in frame.columns]
    if missing:
        raise ValueError(f"market data is missing columns: {', '.join(missing)}")

    bonds = frame["bonds"] if "bonds" in frame.columns else pd.Series(0.0, index=frame.index)
    return [
        HistoricalRecord(
            date=date.item() if isinstance(date, np.generic) else date,
            equities=float(equities),
            inflation=float(inflation),
            bonds=float(bond),
        )
        for date, equities, inflation, bond in zip(
            frame["date"], frame["equities"], frame["inflation"], bonds
        )
    ]


def cycles_to_frame(cycles: Sequence[Cycle]) -> pd.DataFrame:
    """Long-form table with one row per (cycle, year)."""
    rows = [
        {
            "cycle": cycle_index,
            "year": year_index,
            "date": year.date,
            "portfolio_start": year.portfolio_start,
            "spending": year.spending,
            "cumulative_inflation": year.cumulative_inflation,
            "market_return": year.market_return,
            "inflation": year.inflation,
            "portfolio_end": year.portfolio_end,
        }
        for cycle_index, cycle in enumerate(cycles)
        for year_index, year in enumerate(cycle)
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def summarize(cycles: Sequence[Cycle]) -> Dict:
    """Aggregate statistics across cycles.

    Returns
    -------
    dict
        ``cycles`` (count), ``success_probability`` (share of cycles ending
        with a non-negative portfolio), ``failures`` (start dates of failed
        cycles), ``median_terminal``, ``percentiles`` (p10/p50/p90 of the
        end-of-year portfolio by year offset), ``average_spending`` by year
        offset and ``start_dates``.
    """
    if not cycles:
        return {
            "cycles": 0,
            "success_probability": 0.0,
            "failures": [],
            "median_terminal": 0.0,
            "percentiles": {"p10": [], "p50": [], "p90": []},
            "average_spending": [],
            "start_dates": [],
        }

    portfolios = np.vstack([[year.portfolio_end for year in cycle] for cycle in cycles]).astype(float)
    spending = np.vstack([[year.spending for year in cycle] for cycle in cycles]).astype(float)
    terminal = np.array([cycle.terminal_portfolio for cycle in cycles], dtype=float)

    return {
        "cycles": len(cycles),
        "success_probability": float(np.mean(terminal >= 0.0)),
        "failures": [cycle.start_date for cycle in cycles if cycle.failed],
        "median_terminal": float(np.median(terminal)),
        "percentiles": {
            "p10": np.percentile(portfolios, 10, axis=0).tolist(),
            "p50": np.percentile(portfolios, 50, axis=0).tolist(),
            "p90": np.percentile(portfolios, 90, axis=0).tolist(),
        },
        "average_spending": spending.mean(axis=0).tolist(),
        "start_dates": [cycle.start_date for cycle in cycles],
    }


__all__ = ["FRAME_COLUMNS", "records_from_frame", "cycles_to_frame", "summarize"]
