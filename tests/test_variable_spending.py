"""Tests for the variable spending policy."""

import pytest

from fire_simulator.calculators import spending
from fire_simulator.config import Configuration
from fire_simulator.models import Cycle, YearState


def _build_config(**spending_form) -> Configuration:
    form = {"method": "variableSpending", "initial": 40000, "variableSpendingZValue": 0.5}
    form.update(spending_form)
    return Configuration.from_form({
        "retirementStartYear": 2025,
        "retirementEndYear": 2054,
        "spending": form,
    })


def _sim(*years: YearState) -> list:
    return [Cycle(years=list(years))]


def test_first_year_is_initial_spending():
    """Year 0 spends the initial amount without looking at the cycle."""
    cfg = _build_config()
    assert spending.variable_spending(cfg, None, 0, 0) == 40000


def test_portfolio_drop_lowers_spending():
    cfg = _build_config()
    sim = _sim(YearState(1000000), YearState(900000, cumulative_inflation=1.05))
    adjustment = ((900000 / (1000000 * 1.05) - 1) * 0.5) + 1
    assert spending.variable_spending(cfg, sim, 0, 1) == pytest.approx(adjustment * 40000 * 1.05)


def test_portfolio_drop_hits_floor():
    cfg = _build_config(floor="definedValue", floorValue=40000)
    sim = _sim(YearState(1000000), YearState(900000, cumulative_inflation=1.05))
    assert spending.variable_spending(cfg, sim, 0, 1) == pytest.approx(40000 * 1.05)


def test_missing_floor_value_means_no_floor():
    cfg = _build_config(floor="definedValue")
    sim = _sim(YearState(1000000), YearState(900000, cumulative_inflation=1.05))
    adjustment = ((900000 / (1000000 * 1.05) - 1) * 0.5) + 1
    assert spending.variable_spending(cfg, sim, 0, 1) == pytest.approx(adjustment * 40000 * 1.05)


def test_back_below_ceiling_is_measured_from_retirement_start():
    """A boom year in between does not change the anchor of the adjustment."""
    cfg = _build_config(ceiling="definedValue", ceilingValue=60000)
    sim = _sim(
        YearState(1000000),
        YearState(3000000),
        YearState(1000000, cumulative_inflation=1.05),
    )
    adjustment = ((1000000 / (1000000 * 1.05) - 1) * 0.5) + 1
    assert spending.variable_spending(cfg, sim, 0, 2) == pytest.approx(adjustment * 40000 * 1.05)


def test_missing_ceiling_value_means_no_ceiling():
    cfg = _build_config(ceiling="definedValue")
    sim = _sim(YearState(1000000), YearState(2000000, cumulative_inflation=1.05))
    adjustment = ((2000000 / (1000000 * 1.05) - 1) * 0.5) + 1
    assert spending.variable_spending(cfg, sim, 0, 1) == pytest.approx(adjustment * 40000 * 1.05)


def test_portfolio_rise_raises_spending():
    cfg = _build_config()
    sim = _sim(YearState(1000000), YearState(1100000, cumulative_inflation=1))
    assert spending.variable_spending(cfg, sim, 0, 1) == pytest.approx(42000)


def test_portfolio_rise_above_floor():
    cfg = _build_config(floor="definedValue", floorValue=40000)
    sim = _sim(
        YearState(1000000),
        YearState(900000),
        YearState(1100000, cumulative_inflation=1),
    )
    assert spending.variable_spending(cfg, sim, 0, 2) == pytest.approx(42000)


def test_portfolio_rise_hits_ceiling():
    cfg = _build_config(ceiling="definedValue", ceilingValue=60000)
    sim = _sim(YearState(1000000), YearState(3000000, cumulative_inflation=1.05))
    assert spending.variable_spending(cfg, sim, 0, 1) == pytest.approx(60000 * 1.05)


def test_missing_cumulative_inflation_defaults_to_one():
    cfg = _build_config()
    sim = _sim(YearState(1000000), YearState(1100000))
    assert spending.variable_spending(cfg, sim, 0, 1) == pytest.approx(42000)


@pytest.mark.parametrize("z_value", [0.0, 0.25, 0.5, 1.0])
def test_first_year_ignores_z_value(z_value):
    cfg = _build_config(variableSpendingZValue=z_value)
    sim = _sim(YearState(1000000))
    assert spending.variable_spending(cfg, sim, 0, 0) == 40000


def test_higher_portfolio_never_lowers_spending():
    cfg = _build_config()
    previous = None
    for start in range(500000, 2000001, 100000):
        sim = _sim(YearState(1000000), YearState(start, cumulative_inflation=1.03))
        amount = spending.variable_spending(cfg, sim, 0, 1)
        if previous is not None:
            assert amount >= previous
        previous = amount
