"""Historical-cycle retirement simulator.

Given a chronologically ordered sequence of market records and a
configuration, ``run_simulation`` produces one simulated retirement per
possible start year, applying the selected spending policy every year.
"""

from .calculators.cycles import run_simulation
from .calculators.spending import calc_spending
from .config import Configuration, ConfigurationError, SpendingSettings, validate_configuration
from .models import Cycle, HistoricalRecord, YearState

__all__ = [
    "run_simulation",
    "calc_spending",
    "Configuration",
    "ConfigurationError",
    "SpendingSettings",
    "validate_configuration",
    "Cycle",
    "HistoricalRecord",
    "YearState",
]
