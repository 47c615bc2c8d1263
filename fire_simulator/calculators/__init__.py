"""Core calculators for the historical cycle simulator.

* ``spending`` – the spending policies (fixed real, variable and percent of
  portfolio) plus the shared floor and ceiling helpers.
* ``cycles`` – the rolling-window engine that builds one cycle per start year.
* ``stats`` – success rate and percentile summaries and the DataFrame adapters
  used by the reporting layer.
"""

from . import spending, cycles, stats  # noqa: F401

__all__ = ["spending", "cycles", "stats"]
