"""Simulation configuration.

The form collected by the front end is handed over as a plain nested dict
using the same camelCase keys as the web form:

>>> form = {
...     "retirementStartYear": 2025,
...     "retirementEndYear": 2054,
...     "portfolio": {"initial": 1000000},
...     "spending": {"method": "variableSpending", "initial": 40000,
...                  "variableSpendingZValue": 0.5},
... }
>>> cfg = Configuration.from_form(form)
>>> cfg.window_length
30

``from_form`` only parses: unknown tags in the fields the chosen policy reads
are rejected, but missing values are left as ``None``.
``validate_configuration`` checks that every declared policy or bound has the
values it needs and is run by the simulation engine before any cycle is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Type, TypeVar


class ConfigurationError(ValueError):
    """Raised when a configuration cannot drive a simulation."""


class SpendingPolicyName(str, Enum):
    FIXED = "inflationAdjusted"
    VARIABLE = "variableSpending"
    PERCENT_OF_PORTFOLIO = "percentOfPortfolio"


class BoundType(str, Enum):
    DEFINED_VALUE = "definedValue"


class PercentOfPortfolioType(str, Enum):
    CONSTANT = "constant"
    WITH_FLOOR_AND_CEILING = "withFloorAndCeiling"


class PortfolioBoundType(str, Enum):
    PERCENTAGE_OF_PORTFOLIO = "percentageOfPortfolio"
    PERCENTAGE_OF_PREVIOUS_YEAR = "percentageOfPreviousYear"


_E = TypeVar("_E", bound=Enum)

# tags the form uses for "no bound"
_NO_BOUND = {None, "", "none"}


def _parse_tag(enum_cls: Type[_E], value, label: str, optional: bool = True) -> Optional[_E]:
    if optional and value in _NO_BOUND:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ConfigurationError(f"unrecognized {label}: {value!r}") from None


def _opt_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"expected a number, got {value!r}") from None


@dataclass(frozen=True)
class SpendingSettings:
    """Spending policy selection and its variant-specific parameters.

    Every optional field is ``None`` when the form left it out; policies read
    ``None`` as "no clamp" for floors and ceilings.
    """

    policy: SpendingPolicyName = SpendingPolicyName.FIXED
    initial: float = 0.0
    variable_spending_z_value: Optional[float] = None
    floor: Optional[BoundType] = None
    floor_value: Optional[float] = None
    ceiling: Optional[BoundType] = None
    ceiling_value: Optional[float] = None
    percentage_of_portfolio_percentage: Optional[float] = None
    percentage_of_portfolio_type: PercentOfPortfolioType = PercentOfPortfolioType.CONSTANT
    percentage_of_portfolio_floor_type: Optional[PortfolioBoundType] = None
    percentage_of_portfolio_floor_percentage: Optional[float] = None
    percentage_of_portfolio_ceiling_type: Optional[PortfolioBoundType] = None
    percentage_of_portfolio_ceiling_percentage: Optional[float] = None

    @classmethod
    def from_form(cls, spending: Dict) -> "SpendingSettings":
        """Parse the ``spending`` section of the form.

        The policy tag is read first.  Tags belonging to other policies are
        not parsed, so stale or null values left in the form by the front end
        are ignored; a null ``method`` or ``percentageOfPortfolioType`` takes
        its default.
        """
        spending = spending or {}
        policy = _parse_tag(
            SpendingPolicyName,
            spending.get("method") or SpendingPolicyName.FIXED.value,
            "spending policy",
            optional=False,
        )
        settings = dict(
            policy=policy,
            initial=_opt_float(spending.get("initial")) or 0.0,
        )
        if policy is SpendingPolicyName.VARIABLE:
            settings.update(
                variable_spending_z_value=_opt_float(spending.get("variableSpendingZValue")),
                floor=_parse_tag(BoundType, spending.get("floor"), "floor type"),
                floor_value=_opt_float(spending.get("floorValue")),
                ceiling=_parse_tag(BoundType, spending.get("ceiling"), "ceiling type"),
                ceiling_value=_opt_float(spending.get("ceilingValue")),
            )
        elif policy is SpendingPolicyName.PERCENT_OF_PORTFOLIO:
            settings.update(
                percentage_of_portfolio_percentage=_opt_float(spending.get("percentageOfPortfolioPercentage")),
                percentage_of_portfolio_type=_parse_tag(
                    PercentOfPortfolioType,
                    spending.get("percentageOfPortfolioType") or PercentOfPortfolioType.CONSTANT.value,
                    "percentage of portfolio type",
                    optional=False,
                ),
                percentage_of_portfolio_floor_type=_parse_tag(
                    PortfolioBoundType,
                    spending.get("percentageOfPortfolioFloorType"),
                    "percentage of portfolio floor type",
                ),
                percentage_of_portfolio_floor_percentage=_opt_float(
                    spending.get("percentageOfPortfolioFloorPercentage")
                ),
                percentage_of_portfolio_ceiling_type=_parse_tag(
                    PortfolioBoundType,
                    spending.get("percentageOfPortfolioCeilingType"),
                    "percentage of portfolio ceiling type",
                ),
                percentage_of_portfolio_ceiling_percentage=_opt_float(
                    spending.get("percentageOfPortfolioCeilingPercentage")
                ),
            )
        return cls(**settings)


@dataclass(frozen=True)
class Configuration:
    """User-supplied simulation parameters.  Read-only to the engine."""

    retirement_start_year: int
    retirement_end_year: int
    initial_portfolio: float = 0.0
    spending: SpendingSettings = field(default_factory=SpendingSettings)
    equity_allocation: float = 1.0  # fraction held in equities, rest in bonds
    fees: float = 0.0  # annual percentage of the portfolio

    @property
    def window_length(self) -> int:
        return self.retirement_end_year - self.retirement_start_year + 1

    @classmethod
    def from_form(cls, form: Dict) -> "Configuration":
        """Build a configuration from the form dict.

        Parameters
        ----------
        form : dict
            Nested form values.  ``portfolio.equities`` and ``portfolio.fees``
            are percentages (defaults 100 and 0).

        Returns
        -------
        Configuration
            The parsed, not yet validated, configuration.
        """
        portfolio = form.get("portfolio", {}) or {}
        try:
            start = int(form["retirementStartYear"])
            end = int(form["retirementEndYear"])
        except KeyError as exc:
            raise ConfigurationError(f"missing {exc.args[0]}") from None
        equities = _opt_float(portfolio.get("equities"))
        fees = _opt_float(portfolio.get("fees"))
        return cls(
            retirement_start_year=start,
            retirement_end_year=end,
            initial_portfolio=_opt_float(portfolio.get("initial")) or 0.0,
            spending=SpendingSettings.from_form(form.get("spending", {})),
            equity_allocation=1.0 if equities is None else equities / 100.0,
            fees=0.0 if fees is None else fees,
        )


def validate_configuration(config: Configuration) -> None:
    """Raise ``ConfigurationError`` if ``config`` cannot drive a simulation."""
    if config.window_length < 1:
        raise ConfigurationError("retirementEndYear must not be before retirementStartYear")
    if not 0.0 <= config.equity_allocation <= 1.0:
        raise ConfigurationError("equity allocation must be between 0 and 100 percent")

    spending = config.spending
    if not isinstance(spending.policy, SpendingPolicyName):
        raise ConfigurationError(f"unrecognized spending policy: {spending.policy!r}")
    if spending.initial < 0:
        raise ConfigurationError("initial spending cannot be negative")
    if config.initial_portfolio < 0:
        raise ConfigurationError("initial portfolio cannot be negative")

    if spending.policy is SpendingPolicyName.VARIABLE:
        # later years are measured against the starting portfolio
        if config.initial_portfolio <= 0:
            raise ConfigurationError("variable spending requires a positive initial portfolio")
        if spending.variable_spending_z_value is None:
            raise ConfigurationError("variable spending requires variableSpendingZValue")
        if spending.floor is BoundType.DEFINED_VALUE and spending.floor_value is None:
            raise ConfigurationError("floor type definedValue requires floorValue")
        if spending.ceiling is BoundType.DEFINED_VALUE and spending.ceiling_value is None:
            raise ConfigurationError("ceiling type definedValue requires ceilingValue")

    if spending.policy is SpendingPolicyName.PERCENT_OF_PORTFOLIO:
        if spending.percentage_of_portfolio_percentage is None:
            raise ConfigurationError("percent of portfolio requires percentageOfPortfolioPercentage")
        if spending.percentage_of_portfolio_type is PercentOfPortfolioType.WITH_FLOOR_AND_CEILING:
            if (
                spending.percentage_of_portfolio_floor_type is not None
                and spending.percentage_of_portfolio_floor_percentage is None
            ):
                raise ConfigurationError(
                    "percentageOfPortfolioFloorType requires percentageOfPortfolioFloorPercentage"
                )
            if (
                spending.percentage_of_portfolio_ceiling_type is not None
                and spending.percentage_of_portfolio_ceiling_percentage is None
            ):
                raise ConfigurationError(
                    "percentageOfPortfolioCeilingType requires percentageOfPortfolioCeilingPercentage"
                )


__all__ = [
    "ConfigurationError",
    "SpendingPolicyName",
    "BoundType",
    "PercentOfPortfolioType",
    "PortfolioBoundType",
    "SpendingSettings",
    "Configuration",
    "validate_configuration",
]
