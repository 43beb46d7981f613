"""
Cash-flow components: one cost or benefit line item per instance.

A component is a row of a cost/benefit table. Its direction comes from
`kind`, never from the sign of `amount`.
"""
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from cashflow_model.errors import ConfigurationError, InvalidComponentError


class FlowKind(str, Enum):
    COST = 'cost'
    BENEFIT = 'benefit'


class FlowPattern(str, Enum):
    ONE_TIME = 'one_time'
    RECURRING = 'recurring'
    PER_UNIT = 'per_unit'


def _is_amount(value) -> bool:
    """Finite, non-negative real number (bools excluded)"""
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and bool(np.isfinite(value))
        and value >= 0
    )


def _is_period(value) -> bool:
    """Non-negative integer period index (bools excluded)"""
    return isinstance(value, numbers.Integral) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class CashFlowComponent:
    """
    A single typed cost or benefit item.

    Attributes:
        name: Label used in reports and error messages
        kind: COST or BENEFIT
        pattern: ONE_TIME, RECURRING or PER_UNIT
        amount: Non-negative magnitude in currency units (per unit for PER_UNIT)
        start_period: First period the item applies to
        units: Per-period unit series driving PER_UNIT magnitude
        horizon: Horizon the item was authored against, if any
    """

    name: str
    kind: FlowKind
    pattern: FlowPattern
    amount: float
    start_period: int = 0
    units: Optional[Tuple[float, ...]] = None
    horizon: Optional[int] = field(default=None)

    def __post_init__(self):
        if not isinstance(self.kind, FlowKind):
            raise InvalidComponentError(f"Unknown component kind: {self.kind!r}", component=self.name)
        if not isinstance(self.pattern, FlowPattern):
            raise InvalidComponentError(f"Unknown component pattern: {self.pattern!r}", component=self.name)
        if not _is_amount(self.amount):
            raise InvalidComponentError(
                "Amount must be a finite non-negative number; use kind to express direction",
                component=self.name,
                amount=self.amount
            )
        if not _is_period(self.start_period):
            raise InvalidComponentError(
                "Start period must be a non-negative integer",
                component=self.name,
                start_period=self.start_period
            )
        if self.horizon is not None and not (_is_period(self.horizon) and self.horizon > 0):
            raise InvalidComponentError(
                "Horizon must be a positive integer",
                component=self.name,
                horizon=self.horizon
            )
        if self.units is not None:
            units = tuple(self.units)
            invalid = [i for i, u in enumerate(units) if not _is_amount(u)]
            if invalid:
                raise InvalidComponentError(
                    "Unit series must be finite and non-negative",
                    component=self.name,
                    period=invalid[0]
                )
            # frozen dataclass: normalize through object.__setattr__
            object.__setattr__(self, 'units', tuple(float(u) for u in units))

    @property
    def is_cost(self) -> bool:
        return self.kind is FlowKind.COST

    @property
    def implied_horizon(self) -> Optional[int]:
        """Horizon this component assumes: declared, else the unit series length"""
        if self.horizon is not None:
            return self.horizon
        if self.pattern is FlowPattern.PER_UNIT and self.units is not None:
            return len(self.units)
        return None

    def _resolve_units(self, units: Optional[Sequence[float]]) -> Sequence[float]:
        series = units if units is not None else self.units
        if series is None:
            raise ConfigurationError(
                "PER_UNIT component requires a unit series",
                component=self.name
            )
        if units is not None:
            invalid = [i for i, u in enumerate(units) if not _is_amount(u)]
            if invalid:
                raise InvalidComponentError(
                    "Unit series must be finite and non-negative",
                    component=self.name,
                    period=invalid[0]
                )
        return series

    def amount_at(self, period: int, units: Optional[Sequence[float]] = None) -> float:
        """
        Contribution of this component in a single period.

        Args:
            period: Period index
            units: Optional unit series overriding the constructed one (PER_UNIT only)

        Returns:
            Non-negative amount for the period
        """
        if self.pattern is FlowPattern.ONE_TIME:
            return float(self.amount) if period == self.start_period else 0.0

        if self.pattern is FlowPattern.RECURRING:
            return float(self.amount) if period >= self.start_period else 0.0

        series = self._resolve_units(units)
        if period < self.start_period or period < 0 or period >= len(series):
            return 0.0
        return float(self.amount) * float(series[period])

    def series(self, horizon: int, units: Optional[Sequence[float]] = None) -> np.ndarray:
        """
        Per-period amounts over 0..horizon-1 as a float array.

        Raises:
            ConfigurationError: PER_UNIT without a unit series, even when inert
        """
        values = np.zeros(horizon, dtype=float)
        if self.pattern is FlowPattern.PER_UNIT:
            resolved = self._resolve_units(units)
        if self.start_period >= horizon:
            # Starts after the horizon: inert
            return values

        if self.pattern is FlowPattern.ONE_TIME:
            values[self.start_period] = self.amount
        elif self.pattern is FlowPattern.RECURRING:
            values[self.start_period:] = self.amount
        else:
            series = np.asarray(resolved, dtype=float)[:horizon]
            values[:len(series)] = series * self.amount
            values[:self.start_period] = 0.0
        return values


def one_time_cost(name: str, amount: float, start_period: int = 0) -> CashFlowComponent:
    return CashFlowComponent(name, FlowKind.COST, FlowPattern.ONE_TIME, amount, start_period)


def recurring_cost(name: str, amount: float, start_period: int = 0) -> CashFlowComponent:
    return CashFlowComponent(name, FlowKind.COST, FlowPattern.RECURRING, amount, start_period)


def per_unit_cost(name: str, amount: float, units: Sequence[float], start_period: int = 0) -> CashFlowComponent:
    return CashFlowComponent(name, FlowKind.COST, FlowPattern.PER_UNIT, amount, start_period, units=units)


def one_time_benefit(name: str, amount: float, start_period: int = 0) -> CashFlowComponent:
    return CashFlowComponent(name, FlowKind.BENEFIT, FlowPattern.ONE_TIME, amount, start_period)


def recurring_benefit(name: str, amount: float, start_period: int = 0) -> CashFlowComponent:
    return CashFlowComponent(name, FlowKind.BENEFIT, FlowPattern.RECURRING, amount, start_period)


def per_unit_benefit(name: str, amount: float, units: Sequence[float], start_period: int = 0) -> CashFlowComponent:
    return CashFlowComponent(name, FlowKind.BENEFIT, FlowPattern.PER_UNIT, amount, start_period, units=units)
