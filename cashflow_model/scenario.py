"""
Scenario: one architectural option expressed as a bundle of cash-flow components
"""
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from utils.logger import setup_logger
from cashflow_model.components import CashFlowComponent, FlowKind
from cashflow_model.errors import (
    ConfigurationError,
    DivisionByZeroError,
    HorizonMismatchError,
)
from cashflow_model.timeline import PeriodTimeline

logger = setup_logger(__name__)

# Returned by breakeven_period() when cumulative benefit never catches up
NO_BREAKEVEN = None


class Scenario:
    """Named collection of cost/benefit components over a fixed horizon"""

    def __init__(self, name: str, horizon: int, components: Optional[Iterable[CashFlowComponent]] = None):
        self.name = name
        self.timeline = PeriodTimeline(horizon)
        self._components: List[CashFlowComponent] = []
        self._cache: Dict[str, np.ndarray] = {}

        for component in components or []:
            self.add_component(component)

    def __repr__(self) -> str:
        return f"Scenario(name={self.name!r}, horizon={self.horizon}, components={len(self._components)})"

    @property
    def horizon(self) -> int:
        return self.timeline.horizon

    @property
    def components(self) -> List[CashFlowComponent]:
        return list(self._components)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_component(self, component: CashFlowComponent) -> 'Scenario':
        """
        Append a component and invalidate cached series.

        Raises:
            HorizonMismatchError: component assumes a longer horizon than this scenario
        """
        implied = component.implied_horizon
        if implied is not None and implied > self.horizon:
            raise HorizonMismatchError(
                f"Component assumes horizon {implied} but scenario horizon is {self.horizon}",
                scenario=self.name,
                component=component.name
            )

        self._components.append(component)
        self.invalidate()
        logger.debug(f"Added {component.kind.value} '{component.name}' to scenario '{self.name}'")
        return self

    def remove_component(self, name: str) -> CashFlowComponent:
        """Remove the first component with the given name and invalidate cached series"""
        for i, component in enumerate(self._components):
            if component.name == name:
                del self._components[i]
                self.invalidate()
                logger.debug(f"Removed '{name}' from scenario '{self.name}'")
                return component
        raise ConfigurationError("No such component", scenario=self.name, component=name)

    def invalidate(self):
        self._cache.clear()

    # ------------------------------------------------------------------
    # Derived series
    # ------------------------------------------------------------------

    def _sum_kind(self, kind: FlowKind) -> np.ndarray:
        total = np.zeros(self.horizon, dtype=float)
        for component in self._components:
            if component.kind is not kind:
                continue
            try:
                total += component.series(self.horizon)
            except ConfigurationError as e:
                raise ConfigurationError(e.reason, scenario=self.name, component=e.component) from e
        return total

    def _cached(self, key: str) -> np.ndarray:
        if key not in self._cache:
            if key == 'cost':
                self._cache[key] = self._sum_kind(FlowKind.COST)
            elif key == 'benefit':
                self._cache[key] = self._sum_kind(FlowKind.BENEFIT)
            elif key == 'cumulative_cost':
                self._cache[key] = np.cumsum(self._cached('cost'))
            elif key == 'cumulative_benefit':
                self._cache[key] = np.cumsum(self._cached('benefit'))
            else:
                raise KeyError(key)
        return self._cache[key]

    def cost_series(self) -> np.ndarray:
        """Per-period total cost, length horizon"""
        return self._cached('cost').copy()

    def benefit_series(self) -> np.ndarray:
        """Per-period total benefit, length horizon"""
        return self._cached('benefit').copy()

    def net_series(self) -> np.ndarray:
        return self._cached('benefit') - self._cached('cost')

    def cumulative_cost(self, period: int) -> float:
        self.timeline.validate_period(period, scenario=self.name)
        return float(self._cached('cumulative_cost')[period])

    def cumulative_benefit(self, period: int) -> float:
        self.timeline.validate_period(period, scenario=self.name)
        return float(self._cached('cumulative_benefit')[period])

    def cumulative_net(self, period: int) -> float:
        return self.cumulative_benefit(period) - self.cumulative_cost(period)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def roi(self, period: int) -> float:
        """
        Cumulative-to-date ROI: (benefit - cost) / cost through the given period.

        Raises:
            DivisionByZeroError: no cost has accrued by this period
        """
        cost = self.cumulative_cost(period)
        benefit = self.cumulative_benefit(period)
        if cost == 0:
            raise DivisionByZeroError(
                "ROI undefined: cumulative cost is zero",
                scenario=self.name,
                period=period
            )
        return (benefit - cost) / cost

    def breakeven_period(self) -> Optional[int]:
        """
        First period where cumulative benefit meets or exceeds cumulative cost.

        Returns:
            Period index, or NO_BREAKEVEN if it never happens within the horizon
        """
        reached = np.nonzero(self._cached('cumulative_benefit') >= self._cached('cumulative_cost'))[0]
        if len(reached) == 0:
            logger.debug(f"Scenario '{self.name}' does not break even within {self.horizon} periods")
            return NO_BREAKEVEN
        return int(reached[0])

    def to_frame(self) -> pd.DataFrame:
        """Per-period and cumulative series as a DataFrame indexed by period"""
        df = pd.DataFrame({
            'cost': self._cached('cost'),
            'benefit': self._cached('benefit'),
            'cumulative_cost': self._cached('cumulative_cost'),
            'cumulative_benefit': self._cached('cumulative_benefit'),
        }, index=self.timeline.to_index())
        df['net'] = df['benefit'] - df['cost']
        df['cumulative_net'] = df['cumulative_benefit'] - df['cumulative_cost']
        return df
