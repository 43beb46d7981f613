"""
Decision model: compares competing scenarios on ROI, breakeven and NPV
"""
import os
from typing import Dict, Any, List, Optional

import pandas as pd
import yaml

from utils.logger import setup_logger, LogContext
from cashflow_model.errors import (
    ConfigurationError,
    DivisionByZeroError,
    HorizonMismatchError,
)
from cashflow_model.scenario import Scenario
from scenario_engine.npv_calculator import NPVCalculator, validate_rate
from scenario_engine.probability_weighting import DecisionPoint, DEFAULT_PROBABILITY_TOLERANCE

logger = setup_logger(__name__)

CONFIG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'config')

DEFAULT_DISCOUNT_RATE = 0.01


def load_engine_config(filepath: Optional[str] = None) -> Dict:
    """Load engine defaults from config/engine.yaml"""
    filepath = filepath or os.path.join(CONFIG_DIR, 'engine.yaml')
    try:
        with open(filepath, 'r') as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load engine config {filepath}: {e}")
        return {}


class DecisionModel:
    """Holds named scenarios and decision points for one comparison run"""

    def __init__(
        self,
        scenarios: Optional[List[Scenario]] = None,
        discount_rate: Optional[float] = None,
        config: Optional[Dict] = None
    ):
        self.config = config if config is not None else load_engine_config()
        defaults = self.config.get('defaults', {})

        if discount_rate is None:
            discount_rate = defaults.get('discount_rate', DEFAULT_DISCOUNT_RATE)
        self.discount_rate = validate_rate(discount_rate)
        self.probability_tolerance = defaults.get('probability_tolerance', DEFAULT_PROBABILITY_TOLERANCE)

        self.calculator = NPVCalculator()
        self._scenarios: Dict[str, Scenario] = {}
        self._decision_points: Dict[str, DecisionPoint] = {}
        # decision point name -> scenario name it conditions
        self._attachments: Dict[str, str] = {}

        for scenario in scenarios or []:
            self.add_scenario(scenario)

    def __repr__(self) -> str:
        return f"DecisionModel(scenarios={list(self._scenarios)}, decision_points={list(self._decision_points)})"

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @property
    def horizon(self) -> Optional[int]:
        for scenario in self._scenarios.values():
            return scenario.horizon
        return None

    @property
    def scenario_names(self) -> List[str]:
        return list(self._scenarios)

    @property
    def decision_points(self) -> Dict[str, DecisionPoint]:
        return dict(self._decision_points)

    def add_scenario(self, scenario: Scenario) -> Scenario:
        """
        Register a scenario under its name.

        Raises:
            ConfigurationError: a scenario with this name already exists
            HorizonMismatchError: horizon differs from scenarios already held
        """
        if scenario.name in self._scenarios:
            raise ConfigurationError("Duplicate scenario name", scenario=scenario.name)
        if self.horizon is not None and scenario.horizon != self.horizon:
            raise HorizonMismatchError(
                f"Scenario horizon {scenario.horizon} differs from model horizon {self.horizon}",
                scenario=scenario.name
            )
        self._scenarios[scenario.name] = scenario
        logger.debug(f"Registered scenario '{scenario.name}'")
        return scenario

    def get_scenario(self, name: str) -> Scenario:
        try:
            return self._scenarios[name]
        except KeyError:
            raise ConfigurationError("Unknown scenario", scenario=name) from None

    def add_decision_point(self, decision_point: DecisionPoint, scenario_name: Optional[str] = None) -> DecisionPoint:
        """
        Register a decision point, optionally conditioning one of the scenarios.

        An attached decision point makes recommend() rank by expected NPV.
        """
        if decision_point.name in self._decision_points:
            raise ConfigurationError(f"Duplicate decision point '{decision_point.name}'")
        if scenario_name is not None:
            self.get_scenario(scenario_name)
            self._attachments[decision_point.name] = scenario_name

        self._decision_points[decision_point.name] = decision_point
        return decision_point

    def get_decision_point(self, name: str) -> DecisionPoint:
        try:
            return self._decision_points[name]
        except KeyError:
            raise ConfigurationError(f"Unknown decision point '{name}'") from None

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def _scenario_metrics(self, scenario: Scenario, period: int) -> Dict[str, Any]:
        metrics = {
            'cumulative_cost': scenario.cumulative_cost(period),
            'cumulative_benefit': scenario.cumulative_benefit(period),
            'roi': None,
            'breakeven_period': scenario.breakeven_period()
        }
        try:
            metrics['roi'] = scenario.roi(period)
        except DivisionByZeroError as e:
            logger.warning(f"ROI undefined: {e}")
            metrics['roi_error'] = str(e)
        return metrics

    def compare(self, period: int) -> Dict[str, Any]:
        """
        Compare every scenario at a period.

        Ranking is by ROI descending, then lower cumulative cost, then
        insertion order. Scenarios with undefined ROI rank last.

        Args:
            period: Period the cumulative figures are taken at

        Returns:
            Dictionary with per-scenario metrics and the ranking
        """
        with LogContext(logger, f"compare {len(self._scenarios)} scenarios at period {period}"):
            results = {
                name: self._scenario_metrics(scenario, period)
                for name, scenario in self._scenarios.items()
            }

            order = {name: i for i, name in enumerate(self._scenarios)}
            ranking = sorted(
                results,
                key=lambda name: (
                    results[name]['roi'] is None,
                    -(results[name]['roi'] or 0.0),
                    results[name]['cumulative_cost'],
                    order[name]
                )
            )
            for rank, name in enumerate(ranking, start=1):
                results[name]['rank'] = rank

        if ranking:
            logger.info(f"Period {period} ranking: {', '.join(ranking)}")

        return {
            'period': period,
            'scenarios': results,
            'ranking': ranking
        }

    def compare_frame(self, period: int) -> pd.DataFrame:
        """compare() as a DataFrame ordered by rank"""
        comparison = self.compare(period)
        df = pd.DataFrame.from_dict(comparison['scenarios'], orient='index')
        df.index.name = 'scenario'
        return df.loc[comparison['ranking']]

    # ------------------------------------------------------------------
    # Discounting
    # ------------------------------------------------------------------

    def _rate(self, discount_rate: Optional[float]) -> float:
        return self.discount_rate if discount_rate is None else discount_rate

    def npv(self, scenario_name: str, discount_rate: Optional[float] = None) -> float:
        """
        Net present value of a scenario's per-period net cash flow.

        Raises:
            InvalidRateError: discount_rate < 0
        """
        scenario = self.get_scenario(scenario_name)
        rate = validate_rate(self._rate(discount_rate), scenario=scenario_name)
        npv, _ = self.calculator.calculate_npv(scenario.net_series(), rate, scenario=scenario_name)
        return npv

    def npv_table(self, scenario_name: str, discount_rate: Optional[float] = None) -> pd.DataFrame:
        scenario = self.get_scenario(scenario_name)
        _, df = self.calculator.calculate_npv(scenario.net_series(), self._rate(discount_rate), scenario=scenario_name)
        return df

    def expected_npv(self, decision_point_name: str, discount_rate: Optional[float] = None) -> float:
        """Probability-weighted NPV across a decision point's branches"""
        decision_point = self.get_decision_point(decision_point_name)
        expected = decision_point.expected_npv(self._rate(discount_rate))
        logger.info(f"Expected NPV for '{decision_point_name}': {expected:,.2f}")
        return expected

    # ------------------------------------------------------------------
    # Recommendation
    # ------------------------------------------------------------------

    def _value_by_expected_npv(self, discount_rate: float) -> Dict[str, float]:
        values = {}
        for name, scenario in self._scenarios.items():
            attached = [dp for dp, target in self._attachments.items() if target == name]
            if attached:
                # Several decision points on one scenario: take the first registered
                values[name] = self._decision_points[attached[0]].expected_npv(discount_rate)
            else:
                values[name] = self.calculator.npv(scenario.net_series(), discount_rate)
        return values

    def recommend(self, period: int, discount_rate: Optional[float] = None) -> Scenario:
        """
        Scenario with the highest ROI at the period, or the highest expected
        NPV when any decision point conditions a scenario.

        An attached decision point's expected NPV replaces that scenario's
        own NPV; override-only branches therefore ignore its cash flows.

        Raises:
            ConfigurationError: the model holds no scenarios
        """
        if not self._scenarios:
            raise ConfigurationError("Cannot recommend from an empty model")

        if self._attachments:
            rate = validate_rate(self._rate(discount_rate))
            values = self._value_by_expected_npv(rate)
            order = list(self._scenarios)
            # max() keeps the first of equal values, i.e. insertion order
            best = max(order, key=lambda name: values[name])
            logger.info(f"Recommended '{best}' by expected NPV ({values[best]:,.2f})")
        else:
            best = self.compare(period)['ranking'][0]
            logger.info(f"Recommended '{best}' by ROI at period {period}")

        return self._scenarios[best]
