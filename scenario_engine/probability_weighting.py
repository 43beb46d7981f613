"""
Probability-weighted expected value across alternative futures
"""
from dataclasses import dataclass
from typing import Dict, Any, Iterable, List, Optional

from utils.logger import setup_logger
from cashflow_model.errors import (
    ConfigurationError,
    DivisionByZeroError,
    ProbabilitySumError,
)
from cashflow_model.scenario import Scenario
from scenario_engine.npv_calculator import NPVCalculator, validate_rate

logger = setup_logger(__name__)

DEFAULT_PROBABILITY_TOLERANCE = 1e-6

EV_FORMS = ('roi', 'net_benefit')


def breakeven_probability(cost: float, benefit: float) -> float:
    """
    Probability at which probability * benefit - cost = 0.

    Above this threshold the expected value of paying `cost` now for an
    uncertain `benefit` is positive.

    Raises:
        ConfigurationError: benefit is zero, so no threshold exists
    """
    if benefit == 0:
        raise ConfigurationError(
            "Breakeven probability undefined for zero benefit",
            cost=cost,
            benefit=benefit
        )
    threshold = cost / benefit
    logger.debug(f"Breakeven probability for cost {cost:,.0f} / benefit {benefit:,.0f}: {threshold:.4f}")
    return threshold


@dataclass
class OutcomeBranch:
    """
    One possible future with its probability.

    The branch either references a scenario (not owned) or carries a fixed
    cost/benefit override for lump-sum "what if" branches.
    """

    label: str
    probability: float
    scenario: Optional[Scenario] = None
    cost_override: Optional[float] = None
    benefit_override: Optional[float] = None

    def __post_init__(self):
        has_override = self.cost_override is not None or self.benefit_override is not None
        if self.scenario is None and not has_override:
            raise ConfigurationError(
                f"Branch '{self.label}' needs a scenario or a cost/benefit override"
            )
        if self.scenario is not None and has_override:
            raise ConfigurationError(
                f"Branch '{self.label}' cannot have both a scenario and an override",
                scenario=self.scenario.name
            )

    @property
    def is_override(self) -> bool:
        return self.scenario is None

    @property
    def _cost(self) -> float:
        return float(self.cost_override or 0.0)

    @property
    def _benefit(self) -> float:
        return float(self.benefit_override or 0.0)

    def roi(self, period: int) -> float:
        if not self.is_override:
            return self.scenario.roi(period)
        if self._cost == 0:
            raise DivisionByZeroError(f"ROI undefined for branch '{self.label}': cost is zero")
        return (self._benefit - self._cost) / self._cost

    def net_benefit(self, period: int) -> float:
        if not self.is_override:
            return self.scenario.cumulative_net(period)
        return self._benefit - self._cost

    def value(self, period: int, form: str = 'roi') -> float:
        return self.roi(period) if form == 'roi' else self.net_benefit(period)

    def npv(self, discount_rate: float, calculator: Optional[NPVCalculator] = None) -> float:
        calculator = calculator or NPVCalculator()
        if self.is_override:
            # Lump sums fall in period 0
            validate_rate(discount_rate, scenario=self.label)
            return self._benefit - self._cost
        return calculator.npv(self.scenario.net_series(), discount_rate)


class DecisionPoint:
    """Named set of mutually exclusive outcome branches"""

    def __init__(
        self,
        name: str,
        branches: Iterable[OutcomeBranch],
        tolerance: float = DEFAULT_PROBABILITY_TOLERANCE
    ):
        self.name = name
        self.tolerance = tolerance
        self.branches: List[OutcomeBranch] = list(branches)
        self.calculator = NPVCalculator()
        self.validate()

    def __repr__(self) -> str:
        return f"DecisionPoint(name={self.name!r}, branches={len(self.branches)})"

    def add_branch(self, branch: OutcomeBranch):
        """Append a branch; the set is re-validated before the next computation"""
        self.branches.append(branch)

    def validate(self):
        """
        Check each probability lies in [0, 1] and that they sum to 1.

        Raises:
            ProbabilitySumError: never renormalizes
        """
        for branch in self.branches:
            if not 0.0 <= branch.probability <= 1.0:
                raise ProbabilitySumError(
                    f"Branch '{branch.label}' probability outside [0, 1]",
                    decision_point=self.name,
                    probability=branch.probability
                )

        total = sum(b.probability for b in self.branches)
        if abs(total - 1.0) > self.tolerance:
            raise ProbabilitySumError(
                f"Branch probabilities sum to {total:.6f}, expected 1.0",
                decision_point=self.name,
                tolerance=self.tolerance
            )

    def expected_value(self, period: int, form: str = 'roi') -> float:
        """
        Probability-weighted value of the branches at a period.

        Args:
            period: Period the cumulative figures are taken at
            form: 'roi' blends branch ROIs, 'net_benefit' blends cumulative
                benefit minus cost

        Returns:
            Expected value
        """
        if form not in EV_FORMS:
            raise ConfigurationError(f"Unknown expected-value form: {form!r}", decision_point=self.name)
        self.validate()

        expected = 0.0
        for branch in self.branches:
            try:
                expected += branch.probability * branch.value(period, form)
            except DivisionByZeroError as e:
                raise DivisionByZeroError(
                    e.reason,
                    scenario=e.scenario,
                    period=period,
                    decision_point=self.name,
                    branch=branch.label
                ) from e
        return expected

    def expected_roi(self, period: int) -> float:
        return self.expected_value(period, 'roi')

    def expected_net_benefit(self, period: int) -> float:
        return self.expected_value(period, 'net_benefit')

    def expected_npv(self, discount_rate: float) -> float:
        self.validate()
        return sum(b.probability * b.npv(discount_rate, self.calculator) for b in self.branches)

    def npv_distribution(self, discount_rate: float) -> Dict[str, Any]:
        """
        Expected NPV with per-branch detail and spread statistics.

        Returns:
            Dictionary with expected NPV, variance, std dev, min/max and branches
        """
        self.validate()

        branch_results = {}
        expected_npv = 0.0

        for branch in self.branches:
            npv = branch.npv(discount_rate, self.calculator)
            branch_results[branch.label] = {
                'probability': branch.probability,
                'npv': npv,
                'weighted_npv': npv * branch.probability,
                'scenario': branch.scenario.name if branch.scenario is not None else None
            }
            expected_npv += npv * branch.probability

        npv_variance = sum(
            b['probability'] * (b['npv'] - expected_npv) ** 2
            for b in branch_results.values()
        )
        npv_std_dev = npv_variance ** 0.5

        result = {
            'decision_point': self.name,
            'discount_rate': discount_rate,
            'expected_npv': expected_npv,
            'npv_variance': npv_variance,
            'npv_std_dev': npv_std_dev,
            'coefficient_of_variation': npv_std_dev / expected_npv if expected_npv != 0 else float('inf'),
            'max_npv': max(b['npv'] for b in branch_results.values()),
            'min_npv': min(b['npv'] for b in branch_results.values()),
            'branches': branch_results
        }

        logger.info(f"Expected NPV for '{self.name}': {expected_npv:,.2f} (std dev: {npv_std_dev:,.2f})")
        return result

    def breakeven_probability(self, cost: float, benefit: float) -> float:
        return breakeven_probability(cost, benefit)


def risk_adjusted_value(expected_npv: float, npv_std_dev: float, risk_aversion: float = 0.5) -> float:
    """Mean-variance penalty: expected NPV minus risk_aversion times std dev"""
    return expected_npv - (risk_aversion * npv_std_dev)
