"""
Tests for outcome branches, decision points and breakeven probability.
"""
import pytest

from cashflow_model import (
    ConfigurationError,
    DivisionByZeroError,
    InvalidRateError,
    ProbabilitySumError,
)
from scenario_engine import (
    DecisionPoint,
    OutcomeBranch,
    breakeven_probability,
    risk_adjusted_value,
)


def scale_decision(p_scale: float = 0.15, p_flat: float = 0.85) -> DecisionPoint:
    return DecisionPoint('scale in year three', [
        OutcomeBranch('hits scale', p_scale, cost_override=130000, benefit_override=500000),
        OutcomeBranch('never scales', p_flat, cost_override=130000, benefit_override=0),
    ])


# ============================================================================
# BREAKEVEN PROBABILITY
# ============================================================================


class TestBreakevenProbability:

    def test_threshold(self):
        """Paying 130k for a 500k upside pays off above p = 0.26."""
        assert breakeven_probability(130000, 500000) == pytest.approx(0.26, abs=1e-6)

    def test_zero_benefit_raises(self):
        with pytest.raises(ConfigurationError):
            breakeven_probability(130000, 0)

    def test_decision_point_delegates(self):
        assert scale_decision().breakeven_probability(50, 200) == pytest.approx(0.25)


# ============================================================================
# BRANCH CONSTRUCTION
# ============================================================================


class TestBranchValidation:

    def test_probabilities_must_sum_to_one(self):
        """0.85 + 0.1 = 0.95 is rejected, never renormalized."""
        with pytest.raises(ProbabilitySumError):
            scale_decision(p_scale=0.1, p_flat=0.85)

    def test_tolerance_allows_float_noise(self):
        dp = DecisionPoint('thirds', [
            OutcomeBranch('a', 1 / 3, benefit_override=1),
            OutcomeBranch('b', 1 / 3, benefit_override=1),
            OutcomeBranch('c', 1 / 3, benefit_override=1),
        ])
        assert len(dp.branches) == 3

    def test_probability_outside_unit_interval(self):
        with pytest.raises(ProbabilitySumError):
            DecisionPoint('bad', [
                OutcomeBranch('a', 1.5, benefit_override=1),
                OutcomeBranch('b', -0.5, benefit_override=1),
            ])

    def test_empty_branch_set_rejected(self):
        with pytest.raises(ProbabilitySumError):
            DecisionPoint('empty', [])

    def test_branch_needs_scenario_or_override(self):
        with pytest.raises(ConfigurationError):
            OutcomeBranch('nothing', 1.0)

    def test_branch_cannot_have_both(self, monolith):
        with pytest.raises(ConfigurationError):
            OutcomeBranch('both', 1.0, scenario=monolith, cost_override=10)

    def test_mutation_revalidated(self):
        dp = scale_decision()
        dp.add_branch(OutcomeBranch('acquired', 0.1, benefit_override=1000000))
        with pytest.raises(ProbabilitySumError):
            dp.expected_npv(0.0)

    def test_probability_edit_revalidated(self):
        dp = scale_decision()
        dp.branches[0].probability = 0.5
        with pytest.raises(ProbabilitySumError):
            dp.expected_net_benefit(0)


# ============================================================================
# EXPECTED VALUE
# ============================================================================


class TestExpectedValue:

    def test_net_benefit_form_matches_benefit_times_probability_minus_cost(self):
        """EV = Benefit x Probability - Cost when the cost is paid in every branch."""
        ev = scale_decision().expected_net_benefit(0)
        assert ev == pytest.approx(500000 * 0.15 - 130000)

    def test_roi_form_blends_branch_roi(self, monolith, microservices):
        dp = DecisionPoint('architecture', [
            OutcomeBranch('monolith future', 0.5, scenario=monolith),
            OutcomeBranch('microservices future', 0.5, scenario=microservices),
        ])
        expected = 0.5 * monolith.roi(11) + 0.5 * microservices.roi(11)
        assert dp.expected_roi(11) == pytest.approx(expected)
        assert dp.expected_value(11, form='roi') == pytest.approx(expected)

    def test_net_benefit_form_with_scenarios(self, monolith, microservices):
        dp = DecisionPoint('architecture', [
            OutcomeBranch('monolith future', 0.25, scenario=monolith),
            OutcomeBranch('microservices future', 0.75, scenario=microservices),
        ])
        expected = 0.25 * monolith.cumulative_net(5) + 0.75 * microservices.cumulative_net(5)
        assert dp.expected_value(5, form='net_benefit') == pytest.approx(expected)

    def test_unknown_form(self):
        with pytest.raises(ConfigurationError):
            scale_decision().expected_value(0, form='irr')

    def test_undefined_roi_reports_branch(self):
        dp = DecisionPoint('free', [
            OutcomeBranch('windfall', 1.0, benefit_override=100),
        ])
        with pytest.raises(DivisionByZeroError) as exc:
            dp.expected_roi(0)
        assert exc.value.details['branch'] == 'windfall'


class TestExpectedNPV:

    def test_override_branches(self):
        assert scale_decision().expected_npv(0.05) == pytest.approx(-55000)

    def test_scenario_branches_discounted(self, monolith):
        dp = DecisionPoint('only', [OutcomeBranch('certain', 1.0, scenario=monolith)])
        assert dp.expected_npv(0.0) == pytest.approx(175900)
        assert dp.expected_npv(0.01) < 175900

    def test_negative_rate(self):
        with pytest.raises(InvalidRateError):
            scale_decision().expected_npv(-0.01)

    def test_distribution_statistics(self):
        result = scale_decision().npv_distribution(0.0)
        assert result['expected_npv'] == pytest.approx(-55000)
        assert result['max_npv'] == 370000
        assert result['min_npv'] == -130000
        variance = 0.15 * (370000 + 55000) ** 2 + 0.85 * (-130000 + 55000) ** 2
        assert result['npv_variance'] == pytest.approx(variance)
        assert result['branches']['hits scale']['weighted_npv'] == pytest.approx(55500)

    def test_risk_adjusted_value(self):
        assert risk_adjusted_value(1000, 400) == 800
        assert risk_adjusted_value(1000, 400, risk_aversion=1.0) == 600
