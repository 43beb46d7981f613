"""
Tests for building decision models from definitions and YAML files.
"""
import logging

import pytest

from cashflow_model import (
    ConfigurationError,
    InvalidComponentError,
    InvalidHorizonError,
    NO_BREAKEVEN,
    ProbabilitySumError,
)
from scenario_engine import build_model, load_model
from utils import LogContext, setup_logger

from tests.conftest import EXAMPLE_MODEL


def definition(**overrides):
    data = {
        'horizon': 6,
        'discount_rate': 0.0,
        'scenarios': {
            'Build now': {
                'components': [
                    {'name': 'build', 'kind': 'cost', 'pattern': 'one_time', 'amount': 600},
                    {'name': 'savings', 'kind': 'benefit', 'pattern': 'recurring', 'amount': 150},
                ]
            },
            'Build later': {
                'components': [
                    {'name': 'build', 'kind': 'COST', 'pattern': 'ONE_TIME', 'amount': 500, 'start_period': 3},
                    {'name': 'savings', 'kind': 'benefit', 'pattern': 'recurring', 'amount': 150, 'start_period': 3},
                ]
            },
        },
    }
    data.update(overrides)
    return data


class TestBuildModel:

    def test_scenarios_and_components(self):
        model = build_model(definition(), config={})
        assert model.scenario_names == ['Build now', 'Build later']
        assert model.discount_rate == 0.0
        assert model.get_scenario('Build now').breakeven_period() == 3
        assert model.get_scenario('Build later').cumulative_cost(2) == 0

    def test_enum_values_case_insensitive(self):
        model = build_model(definition(), config={})
        assert model.get_scenario('Build later').cumulative_cost(3) == 500

    def test_unknown_kind(self):
        data = definition(scenarios={'X': {'components': [
            {'name': 'refund', 'kind': 'rebate', 'pattern': 'one_time', 'amount': 1}
        ]}})
        with pytest.raises(ConfigurationError) as exc:
            build_model(data, config={})
        assert exc.value.component == 'refund'

    def test_missing_amount(self):
        data = definition(scenarios={'X': {'components': [
            {'name': 'build', 'kind': 'cost', 'pattern': 'one_time'}
        ]}})
        with pytest.raises(ConfigurationError):
            build_model(data, config={})

    def test_negative_amount(self):
        data = definition(scenarios={'X': {'components': [
            {'name': 'build', 'kind': 'cost', 'pattern': 'one_time', 'amount': -1}
        ]}})
        with pytest.raises(InvalidComponentError):
            build_model(data, config={})

    @pytest.mark.parametrize('field, value', [('start_period', 1.5), ('amount', '100')])
    def test_loader_does_not_coerce_component_fields(self, field, value):
        """Values reach the component unchanged, so 1.5 is rejected rather than truncated."""
        component = {'name': 'build', 'kind': 'cost', 'pattern': 'one_time', 'amount': 100}
        component[field] = value
        data = definition(scenarios={'X': {'components': [component]}})
        with pytest.raises(InvalidComponentError):
            build_model(data, config={})

    def test_fractional_horizon_rejected(self):
        data = definition()
        data['horizon'] = 2.5
        with pytest.raises(InvalidHorizonError):
            build_model(data, config={})

    def test_missing_horizon(self):
        data = definition()
        del data['horizon']
        with pytest.raises(ConfigurationError):
            build_model(data, config={})

    def test_decision_point_with_scenario_branches(self):
        data = definition(decision_points={
            'timing': {
                'branches': [
                    {'label': 'now', 'probability': 0.4, 'scenario': 'Build now'},
                    {'label': 'later', 'probability': 0.6, 'scenario': 'Build later'},
                ]
            }
        })
        model = build_model(data, config={})
        expected = 0.4 * model.npv('Build now') + 0.6 * model.npv('Build later')
        assert model.expected_npv('timing') == pytest.approx(expected)

    def test_decision_point_probability_violation(self):
        data = definition(decision_points={
            'timing': {
                'branches': [
                    {'label': 'now', 'probability': 0.85, 'benefit': 1},
                    {'label': 'later', 'probability': 0.1, 'benefit': 1},
                ]
            }
        })
        with pytest.raises(ProbabilitySumError):
            build_model(data, config={})


class TestExampleModel:

    def test_load_example(self):
        model = load_model(EXAMPLE_MODEL, config={})
        assert model.scenario_names == ['Monolith', 'Microservices']
        assert model.get_scenario('Monolith').breakeven_period() == 1
        assert model.get_scenario('Microservices').breakeven_period() is NO_BREAKEVEN

    def test_example_expected_npv_and_recommendation(self):
        model = load_model(EXAMPLE_MODEL, config={})
        assert model.expected_npv('scale_in_year_three') == pytest.approx(-55000)
        assert model.recommend(11).name == 'Monolith'


class TestLogging:

    def test_setup_logger_idempotent(self):
        first = setup_logger('decision_economics.test')
        second = setup_logger('decision_economics.test')
        assert first is second
        assert len(second.handlers) >= 1
        assert len(second.handlers) == len(first.handlers)

    def test_log_context_reports_failure(self, caplog):
        logger = logging.getLogger('decision_economics.context')
        with caplog.at_level(logging.DEBUG, logger='decision_economics.context'):
            with pytest.raises(ValueError):
                with LogContext(logger, 'bad computation'):
                    raise ValueError('boom')
        assert any('Failed: bad computation' in r.message for r in caplog.records)

    def test_level_override_from_environment(self, monkeypatch):
        monkeypatch.setenv('DECISION_ECONOMICS_LOG_LEVEL', 'debug')
        logger = setup_logger('decision_economics.env_override')
        assert logger.level == logging.DEBUG
