"""
Pytest fixtures: the monolith vs microservices comparison used across tests.
"""
import os

import pytest

from cashflow_model import (
    Scenario,
    one_time_cost,
    recurring_cost,
    recurring_benefit,
    per_unit_benefit,
)
from scenario_engine import DecisionModel

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
EXAMPLE_MODEL = os.path.join(REPO_ROOT, 'config', 'examples', 'architecture_choice.yaml')

HORIZON = 12

MONOLITH_RAMP = [0, 0, 1200, 2400, 3600, 4800, 6000, 7200, 8400, 9600, 10800, 12000]
MICROSERVICES_RAMP = [0, 150, 300, 450, 600, 750, 900, 1050, 1200, 1350, 1450, 1500]


@pytest.fixture
def monolith() -> Scenario:
    """20k build, 1,175/month running cost, 12k/month benefit plus a feature ramp."""
    return Scenario('Monolith', HORIZON, [
        one_time_cost('initial build', 20000),
        recurring_cost('hosting and maintenance', 1175),
        recurring_benefit('feature revenue', 12000),
        per_unit_benefit('feature ramp', 1.0, MONOLITH_RAMP),
    ])


@pytest.fixture
def microservices() -> Scenario:
    """73k build, 1,250 + 5,300/month running cost, benefit ramping to 1,500."""
    return Scenario('Microservices', HORIZON, [
        one_time_cost('initial build', 73000),
        recurring_cost('platform hosting', 1250),
        recurring_cost('platform team time', 5300),
        per_unit_benefit('feature revenue', 1.0, MICROSERVICES_RAMP),
    ])


@pytest.fixture
def model(monolith, microservices) -> DecisionModel:
    return DecisionModel([monolith, microservices], discount_rate=0.01, config={})
