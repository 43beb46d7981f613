"""
Build a DecisionModel from a plain definition (dict or YAML file)
"""
from typing import Dict, Any, List, Optional

import yaml

from utils.logger import setup_logger
from cashflow_model.components import CashFlowComponent, FlowKind, FlowPattern
from cashflow_model.errors import ConfigurationError
from cashflow_model.scenario import Scenario
from scenario_engine.decision_model import DecisionModel
from scenario_engine.probability_weighting import DecisionPoint, OutcomeBranch

logger = setup_logger(__name__)


def _parse_enum(enum_cls, value: Any, scenario: str, component: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown {enum_cls.__name__} {value!r}; expected one of {[e.value for e in enum_cls]}",
            scenario=scenario,
            component=component
        ) from None


def build_component(data: Dict[str, Any], scenario: str) -> CashFlowComponent:
    name = data.get('name', 'unnamed')
    try:
        amount = data['amount']
    except KeyError:
        raise ConfigurationError("Component needs an amount", scenario=scenario, component=name) from None

    return CashFlowComponent(
        name=name,
        kind=_parse_enum(FlowKind, data.get('kind'), scenario, name),
        pattern=_parse_enum(FlowPattern, data.get('pattern'), scenario, name),
        amount=amount,
        start_period=data.get('start_period', 0),
        units=data.get('units'),
        horizon=data.get('horizon')
    )


def build_scenario(name: str, data: Dict[str, Any], horizon: int) -> Scenario:
    scenario = Scenario(name, data.get('horizon', horizon))
    for component in data.get('components', []):
        scenario.add_component(build_component(component, name))
    return scenario


def _build_branch(data: Dict[str, Any], model: DecisionModel) -> OutcomeBranch:
    label = data.get('label', 'unnamed')
    scenario_name = data.get('scenario')
    return OutcomeBranch(
        label=label,
        probability=float(data.get('probability', 0.0)),
        scenario=model.get_scenario(scenario_name) if scenario_name else None,
        cost_override=data.get('cost'),
        benefit_override=data.get('benefit')
    )


def build_model(definition: Dict[str, Any], config: Optional[Dict] = None) -> DecisionModel:
    """
    Create a model from a definition of the form:

        horizon: 12
        discount_rate: 0.01
        scenarios: {name: {components: [...]}}
        decision_points: {name: {scenario: ..., branches: [...]}}

    Branch entries either name a scenario or give a fixed cost/benefit.
    """
    if 'horizon' not in definition:
        raise ConfigurationError("Model definition needs a horizon")
    horizon = definition['horizon']

    model = DecisionModel(discount_rate=definition.get('discount_rate'), config=config)

    for name, data in (definition.get('scenarios') or {}).items():
        model.add_scenario(build_scenario(name, data or {}, horizon))

    for name, data in (definition.get('decision_points') or {}).items():
        branches: List[OutcomeBranch] = [_build_branch(b, model) for b in data.get('branches', [])]
        decision_point = DecisionPoint(name, branches, tolerance=model.probability_tolerance)
        model.add_decision_point(decision_point, scenario_name=data.get('scenario'))

    logger.info(
        f"Built model with {len(model.scenario_names)} scenarios and "
        f"{len(model.decision_points)} decision points over {horizon} periods"
    )
    return model


def load_model(filepath: str, config: Optional[Dict] = None) -> DecisionModel:
    """Load a model definition from a YAML file"""
    with open(filepath, 'r') as f:
        definition = yaml.safe_load(f) or {}
    logger.debug(f"Loaded model definition from {filepath}")
    return build_model(definition, config=config)
