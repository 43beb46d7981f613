"""
Cash-Flow Model Module
Period timeline, cost/benefit components and scenarios
"""
from cashflow_model.errors import (
    DecisionEconomicsError,
    InvalidComponentError,
    HorizonMismatchError,
    InvalidHorizonError,
    PeriodOutOfRangeError,
    ConfigurationError,
    DivisionByZeroError,
    InvalidRateError,
    ProbabilitySumError
)
from cashflow_model.timeline import PeriodTimeline
from cashflow_model.components import (
    CashFlowComponent,
    FlowKind,
    FlowPattern,
    one_time_cost,
    recurring_cost,
    per_unit_cost,
    one_time_benefit,
    recurring_benefit,
    per_unit_benefit
)
from cashflow_model.scenario import Scenario, NO_BREAKEVEN

__all__ = [
    'DecisionEconomicsError',
    'InvalidComponentError',
    'HorizonMismatchError',
    'InvalidHorizonError',
    'PeriodOutOfRangeError',
    'ConfigurationError',
    'DivisionByZeroError',
    'InvalidRateError',
    'ProbabilitySumError',
    'PeriodTimeline',
    'CashFlowComponent',
    'FlowKind',
    'FlowPattern',
    'one_time_cost',
    'recurring_cost',
    'per_unit_cost',
    'one_time_benefit',
    'recurring_benefit',
    'per_unit_benefit',
    'Scenario',
    'NO_BREAKEVEN'
]
