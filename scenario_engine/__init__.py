"""
Scenario Engine Module
NPV calculations, probability weighting, decision comparison and sensitivity analysis
"""
from scenario_engine.npv_calculator import NPVCalculator, calculate_npv
from scenario_engine.probability_weighting import (
    OutcomeBranch,
    DecisionPoint,
    breakeven_probability,
    risk_adjusted_value
)
from scenario_engine.decision_model import DecisionModel, load_engine_config
from scenario_engine.sensitivity_matrix import SensitivityMatrix, generate_sensitivity_matrix
from scenario_engine.model_loader import build_model, load_model

__all__ = [
    'NPVCalculator',
    'calculate_npv',
    'OutcomeBranch',
    'DecisionPoint',
    'breakeven_probability',
    'risk_adjusted_value',
    'DecisionModel',
    'load_engine_config',
    'SensitivityMatrix',
    'generate_sensitivity_matrix',
    'build_model',
    'load_model'
]
