"""
Sensitivity analysis: scenario NPV across discount rates, EV across probabilities
"""
import pandas as pd
from typing import Dict, Any, List, Optional, Tuple

from utils.logger import setup_logger
from scenario_engine.npv_calculator import NPVCalculator
from scenario_engine.probability_weighting import breakeven_probability
from scenario_engine.decision_model import DecisionModel

logger = setup_logger(__name__)

DEFAULT_DISCOUNT_RATES = [0.0, 0.005, 0.01, 0.02, 0.05]
DEFAULT_PROBABILITIES = [0.05, 0.1, 0.15, 0.25, 0.5, 0.75, 1.0]


class SensitivityMatrix:
    """Generates sensitivity tables over the decision model's inputs"""

    def __init__(self, config: Optional[Dict] = None):
        self.calculator = NPVCalculator()
        self.config = (config or {}).get('sensitivity', {})

    def generate_rate_matrix(
        self,
        model: DecisionModel,
        discount_rates: Optional[List[float]] = None
    ) -> Tuple[pd.DataFrame, Dict[str, Any]]:
        """
        Generate an NPV matrix of scenario vs discount rate.

        Args:
            model: Decision model whose scenarios are evaluated
            discount_rates: Per-period rates to test

        Returns:
            Tuple of (DataFrame scenarios x rates, metadata dict)
        """
        if discount_rates is None:
            discount_rates = self.config.get('discount_rates', DEFAULT_DISCOUNT_RATES)

        matrix_data = {}
        breakevens = {}

        for name in model.scenario_names:
            net = model.get_scenario(name).net_series()
            matrix_data[name] = [self.calculator.npv(net, rate) for rate in discount_rates]
            breakevens[name] = self.calculator.find_breakeven_rate(net)

        df = pd.DataFrame.from_dict(
            matrix_data,
            orient='index',
            columns=[f"{r*100:.1f}%" for r in discount_rates]
        )
        df.index.name = 'scenario'

        metadata = {
            'discount_rates': list(discount_rates),
            'max_npv': float(df.max().max()) if not df.empty else None,
            'min_npv': float(df.min().min()) if not df.empty else None,
            'breakeven_rate_by_scenario': breakevens
        }

        logger.info(f"Generated {len(model.scenario_names)}x{len(discount_rates)} rate sensitivity matrix")
        return df, metadata

    def generate_probability_sweep(
        self,
        cost: float,
        benefit: float,
        probabilities: Optional[List[float]] = None
    ) -> Tuple[pd.DataFrame, Dict[str, Any]]:
        """
        Expected value of paying `cost` for an uncertain `benefit` across probabilities.

        Returns:
            Tuple of (DataFrame indexed by probability, metadata with the flip threshold)
        """
        if probabilities is None:
            probabilities = self.config.get('probabilities', DEFAULT_PROBABILITIES)

        threshold = breakeven_probability(cost, benefit)

        df = pd.DataFrame({'probability': list(probabilities)})
        df['expected_value'] = df['probability'] * benefit - cost
        df['decision'] = df['expected_value'].apply(lambda ev: 'build' if ev > 0 else 'defer')
        df = df.set_index('probability')

        metadata = {
            'cost': cost,
            'benefit': benefit,
            'breakeven_probability': threshold
        }

        logger.info(f"Probability sweep: decision flips at p={threshold:.4f}")
        return df, metadata


# Convenience function
def generate_sensitivity_matrix(model: DecisionModel, discount_rates: Optional[List[float]] = None) -> pd.DataFrame:
    """Quick discount-rate sensitivity table"""
    df, _ = SensitivityMatrix(model.config).generate_rate_matrix(model, discount_rates)
    return df
