"""
Core discounting engine: NPV, breakeven rate, discounted payback
"""
import pandas as pd
import numpy as np
import numpy_financial as npf
from typing import Optional, Sequence, Tuple

from utils.logger import setup_logger
from cashflow_model.errors import InvalidRateError

logger = setup_logger(__name__)


def validate_rate(discount_rate: float, scenario: Optional[str] = None) -> float:
    """Reject negative (or NaN) discount rates"""
    if discount_rate is None or np.isnan(discount_rate) or discount_rate < 0:
        raise InvalidRateError(
            "Discount rate must be >= 0",
            scenario=scenario,
            discount_rate=discount_rate
        )
    return float(discount_rate)


class NPVCalculator:
    """Discounts per-period net cash flows; period 0 is undiscounted"""

    def discount_factors(self, horizon: int, discount_rate: float) -> np.ndarray:
        rate = validate_rate(discount_rate)
        return (1 + rate) ** -np.arange(horizon, dtype=float)

    def calculate_npv(
        self,
        net_flows: Sequence[float],
        discount_rate: float,
        scenario: Optional[str] = None
    ) -> Tuple[float, pd.DataFrame]:
        """
        Calculate NPV of a per-period net cash-flow series.

        Args:
            net_flows: Benefit minus cost for each period, starting at period 0
            discount_rate: Per-period discount rate (e.g., 0.01 for 1%/month)
            scenario: Scenario name for log and error context

        Returns:
            Tuple of (NPV, DataFrame with per-period discounting detail)
        """
        validate_rate(discount_rate, scenario=scenario)
        flows = np.asarray(net_flows, dtype=float)

        df = pd.DataFrame({'net_cash_flow': flows}, index=pd.RangeIndex(len(flows), name='period'))
        df['discount_factor'] = self.discount_factors(len(flows), discount_rate)
        df['present_value'] = df['net_cash_flow'] * df['discount_factor']
        df['cumulative_present_value'] = df['present_value'].cumsum()

        npv = float(df['present_value'].sum())

        label = f"'{scenario}'" if scenario else 'series'
        logger.info(f"NPV for {label}: {npv:,.2f} at {discount_rate*100:.2f}% per period")

        return npv, df

    def npv(self, net_flows: Sequence[float], discount_rate: float) -> float:
        flows = np.asarray(net_flows, dtype=float)
        return float(np.dot(flows, self.discount_factors(len(flows), discount_rate)))

    def find_breakeven_rate(self, net_flows: Sequence[float]) -> Optional[float]:
        """
        Find the discount rate where NPV = 0 (internal rate of return).

        The rate may exceed 100% per period or be negative.

        Returns:
            Breakeven rate, or None if the flows never change sign
        """
        flows = np.asarray(net_flows, dtype=float)
        irr = npf.irr(flows)

        if np.isnan(irr):
            logger.debug("Net flows never change sign; no breakeven rate")
            return None

        logger.debug(f"Breakeven discount rate: {irr*100:.4f}%")
        return float(irr)

    def discounted_payback_period(self, net_flows: Sequence[float], discount_rate: float) -> Optional[int]:
        """
        First period where cumulative discounted net cash flow turns non-negative.

        Returns:
            Period index, or None if it never does within the series
        """
        flows = np.asarray(net_flows, dtype=float)
        cumulative = np.cumsum(flows * self.discount_factors(len(flows), discount_rate))
        reached = np.nonzero(cumulative >= 0)[0]
        return int(reached[0]) if len(reached) else None


# Convenience function
def calculate_npv(net_flows: Sequence[float], discount_rate: float) -> float:
    """Quick NPV calculation"""
    return NPVCalculator().npv(net_flows, discount_rate)
