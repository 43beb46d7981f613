"""
Discrete period timeline over a fixed horizon
"""
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from cashflow_model.errors import InvalidHorizonError, PeriodOutOfRangeError


@dataclass(frozen=True)
class PeriodTimeline:
    """Ordered periods 0..horizon-1 (months in the usual reading)"""

    horizon: int

    def __post_init__(self):
        if isinstance(self.horizon, bool) or not isinstance(self.horizon, int) or self.horizon <= 0:
            raise InvalidHorizonError(
                "Horizon must be a positive integer", horizon=self.horizon
            )

    @property
    def periods(self) -> range:
        return range(self.horizon)

    @property
    def last_period(self) -> int:
        return self.horizon - 1

    def __len__(self) -> int:
        return self.horizon

    def __iter__(self):
        return iter(self.periods)

    def contains(self, period: int) -> bool:
        return 0 <= period < self.horizon

    def validate_period(self, period: int, scenario: Optional[str] = None) -> int:
        """Return period unchanged, or raise if it falls outside the timeline"""
        if not self.contains(period):
            raise PeriodOutOfRangeError(
                f"Period outside timeline 0..{self.last_period}",
                scenario=scenario,
                period=period
            )
        return period

    def to_index(self) -> pd.RangeIndex:
        return pd.RangeIndex(self.horizon, name='period')
