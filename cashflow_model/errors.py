"""
Error taxonomy for cash-flow modeling and decision analysis.

Every error carries the scenario, component and period it concerns (where
known) so a caller can act on it without inspecting engine internals.
"""
from typing import Any, Optional


class DecisionEconomicsError(Exception):
    """Base class for all engine errors"""

    def __init__(
        self,
        message: str,
        scenario: Optional[str] = None,
        component: Optional[str] = None,
        period: Optional[int] = None,
        **details: Any
    ):
        self.scenario = scenario
        self.component = component
        self.period = period
        self.details = details
        self.reason = message
        super().__init__(self._format(message))

    def _format(self, message: str) -> str:
        context = []
        if self.scenario is not None:
            context.append(f"scenario={self.scenario!r}")
        if self.component is not None:
            context.append(f"component={self.component!r}")
        if self.period is not None:
            context.append(f"period={self.period}")
        for key, value in self.details.items():
            context.append(f"{key}={value!r}")
        if not context:
            return message
        return f"{message} ({', '.join(context)})"


class InvalidComponentError(DecisionEconomicsError, ValueError):
    """Malformed cash-flow component: negative amount, start period or units"""


class HorizonMismatchError(DecisionEconomicsError, ValueError):
    """A component or scenario does not fit the horizon it is added to"""


class InvalidHorizonError(DecisionEconomicsError, ValueError):
    """Timeline horizon is not a positive integer"""


class PeriodOutOfRangeError(DecisionEconomicsError, IndexError):
    """Period index outside 0..horizon-1"""


class ConfigurationError(DecisionEconomicsError):
    """Required auxiliary data is missing or a definition is malformed"""


class DivisionByZeroError(DecisionEconomicsError, ZeroDivisionError):
    """ROI requested while cumulative cost is zero"""


class InvalidRateError(DecisionEconomicsError, ValueError):
    """Negative discount rate"""


class ProbabilitySumError(DecisionEconomicsError, ValueError):
    """Outcome branch probabilities do not sum to 1 or lie outside [0, 1]"""
