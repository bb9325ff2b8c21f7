"""
Basic enums shared by conventions, trades and curves.
"""

from enum import Enum


class Frequency(Enum):
    """Payment frequencies, valued in months."""

    ANNUAL = 12
    SEMIANNUAL = 6
    QUARTERLY = 3
    MONTHLY = 1
    TERM = 0

    def months(self) -> int:
        return self.value


class BusinessDayAdjustment(Enum):
    """Business day adjustment rules."""

    NO_ADJUSTMENT = "NO_ADJUSTMENT"
    FOLLOWING = "FOLLOWING"
    MODIFIED_FOLLOWING = "MODIFIED_FOLLOWING"
    PRECEDING = "PRECEDING"
    MODIFIED_PRECEDING = "MODIFIED_PRECEDING"


class PayReceive(Enum):
    """Direction of a leg or cash flow from the holder's point of view."""

    PAY = -1
    RECEIVE = 1

    @property
    def sign(self) -> int:
        return self.value

    def opposite(self) -> "PayReceive":
        return PayReceive.RECEIVE if self is PayReceive.PAY else PayReceive.PAY


class BuySell(Enum):
    """Trade direction for single-leg money market instruments."""

    BUY = 1
    SELL = -1

    @property
    def sign(self) -> int:
        return self.value
