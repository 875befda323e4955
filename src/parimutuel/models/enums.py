"""
Enumerations for prediction and payout states
"""

from enum import Enum


class PredictionStatus(str, Enum):
    """Prediction lifecycle states"""

    OPEN = "open"
    RESOLVED = "resolved"


class PayoutStatus(str, Enum):
    """Outcome of a single payout transfer"""

    PAID = "paid"
    FAILED = "failed"


class PayoutPolicy(str, Enum):
    """How the pool was distributed at resolution"""

    PROPORTIONAL = "proportional"
    REFUND = "refund"
    RETAINED = "retained"
