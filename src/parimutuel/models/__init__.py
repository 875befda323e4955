"""
Data models for the parimutuel ledger
"""

from .enums import PayoutPolicy, PayoutStatus, PredictionStatus
from .payout import PayoutResult, ResolutionReport
from .prediction import Prediction

__all__ = [
    "PredictionStatus",
    "PayoutStatus",
    "PayoutPolicy",
    "Prediction",
    "PayoutResult",
    "ResolutionReport",
]
