"""
Event Models Module - Pydantic schemas for ledger events

Schema Version: 1.0.0
"""

from .ledger_events import (
    AdminChanged,
    BetPlaced,
    LedgerEvent,
    OperationFailed,
    PayoutFailed,
    PayoutIssued,
    PredictionCreated,
    PredictionResolved,
)

__all__ = [
    "LedgerEvent",
    "PredictionCreated",
    "PredictionResolved",
    "BetPlaced",
    "PayoutIssued",
    "PayoutFailed",
    "AdminChanged",
    "OperationFailed",
]
