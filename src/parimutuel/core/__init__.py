"""Core module - Ledger state and market business logic"""

from . import validators
from .access_control import AccessControl, AuthorizationGate
from .clock import Clock, ManualClock, SystemClock
from .errors import (
    AlreadyResolved,
    InvalidAmount,
    InvalidOption,
    InvalidParameters,
    LedgerError,
    PredictionNotFound,
    StakingClosed,
    TooEarly,
    TransferError,
    Unauthorized,
)
from .funds import FundsGateway, InMemoryFunds
from .ledger_store import LedgerEvents, LedgerStore
from .lifecycle import PredictionLifecycle
from .market import ParimutuelMarket
from .payouts import PayoutCalculator, proportional_share
from .staking import StakingEngine

__all__ = [
    "AccessControl",
    "AlreadyResolved",
    "AuthorizationGate",
    "Clock",
    "FundsGateway",
    "InMemoryFunds",
    "InvalidAmount",
    "InvalidOption",
    "InvalidParameters",
    "LedgerError",
    "LedgerEvents",
    "LedgerStore",
    "ManualClock",
    "ParimutuelMarket",
    "PayoutCalculator",
    "PredictionLifecycle",
    "PredictionNotFound",
    "StakingClosed",
    "StakingEngine",
    "SystemClock",
    "TooEarly",
    "TransferError",
    "Unauthorized",
    "proportional_share",
    "validators",
]
