"""
Ledger Event Schemas

Payloads published on the event bus after each committed ledger operation.
Subscribers receive `{"name": <event name>, "data": <payload dict>}` where the
payload is `model_dump(mode="json")` of one of these models.

Schema Version: 1.0.0
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LedgerEvent(BaseModel):
    """Common envelope fields for all ledger events."""

    occurred_at: datetime = Field(default_factory=_utc_now, description="Wall-clock emit time")
    clock: int = Field(..., description="Logical clock reading of the operation")

    class Config:
        extra = 'forbid'


# =============================================================================
# LIFECYCLE
# =============================================================================

class PredictionCreated(LedgerEvent):
    """
    A prediction was created and opened for staking.

    Example payload:
    {
        "prediction_id": 0,
        "title": "Will it rain?",
        "options": ["yes", "no"],
        "deadline": 1765069123,
        "created_by": "admin"
    }
    """

    prediction_id: int = Field(..., ge=0)
    title: str
    options: list[str] = Field(..., min_length=2)
    deadline: int
    created_by: str


class PredictionResolved(LedgerEvent):
    """A prediction was resolved; distribution has completed."""

    prediction_id: int = Field(..., ge=0)
    winning_option: str
    total_pool: int = Field(..., ge=0)
    winning_pool: int = Field(..., ge=0)
    policy: Literal['proportional', 'refund', 'retained']
    paid_total: int = Field(..., ge=0)
    failed_count: int = Field(0, ge=0)
    dust: int = Field(0, ge=0)
    resolved_by: str


# =============================================================================
# STAKING
# =============================================================================

class BetPlaced(LedgerEvent):
    """A stake was recorded against an option."""

    prediction_id: int = Field(..., ge=0)
    option: str
    participant: str
    amount: int = Field(..., gt=0, description="Base units staked in this call")
    participant_stake: int = Field(..., gt=0, description="Participant total on the option")
    option_pool: int = Field(..., gt=0, description="Option pool after the stake")


# =============================================================================
# PAYOUTS
# =============================================================================

class PayoutIssued(LedgerEvent):
    """One participant was paid."""

    prediction_id: int = Field(..., ge=0)
    participant: str
    stake: int = Field(..., ge=0)
    amount: int = Field(..., ge=0)


class PayoutFailed(LedgerEvent):
    """A transfer to one participant failed; distribution continued."""

    prediction_id: int = Field(..., ge=0)
    participant: str
    amount: int = Field(..., ge=0)
    error: str


# =============================================================================
# ADMINISTRATION
# =============================================================================

class AdminChanged(LedgerEvent):
    """The owner added or removed an admin."""

    action: Literal['added', 'removed']
    identity: str
    changed_by: str


class OperationFailed(LedgerEvent):
    """A ledger operation was rejected; no state changed."""

    operation: str
    caller: str
    code: str
    message: str
    prediction_id: Optional[int] = Field(None)

    @field_validator('message', mode='before')
    @classmethod
    def truncate_message(cls, v):
        if isinstance(v, str) and len(v) > 500:
            return v[:497] + "..."
        return v
