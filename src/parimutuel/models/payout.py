"""
Payout and resolution result models
"""

from dataclasses import dataclass, field

from .enums import PayoutPolicy, PayoutStatus


@dataclass
class PayoutResult:
    """
    Outcome of paying one participant

    Attributes:
        participant: Receiving identity
        stake: Stake that entitled the participant to this payout
        amount: Base units owed to the participant
        status: paid/failed
        error: Transfer error message when status is failed
    """

    participant: str
    stake: int
    amount: int
    status: PayoutStatus = PayoutStatus.PAID
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == PayoutStatus.PAID

    def to_dict(self) -> dict:
        return {
            "participant": self.participant,
            "stake": self.stake,
            "amount": self.amount,
            "status": self.status.value,
            "error": self.error,
        }


@dataclass
class ResolutionReport:
    """
    Summary of a resolution and its distribution

    `retained` is everything held against the prediction that was not
    transferred out: rounding dust, failed transfers, or the whole pool
    when nobody backed the winner and the pool is retained.
    """

    prediction_id: int
    winning_option: str
    total_pool: int
    winning_pool: int
    policy: PayoutPolicy
    results: list[PayoutResult] = field(default_factory=list)
    dust: int = 0

    @property
    def paid_total(self) -> int:
        return sum(r.amount for r in self.results if r.succeeded)

    @property
    def failed_total(self) -> int:
        return sum(r.amount for r in self.results if not r.succeeded)

    @property
    def failures(self) -> list[PayoutResult]:
        return [r for r in self.results if not r.succeeded]

    @property
    def retained(self) -> int:
        return self.total_pool - self.paid_total

    def payout_for(self, participant: str) -> int:
        """Amount actually transferred to a participant (0 if none)"""
        return sum(r.amount for r in self.results if r.participant == participant and r.succeeded)

    def to_dict(self) -> dict:
        return {
            "prediction_id": self.prediction_id,
            "winning_option": self.winning_option,
            "total_pool": self.total_pool,
            "winning_pool": self.winning_pool,
            "policy": self.policy.value,
            "results": [r.to_dict() for r in self.results],
            "paid_total": self.paid_total,
            "failed_total": self.failed_total,
            "dust": self.dust,
            "retained": self.retained,
        }
