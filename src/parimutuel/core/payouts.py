"""
Payout Calculator

Distributes the whole pool of a resolved prediction to backers of the
winning option in proportion to their stake:

    payout_p = floor(T * s_p / W)

with T the total pool, W the winning pool and s_p the participant's winning
stake, all in integer base units. The flooring remainder (dust) is retained
unless the dust policy hands it to the largest winning stake.

When nobody backed the winner (W == 0) the zero-winner policy applies:
"retain" keeps the pool undistributed, "refund" returns every stake.
"""

import logging
from collections.abc import Iterator

from parimutuel.config import DUST_POLICIES, ZERO_WINNER_POLICIES, ConfigError, config
from parimutuel.models import PayoutPolicy, PayoutResult, PayoutStatus

from .errors import TransferError
from .funds import FundsGateway
from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)


def proportional_share(total_pool: int, stake: int, winning_pool: int) -> int:
    """floor(total_pool * stake / winning_pool) in exact integer arithmetic"""
    if winning_pool <= 0:
        raise ValueError(f"winning_pool must be positive, got {winning_pool}")
    return (total_pool * stake) // winning_pool


def _configured_policy(key: str, allowed) -> str:
    """Market policy from config; unknown values raise ConfigError"""
    value = config.get("market", key, "retain")
    if value not in allowed:
        raise ConfigError(f"{key} must be one of {sorted(allowed)}, got {value!r}")
    return value


class PayoutCalculator:
    """
    Computes and effects the distribution for one resolution

    `compute_payouts` is pure; `iter_payouts` performs the transfers lazily,
    one participant per step.
    """

    def __init__(
        self,
        store: LedgerStore,
        funds: FundsGateway,
        zero_winner_policy: str | None = None,
        dust_policy: str | None = None,
    ):
        if zero_winner_policy is not None and zero_winner_policy not in ZERO_WINNER_POLICIES:
            raise ValueError(
                f"zero_winner_policy must be one of {sorted(ZERO_WINNER_POLICIES)}, "
                f"got {zero_winner_policy!r}"
            )
        if dust_policy is not None and dust_policy not in DUST_POLICIES:
            raise ValueError(
                f"dust_policy must be one of {sorted(DUST_POLICIES)}, got {dust_policy!r}"
            )

        self.store = store
        self.funds = funds
        self._zero_winner_policy = zero_winner_policy
        self._dust_policy = dust_policy

    @property
    def zero_winner_policy(self) -> str:
        if self._zero_winner_policy:
            return self._zero_winner_policy
        return _configured_policy("zero_winner_policy", ZERO_WINNER_POLICIES)

    @property
    def dust_policy(self) -> str:
        if self._dust_policy:
            return self._dust_policy
        return _configured_policy("dust_policy", DUST_POLICIES)

    # ========================================================================
    # CALCULATION
    # ========================================================================

    def select_policy(self, prediction_id: int, winning_option: str) -> PayoutPolicy:
        if self.store.option_pool(prediction_id, winning_option) > 0:
            return PayoutPolicy.PROPORTIONAL
        if self.zero_winner_policy == "refund" and self.store.total_pool(prediction_id) > 0:
            return PayoutPolicy.REFUND
        return PayoutPolicy.RETAINED

    def compute_payouts(self, prediction_id: int, winning_option: str) -> list[tuple[str, int, int]]:
        """
        Calculate (participant, stake, amount) entitlements without moving funds

        Participants appear once each, in first-stake order.
        """
        policy = self.select_policy(prediction_id, winning_option)

        if policy == PayoutPolicy.RETAINED:
            return []

        if policy == PayoutPolicy.REFUND:
            return [
                (participant, total, total)
                for participant, total in self.store.participant_totals(prediction_id).items()
            ]

        total_pool = self.store.total_pool(prediction_id)
        winning_pool = self.store.option_pool(prediction_id, winning_option)

        entitlements = [
            (participant, stake, proportional_share(total_pool, stake, winning_pool))
            for participant, stake in self.store.iter_stakes(prediction_id, winning_option)
            if stake > 0
        ]

        dust = total_pool - sum(amount for _, _, amount in entitlements)
        if dust and self.dust_policy == "largest_stake":
            # max() keeps the first maximum, so ties go to the earliest staker
            index = max(range(len(entitlements)), key=lambda i: entitlements[i][1])
            participant, stake, amount = entitlements[index]
            entitlements[index] = (participant, stake, amount + dust)
            logger.debug(f"Dust {dust} assigned to largest stake {participant}")

        return entitlements

    def dust(self, prediction_id: int, winning_option: str) -> int:
        """Undistributed remainder the calculation leaves behind"""
        if self.select_policy(prediction_id, winning_option) != PayoutPolicy.PROPORTIONAL:
            return 0
        owed = sum(amount for _, _, amount in self.compute_payouts(prediction_id, winning_option))
        return self.store.total_pool(prediction_id) - owed

    # ========================================================================
    # DISTRIBUTION
    # ========================================================================

    def iter_payouts(self, prediction_id: int, winning_option: str) -> Iterator[PayoutResult]:
        """
        Transfer each entitlement and yield its result

        A TransferError for one participant yields a FAILED result and does
        not stop the remaining transfers. Nothing is retried. Only committed
        transfers are recorded in the store.
        """
        for participant, stake, amount in self.compute_payouts(prediction_id, winning_option):
            if self.store.has_been_paid(prediction_id, participant):
                logger.error(
                    f"Skipping duplicate payout to {participant} for prediction {prediction_id}"
                )
                continue

            try:
                self.funds.transfer_out(participant, amount)
            except TransferError as e:
                logger.error(
                    f"Payout to {participant} failed for prediction {prediction_id}: {e}"
                )
                yield PayoutResult(
                    participant=participant,
                    stake=stake,
                    amount=amount,
                    status=PayoutStatus.FAILED,
                    error=str(e),
                )
                continue

            self.store.record_payout(prediction_id, participant, amount)
            logger.info(f"Paid {amount} to {participant} for prediction {prediction_id}")
            yield PayoutResult(participant=participant, stake=stake, amount=amount)
