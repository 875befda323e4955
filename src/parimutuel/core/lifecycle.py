"""
Prediction Lifecycle Manager

State Machine:
    OPEN (active) ──resolve──▶ RESOLVED (terminal)

- create: authorized operator opens a prediction with >= 2 distinct options
  and a deadline strictly in the future
- resolve: authorized operator declares the winner at or after the deadline;
  the status flips before any payout transfer, so re-entrant resolve calls
  fail with AlreadyResolved and re-entrant stakes fail with StakingClosed
"""

import logging

from parimutuel.models import PayoutPolicy, ResolutionReport

from .access_control import AuthorizationGate
from .clock import Clock
from .errors import AlreadyResolved, InvalidOption, InvalidParameters, TooEarly, Unauthorized
from .ledger_store import LedgerStore
from .payouts import PayoutCalculator
from .validators import (
    validate_deadline,
    validate_option_declared,
    validate_options,
    validate_resolution_time,
    validate_title,
)

logger = logging.getLogger(__name__)


class PredictionLifecycle:
    """Creates and resolves predictions"""

    def __init__(
        self,
        store: LedgerStore,
        access: AuthorizationGate,
        clock: Clock,
        payouts: PayoutCalculator,
    ):
        self.store = store
        self.access = access
        self.clock = clock
        self.payouts = payouts

    def create(self, caller: str, title: str, description: str, options, deadline: int) -> int:
        """
        Open a new prediction

        Returns:
            The new prediction id

        Raises:
            Unauthorized: Caller is not an admin or the owner
            InvalidParameters: Bad title, options or deadline
        """
        if not self.access.is_authorized(caller):
            raise Unauthorized("Only admin can perform this action")

        now = self.clock.now()

        for is_valid, error in (
            validate_title(title),
            validate_options(options),
            validate_deadline(deadline, now),
        ):
            if not is_valid:
                raise InvalidParameters(error)

        prediction = self.store.add_prediction(
            title=title,
            description=description or "",
            options=tuple(options),
            deadline=deadline,
            created_by=caller,
            created_at=now,
        )
        return prediction.prediction_id

    def resolve(self, caller: str, prediction_id: int, winning_option: str) -> ResolutionReport:
        """
        Declare the winning option and distribute the pool exactly once

        Raises:
            Unauthorized: Caller is not an admin or the owner
            PredictionNotFound: Unknown prediction
            AlreadyResolved: Prediction already resolved
            TooEarly: Clock is before the deadline
            InvalidOption: Winner is not a declared option
        """
        if not self.access.is_authorized(caller):
            raise Unauthorized("Only admin can perform this action", prediction_id)

        now = self.clock.now()
        prediction = self.store.get_prediction(prediction_id)

        if not prediction.is_active:
            raise AlreadyResolved(f"Prediction {prediction_id} already resolved", prediction_id)

        is_valid, error = validate_resolution_time(prediction, now)
        if not is_valid:
            raise TooEarly(error, prediction_id)

        is_valid, error = validate_option_declared(prediction, winning_option)
        if not is_valid:
            raise InvalidOption(error, prediction_id)

        # Everything the report needs is fixed before the one-way transition
        total_pool = self.store.total_pool(prediction_id)
        winning_pool = self.store.option_pool(prediction_id, winning_option)
        policy = self.payouts.select_policy(prediction_id, winning_option)
        dust = self.payouts.dust(prediction_id, winning_option)

        self.store.mark_resolved(prediction_id, winning_option, now)
        logger.info(
            f"Prediction {prediction_id} resolved: winner {winning_option!r}, "
            f"pool {total_pool}, winning pool {winning_pool}, policy {policy.value}"
        )

        results = list(self.payouts.iter_payouts(prediction_id, winning_option))

        report = ResolutionReport(
            prediction_id=prediction_id,
            winning_option=winning_option,
            total_pool=total_pool,
            winning_pool=winning_pool,
            policy=policy,
            results=results,
            dust=dust,
        )

        if policy == PayoutPolicy.RETAINED and total_pool:
            logger.warning(
                f"No stake on winning option {winning_option!r}; "
                f"{total_pool} retained for prediction {prediction_id}"
            )
        if report.failures:
            logger.warning(
                f"{len(report.failures)} payout(s) failed for prediction {prediction_id}; "
                f"{report.failed_total} left undistributed"
            )
        return report
