"""
Parimutuel market manager
"""

import logging
import threading

from parimutuel.models import Prediction, ResolutionReport
from parimutuel.models.events import (
    AdminChanged,
    BetPlaced,
    OperationFailed,
    PayoutFailed,
    PayoutIssued,
    PredictionCreated,
    PredictionResolved,
)
from parimutuel.services import Events, event_bus
from parimutuel.services.logger import PerformanceLogger

from .access_control import AccessControl
from .clock import Clock, SystemClock
from .errors import LedgerError, PredictionNotFound
from .funds import FundsGateway
from .ledger_store import LedgerStore
from .lifecycle import PredictionLifecycle
from .payouts import PayoutCalculator
from .staking import StakingEngine

logger = logging.getLogger(__name__)


class ParimutuelMarket:
    """
    Operation surface of the ledger

    Responsibilities:
    - Serialize operations (one at a time, never interleaved)
    - Route to the lifecycle manager and staking engine
    - Keep resolution reports for later reads
    - Log and publish ledger events
    """

    def __init__(
        self,
        access: AccessControl,
        funds: FundsGateway,
        clock: Clock | None = None,
        store: LedgerStore | None = None,
        bus=None,
        zero_winner_policy: str | None = None,
        dust_policy: str | None = None,
    ):
        self.access = access
        self.funds = funds
        self.clock = clock or SystemClock()
        self.store = store or LedgerStore()
        if bus is None:
            # The shared bus only delivers once its dispatch thread runs
            bus = event_bus
            bus.start()
        self.bus = bus

        self.payouts = PayoutCalculator(
            self.store, funds, zero_winner_policy=zero_winner_policy, dust_policy=dust_policy
        )
        self.lifecycle = PredictionLifecycle(self.store, access, self.clock, self.payouts)
        self.staking = StakingEngine(self.store, funds, self.clock)

        self._resolutions: dict[int, ResolutionReport] = {}
        self._sequencer = threading.RLock()
        logger.info("ParimutuelMarket initialized")

    # ========================================================================
    # ADMINISTRATION
    # ========================================================================

    def add_admin(self, caller: str, identity: str) -> bool:
        with self._sequencer:
            try:
                added = self.access.add_admin(caller, identity)
            except LedgerError as e:
                self._reject("add_admin", caller, e)
                raise
            self._publish(
                Events.ADMIN_ADDED,
                AdminChanged(
                    clock=self.clock.now(), action="added", identity=identity, changed_by=caller
                ),
            )
            return added

    def remove_admin(self, caller: str, identity: str) -> bool:
        with self._sequencer:
            try:
                removed = self.access.remove_admin(caller, identity)
            except LedgerError as e:
                self._reject("remove_admin", caller, e)
                raise
            self._publish(
                Events.ADMIN_REMOVED,
                AdminChanged(
                    clock=self.clock.now(), action="removed", identity=identity, changed_by=caller
                ),
            )
            return removed

    def is_admin(self, identity: str) -> bool:
        return self.access.is_admin(identity)

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    def create_prediction(
        self, caller: str, title: str, description: str, options, deadline: int
    ) -> int:
        """
        Create a prediction

        Returns:
            Sequential prediction id
        """
        with self._sequencer:
            try:
                prediction_id = self.lifecycle.create(caller, title, description, options, deadline)
            except LedgerError as e:
                self._reject("create_prediction", caller, e)
                raise

            prediction = self.store.get_prediction(prediction_id)
            self._publish(
                Events.PREDICTION_CREATED,
                PredictionCreated(
                    clock=prediction.created_at,
                    prediction_id=prediction_id,
                    title=prediction.title,
                    options=list(prediction.options),
                    deadline=prediction.deadline,
                    created_by=caller,
                ),
            )
            logger.info(
                f"CREATE: prediction {prediction_id} by {caller} "
                f"options={list(prediction.options)} deadline={prediction.deadline}"
            )
            return prediction_id

    def place_bet(self, caller: str, prediction_id: int, option: str, amount: int) -> dict:
        """
        Stake on an option

        Returns:
            Stake record with the caller's new total and the option pool
        """
        with self._sequencer:
            try:
                record = self.staking.place_stake(caller, prediction_id, option, amount)
            except LedgerError as e:
                self._reject("place_bet", caller, e, prediction_id)
                raise

            self._publish(
                Events.BET_PLACED,
                BetPlaced(
                    clock=self.clock.now(),
                    prediction_id=prediction_id,
                    option=option,
                    participant=caller,
                    amount=amount,
                    participant_stake=record["participant_stake"],
                    option_pool=record["option_pool"],
                ),
            )
            return record

    def end_prediction(
        self, caller: str, prediction_id: int, winning_option: str
    ) -> ResolutionReport:
        """
        Resolve a prediction and distribute its pool

        Returns:
            ResolutionReport with one result per paid (or failed) participant
        """
        with self._sequencer:
            with PerformanceLogger(logger, f"resolve prediction {prediction_id}"):
                try:
                    report = self.lifecycle.resolve(caller, prediction_id, winning_option)
                except LedgerError as e:
                    self._reject("end_prediction", caller, e, prediction_id)
                    raise

            self._resolutions[prediction_id] = report
            now = self.clock.now()

            for result in report.results:
                if result.succeeded:
                    self._publish(
                        Events.PAYOUT_ISSUED,
                        PayoutIssued(
                            clock=now,
                            prediction_id=prediction_id,
                            participant=result.participant,
                            stake=result.stake,
                            amount=result.amount,
                        ),
                    )
                else:
                    self._publish(
                        Events.PAYOUT_FAILED,
                        PayoutFailed(
                            clock=now,
                            prediction_id=prediction_id,
                            participant=result.participant,
                            amount=result.amount,
                            error=result.error or "",
                        ),
                    )

            self._publish(
                Events.PREDICTION_RESOLVED,
                PredictionResolved(
                    clock=now,
                    prediction_id=prediction_id,
                    winning_option=winning_option,
                    total_pool=report.total_pool,
                    winning_pool=report.winning_pool,
                    policy=report.policy.value,
                    paid_total=report.paid_total,
                    failed_count=len(report.failures),
                    dust=report.dust,
                    resolved_by=caller,
                ),
            )
            return report

    # ========================================================================
    # READ ACCESSORS
    # ========================================================================

    def get_prediction(self, prediction_id: int) -> Prediction:
        return self.store.get_prediction(prediction_id)

    def get_options(self, prediction_id: int) -> list[str]:
        return list(self.store.get_prediction(prediction_id).options)

    def get_total_stake(self, prediction_id: int, option: str) -> int:
        """Option pool total (0 for unstaked options)"""
        return self.store.option_pool(prediction_id, option)

    def get_participant_stake(self, prediction_id: int, option: str, participant: str) -> int:
        return self.store.participant_stake(prediction_id, option, participant)

    def get_total_pool(self, prediction_id: int) -> int:
        return self.store.total_pool(prediction_id)

    def get_resolution(self, prediction_id: int) -> ResolutionReport | None:
        """Report of a resolved prediction, None while it is open"""
        with self._sequencer:
            if not self.store.has_prediction(prediction_id):
                raise PredictionNotFound(
                    f"Prediction {prediction_id} does not exist", prediction_id
                )
            return self._resolutions.get(prediction_id)

    def list_predictions(self) -> list[Prediction]:
        return self.store.list_predictions()

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _publish(self, event: Events, payload):
        self.bus.publish(event, payload.model_dump(mode="json"))

    def _reject(self, operation: str, caller: str, error: LedgerError, prediction_id=None):
        logger.warning(f"{operation.upper()} rejected for {caller}: [{error.code}] {error.message}")
        self._publish(
            Events.OPERATION_FAILED,
            OperationFailed(
                clock=self.clock.now(),
                operation=operation,
                caller=caller,
                code=error.code,
                message=error.message,
                prediction_id=prediction_id if prediction_id is not None else error.prediction_id,
            ),
        )
