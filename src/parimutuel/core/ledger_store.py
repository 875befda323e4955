"""
Ledger Store Module
Owns predictions, option pools and stake records with thread-safe mutation
and observer notifications
"""

import logging
import threading
from collections import defaultdict, deque
from collections.abc import Callable, Iterator
from datetime import datetime
from enum import Enum
from typing import Any

from parimutuel.config import config
from parimutuel.models import Prediction, PredictionStatus

from .errors import AlreadyResolved, PredictionNotFound, StakingClosed

logger = logging.getLogger(__name__)


class LedgerEvents(Enum):
    """Events emitted by the store after a committed mutation"""

    PREDICTION_ADDED = "prediction_added"
    STAKE_RECORDED = "stake_recorded"
    PREDICTION_RESOLVED = "prediction_resolved"
    PAYOUT_RECORDED = "payout_recorded"


class LedgerStore:
    """
    Persistent ledger state

    Layout:
        predictions: prediction id -> Prediction
        pools:       (prediction id, option) -> pool total
        stakes:      (prediction id, option, participant) -> stake total
        stakers:     (prediction id, option) -> participants in first-stake order

    Pools and stakes only grow until resolution. Amounts are int base units.
    """

    def __init__(self):
        self._predictions: dict[int, Prediction] = {}
        self._pools: dict[tuple[int, str], int] = {}
        self._stakes: dict[tuple[int, str, str], int] = {}
        self._stakers: dict[tuple[int, str], list[str]] = {}
        self._received: dict[int, int] = defaultdict(int)
        self._paid_out: dict[int, int] = defaultdict(int)
        self._paid_participants: dict[int, set[str]] = defaultdict(set)
        self._next_id = 0

        self._stats = {
            "predictions_created": 0,
            "predictions_resolved": 0,
            "stakes_recorded": 0,
            "payouts_recorded": 0,
            "total_staked": 0,
            "total_paid_out": 0,
        }

        self._transaction_log: deque[dict] = deque(
            maxlen=config.get("memory", "max_transaction_log", 10000)
        )
        self._observers: dict[LedgerEvents, list[Callable]] = defaultdict(list)
        self._lock = threading.RLock()

        logger.info("LedgerStore initialized")

    # ========== Prediction Records ==========

    def add_prediction(
        self,
        title: str,
        description: str,
        options,
        deadline: int,
        created_by: str,
        created_at: int,
    ) -> Prediction:
        """Store a new prediction under the next sequential id"""
        with self._lock:
            prediction = Prediction(
                prediction_id=self._next_id,
                title=title,
                description=description,
                options=tuple(options),
                deadline=deadline,
                created_by=created_by,
                created_at=created_at,
            )
            self._predictions[prediction.prediction_id] = prediction
            self._next_id += 1
            self._stats["predictions_created"] += 1
            self._log("prediction_added", prediction.prediction_id, created_by, 0)
            snapshot = prediction.copy()

        self._emit(LedgerEvents.PREDICTION_ADDED, snapshot)
        logger.info(f"Prediction {snapshot.prediction_id} stored: {snapshot.title!r}")
        return snapshot

    def has_prediction(self, prediction_id: int) -> bool:
        with self._lock:
            return prediction_id in self._predictions

    def get_prediction(self, prediction_id: int) -> Prediction:
        """
        Get a detached copy of a prediction

        Raises:
            PredictionNotFound: If the id was never assigned
        """
        with self._lock:
            prediction = self._predictions.get(prediction_id)
            if prediction is None:
                raise PredictionNotFound(
                    f"Prediction {prediction_id} does not exist", prediction_id
                )
            return prediction.copy()

    def list_predictions(self) -> list[Prediction]:
        with self._lock:
            return [self._predictions[pid].copy() for pid in sorted(self._predictions)]

    def mark_resolved(self, prediction_id: int, winning_option: str, resolved_at: int) -> Prediction:
        """
        One-way transition to RESOLVED

        Raises:
            AlreadyResolved: If the prediction is no longer active
        """
        with self._lock:
            prediction = self._predictions.get(prediction_id)
            if prediction is None:
                raise PredictionNotFound(
                    f"Prediction {prediction_id} does not exist", prediction_id
                )
            if not prediction.is_active:
                raise AlreadyResolved(
                    f"Prediction {prediction_id} already resolved", prediction_id
                )
            prediction.status = PredictionStatus.RESOLVED
            prediction.winning_option = winning_option
            prediction.resolved_at = resolved_at
            self._stats["predictions_resolved"] += 1
            self._log("prediction_resolved", prediction_id, winning_option, 0)
            snapshot = prediction.copy()

        self._emit(LedgerEvents.PREDICTION_RESOLVED, snapshot)
        return snapshot

    # ========== Stakes ==========

    def record_stake(self, prediction_id: int, option: str, participant: str, amount: int) -> dict:
        """
        Add a stake to the option pool, the participant record and received funds

        Returns:
            Dict with the new participant stake and option pool totals
        """
        with self._lock:
            prediction = self._predictions.get(prediction_id)
            if prediction is None:
                raise PredictionNotFound(
                    f"Prediction {prediction_id} does not exist", prediction_id
                )
            if not prediction.is_active:
                raise StakingClosed(
                    f"Prediction {prediction_id} is closed for staking", prediction_id
                )

            pool_key = (prediction_id, option)
            stake_key = (prediction_id, option, participant)

            if stake_key not in self._stakes:
                self._stakers.setdefault(pool_key, []).append(participant)

            self._stakes[stake_key] = self._stakes.get(stake_key, 0) + amount
            self._pools[pool_key] = self._pools.get(pool_key, 0) + amount
            self._received[prediction_id] += amount

            self._stats["stakes_recorded"] += 1
            self._stats["total_staked"] += amount
            self._log("stake", prediction_id, participant, amount, option=option)

            record = {
                "prediction_id": prediction_id,
                "option": option,
                "participant": participant,
                "amount": amount,
                "participant_stake": self._stakes[stake_key],
                "option_pool": self._pools[pool_key],
            }

        self._emit(LedgerEvents.STAKE_RECORDED, record)
        return record

    def option_pool(self, prediction_id: int, option: str) -> int:
        with self._lock:
            return self._pools.get((prediction_id, option), 0)

    def participant_stake(self, prediction_id: int, option: str, participant: str) -> int:
        with self._lock:
            return self._stakes.get((prediction_id, option, participant), 0)

    def total_pool(self, prediction_id: int) -> int:
        """Sum of all option pools for a prediction"""
        with self._lock:
            prediction = self._predictions.get(prediction_id)
            if prediction is None:
                return 0
            return sum(self._pools.get((prediction_id, o), 0) for o in prediction.options)

    def stakers(self, prediction_id: int, option: str) -> list[str]:
        """Participants with a stake on the option, in first-stake order"""
        with self._lock:
            return list(self._stakers.get((prediction_id, option), []))

    def iter_stakes(self, prediction_id: int, option: str) -> Iterator[tuple[str, int]]:
        """Yield (participant, stake) pairs for one option"""
        for participant in self.stakers(prediction_id, option):
            yield participant, self.participant_stake(prediction_id, option, participant)

    def participant_totals(self, prediction_id: int) -> dict[str, int]:
        """Each participant's stake summed across all options, in first-stake order"""
        with self._lock:
            totals: dict[str, int] = {}
            prediction = self._predictions.get(prediction_id)
            if prediction is None:
                return totals
            for option in prediction.options:
                for participant in self._stakers.get((prediction_id, option), []):
                    totals[participant] = (
                        totals.get(participant, 0)
                        + self._stakes[(prediction_id, option, participant)]
                    )
            return totals

    def stake_records_total(self, prediction_id: int) -> int:
        with self._lock:
            return sum(
                amount for (pid, _, _), amount in self._stakes.items() if pid == prediction_id
            )

    # ========== Funds Accounting ==========

    def received(self, prediction_id: int) -> int:
        """Funds taken in for a prediction"""
        with self._lock:
            return self._received.get(prediction_id, 0)

    def paid_out(self, prediction_id: int) -> int:
        """Funds transferred out for a prediction (committed transfers only)"""
        with self._lock:
            return self._paid_out.get(prediction_id, 0)

    def has_been_paid(self, prediction_id: int, participant: str) -> bool:
        with self._lock:
            return participant in self._paid_participants.get(prediction_id, set())

    def record_payout(self, prediction_id: int, participant: str, amount: int):
        """
        Record a committed payout

        Raises:
            ValueError: If the participant was already paid or the payout
                would exceed the funds received
        """
        with self._lock:
            if participant in self._paid_participants[prediction_id]:
                raise ValueError(
                    f"Participant {participant} already paid for prediction {prediction_id}"
                )
            if self._paid_out[prediction_id] + amount > self._received[prediction_id]:
                raise ValueError(
                    f"Payout of {amount} exceeds funds held for prediction {prediction_id}"
                )
            self._paid_participants[prediction_id].add(participant)
            self._paid_out[prediction_id] += amount
            self._stats["payouts_recorded"] += 1
            self._stats["total_paid_out"] += amount
            self._log("payout", prediction_id, participant, -amount)

        self._emit(
            LedgerEvents.PAYOUT_RECORDED,
            {"prediction_id": prediction_id, "participant": participant, "amount": amount},
        )

    # ========== Observer Pattern ==========

    def subscribe(self, event: LedgerEvents, callback: Callable):
        """Subscribe to committed-mutation events"""
        with self._lock:
            self._observers[event].append(callback)
            logger.debug(f"Subscribed to {event.value}")

    def unsubscribe(self, event: LedgerEvents, callback: Callable):
        with self._lock:
            if callback in self._observers[event]:
                self._observers[event].remove(callback)
                logger.debug(f"Unsubscribed from {event.value}")

    def _emit(self, event: LedgerEvents, data: Any = None):
        """Notify observers outside the lock"""
        with self._lock:
            callbacks = list(self._observers[event])

        for callback in callbacks:
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Observer callback error for {event.value}: {e}")

    # ========== History and Stats ==========

    def _log(self, kind: str, prediction_id: int, party: str, amount: int, **extra):
        entry = {
            "timestamp": datetime.now(),
            "type": kind,
            "prediction_id": prediction_id,
            "party": party,
            "amount": amount,
        }
        entry.update(extra)
        self._transaction_log.append(entry)

    def get_transaction_log(self, limit: int | None = None) -> list[dict]:
        with self._lock:
            log_list = list(self._transaction_log)
            if limit:
                return log_list[-limit:]
            return log_list

    def get_stats(self, key: str | None = None) -> Any:
        with self._lock:
            if key:
                return self._stats.get(key)
            return self._stats.copy()
