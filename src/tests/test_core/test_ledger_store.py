"""
Tests for LedgerStore
"""

import threading

import pytest

from parimutuel.config import config
from parimutuel.core import AlreadyResolved, LedgerEvents, LedgerStore, PredictionNotFound, StakingClosed
from parimutuel.models import PredictionStatus


def add(store, options=("A", "B")):
    return store.add_prediction("Title", "Desc", options, deadline=100, created_by="admin", created_at=0)


class TestLedgerStoreInitialization:
    """Test store creation"""

    def test_store_starts_empty(self, store):
        assert store.list_predictions() == []
        assert store.has_prediction(0) is False
        assert store.get_stats("predictions_created") == 0

    def test_ids_are_sequential_from_zero(self, store):
        ids = [add(store).prediction_id for _ in range(3)]
        assert ids == [0, 1, 2]


class TestPredictionRecords:
    """Test prediction lookups and the resolve transition"""

    def test_get_prediction_returns_copy(self, store):
        add(store)

        copy = store.get_prediction(0)
        copy.status = PredictionStatus.RESOLVED

        assert store.get_prediction(0).is_active is True

    def test_unknown_prediction_raises(self, store):
        with pytest.raises(PredictionNotFound):
            store.get_prediction(7)

    def test_mark_resolved_sets_fields(self, store):
        add(store)

        prediction = store.mark_resolved(0, "B", 150)

        assert prediction.status == PredictionStatus.RESOLVED
        assert prediction.winning_option == "B"
        assert prediction.resolved_at == 150

    def test_mark_resolved_is_one_way(self, store):
        add(store)
        store.mark_resolved(0, "A", 150)

        with pytest.raises(AlreadyResolved):
            store.mark_resolved(0, "B", 151)
        assert store.get_prediction(0).winning_option == "A"


class TestStakes:
    """Test pool and stake accounting"""

    def test_record_stake_updates_totals(self, store):
        add(store)

        record = store.record_stake(0, "A", "u1", 5)

        assert record["participant_stake"] == 5
        assert record["option_pool"] == 5
        assert store.option_pool(0, "A") == 5
        assert store.participant_stake(0, "A", "u1") == 5
        assert store.received(0) == 5

    def test_pool_equals_sum_of_stakes(self, store):
        add(store)
        store.record_stake(0, "A", "u1", 5)
        store.record_stake(0, "A", "u2", 7)
        store.record_stake(0, "A", "u1", 1)
        store.record_stake(0, "B", "u3", 4)

        assert store.option_pool(0, "A") == sum(amount for _, amount in store.iter_stakes(0, "A"))
        assert store.total_pool(0) == 17
        assert store.stake_records_total(0) == 17

    def test_stakers_in_first_stake_order(self, store):
        add(store)
        store.record_stake(0, "A", "u2", 1)
        store.record_stake(0, "A", "u1", 1)
        store.record_stake(0, "A", "u2", 1)

        assert store.stakers(0, "A") == ["u2", "u1"]

    def test_participant_totals_span_options(self, store):
        add(store)
        store.record_stake(0, "A", "u1", 2)
        store.record_stake(0, "B", "u2", 3)
        store.record_stake(0, "B", "u1", 4)

        assert store.participant_totals(0) == {"u1": 6, "u2": 3}

    def test_unstaked_reads_are_zero(self, store):
        add(store)

        assert store.option_pool(0, "A") == 0
        assert store.participant_stake(0, "A", "nobody") == 0
        assert store.total_pool(42) == 0

    def test_no_stake_after_resolution(self, store):
        add(store)
        store.mark_resolved(0, "A", 150)

        with pytest.raises(StakingClosed):
            store.record_stake(0, "A", "u1", 1)
        assert store.total_pool(0) == 0

    def test_concurrent_stakes_are_not_lost(self, store):
        add(store)

        def worker(name):
            for _ in range(200):
                store.record_stake(0, "A", name, 1)

        threads = [threading.Thread(target=worker, args=(f"u{i}",)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.option_pool(0, "A") == 1000
        assert store.received(0) == 1000


class TestPayoutRecords:
    """Test payout bookkeeping"""

    def test_record_payout(self, store):
        add(store)
        store.record_stake(0, "A", "u1", 5)

        store.record_payout(0, "u1", 5)

        assert store.paid_out(0) == 5
        assert store.has_been_paid(0, "u1") is True

    def test_duplicate_payout_rejected(self, store):
        add(store)
        store.record_stake(0, "A", "u1", 5)
        store.record_payout(0, "u1", 2)

        with pytest.raises(ValueError, match="already paid"):
            store.record_payout(0, "u1", 2)

    def test_overpay_rejected(self, store):
        add(store)
        store.record_stake(0, "A", "u1", 5)

        with pytest.raises(ValueError, match="exceeds"):
            store.record_payout(0, "u1", 6)
        assert store.paid_out(0) == 0


class TestObservers:
    """Test the observer pattern"""

    def test_subscribe_receives_events(self, store):
        received = []
        store.subscribe(LedgerEvents.STAKE_RECORDED, received.append)
        add(store)

        store.record_stake(0, "A", "u1", 3)

        assert received[0]["amount"] == 3

    def test_unsubscribe(self, store):
        received = []
        store.subscribe(LedgerEvents.PREDICTION_ADDED, received.append)
        store.unsubscribe(LedgerEvents.PREDICTION_ADDED, received.append)

        add(store)

        assert received == []

    def test_observer_error_does_not_break_store(self, store):
        def broken(data):
            raise RuntimeError("boom")

        store.subscribe(LedgerEvents.PREDICTION_ADDED, broken)

        prediction = add(store)

        assert store.has_prediction(prediction.prediction_id)

    def test_transaction_log(self, store):
        add(store)
        store.record_stake(0, "A", "u1", 3)

        log = store.get_transaction_log()

        assert [entry["type"] for entry in log] == ["prediction_added", "stake"]
        assert store.get_transaction_log(limit=1)[0]["amount"] == 3

    def test_transaction_log_size_from_config(self):
        config.set("memory", "max_transaction_log", 2)
        small = LedgerStore()

        for _ in range(3):
            add(small)

        assert len(small.get_transaction_log()) == 2
