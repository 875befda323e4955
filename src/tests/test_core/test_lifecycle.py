"""
Tests for PredictionLifecycle
"""

import pytest

from parimutuel.core import (
    AlreadyResolved,
    InvalidOption,
    InvalidParameters,
    PayoutCalculator,
    PredictionLifecycle,
    PredictionNotFound,
    TooEarly,
    Unauthorized,
)
from parimutuel.models import PayoutPolicy, PredictionStatus
from tests.conftest import ONE_HOUR, START_TIME


@pytest.fixture
def lifecycle(store, access, clock, funds):
    return PredictionLifecycle(store, access, clock, PayoutCalculator(store, funds))


@pytest.fixture
def created(lifecycle):
    return lifecycle.create("admin", "T", "D", ["A", "B"], START_TIME + ONE_HOUR)


class TestCreate:
    def test_admin_creates(self, lifecycle, store):
        prediction_id = lifecycle.create("admin", "T", "D", ["A", "B", "C"], START_TIME + 1)

        prediction = store.get_prediction(prediction_id)
        assert prediction.options == ("A", "B", "C")
        assert prediction.created_by == "admin"
        assert prediction.created_at == START_TIME
        assert prediction.status == PredictionStatus.OPEN

    def test_owner_is_implicitly_authorized(self, lifecycle):
        assert lifecycle.create("owner", "T", "", ["A", "B"], START_TIME + 1) == 0

    def test_auth_checked_before_parameters(self, lifecycle):
        with pytest.raises(Unauthorized):
            lifecycle.create("user1", "", "", ["A"], START_TIME - 1)

    @pytest.mark.parametrize(
        "title,options,deadline",
        [
            ("", ["A", "B"], START_TIME + 1),
            ("T", ["A"], START_TIME + 1),
            ("T", ["A", "A"], START_TIME + 1),
            ("T", ["A", "B"], START_TIME),
            ("T", ["A", "B"], START_TIME - 10),
        ],
    )
    def test_invalid_parameters(self, lifecycle, store, title, options, deadline):
        with pytest.raises(InvalidParameters):
            lifecycle.create("admin", title, "", options, deadline)
        assert store.list_predictions() == []


class TestResolve:
    def test_check_order_auth_first(self, lifecycle):
        with pytest.raises(Unauthorized):
            lifecycle.resolve("user1", 99, "Z")

    def test_unknown_prediction(self, lifecycle):
        with pytest.raises(PredictionNotFound):
            lifecycle.resolve("admin", 99, "A")

    def test_too_early(self, lifecycle, created):
        with pytest.raises(TooEarly):
            lifecycle.resolve("admin", created, "A")

    def test_too_early_checked_before_option(self, lifecycle, created):
        with pytest.raises(TooEarly):
            lifecycle.resolve("admin", created, "Z")

    def test_undeclared_winner(self, lifecycle, store, clock, created):
        clock.advance(ONE_HOUR)

        with pytest.raises(InvalidOption):
            lifecycle.resolve("admin", created, "Z")
        assert store.get_prediction(created).is_active is True

    def test_already_resolved_checked_before_option(self, lifecycle, clock, created):
        clock.advance(ONE_HOUR)
        lifecycle.resolve("admin", created, "A")

        with pytest.raises(AlreadyResolved):
            lifecycle.resolve("admin", created, "Z")

    def test_empty_prediction_resolves(self, lifecycle, store, clock, created):
        clock.advance(ONE_HOUR)

        report = lifecycle.resolve("admin", created, "B")

        assert report.policy == PayoutPolicy.RETAINED
        assert report.results == []
        assert report.total_pool == 0
        assert store.get_prediction(created).winning_option == "B"

    def test_status_flips_before_transfers(self, lifecycle, store, funds, clock, created):
        seen = []
        store.record_stake(created, "A", "user1", 5)
        funds.transfer_in("user1", 5)
        funds.on_transfer_out = lambda dest, amount: seen.append(
            store.get_prediction(created).status
        )
        clock.advance(ONE_HOUR)

        lifecycle.resolve("admin", created, "A")

        assert seen == [PredictionStatus.RESOLVED]

    def test_retained_pool_when_nobody_backed_winner(self, lifecycle, store, funds, clock, created):
        store.record_stake(created, "A", "user1", 5)
        funds.transfer_in("user1", 5)
        clock.advance(ONE_HOUR)

        report = lifecycle.resolve("admin", created, "B")

        assert report.policy == PayoutPolicy.RETAINED
        assert report.retained == 5
        assert funds.escrow == 5

    def test_refund_when_configured(self, store, access, clock, funds, created):
        lifecycle = PredictionLifecycle(
            store, access, clock, PayoutCalculator(store, funds, zero_winner_policy="refund")
        )
        store.record_stake(created, "A", "user1", 5)
        funds.transfer_in("user1", 5)
        clock.advance(ONE_HOUR)
        before = funds.balance_of("user1")

        report = lifecycle.resolve("admin", created, "B")

        assert report.policy == PayoutPolicy.REFUND
        assert funds.balance_of("user1") == before + 5
        assert report.retained == 0
