"""
Tests for ledger event schemas
"""

import pytest
from pydantic import ValidationError

from parimutuel.models.events import (
    AdminChanged,
    BetPlaced,
    OperationFailed,
    PredictionCreated,
    PredictionResolved,
)


class TestPredictionCreated:
    def test_valid(self):
        event = PredictionCreated(
            clock=5, prediction_id=0, title="T", options=["A", "B"], deadline=10, created_by="admin"
        )

        data = event.model_dump(mode="json")
        assert data["options"] == ["A", "B"]
        assert "occurred_at" in data

    def test_requires_two_options(self):
        with pytest.raises(ValidationError):
            PredictionCreated(
                clock=5, prediction_id=0, title="T", options=["A"], deadline=10, created_by="admin"
            )

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            PredictionCreated(
                clock=5,
                prediction_id=0,
                title="T",
                options=["A", "B"],
                deadline=10,
                created_by="admin",
                colour="red",
            )


class TestBetPlaced:
    def test_amount_must_be_positive(self):
        with pytest.raises(ValidationError):
            BetPlaced(
                clock=1,
                prediction_id=0,
                option="A",
                participant="u1",
                amount=0,
                participant_stake=1,
                option_pool=1,
            )

    def test_large_amounts_survive_json_dump(self):
        amount = 3 * 10**18
        event = BetPlaced(
            clock=1,
            prediction_id=0,
            option="A",
            participant="u1",
            amount=amount,
            participant_stake=amount,
            option_pool=amount,
        )

        assert event.model_dump(mode="json")["option_pool"] == amount


class TestResolutionEvents:
    def test_policy_literal(self):
        with pytest.raises(ValidationError):
            PredictionResolved(
                clock=1,
                prediction_id=0,
                winning_option="A",
                total_pool=1,
                winning_pool=1,
                policy="lottery",
                paid_total=1,
                resolved_by="admin",
            )

    def test_admin_action_literal(self):
        assert AdminChanged(clock=1, action="added", identity="a", changed_by="owner").action == "added"
        with pytest.raises(ValidationError):
            AdminChanged(clock=1, action="promoted", identity="a", changed_by="owner")

    def test_operation_failed_truncates_message(self):
        event = OperationFailed(
            clock=1, operation="place_bet", caller="u1", code="INVALID_AMOUNT", message="x" * 600
        )

        assert len(event.message) == 500
        assert event.message.endswith("...")
        assert event.prediction_id is None
