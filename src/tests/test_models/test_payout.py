"""
Tests for PayoutResult and ResolutionReport
"""

from parimutuel.models import PayoutPolicy, PayoutResult, PayoutStatus, ResolutionReport


def report(results, total_pool=10, dust=0):
    return ResolutionReport(
        prediction_id=0,
        winning_option="A",
        total_pool=total_pool,
        winning_pool=5,
        policy=PayoutPolicy.PROPORTIONAL,
        results=results,
        dust=dust,
    )


class TestPayoutResult:
    def test_default_is_paid(self):
        result = PayoutResult(participant="u1", stake=1, amount=2)

        assert result.succeeded is True
        assert result.to_dict()["status"] == "paid"

    def test_failed(self):
        result = PayoutResult("u1", 1, 2, status=PayoutStatus.FAILED, error="rejected")

        assert result.succeeded is False
        assert result.to_dict()["error"] == "rejected"


class TestResolutionReport:
    def test_totals(self):
        r = report(
            [
                PayoutResult("u1", 2, 4),
                PayoutResult("u2", 3, 5, status=PayoutStatus.FAILED, error="x"),
            ]
        )

        assert r.paid_total == 4
        assert r.failed_total == 5
        assert [f.participant for f in r.failures] == ["u2"]
        assert r.retained == 6

    def test_payout_for_counts_only_paid(self):
        r = report([PayoutResult("u1", 2, 4), PayoutResult("u2", 3, 5, status=PayoutStatus.FAILED)])

        assert r.payout_for("u1") == 4
        assert r.payout_for("u2") == 0
        assert r.payout_for("nobody") == 0

    def test_retained_includes_dust(self):
        r = report([PayoutResult("u1", 1, 3), PayoutResult("u2", 1, 3)], total_pool=7, dust=1)

        assert r.retained == 1

    def test_to_dict(self):
        data = report([PayoutResult("u1", 5, 10)]).to_dict()

        assert data["policy"] == "proportional"
        assert data["paid_total"] == 10
        assert data["retained"] == 0
        assert data["results"][0]["participant"] == "u1"
