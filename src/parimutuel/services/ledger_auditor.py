"""
Ledger Auditor

Checks the conservation invariants of a LedgerStore:

    sum(option pools) == sum(stake records) == funds received

and, once a prediction is resolved, that payouts never exceed what was
received. Logs drift when any check fails.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class LedgerAuditor:
    """Verifies ledger accounting against its own records."""

    def __init__(self, store):
        """
        Args:
            store: LedgerStore instance to audit
        """
        self.store = store
        self.violation_count = 0
        self.total_verifications = 0
        self.last_verification: dict[str, Any] | None = None

    def verify(self, prediction_id: int) -> dict[str, Any]:
        """
        Audit one prediction

        Returns:
            Dict with the verification result and the compared totals
        """
        self.total_verifications += 1
        prediction = self.store.get_prediction(prediction_id)

        pools = self.store.total_pool(prediction_id)
        stakes = self.store.stake_records_total(prediction_id)
        received = self.store.received(prediction_id)
        paid = self.store.paid_out(prediction_id)
        retained = received - paid

        pools_ok = pools == stakes
        received_ok = stakes == received
        payout_ok = 0 <= paid <= received
        if prediction.is_active:
            # Nothing may leave before resolution
            payout_ok = payout_ok and paid == 0

        all_ok = pools_ok and received_ok and payout_ok

        if not all_ok:
            self.violation_count += 1
            logger.warning(
                f"Ledger drift on prediction {prediction_id}! "
                f"pools: {pools}, stakes: {stakes}, received: {received}, paid: {paid}"
            )

        result = {
            "prediction_id": prediction_id,
            "verified": all_ok,
            "resolved": not prediction.is_active,
            "pools": {"total": pools, "ok": pools_ok},
            "stakes": {"total": stakes, "ok": received_ok},
            "received": received,
            "paid_out": {"total": paid, "ok": payout_ok},
            "retained": retained,
            "violation_count": self.violation_count,
            "total_verifications": self.total_verifications,
        }

        self.last_verification = result
        return result

    def verify_all(self) -> dict[str, Any]:
        """Audit every prediction in the store"""
        results = [self.verify(p.prediction_id) for p in self.store.list_predictions()]
        failed = [r["prediction_id"] for r in results if not r["verified"]]
        return {
            "verified": not failed,
            "checked": len(results),
            "failed": failed,
            "results": results,
        }

    def get_stats(self) -> dict[str, Any]:
        return {
            "violation_count": self.violation_count,
            "total_verifications": self.total_verifications,
            "violation_rate": (
                self.violation_count / self.total_verifications
                if self.total_verifications > 0
                else 0.0
            ),
        }
