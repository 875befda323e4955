"""
Tests for the command-line demo
"""

import json
import logging

import pytest

from parimutuel.__main__ import main, run_demo
from parimutuel.models import PayoutPolicy
from parimutuel.services.logger import cleanup_logging
from tests.conftest import ether


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    cleanup_logging()
    root.handlers = saved_handlers
    root.setLevel(saved_level)


class TestRunDemo:
    def test_winner_b(self):
        market, funds, report, starting = run_demo("B")

        assert report.payout_for("user2") == ether("2.4")
        assert report.payout_for("user3") == ether("3.6")
        assert funds.balance_of("user1") == starting["user1"] - ether(1)

    def test_refund_policy_leaves_backed_winner_proportional(self):
        market, funds, report, starting = run_demo("A", zero_winner_policy="refund")

        assert report.policy == PayoutPolicy.PROPORTIONAL
        assert report.paid_total == ether(6)


class TestMain:
    def test_json_output(self, capsys):
        assert main(["--log-level", "ERROR", "demo", "--winner", "B", "--json"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["report"]["paid_total"] == ether(6)
        assert data["audit"]["verified"] is True

    def test_text_output(self, capsys):
        assert main(["demo", "--winner", "A"]) == 0

        out = capsys.readouterr().out
        assert "Winner: A" in out
        assert "Audit: OK" in out

    def test_undeclared_winner_fails(self, capsys):
        assert main(["demo", "--winner", "C"]) == 1
        assert "INVALID_OPTION" in capsys.readouterr().err
