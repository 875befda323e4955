"""
Command-line entry point

    python -m parimutuel demo [--winner B] [--json]

Runs the two-option, three-bettor scenario against in-memory collaborators
and prints the resulting payouts.
"""

import argparse
import json
import logging
import sys

from parimutuel import __version__
from parimutuel.config import ConfigError, config
from parimutuel.core import AccessControl, InMemoryFunds, LedgerError, ManualClock, ParimutuelMarket
from parimutuel.services import EventBus, setup_logging
from parimutuel.services.ledger_auditor import LedgerAuditor
from parimutuel.utils import format_amount, to_base_units

logger = logging.getLogger(__name__)

DEMO_BETS = [
    ("user1", "A", "1"),
    ("user2", "B", "2"),
    ("user3", "B", "3"),
]


def run_demo(winner: str, zero_winner_policy: str | None = None, dust_policy: str | None = None):
    """
    Build a market, take the demo bets and resolve it

    Returns:
        (market, funds, report, starting balances)
    """
    clock = ManualClock(start=1_000)
    access = AccessControl(owner="owner")
    funds = InMemoryFunds()
    market = ParimutuelMarket(
        access,
        funds,
        clock=clock,
        bus=EventBus(),
        zero_winner_policy=zero_winner_policy,
        dust_policy=dust_policy,
    )
    market.add_admin("owner", "admin")

    starting = {}
    for user, _, _ in DEMO_BETS:
        funds.deposit(user, to_base_units("100"))
        starting[user] = funds.balance_of(user)

    prediction_id = market.create_prediction(
        "admin", "Demo prediction", "Which option wins?", ["A", "B"], clock.now() + 3600
    )
    for user, option, amount in DEMO_BETS:
        market.place_bet(user, prediction_id, option, to_base_units(amount))

    clock.advance(3600)
    report = market.end_prediction("admin", prediction_id, winner)
    return market, funds, report, starting


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="parimutuel", description="Parimutuel ledger tools")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Console log level (default from config)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    demo = subparsers.add_parser("demo", help="Run the three-bettor demo scenario")
    demo.add_argument("--winner", default="A", help="Winning option label (A or B)")
    demo.add_argument("--zero-winner-policy", choices=["retain", "refund"], default=None)
    demo.add_argument("--dust-policy", choices=["retain", "largest_stake"], default=None)
    demo.add_argument("--json", action="store_true", help="Print the resolution report as JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides = {"file_output": False}
    if args.log_level:
        overrides["console_level"] = args.log_level.upper()
    setup_logging(overrides)

    try:
        config.validate()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        market, funds, report, starting = run_demo(
            args.winner, args.zero_winner_policy, args.dust_policy
        )
    except LedgerError as e:
        print(f"Demo failed: [{e.code}] {e.message}", file=sys.stderr)
        return 1

    audit = LedgerAuditor(market.store).verify(report.prediction_id)

    if args.json:
        print(json.dumps({"report": report.to_dict(), "audit": audit}, indent=2, default=str))
        return 0

    print(f"Winner: {report.winning_option}  (policy: {report.policy.value})")
    print(f"Total pool: {format_amount(report.total_pool)}")
    for user in starting:
        net = funds.balance_of(user) - starting[user]
        sign = "+" if net >= 0 else "-"
        print(f"  {user}: payout {format_amount(report.payout_for(user))}  net {sign}{format_amount(abs(net))}")
    print(f"Dust: {report.dust}  Retained: {format_amount(report.retained)}")
    print(f"Audit: {'OK' if audit['verified'] else 'DRIFT'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
