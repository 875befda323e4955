"""
Currency transfer collaborators

`FundsGateway` is what the ledger consumes. `InMemoryFunds` is a wallet
implementation that keeps participant balances plus the escrow account the
ledger pulls stakes into and pays winnings out of.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from .errors import TransferError

logger = logging.getLogger(__name__)

MAX_TRANSFER_LOG_SIZE = 1000


class FundsGateway(Protocol):
    """Funds movement consumed by the ledger; failures raise TransferError"""

    def transfer_in(self, source: str, amount: int) -> None: ...

    def transfer_out(self, destination: str, amount: int) -> None: ...


class InMemoryFunds:
    """
    In-memory wallet with an escrow balance

    Attributes:
        on_transfer_out: Optional hook called before each payout is credited.
            Raising from it rejects that transfer. Lets a receiving account
            behave like a contract with a fallback.
    """

    def __init__(self, balances: dict[str, int] | None = None):
        self._balances: dict[str, int] = dict(balances or {})
        self._escrow = 0
        self._rejecting: set[str] = set()
        self._transfer_log: deque[dict] = deque(maxlen=MAX_TRANSFER_LOG_SIZE)
        self._lock = threading.RLock()
        self.on_transfer_out: Callable[[str, int], None] | None = None

    # ========== Account Management ==========

    def deposit(self, account: str, amount: int):
        """Credit an account from outside the system"""
        if amount < 0:
            raise ValueError(f"Deposit must be non-negative, got {amount}")
        with self._lock:
            self._balances[account] = self._balances.get(account, 0) + amount

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    @property
    def escrow(self) -> int:
        with self._lock:
            return self._escrow

    def reject_payments_to(self, account: str):
        """Make future transfers to `account` fail"""
        with self._lock:
            self._rejecting.add(account)

    def accept_payments_to(self, account: str):
        with self._lock:
            self._rejecting.discard(account)

    # ========== FundsGateway ==========

    def transfer_in(self, source: str, amount: int) -> None:
        """Move `amount` from `source` into escrow"""
        with self._lock:
            balance = self._balances.get(source, 0)
            if amount <= 0:
                raise TransferError(f"Invalid transfer amount {amount}", source, amount)
            if balance < amount:
                raise TransferError(
                    f"Insufficient balance: {source} has {balance}, needs {amount}", source, amount
                )
            self._balances[source] = balance - amount
            self._escrow += amount
            self._log("transfer_in", source, amount)

    def transfer_out(self, destination: str, amount: int) -> None:
        """Move `amount` from escrow to `destination`"""
        if self.on_transfer_out is not None:
            try:
                self.on_transfer_out(destination, amount)
            except TransferError:
                raise
            except Exception as e:
                raise TransferError(
                    f"Receiver {destination} rejected funds: {e}", destination, amount
                ) from e

        with self._lock:
            if destination in self._rejecting:
                raise TransferError(f"Receiver {destination} rejects funds", destination, amount)
            if amount > self._escrow:
                raise TransferError(
                    f"Escrow underflow: holding {self._escrow}, asked for {amount}",
                    destination,
                    amount,
                )
            self._escrow -= amount
            self._balances[destination] = self._balances.get(destination, 0) + amount
            self._log("transfer_out", destination, amount)

    # ========== History ==========

    def _log(self, kind: str, account: str, amount: int):
        self._transfer_log.append(
            {"timestamp": datetime.now(), "type": kind, "account": account, "amount": amount}
        )
        logger.debug(f"{kind}: {account} {amount} (escrow {self._escrow})")

    def get_transfer_log(self, limit: int | None = None) -> list[dict]:
        with self._lock:
            log_list = list(self._transfer_log)
            if limit:
                return log_list[-limit:]
            return log_list
