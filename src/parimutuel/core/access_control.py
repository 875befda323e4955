"""
Access Control Gate

The ledger only ever *queries* authorization. `AccessControl` is the
allow-list reference gate: one immutable owner plus a mutable set of admins
that only the owner may change.
"""

import logging
import threading
from typing import Protocol

from .errors import Unauthorized

logger = logging.getLogger(__name__)


class AuthorizationGate(Protocol):
    """Authorization predicates consumed by the ledger"""

    def is_authorized(self, identity: str) -> bool: ...

    def is_owner(self, identity: str) -> bool: ...


class AccessControl:
    """
    Owner/admin allow-list

    The owner is implicitly authorized for privileged ledger operations.
    """

    def __init__(self, owner: str, admins=()):
        if not owner:
            raise ValueError("owner identity is required")
        self._owner = owner
        self._admins: set[str] = set(admins)
        self._lock = threading.RLock()
        logger.info(f"AccessControl initialized (owner={owner}, admins={len(self._admins)})")

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, identity: str) -> bool:
        return identity == self._owner

    def is_admin(self, identity: str) -> bool:
        with self._lock:
            return identity in self._admins

    def is_authorized(self, identity: str) -> bool:
        return self.is_owner(identity) or self.is_admin(identity)

    def admins(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._admins)

    def add_admin(self, caller: str, identity: str) -> bool:
        """
        Grant admin rights

        Args:
            caller: Identity requesting the change (must be owner)
            identity: Identity to authorize

        Returns:
            True if the identity was newly added

        Raises:
            Unauthorized: If caller is not the owner
        """
        self._require_owner(caller)
        if not identity:
            raise ValueError("identity is required")
        with self._lock:
            added = identity not in self._admins
            self._admins.add(identity)
        if added:
            logger.info(f"Admin added: {identity}")
        return added

    def remove_admin(self, caller: str, identity: str) -> bool:
        """
        Revoke admin rights

        Returns:
            True if the identity was an admin

        Raises:
            Unauthorized: If caller is not the owner
        """
        self._require_owner(caller)
        with self._lock:
            removed = identity in self._admins
            self._admins.discard(identity)
        if removed:
            logger.info(f"Admin removed: {identity}")
        return removed

    def _require_owner(self, caller: str):
        if not self.is_owner(caller):
            logger.warning(f"Rejected admin change by non-owner {caller}")
            raise Unauthorized("Only owner can perform this action")
