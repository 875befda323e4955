"""
Tests for AccessControl
"""

import pytest

from parimutuel.core import AccessControl, Unauthorized


class TestAccessControl:
    def test_owner_is_authorized(self):
        gate = AccessControl(owner="owner")

        assert gate.is_owner("owner") is True
        assert gate.is_authorized("owner") is True
        assert gate.is_admin("owner") is False

    def test_initial_admins(self):
        gate = AccessControl(owner="owner", admins=["a1", "a2"])

        assert gate.admins() == frozenset({"a1", "a2"})
        assert gate.is_authorized("a1") is True
        assert gate.is_authorized("stranger") is False

    def test_add_and_remove(self):
        gate = AccessControl(owner="owner")

        assert gate.add_admin("owner", "a1") is True
        assert gate.add_admin("owner", "a1") is False
        assert gate.remove_admin("owner", "a1") is True
        assert gate.remove_admin("owner", "a1") is False
        assert gate.is_admin("a1") is False

    def test_only_owner_changes_admins(self):
        gate = AccessControl(owner="owner", admins=["a1"])

        with pytest.raises(Unauthorized, match="Only owner"):
            gate.add_admin("a1", "a2")
        with pytest.raises(Unauthorized):
            gate.remove_admin("a1", "a1")

        assert gate.admins() == frozenset({"a1"})

    def test_owner_required(self):
        with pytest.raises(ValueError):
            AccessControl(owner="")

    def test_empty_identity_rejected(self):
        gate = AccessControl(owner="owner")

        with pytest.raises(ValueError):
            gate.add_admin("owner", "")
