"""Tests for ownership and role checks."""

import pytest
from ordering.errors import NotAuthorizedError, ensure_admin, ensure_customer, ensure_owner, ensure_owner_or_admin


class TestEnsureOwner:
    def test_owner_passes(self):
        ensure_owner("cust-1", "cust-1")

    def test_other_customer_rejected(self):
        with pytest.raises(NotAuthorizedError) as exc:
            ensure_owner("cust-1", "cust-2", "cancel this order")
        assert exc.value.message == "Not authorized to cancel this order"

    def test_guest_order_has_no_owner(self):
        with pytest.raises(NotAuthorizedError):
            ensure_owner(None, "cust-1")

    def test_anonymous_caller_rejected(self):
        with pytest.raises(NotAuthorizedError):
            ensure_owner("cust-1", None)


class TestRoles:
    def test_admin_passes(self):
        ensure_admin("admin")

    def test_customer_role_rejected(self):
        with pytest.raises(NotAuthorizedError):
            ensure_admin("customer")

    def test_admin_may_view_any_order(self):
        ensure_owner_or_admin("cust-1", None, "admin")

    def test_non_admin_must_own(self):
        with pytest.raises(NotAuthorizedError):
            ensure_owner_or_admin("cust-1", "cust-2", None)


class TestEnsureCustomer:
    def test_returns_caller(self):
        assert ensure_customer("cust-1") == "cust-1"

    def test_anonymous_rejected(self):
        with pytest.raises(NotAuthorizedError) as exc:
            ensure_customer(None)
        assert exc.value.message == "Sign in to use the cart"
