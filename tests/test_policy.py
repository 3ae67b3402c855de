"""
Tests for the ownership policy, run directly against the store.
"""

import pytest

from errors import AuthorizationError, NotFoundError
from policy import OwnershipPolicy

ALICE = "65f0c0ffee0000000000000a"
BOB = "65f0c0ffee0000000000000b"


@pytest.fixture
def policy(store):
    return OwnershipPolicy(store)


@pytest.fixture
def budget(store):
    return store.create_document("budget", {"user_id": ALICE, "month": 5, "year": 2024})


class TestOwnershipPolicy:

    def test_owner_can_access_budget(self, policy, budget):
        assert policy.authorize(ALICE, "budget", budget) == budget

    def test_other_user_denied_budget(self, policy, budget):
        with pytest.raises(AuthorizationError):
            policy.authorize(BOB, "budget", budget)

    def test_child_resolves_through_parent(self, policy, store, budget):
        expense = store.create_document("expense", {"budget_id": budget["id"], "name": "Rent"})
        assert policy.authorize(ALICE, "expense", expense)["id"] == budget["id"]
        with pytest.raises(AuthorizationError):
            policy.authorize(BOB, "expense", expense)

    def test_child_with_missing_parent_is_not_found(self, policy, store, budget):
        saving = store.create_document("saving", {"budget_id": budget["id"], "target_amount": 10})
        store.delete_document("budget", budget["id"])
        with pytest.raises(NotFoundError):
            policy.authorize(ALICE, "saving", saving)

    def test_user_only_self(self, policy, store):
        user = store.create_document("user", {"name": "A", "email": "a@x.com", "password_hash": "x"})
        with pytest.raises(AuthorizationError):
            policy.authorize(BOB, "user", user)
        assert policy.authorize(user["id"], "user", user)["id"] == user["id"]

    def test_require_self_needs_existing_user(self, policy):
        with pytest.raises(NotFoundError, match="User not found"):
            policy.require_self(ALICE, ALICE)
        with pytest.raises(AuthorizationError):
            policy.require_self(ALICE, BOB)

    def test_require_budget_unknown_id(self, policy):
        with pytest.raises(NotFoundError):
            policy.require_budget(ALICE, "65f0c0ffee00000000000fff")

    def test_owned_budget_ids(self, policy, store, budget):
        store.create_document("budget", {"user_id": BOB, "month": 1, "year": 2024})
        assert policy.owned_budget_ids(ALICE) == [budget["id"]]
