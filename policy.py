"""
Ownership policy

User -> Budget -> {Income, Expense, Saving}. Access to any record is
decided by walking up to the owning user. A record that exists but
belongs to someone else is a 403, not a 404: existence is revealed,
content is not.
"""

from typing import Any, Dict, List

from database import RecordStore
from errors import AuthorizationError, NotFoundError

BUDGET = "budget"
USER = "user"


class OwnershipPolicy:

    def __init__(self, store: RecordStore):
        self._store = store

    def authorize(self, caller_id: str, kind: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Allow or deny `caller_id` access to `record` of collection `kind`.

        Returns the record that decided ownership (the user itself, the
        budget itself, or the parent budget of a child record).

        Raises:
            AuthorizationError: the record is owned by someone else
            NotFoundError: a child's parent budget no longer exists
        """
        if kind == USER:
            return self.require_self(caller_id, record["id"])
        if kind == BUDGET:
            if record.get("user_id") != caller_id:
                raise AuthorizationError("Not authorized to access this budget")
            return record
        return self.require_budget(caller_id, record.get("budget_id"))

    def require_self(self, caller_id: str, user_id: str) -> Dict[str, Any]:
        """Check `user_id` is the caller and that the account still exists."""
        if user_id != caller_id:
            raise AuthorizationError("Not authorized to access this user")
        user = self._store.get_document(USER, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def require_budget(self, caller_id: str, budget_id: str) -> Dict[str, Any]:
        """Load a budget and check the caller owns it."""
        budget = self._store.get_document(BUDGET, budget_id) if budget_id else None
        if budget is None:
            raise NotFoundError("Budget not found")
        if budget.get("user_id") != caller_id:
            raise AuthorizationError("Not authorized to access this budget")
        return budget

    def owned_budget_ids(self, caller_id: str) -> List[str]:
        return [b["id"] for b in self._store.get_documents(BUDGET, {"user_id": caller_id})]
