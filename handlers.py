"""
Resource handlers

Each handler runs authorization, the store operation and response
shaping for one collection. Payload shape has already been checked by the
pydantic models before a handler is called.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel

from auth import Identity, hash_password, public_user
from database import RecordStore
from errors import ConflictError, NotFoundError
from log import get_logger
from policy import OwnershipPolicy

logger = get_logger(__name__)


class ResourceHandler:
    """get / update / delete shared by every collection."""

    collection = ""
    label = ""

    def __init__(self, store: RecordStore, policy: OwnershipPolicy):
        self.store = store
        self.policy = policy

    def _load(self, record_id: str) -> Dict[str, Any]:
        record = self.store.get_document(self.collection, record_id)
        if record is None:
            raise NotFoundError(f"{self.label} not found")
        return record

    def _shape(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return record

    def _prepare_changes(self, caller: Identity, changes: Dict[str, Any]) -> Dict[str, Any]:
        return changes

    def get(self, caller: Identity, record_id: str) -> Dict[str, Any]:
        record = self._load(record_id)
        self.policy.authorize(caller.user_id, self.collection, record)
        return self._shape(record)

    def update(self, caller: Identity, record_id: str, payload: BaseModel) -> Dict[str, Any]:
        record = self._load(record_id)
        self.policy.authorize(caller.user_id, self.collection, record)

        # explicit null/false/0 are set, absent fields are not
        changes = self._prepare_changes(caller, payload.model_dump(exclude_unset=True))
        updated = self.store.update_document(self.collection, record_id, changes)
        if updated is None:
            # deleted between load and write
            raise NotFoundError(f"{self.label} not found")
        logger.info("record_updated", collection=self.collection, record_id=record_id,
                    user_id=caller.user_id, fields=sorted(changes))
        return self._shape(updated)

    def delete(self, caller: Identity, record_id: str) -> Dict[str, str]:
        record = self._load(record_id)
        self.policy.authorize(caller.user_id, self.collection, record)
        if not self.store.delete_document(self.collection, record_id):
            logger.info("record_already_deleted", collection=self.collection, record_id=record_id)
        else:
            logger.info("record_deleted", collection=self.collection, record_id=record_id,
                        user_id=caller.user_id)
        return {"message": f"{self.label} deleted"}


class UserHandler(ResourceHandler):
    """Self-service profile operations. Password hashes never leave here."""

    collection = "user"
    label = "User"

    def _shape(self, record):
        return public_user(record)

    def list(self, caller: Identity) -> List[Dict[str, Any]]:
        me = self.store.get_document(self.collection, caller.user_id)
        return [public_user(me)] if me else []

    def _prepare_changes(self, caller, changes):
        if "email" in changes:
            changes["email"] = changes["email"].lower()
            existing = self.store.find_one(self.collection, {"email": changes["email"]})
            if existing and existing["id"] != caller.user_id:
                raise ConflictError("Email already in use")
        if "password" in changes:
            changes["password_hash"] = hash_password(changes.pop("password"))
        if changes:
            changes["updated_at"] = datetime.now(timezone.utc)
        return changes


class BudgetHandler(ResourceHandler):

    collection = "budget"
    label = "Budget"

    def list(self, caller: Identity) -> List[Dict[str, Any]]:
        return self.store.get_documents(self.collection, {"user_id": caller.user_id})

    def list_by_user(self, caller: Identity, user_id: str) -> List[Dict[str, Any]]:
        self.policy.require_self(caller.user_id, user_id)
        return self.list(caller)

    def create(self, caller: Identity, payload: BaseModel) -> Dict[str, Any]:
        data = payload.model_dump()
        if data.get("user_id") is None:
            data["user_id"] = caller.user_id
        # owner must be the caller and must still exist
        self.policy.require_self(caller.user_id, data["user_id"])
        data["created_at"] = datetime.now(timezone.utc)

        budget = self.store.create_document(self.collection, data)
        logger.info("record_created", collection=self.collection, record_id=budget["id"],
                    user_id=caller.user_id)
        return budget


class ChildHandler(ResourceHandler):
    """Handler for records that hang off a budget (income, expense, saving)."""

    def __init__(self, store: RecordStore, policy: OwnershipPolicy, collection: str, label: str):
        super().__init__(store, policy)
        self.collection = collection
        self.label = label

    def list(self, caller: Identity) -> List[Dict[str, Any]]:
        budget_ids = self.policy.owned_budget_ids(caller.user_id)
        if not budget_ids:
            return []
        return self.store.get_documents(self.collection, {"budget_id": {"$in": budget_ids}})

    def list_by_budget(self, caller: Identity, budget_id: str) -> List[Dict[str, Any]]:
        self.policy.require_budget(caller.user_id, budget_id)
        return self.store.get_documents(self.collection, {"budget_id": budget_id})

    def create(self, caller: Identity, payload: BaseModel) -> Dict[str, Any]:
        self.policy.require_budget(caller.user_id, payload.budget_id)
        record = self.store.create_document(self.collection, payload)
        logger.info("record_created", collection=self.collection, record_id=record["id"],
                    budget_id=record["budget_id"], user_id=caller.user_id)
        return record
