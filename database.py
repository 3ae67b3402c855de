"""
MongoDB access layer

One RecordStore is built when the process starts and handed to the app;
nothing in here is module-global. Each collection is named after the
lowercased schema class (User -> "user", Budget -> "budget", ...).
"""

from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from errors import ConflictError
from log import get_logger
from settings import Settings

logger = get_logger(__name__)

CHILD_COLLECTIONS = ("income", "expense", "saving")


def _to_object_id(record_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        return None


def _encode(value: Any) -> Any:
    # BSON has no date type
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return value


def _encode_document(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: _encode(v) for k, v in data.items()}


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert a raw document into its API shape (`_id` -> `id`)."""
    if doc is None:
        return None
    out = dict(doc)
    if "_id" in out:
        out["id"] = str(out.pop("_id"))
    return out


class RecordStore:
    """Typed CRUD over the budget collections."""

    def __init__(self, db: Database, client: Optional[MongoClient] = None):
        self.db = db
        self._client = client

    @property
    def name(self) -> str:
        return self.db.name

    def ensure_indexes(self) -> None:
        self.db["user"].create_index([("email", ASCENDING)], unique=True)
        self.db["budget"].create_index([("user_id", ASCENDING)])
        for name in CHILD_COLLECTIONS:
            self.db[name].create_index([("budget_id", ASCENDING)])

    def ping(self) -> bool:
        self.db.command("ping")
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def create_document(self, collection_name: str, data) -> Dict[str, Any]:
        """Insert a document and return it with its generated id."""
        if isinstance(data, BaseModel):
            data = data.model_dump()
        doc = _encode_document(data)
        try:
            result = self.db[collection_name].insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError(_duplicate_message(collection_name)) from e
        doc["_id"] = result.inserted_id
        return serialize(doc)

    def get_document(self, collection_name: str, record_id: str) -> Optional[Dict[str, Any]]:
        oid = _to_object_id(record_id)
        if oid is None:
            return None
        return serialize(self.db[collection_name].find_one({"_id": oid}))

    def find_one(self, collection_name: str, filter_dict: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return serialize(self.db[collection_name].find_one(filter_dict))

    def get_documents(
        self,
        collection_name: str,
        filter_dict: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        return [serialize(d) for d in self.db[collection_name].find(filter_dict or {})]

    def update_document(
        self,
        collection_name: str,
        record_id: str,
        changes: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """
        Apply `changes` in a single $set and return the updated document.

        Returns None when the record no longer exists.
        """
        oid = _to_object_id(record_id)
        if oid is None:
            return None
        collection = self.db[collection_name]
        if not changes:
            return serialize(collection.find_one({"_id": oid}))
        try:
            doc = collection.find_one_and_update(
                {"_id": oid},
                {"$set": _encode_document(changes)},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            raise ConflictError(_duplicate_message(collection_name)) from e
        return serialize(doc)

    def delete_document(self, collection_name: str, record_id: str) -> bool:
        oid = _to_object_id(record_id)
        if oid is None:
            return False
        result = self.db[collection_name].delete_one({"_id": oid})
        return result.deleted_count == 1


def _duplicate_message(collection_name: str) -> str:
    if collection_name == "user":
        return "Email already in use"
    return "Resource already exists"


def connect(settings: Settings) -> RecordStore:
    """Open the MongoDB connection described by `settings`."""
    client = MongoClient(settings.database_url, tz_aware=True)
    store = RecordStore(client[settings.database_name], client=client)
    logger.info("database_connected", database=settings.database_name)
    return store
