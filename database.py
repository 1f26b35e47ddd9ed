"""
MongoDB access layer

The client is created lazily on first use and shared by the whole process.
Collections are addressed by their lowercase singular name:
- Product -> "product"
- Cart -> "cart"
"""
import logging
import os
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import ASCENDING, DESCENDING, MongoClient

from errors import DatabaseNotConfiguredError

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_db = None
_lock = threading.Lock()


def utcnow() -> datetime:
    # pymongo returns naive UTC datetimes, so everything we store is naive UTC too
    return datetime.now(timezone.utc).replace(tzinfo=None)


def ensure_indexes(database) -> None:
    database["cart"].create_index([("user", ASCENDING)], unique=True)
    database["order"].create_index([("user", ASCENDING)])
    database["order"].create_index([("status", ASCENDING)])
    database["order"].create_index([("paymentStatus", ASCENDING)])
    database["order"].create_index([("createdAt", DESCENDING)])
    database["product"].create_index([("category", ASCENDING)])
    database["product"].create_index([("featured", ASCENDING)])
    database["product"].create_index([("price", ASCENDING)])
    database["user"].create_index([("email", ASCENDING)], unique=True)
    database["analytics"].create_index([("date", ASCENDING)])


def use_client(client: MongoClient, name: str):
    """Bind an already constructed client, replacing any current one."""
    global _client, _db
    with _lock:
        _client = client
        _db = client[name]
        ensure_indexes(_db)
    return _db


def get_db():
    """Return the shared database handle, connecting on first call."""
    global _client, _db
    if _db is not None:
        return _db
    with _lock:
        # another thread may have connected while we waited
        if _db is None:
            url = os.getenv("DATABASE_URL")
            name = os.getenv("DATABASE_NAME")
            if not url or not name:
                raise DatabaseNotConfiguredError()
            client = MongoClient(url, serverSelectionTimeoutMS=5000)
            database = client[name]
            ensure_indexes(database)
            _client, _db = client, database
            logger.info("Connected to MongoDB database %s", name)
    return _db


def close_db() -> None:
    global _client, _db
    with _lock:
        if _client is not None:
            _client.close()
            logger.info("MongoDB connection closed")
        _client = None
        _db = None


def is_connected() -> bool:
    return _db is not None


def parse_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]], db=None) -> str:
    """Insert a document with createdAt/updatedAt stamps and return its id."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(by_alias=True)
    else:
        doc = dict(data)
    now = utcnow()
    doc.setdefault("createdAt", now)
    doc["updatedAt"] = now
    result = (db if db is not None else get_db())[collection_name].insert_one(doc)
    return str(result.inserted_id)


def _serialize_value(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_doc(doc):
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.pop("_id", None)
    out = {"id": str(_id)} if _id is not None else {}
    for k, v in doc.items():
        out[k] = _serialize_value(v)
    return out
