"""
Database access

The MongoClient is built once at startup (see main.lifespan) and stored on
app.state; handlers receive the Database through the get_db dependency.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from fastapi import Request
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

import config
from errors import InternalFailure, InvalidRequest

logger = logging.getLogger(__name__)

PLANTS = "plants"
ORDERS = "orders"
USERS = "users"


def connect(url: str = config.DATABASE_URL, name: str = config.DATABASE_NAME) -> Database:
    client = MongoClient(url)
    logger.info("Using MongoDB database %s", name)
    return client[name]


def ensure_indexes(db: Database) -> None:
    # Email uniqueness lives in the store, not only in the register handler.
    db[USERS].create_index([("email", ASCENDING)], unique=True)


def get_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise InternalFailure("Database not configured")
    return db


def now() -> datetime:
    return datetime.now(timezone.utc)


def parse_object_id(value: Optional[str], label: str = "id") -> ObjectId:
    if not value or not ObjectId.is_valid(value):
        raise InvalidRequest(f"Invalid {label}")
    return ObjectId(value)


def create_document(db: Database, collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document stamped with created_at and return its id as a string."""
    if isinstance(data, BaseModel):
        doc = data.model_dump()
    else:
        doc = dict(data)
    doc.setdefault("created_at", now())
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None,
                  limit: Optional[int] = None) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return [serialize_doc(d) for d in cursor]


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    d = dict(doc)
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d
