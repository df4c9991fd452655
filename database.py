"""
RentEasy - MongoDB access

A single client is created from settings; handlers receive the database
through the ``get_db`` dependency so tests can swap it out.
Collection name is the lowercase of the schema class name (e.g., User -> "user").
"""
from datetime import date, datetime, time, timezone
from typing import Any, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import MongoClient
from pymongo.database import Database

from core.config import settings

client = MongoClient(settings.DATABASE_URL)
db = client[settings.DATABASE_NAME]


def get_db() -> Database:
    return db


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id coming from a URL or body; malformed ids yield None."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_datetime(value: Union[date, datetime]) -> datetime:
    """BSON has no date type: calendar dates are stored as midnight datetimes."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime.combine(value, time.min)


def to_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def create_document(database: Database, collection_name: str, data: Union[BaseModel, dict]) -> str:
    if isinstance(data, BaseModel):
        data_dict = data.model_dump()
    else:
        data_dict = data.copy()

    data_dict["created_at"] = now_utc()
    data_dict["updated_at"] = data_dict["created_at"]

    result = database[collection_name].insert_one(data_dict)
    return str(result.inserted_id)


def get_documents(database: Database, collection_name: str, filter_dict: Optional[dict] = None,
                  limit: Optional[int] = None, skip: int = 0, sort=None):
    cursor = database[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort)
    if skip:
        cursor = cursor.skip(skip)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def serialize_doc(doc: Optional[dict], exclude=("password_hash",)) -> Optional[dict]:
    if doc is None:
        return None
    out = {k: v for k, v in doc.items() if k not in exclude}
    out["_id"] = str(out["_id"])  # stringify
    return out
