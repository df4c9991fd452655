# services/admin_service.py

"""Admin moderation and platform-wide reporting."""

from typing import Optional

from pymongo.database import Database

from core.errors import BusinessRuleViolation, NotFound
from core.logging_config import logger
from database import now_utc, to_object_id
from schemas import Role
from services.booking_service import NEWEST_FIRST, count_by_status, expand_bookings
from services.property_service import with_owners, find_property, page_response, paginate
from services.user_service import public_user


def _status_flag(status: Optional[str]) -> Optional[bool]:
    """``active``/``inactive`` query value to an ``is_active`` flag."""
    if status is None:
        return None
    return status == "active"


def _find_user(db: Database, user_id: str) -> dict:
    oid = to_object_id(user_id)
    user = db["user"].find_one({"_id": oid}) if oid else None
    if not user:
        raise NotFound("User not found")
    return user


# -------------------------------------------------------------
# Users
# -------------------------------------------------------------
def list_users(db: Database, page=1, limit=10, role: Optional[str] = None, status: Optional[str] = None) -> dict:
    query = {}
    if role:
        query["role"] = role
    is_active = _status_flag(status)
    if is_active is not None:
        query["is_active"] = is_active

    page, limit, skip = paginate(page, limit)
    docs = list(db["user"].find(query).sort(NEWEST_FIRST).skip(skip).limit(limit))
    total = db["user"].count_documents(query)
    return page_response([public_user(d) for d in docs], page, limit, total)


def get_user(db: Database, user_id: str) -> dict:
    return public_user(_find_user(db, user_id))


def set_user_status(db: Database, user_id: str, is_active: bool) -> dict:
    user = _find_user(db, user_id)
    db["user"].update_one({"_id": user["_id"]}, {"$set": {"is_active": bool(is_active)}})
    logger.info(f"User {user_id} {'activated' if is_active else 'deactivated'}")
    return get_user(db, user_id)


def delete_user(db: Database, user_id: str, acting_user_id: str) -> None:
    user = _find_user(db, user_id)
    if str(user["_id"]) == acting_user_id:
        raise BusinessRuleViolation("Cannot delete your own account")
    db["user"].delete_one({"_id": user["_id"]})
    logger.info(f"User {user_id} deleted by admin {acting_user_id}")


# -------------------------------------------------------------
# Properties
# -------------------------------------------------------------
def list_all_properties(
    db: Database, page=1, limit=10, status: Optional[str] = None, approved: Optional[bool] = None
) -> dict:
    query = {}
    is_active = _status_flag(status)
    if is_active is not None:
        query["is_active"] = is_active
    if approved is not None:
        query["is_approved"] = bool(approved)

    page, limit, skip = paginate(page, limit)
    docs = list(db["property"].find(query).sort(NEWEST_FIRST).skip(skip).limit(limit))
    total = db["property"].count_documents(query)
    return page_response(with_owners(db, docs), page, limit, total)


def set_property_approval(db: Database, property_id: str, is_approved: bool) -> dict:
    doc = find_property(db, property_id)
    db["property"].update_one(
        {"_id": doc["_id"]}, {"$set": {"is_approved": bool(is_approved), "updated_at": now_utc()}}
    )
    logger.info(f"Property {property_id} {'approved' if is_approved else 'unapproved'}")
    return with_owners(db, [db["property"].find_one({"_id": doc["_id"]})])[0]


def delete_any_property(db: Database, property_id: str) -> None:
    doc = find_property(db, property_id)
    db["property"].delete_one({"_id": doc["_id"]})
    logger.info(f"Property {property_id} deleted by admin")


# -------------------------------------------------------------
# Bookings
# -------------------------------------------------------------
def list_all_bookings(db: Database, page=1, limit=10, status: Optional[str] = None) -> dict:
    query = {"status": status} if status else {}
    page, limit, skip = paginate(page, limit)
    docs = list(db["booking"].find(query).sort(NEWEST_FIRST).skip(skip).limit(limit))
    total = db["booking"].count_documents(query)
    return page_response(expand_bookings(db, docs), page, limit, total)


# -------------------------------------------------------------
# Platform statistics
# -------------------------------------------------------------
def platform_stats(db: Database) -> dict:
    users = {r.value: 0 for r in Role}
    for row in db["user"].aggregate([{"$group": {"_id": "$role", "count": {"$sum": 1}}}]):
        users[row["_id"]] = row["count"]
    users["total"] = sum(users.values())

    properties = {"active": 0, "inactive": 0, "approved": 0, "pending": 0, "total": 0}
    grouped = db["property"].aggregate([
        {"$group": {"_id": {"is_active": "$is_active", "is_approved": "$is_approved"}, "count": {"$sum": 1}}}
    ])
    for row in grouped:
        key = row["_id"]
        properties["active" if key.get("is_active") else "inactive"] += row["count"]
        properties["approved" if key.get("is_approved") else "pending"] += row["count"]
        properties["total"] += row["count"]

    bookings = count_by_status(db)
    bookings["total"] = sum(bookings.values())

    return {"users": users, "properties": properties, "bookings": bookings}
