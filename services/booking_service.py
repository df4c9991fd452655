# services/booking_service.py

"""
Booking lifecycle.

A booking links a renter, an owner and a property. It is created ``pending``
and leaves that status exactly once: the owner confirms or rejects it, or
the renter cancels it. Bookings are never deleted.
"""

from datetime import date
from typing import List, Optional, Union

from pydantic import ValidationError as SchemaError
from pymongo.database import Database

from core.errors import Forbidden, InvalidDate, InvalidTransition, NotFound, Unavailable, ValidationError
from core.logging_config import logger
from database import create_document, now_utc, serialize_doc, to_date, to_datetime, to_object_id
from schemas import Booking, BookingStatus, Role

COLLECTION = "booking"

PROPERTY_SUMMARY = {"title": 1, "address": 1, "rent_per_month": 1, "images": 1}
PARTY_SUMMARY = {"name": 1, "email": 1, "phone": 1}

OWNER_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.REJECTED})
RENTER_STATUSES = frozenset({BookingStatus.CANCELLED})

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


def settable_statuses(role: Role) -> frozenset:
    """Statuses a role may move a pending booking into."""
    if role is Role.OWNER:
        return OWNER_STATUSES
    if role is Role.RENTER:
        return RENTER_STATUSES
    if role is Role.ADMIN:
        return frozenset()
    raise ValueError(f"Unknown role: {role!r}")


def schema_errors(exc: SchemaError) -> List[dict]:
    return [{"field": ".".join(str(p) for p in e["loc"]), "msg": e["msg"]} for e in exc.errors()]


def booking_from_doc(doc: dict) -> Booking:
    return Booking(
        property_id=doc["property_id"],
        renter_id=doc["renter_id"],
        owner_id=doc["owner_id"],
        move_in_date=to_date(doc["move_in_date"]),
        duration=doc["duration"],
        total_amount=doc["total_amount"],
        status=doc.get("status", BookingStatus.PENDING),
        message=doc.get("message"),
        owner_response=doc.get("owner_response"),
        responded_at=doc.get("responded_at"),
    )


def booking_to_doc(booking: Booking) -> dict:
    doc = booking.model_dump()
    doc["move_in_date"] = to_datetime(booking.move_in_date)
    doc["move_out_date"] = to_datetime(booking.move_out_date)
    return doc


# -------------------------------------------------------------
# Expansion (property / renter / owner details for display)
# -------------------------------------------------------------
def _summaries(db: Database, collection: str, ids, projection: dict) -> dict:
    oids = [oid for oid in (to_object_id(i) for i in set(ids)) if oid is not None]
    if not oids:
        return {}
    return {
        str(doc["_id"]): serialize_doc(doc)
        for doc in db[collection].find({"_id": {"$in": oids}}, projection)
    }


def expand_bookings(db: Database, bookings: List[dict]) -> List[dict]:
    properties = _summaries(db, "property", [b["property_id"] for b in bookings], PROPERTY_SUMMARY)
    users = _summaries(
        db, "user", [b["renter_id"] for b in bookings] + [b["owner_id"] for b in bookings], PARTY_SUMMARY
    )

    expanded = []
    for booking in bookings:
        out = serialize_doc(booking)
        for key in ("move_in_date", "move_out_date"):
            if out.get(key) is not None:
                out[key] = to_date(out[key])
        out["property"] = properties.get(booking["property_id"])
        out["renter"] = users.get(booking["renter_id"])
        out["owner"] = users.get(booking["owner_id"])
        expanded.append(out)
    return expanded


def expand_booking(db: Database, booking: dict) -> dict:
    return expand_bookings(db, [booking])[0]


def _find_booking(db: Database, booking_id: str) -> dict:
    oid = to_object_id(booking_id)
    booking = db[COLLECTION].find_one({"_id": oid}) if oid else None
    if not booking:
        raise NotFound("Booking not found")
    return booking


# -------------------------------------------------------------
# Operations
# -------------------------------------------------------------
def create_booking(
    db: Database,
    renter_id: str,
    property_id: str,
    move_in_date: Union[date, str],
    duration: int,
    message: Optional[str] = None,
) -> dict:
    if duration is None or int(duration) < 1:
        raise ValidationError(
            "Duration in months is required",
            errors=[{"field": "duration", "msg": "Duration must be at least 1 month"}],
        )
    if isinstance(move_in_date, str):
        try:
            move_in_date = date.fromisoformat(move_in_date)
        except ValueError:
            raise ValidationError(
                "Move-in date is required",
                errors=[{"field": "move_in_date", "msg": "Move-in date must be an ISO 8601 date"}],
            )

    oid = to_object_id(property_id)
    prop = db["property"].find_one({"_id": oid}) if oid else None
    if not prop:
        raise NotFound("Property not found")

    if not prop.get("is_active") or not prop.get("is_approved"):
        raise Unavailable()

    if to_date(move_in_date) < to_date(prop["available_from"]):
        raise InvalidDate()

    try:
        booking = Booking(
            property_id=str(prop["_id"]),
            renter_id=renter_id,
            owner_id=str(prop["owner_id"]),
            move_in_date=to_date(move_in_date),
            duration=int(duration),
            total_amount=prop["rent_per_month"] * int(duration),
            message=message,
        )
    except SchemaError as exc:
        raise ValidationError("Invalid booking request", errors=schema_errors(exc))

    booking_id = create_document(db, COLLECTION, booking_to_doc(booking))
    logger.info(f"Booking {booking_id} requested by renter {renter_id} for property {booking.property_id}")

    return expand_booking(db, db[COLLECTION].find_one({"_id": to_object_id(booking_id)}))


def transition_booking(
    db: Database,
    booking_id: str,
    acting_user_id: str,
    acting_role: Union[Role, str],
    new_status: Union[BookingStatus, str],
    response: Optional[str] = None,
) -> dict:
    try:
        status = BookingStatus(new_status)
    except ValueError:
        raise ValidationError(
            "Status must be confirmed, rejected or cancelled",
            errors=[{"field": "status", "msg": f"Unknown booking status: {new_status}"}],
        )
    role = Role(acting_role)

    doc = _find_booking(db, booking_id)

    if role is Role.OWNER and doc["owner_id"] != acting_user_id:
        raise Forbidden("Not authorized")
    if role is Role.RENTER and doc["renter_id"] != acting_user_id:
        raise Forbidden("Not authorized")

    if status not in settable_statuses(role):
        raise Forbidden(f"A {role.value} cannot set a booking to {status.value}")

    if role is Role.RENTER and response:
        raise ValidationError(
            "Renters cannot attach a response",
            errors=[{"field": "owner_response", "msg": "Only the owner can respond to a booking"}],
        )

    if doc.get("status") != BookingStatus.PENDING.value:
        if status is BookingStatus.CANCELLED:
            raise InvalidTransition("Only pending bookings can be cancelled")
        raise InvalidTransition()

    booking = booking_from_doc(doc)
    try:
        booking.status = status
        if response is not None:
            booking.owner_response = response
        booking.responded_at = now_utc()
    except SchemaError as exc:
        raise ValidationError("Invalid booking update", errors=schema_errors(exc))

    changes = {
        "status": booking.status,
        "responded_at": booking.responded_at,
        "updated_at": booking.responded_at,
    }
    if response is not None:
        changes["owner_response"] = booking.owner_response

    # Only a still-pending booking may be written; a concurrent transition loses here.
    result = db[COLLECTION].update_one({"_id": doc["_id"], "status": BookingStatus.PENDING.value}, {"$set": changes})
    if result.matched_count == 0:
        raise InvalidTransition()

    logger.info(f"Booking {booking_id} moved to {status.value} by {role.value} {acting_user_id}")
    return expand_booking(db, db[COLLECTION].find_one({"_id": doc["_id"]}))


def list_bookings(db: Database, acting_user_id: str, acting_role: Union[Role, str]) -> List[dict]:
    role = Role(acting_role)
    if role is Role.RENTER:
        query = {"renter_id": acting_user_id}
    elif role is Role.OWNER:
        query = {"owner_id": acting_user_id}
    elif role is Role.ADMIN:
        query = {}
    else:
        raise ValueError(f"Unknown role: {role!r}")

    bookings = list(db[COLLECTION].find(query).sort(NEWEST_FIRST))
    return expand_bookings(db, bookings)


def get_booking(db: Database, booking_id: str, acting_user_id: str) -> dict:
    doc = _find_booking(db, booking_id)
    if acting_user_id not in (doc["renter_id"], doc["owner_id"]):
        raise Forbidden("Not authorized")
    return expand_booking(db, doc)


def count_by_status(db: Database, match: Optional[dict] = None) -> dict:
    """Booking counts per status, zero-filled."""
    pipeline = []
    if match:
        pipeline.append({"$match": match})
    pipeline.append({"$group": {"_id": "$status", "count": {"$sum": 1}}})

    counts = {s.value: 0 for s in BookingStatus}
    for row in db[COLLECTION].aggregate(pipeline):
        if row["_id"] in counts:
            counts[row["_id"]] = row["count"]
    return counts


def stats_by_owner(db: Database, owner_id: str) -> dict:
    return count_by_status(db, {"owner_id": owner_id})
