# services/property_service.py

import math
import re
from typing import List, Optional

from pydantic import ValidationError as SchemaError
from pymongo.database import Database

from core.errors import Forbidden, NotFound, ValidationError
from core.logging_config import logger
from database import create_document, get_documents, now_utc, serialize_doc, to_date, to_datetime, to_object_id
from schemas import Property

COLLECTION = "property"

OWNER_SUMMARY = {"name": 1, "email": 1, "phone": 1}
NEWEST_FIRST = [("created_at", -1), ("_id", -1)]

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

# Fields an owner may change through update_property
EDITABLE_FIELDS = (
    "title",
    "description",
    "address",
    "rent_per_month",
    "property_type",
    "bedrooms",
    "bathrooms",
    "amenities",
    "available_from",
)


def _schema_errors(exc: SchemaError) -> List[dict]:
    return [{"field": ".".join(str(p) for p in e["loc"]), "msg": e["msg"]} for e in exc.errors()]


def property_to_doc(prop: Property) -> dict:
    doc = prop.model_dump()
    doc["available_from"] = to_datetime(prop.available_from)
    return doc


def serialize_property(doc: dict, owner: Optional[dict] = None) -> dict:
    out = serialize_doc(doc)
    if out.get("available_from") is not None:
        out["available_from"] = to_date(out["available_from"])
    if owner is not None:
        out["owner"] = serialize_doc(owner)
    return out


def with_owners(db: Database, docs: List[dict]) -> List[dict]:
    oids = [oid for oid in (to_object_id(d["owner_id"]) for d in docs) if oid is not None]
    owners = {
        str(u["_id"]): u for u in db["user"].find({"_id": {"$in": list(set(oids))}}, OWNER_SUMMARY)
    } if oids else {}
    return [serialize_property(d, owners.get(d["owner_id"])) for d in docs]


def find_property(db: Database, property_id: str) -> dict:
    oid = to_object_id(property_id)
    doc = db[COLLECTION].find_one({"_id": oid}) if oid else None
    if not doc:
        raise NotFound("Property not found")
    return doc


def paginate(page, limit):
    """Normalise 1-indexed page/limit query values."""
    page = max(int(page or DEFAULT_PAGE), 1)
    limit = max(int(limit or DEFAULT_LIMIT), 1)
    return page, limit, (page - 1) * limit


def page_response(items: List[dict], page: int, limit: int, total: int) -> dict:
    return {
        "count": len(items),
        "pagination": {"page": page, "pages": math.ceil(total / limit), "total": total},
        "data": items,
    }


# -------------------------------------------------------------
# Public listing
# -------------------------------------------------------------
def build_filter(
    location: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    property_type: Optional[str] = None,
    bedrooms: Optional[int] = None,
    bathrooms: Optional[int] = None,
) -> dict:
    """Query for the public catalogue: only active, approved listings are visible."""
    query = {"is_active": True, "is_approved": True}

    if location:
        pattern = re.escape(location.strip())
        query["$or"] = [
            {"address.city": {"$regex": pattern, "$options": "i"}},
            {"address.state": {"$regex": pattern, "$options": "i"}},
        ]

    if min_price is not None or max_price is not None:
        price_filter = {}
        if min_price is not None:
            price_filter["$gte"] = float(min_price)
        if max_price is not None:
            price_filter["$lte"] = float(max_price)
        query["rent_per_month"] = price_filter

    if property_type:
        query["property_type"] = property_type
    if bedrooms is not None:
        query["bedrooms"] = int(bedrooms)
    if bathrooms is not None:
        query["bathrooms"] = int(bathrooms)

    return query


def list_properties(db: Database, page=DEFAULT_PAGE, limit=DEFAULT_LIMIT, **filters) -> dict:
    query = build_filter(**filters)
    page, limit, skip = paginate(page, limit)

    docs = list(db[COLLECTION].find(query).sort(NEWEST_FIRST).skip(skip).limit(limit))
    total = db[COLLECTION].count_documents(query)
    return page_response(with_owners(db, docs), page, limit, total)


def get_property(db: Database, property_id: str) -> dict:
    doc = find_property(db, property_id)
    return with_owners(db, [doc])[0]


def list_owner_properties(db: Database, owner_id: str) -> dict:
    docs = get_documents(db, COLLECTION, {"owner_id": owner_id}, sort=NEWEST_FIRST)
    items = [serialize_property(d) for d in docs]
    return {"count": len(items), "data": items}


# -------------------------------------------------------------
# Owner CRUD
# -------------------------------------------------------------
def create_property(db: Database, owner_id: str, data: dict, images: Optional[List[str]] = None) -> dict:
    payload = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
    try:
        prop = Property(owner_id=owner_id, images=list(images or []), is_approved=False, **payload)
    except SchemaError as exc:
        raise ValidationError("Invalid property", errors=_schema_errors(exc))

    property_id = create_document(db, COLLECTION, property_to_doc(prop))
    logger.info(f"Property {property_id} listed by owner {owner_id}, awaiting approval")
    return serialize_property(db[COLLECTION].find_one({"_id": to_object_id(property_id)}))


def find_property_for_owner(db: Database, property_id: str, owner_id: str) -> dict:
    doc = find_property(db, property_id)
    if doc["owner_id"] != owner_id:
        raise Forbidden("Not authorized")
    return doc


def update_property(
    db: Database,
    property_id: str,
    owner_id: str,
    changes: dict,
    new_images: Optional[List[str]] = None,
) -> dict:
    doc = find_property_for_owner(db, property_id, owner_id)

    merged = {k: doc[k] for k in EDITABLE_FIELDS if k in doc}
    merged["available_from"] = to_date(merged["available_from"])
    merged.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None})

    try:
        prop = Property(
            owner_id=doc["owner_id"],
            images=list(doc.get("images", [])) + list(new_images or []),
            is_active=doc.get("is_active", True),
            # Any edit sends the listing back through admin review
            is_approved=False,
            **merged,
        )
    except SchemaError as exc:
        raise ValidationError("Invalid property", errors=_schema_errors(exc))

    updates = property_to_doc(prop)
    updates["updated_at"] = now_utc()
    db[COLLECTION].update_one({"_id": doc["_id"]}, {"$set": updates})
    logger.info(f"Property {property_id} updated by owner {owner_id}, approval reset")
    return serialize_property(db[COLLECTION].find_one({"_id": doc["_id"]}))


def delete_property(db: Database, property_id: str, owner_id: str) -> None:
    doc = find_property_for_owner(db, property_id, owner_id)
    db[COLLECTION].delete_one({"_id": doc["_id"]})
    logger.info(f"Property {property_id} removed by owner {owner_id}")
