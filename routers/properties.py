# routers/properties.py

import json
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pymongo.database import Database

from core.errors import ValidationError
from core.uploads import discard_property_images, save_property_images
from database import get_db
from dependencies.auth import CurrentUser, require_roles
from schemas import PropertyType, Role
from services import property_service

router = APIRouter(
    prefix="/properties",
    tags=["Properties"],
)

owner_only = require_roles(Role.OWNER)


def parse_json_field(name: str, raw: Optional[str]):
    """Multipart forms carry nested values (address, amenities) as JSON text."""
    if raw is None or raw == "":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError(f"{name} must be valid JSON", errors=[{"field": name, "msg": "Invalid JSON"}])


# -------------------------------------------------------------
# Public catalogue
# -------------------------------------------------------------
@router.get("")
def list_properties(
    location: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    property_type: Optional[PropertyType] = None,
    bedrooms: Optional[int] = Query(None, ge=0),
    bathrooms: Optional[int] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_db),
):
    result = property_service.list_properties(
        db,
        page=page,
        limit=limit,
        location=location,
        min_price=min_price,
        max_price=max_price,
        property_type=property_type,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
    )
    return {"success": True, **result}


@router.get("/owner/my-properties")
def my_properties(current: CurrentUser = Depends(owner_only), db: Database = Depends(get_db)):
    return {"success": True, **property_service.list_owner_properties(db, current.id)}


@router.get("/{property_id}")
def get_property(property_id: str, db: Database = Depends(get_db)):
    return {"success": True, "data": property_service.get_property(db, property_id)}


# -------------------------------------------------------------
# Owner CRUD
# -------------------------------------------------------------
@router.post("", status_code=201)
async def create_property(
    title: str = Form(...),
    description: str = Form(...),
    address: str = Form(...),
    rent_per_month: float = Form(...),
    property_type: PropertyType = Form(...),
    bedrooms: int = Form(...),
    bathrooms: int = Form(...),
    available_from: date = Form(...),
    amenities: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    current: CurrentUser = Depends(owner_only),
    db: Database = Depends(get_db),
):
    data = {
        "title": title,
        "description": description,
        "address": parse_json_field("address", address),
        "rent_per_month": rent_per_month,
        "property_type": property_type,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "amenities": parse_json_field("amenities", amenities) or [],
        "available_from": available_from,
    }
    paths = await save_property_images(images)
    try:
        created = property_service.create_property(db, current.id, data, paths)
    except Exception:
        discard_property_images(paths)
        raise
    return {"success": True, "data": created}


@router.put("/{property_id}")
async def update_property(
    property_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    rent_per_month: Optional[float] = Form(None),
    property_type: Optional[PropertyType] = Form(None),
    bedrooms: Optional[int] = Form(None),
    bathrooms: Optional[int] = Form(None),
    available_from: Optional[date] = Form(None),
    amenities: Optional[str] = Form(None),
    images: List[UploadFile] = File(default=[]),
    current: CurrentUser = Depends(owner_only),
    db: Database = Depends(get_db),
):
    # Ownership is checked before anything touches the disk
    property_service.find_property_for_owner(db, property_id, current.id)

    changes = {
        "title": title,
        "description": description,
        "address": parse_json_field("address", address),
        "rent_per_month": rent_per_month,
        "property_type": property_type,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "amenities": parse_json_field("amenities", amenities),
        "available_from": available_from,
    }
    paths = await save_property_images(images)
    try:
        updated = property_service.update_property(db, property_id, current.id, changes, paths)
    except Exception:
        discard_property_images(paths)
        raise
    return {"success": True, "data": updated}


@router.delete("/{property_id}")
def delete_property(property_id: str, current: CurrentUser = Depends(owner_only), db: Database = Depends(get_db)):
    property_service.delete_property(db, property_id, current.id)
    return {"success": True, "message": "Property removed"}
