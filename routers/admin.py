# routers/admin.py

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from pymongo.database import Database

from database import get_db
from dependencies.auth import CurrentUser, require_roles
from schemas import Role
from services import admin_service

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
)

admin_only = require_roles(Role.ADMIN)

StatusFilter = Literal["active", "inactive"]


class UserStatusUpdate(BaseModel):
    is_active: bool


class ApprovalUpdate(BaseModel):
    is_approved: bool


# -------------------------------------------------------------
# Users
# -------------------------------------------------------------
@router.get("/users")
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[Role] = None,
    status: Optional[StatusFilter] = None,
    current: CurrentUser = Depends(admin_only),
    db: Database = Depends(get_db),
):
    result = admin_service.list_users(db, page, limit, role=role.value if role else None, status=status)
    return {"success": True, **result}


@router.get("/users/{user_id}")
def get_user(user_id: str, current: CurrentUser = Depends(admin_only), db: Database = Depends(get_db)):
    return {"success": True, "data": admin_service.get_user(db, user_id)}


@router.put("/users/{user_id}/status")
def set_user_status(
    user_id: str,
    body: UserStatusUpdate,
    current: CurrentUser = Depends(admin_only),
    db: Database = Depends(get_db),
):
    return {"success": True, "data": admin_service.set_user_status(db, user_id, body.is_active)}


@router.delete("/users/{user_id}")
def delete_user(user_id: str, current: CurrentUser = Depends(admin_only), db: Database = Depends(get_db)):
    admin_service.delete_user(db, user_id, current.id)
    return {"success": True, "message": "User deleted successfully"}


# -------------------------------------------------------------
# Properties
# -------------------------------------------------------------
@router.get("/properties")
def list_properties(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[StatusFilter] = None,
    approved: Optional[bool] = None,
    current: CurrentUser = Depends(admin_only),
    db: Database = Depends(get_db),
):
    result = admin_service.list_all_properties(db, page, limit, status=status, approved=approved)
    return {"success": True, **result}


@router.put("/properties/{property_id}/approval")
def set_property_approval(
    property_id: str,
    body: ApprovalUpdate,
    current: CurrentUser = Depends(admin_only),
    db: Database = Depends(get_db),
):
    return {"success": True, "data": admin_service.set_property_approval(db, property_id, body.is_approved)}


@router.delete("/properties/{property_id}")
def delete_property(property_id: str, current: CurrentUser = Depends(admin_only), db: Database = Depends(get_db)):
    admin_service.delete_any_property(db, property_id)
    return {"success": True, "message": "Property deleted successfully"}


# -------------------------------------------------------------
# Bookings and statistics
# -------------------------------------------------------------
@router.get("/bookings")
def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[Literal["pending", "confirmed", "rejected", "cancelled"]] = None,
    current: CurrentUser = Depends(admin_only),
    db: Database = Depends(get_db),
):
    return {"success": True, **admin_service.list_all_bookings(db, page, limit, status=status)}


@router.get("/stats")
def stats(current: CurrentUser = Depends(admin_only), db: Database = Depends(get_db)):
    return {"success": True, "data": admin_service.platform_stats(db)}
