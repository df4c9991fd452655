# routers/bookings.py

from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from pymongo.database import Database

from database import get_db
from dependencies.auth import CurrentUser, get_current_user, require_roles
from schemas import BookingStatus, Role
from services import booking_service

router = APIRouter(
    prefix="/bookings",
    tags=["Bookings"],
)


class BookingCreate(BaseModel):
    property_id: str = Field(..., min_length=1)
    move_in_date: date
    duration: int = Field(..., ge=1, description="Whole months")
    message: Optional[str] = Field(None, max_length=500)


class StatusUpdate(BaseModel):
    status: Literal["confirmed", "rejected"]
    owner_response: Optional[str] = Field(None, max_length=500)


@router.post("", status_code=201)
def create_booking(
    body: BookingCreate,
    current: CurrentUser = Depends(require_roles(Role.RENTER)),
    db: Database = Depends(get_db),
):
    booking = booking_service.create_booking(
        db,
        renter_id=current.id,
        property_id=body.property_id,
        move_in_date=body.move_in_date,
        duration=body.duration,
        message=body.message,
    )
    return {"success": True, "data": booking}


@router.get("")
def list_bookings(current: CurrentUser = Depends(get_current_user), db: Database = Depends(get_db)):
    bookings = booking_service.list_bookings(db, current.id, current.role)
    return {"success": True, "count": len(bookings), "data": bookings}


@router.get("/owner/stats")
def owner_stats(current: CurrentUser = Depends(require_roles(Role.OWNER)), db: Database = Depends(get_db)):
    return {"success": True, "data": booking_service.stats_by_owner(db, current.id)}


@router.get("/{booking_id}")
def get_booking(booking_id: str, current: CurrentUser = Depends(get_current_user), db: Database = Depends(get_db)):
    return {"success": True, "data": booking_service.get_booking(db, booking_id, current.id)}


@router.put("/{booking_id}/status")
def update_status(
    booking_id: str,
    body: StatusUpdate,
    current: CurrentUser = Depends(require_roles(Role.OWNER)),
    db: Database = Depends(get_db),
):
    booking = booking_service.transition_booking(
        db, booking_id, current.id, current.role, body.status, response=body.owner_response
    )
    return {"success": True, "data": booking}


@router.put("/{booking_id}/cancel")
def cancel_booking(
    booking_id: str,
    current: CurrentUser = Depends(require_roles(Role.RENTER)),
    db: Database = Depends(get_db),
):
    booking = booking_service.transition_booking(db, booking_id, current.id, current.role, BookingStatus.CANCELLED)
    return {"success": True, "data": booking}
