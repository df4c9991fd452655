"""
RentEasy - Database Schemas

Each Pydantic model represents a MongoDB collection.
Collection name is the lowercase of the class name (e.g., User -> "user").
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, List, Literal

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, EmailStr, computed_field, field_validator


class Role(str, Enum):
    RENTER = "renter"
    OWNER = "owner"
    ADMIN = "admin"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


PropertyType = Literal["apartment", "house", "condo", "townhouse", "studio"]


def add_months(start: date, months: int) -> date:
    """Calendar-month arithmetic; day-of-month is kept, clamped to the month's last day."""
    return start + relativedelta(months=months)


# Shared
class Coordinates(BaseModel):
    lat: float = Field(..., description="Latitude")
    lng: float = Field(..., description="Longitude")


class Address(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    coordinates: Optional[Coordinates] = None


# Users
class User(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: Optional[str] = None
    password_hash: str
    role: Role = Field(Role.RENTER, validate_default=True)
    is_active: bool = True


# Properties
class Property(BaseModel):
    owner_id: str = Field(..., description="Owner user _id as string")
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    address: Address
    rent_per_month: float = Field(..., ge=0)
    property_type: PropertyType
    bedrooms: int = Field(..., ge=0)
    bathrooms: int = Field(..., ge=0)
    amenities: List[str] = []
    images: List[str] = []
    available_from: date
    is_active: bool = True
    is_approved: bool = False

    @field_validator("amenities")
    @classmethod
    def unique_amenities(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(a.strip() for a in value if a and a.strip()))


# Bookings
class Booking(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    property_id: str
    renter_id: str
    owner_id: str
    move_in_date: date
    duration: int = Field(..., ge=1, description="Whole months")
    total_amount: float = Field(..., ge=0)
    status: BookingStatus = Field(BookingStatus.PENDING, validate_default=True)
    message: Optional[str] = Field(None, max_length=500)
    owner_response: Optional[str] = Field(None, max_length=500)
    responded_at: Optional[datetime] = None

    @computed_field
    @property
    def move_out_date(self) -> date:
        return add_months(self.move_in_date, self.duration)
