# routers/auth.py

from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from pymongo.database import Database

from database import get_db
from dependencies.auth import CurrentUser, get_current_user
from services import user_service

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Literal["renter", "owner"] = "renter"
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


@router.post("/register", status_code=201)
def register(body: RegisterRequest, db: Database = Depends(get_db)):
    result = user_service.register_user(
        db, name=body.name, email=body.email, password=body.password, role=body.role, phone=body.phone
    )
    return {"success": True, **result}


@router.post("/login")
def login(body: LoginRequest, db: Database = Depends(get_db)):
    result = user_service.authenticate(db, body.email, body.password)
    return {"success": True, **result}


@router.get("/me")
def me(current: CurrentUser = Depends(get_current_user), db: Database = Depends(get_db)):
    return {"success": True, "user": user_service.get_profile(db, current.id)}


@router.put("/profile")
def update_profile(
    body: ProfileUpdate,
    current: CurrentUser = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    user = user_service.update_profile(db, current.id, name=body.name, email=body.email, phone=body.phone)
    return {"success": True, "user": user}
