from datetime import datetime
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from pymongo.database import Database

from core.errors import Forbidden, Unauthenticated
from core.security import decode_token
from database import get_db, to_object_id
from schemas import Role

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# ============================================================
# Current User Model (identity resolved from the bearer token)
# ============================================================
class CurrentUser(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    phone: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    @classmethod
    def from_doc(cls, doc: dict) -> "CurrentUser":
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name", ""),
            email=doc.get("email", ""),
            role=doc.get("role", Role.RENTER),
            phone=doc.get("phone"),
            is_active=doc.get("is_active", True),
            created_at=doc.get("created_at"),
        )


def get_current_user(token: str = Depends(oauth2_scheme), db: Database = Depends(get_db)) -> CurrentUser:
    try:
        user_id = decode_token(token)
    except jwt.PyJWTError:
        raise Unauthenticated("Could not validate credentials")

    oid = to_object_id(user_id) if user_id else None
    if oid is None:
        raise Unauthenticated("Invalid token")

    user = db["user"].find_one({"_id": oid})
    if not user:
        raise Unauthenticated("User not found")
    if not user.get("is_active", True):
        raise Unauthenticated("Account is deactivated")
    return CurrentUser.from_doc(user)


def require_roles(*roles: Role):
    """Dependency factory: the caller must hold one of ``roles``."""
    allowed = set(roles)

    def checker(current: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current.role not in allowed:
            raise Forbidden(f"User role {current.role.value} is not authorized to access this route")
        return current

    return checker
