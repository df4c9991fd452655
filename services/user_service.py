# services/user_service.py

from typing import Optional

from pydantic import ValidationError as SchemaError
from pymongo.database import Database

from core.errors import NotFound, Unauthenticated, ValidationError
from core.logging_config import logger
from core.security import create_token, hash_password, verify_password
from database import create_document, to_object_id
from schemas import Role, User

COLLECTION = "user"

SELF_SERVICE_ROLES = (Role.RENTER, Role.OWNER)


def public_user(doc: dict) -> dict:
    return {
        "id": str(doc["_id"]),
        "name": doc.get("name"),
        "email": doc.get("email"),
        "phone": doc.get("phone"),
        "role": doc.get("role"),
        "is_active": doc.get("is_active", True),
        "created_at": doc.get("created_at"),
    }


def auth_response(doc: dict) -> dict:
    return {"token": create_token(str(doc["_id"])), "user": public_user(doc)}


def _normalise_email(email: str) -> str:
    return email.strip().lower()


def register_user(
    db: Database,
    name: str,
    email: str,
    password: str,
    role: Role = Role.RENTER,
    phone: Optional[str] = None,
) -> dict:
    try:
        role = Role(role)
    except ValueError:
        role = None
    if role not in SELF_SERVICE_ROLES:
        raise ValidationError("Role must be renter or owner", errors=[{"field": "role", "msg": "Invalid role"}])
    if not password or len(password) < 6:
        raise ValidationError(
            "Please enter a password with 6 or more characters",
            errors=[{"field": "password", "msg": "Password must be at least 6 characters"}],
        )

    email = _normalise_email(email)
    if db[COLLECTION].find_one({"email": email}):
        raise ValidationError("User already exists")

    try:
        user = User(name=name, email=email, phone=phone, role=role, password_hash=hash_password(password))
    except SchemaError as exc:
        raise ValidationError(
            "Invalid registration",
            errors=[{"field": ".".join(str(p) for p in e["loc"]), "msg": e["msg"]} for e in exc.errors()],
        )

    user_id = create_document(db, COLLECTION, user)
    logger.info(f"Registered {user.role} {user_id}")
    return auth_response(db[COLLECTION].find_one({"_id": to_object_id(user_id)}))


def authenticate(db: Database, email: str, password: str) -> dict:
    user = db[COLLECTION].find_one({"email": _normalise_email(email)})
    if not user or not verify_password(password, user.get("password_hash", "")):
        logger.warning(f"Refused login for {email}: invalid credentials")
        raise Unauthenticated("Invalid credentials")
    if not user.get("is_active", True):
        logger.warning(f"Refused login for {email}: account deactivated")
        raise Unauthenticated("Account is deactivated")
    return auth_response(user)


def get_profile(db: Database, user_id: str) -> dict:
    oid = to_object_id(user_id)
    user = db[COLLECTION].find_one({"_id": oid}) if oid else None
    if not user:
        raise NotFound("User not found")
    return public_user(user)


def update_profile(
    db: Database,
    user_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> dict:
    oid = to_object_id(user_id)
    current = db[COLLECTION].find_one({"_id": oid}) if oid else None
    if not current:
        raise NotFound("User not found")

    changes = {}
    if name is not None:
        changes["name"] = name
    if phone is not None:
        changes["phone"] = phone
    if email is not None:
        email = _normalise_email(email)
        if email != current.get("email"):
            if db[COLLECTION].find_one({"email": email, "_id": {"$ne": oid}}):
                raise ValidationError("Email is already in use")
            changes["email"] = email

    if changes:
        merged = {**current, **changes}
        try:
            User(**{k: merged.get(k) for k in ("name", "email", "phone", "password_hash", "role", "is_active")})
        except SchemaError as exc:
            raise ValidationError(
                "Invalid profile",
                errors=[{"field": ".".join(str(p) for p in e["loc"]), "msg": e["msg"]} for e in exc.errors()],
            )
        db[COLLECTION].update_one({"_id": oid}, {"$set": changes})
        logger.info(f"Profile {user_id} updated: {', '.join(sorted(changes))}")

    return get_profile(db, user_id)
