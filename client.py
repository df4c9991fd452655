"""
RentEasy - API client and session state

``Session`` holds the authenticated identity and token. It is created on
startup from a token store (``Session.restore``), filled by login/register,
and cleared on logout or whenever the API rejects the token.
``can_access`` mirrors the protected-route rules used by dashboards.
"""
import json
import os
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

import httpx

from core.logging_config import logger
from schemas import Role

# Guard outcomes
ALLOWED = "allowed"
LOADING = "loading"
LOGIN_REQUIRED = "login"
UNAUTHORIZED = "unauthorized"


class TokenStore:
    """Persists the bearer token between runs (one line in a file)."""

    def __init__(self, path: Optional[str] = None):
        self.path = path

    def load(self) -> Optional[str]:
        if not self.path or not os.path.exists(self.path):
            return None
        with open(self.path) as f:
            return f.read().strip() or None

    def save(self, token: str) -> None:
        if self.path:
            with open(self.path, "w") as f:
                f.write(token)

    def clear(self) -> None:
        if self.path and os.path.exists(self.path):
            os.remove(self.path)


class Session:
    def __init__(self, store: Optional[TokenStore] = None):
        self.store = store or TokenStore()
        self.token: Optional[str] = None
        self.user: Optional[dict] = None
        self.is_authenticated = False
        self.loading = True

    @classmethod
    def restore(cls, store: Optional[TokenStore] = None) -> "Session":
        session = cls(store)
        session.token = session.store.load()
        return session

    @property
    def role(self) -> Optional[Role]:
        if not self.user:
            return None
        return Role(self.user["role"])

    def signed_in(self, token: str, user: dict) -> None:
        self.store.save(token)
        self.token = token
        self.user = user
        self.is_authenticated = True
        self.loading = False

    def user_loaded(self, user: dict) -> None:
        self.user = user
        self.is_authenticated = True
        self.loading = False

    def clear(self) -> None:
        self.store.clear()
        self.token = None
        self.user = None
        self.is_authenticated = False
        self.loading = False


def can_access(session: Session, roles: Optional[Iterable[Role]] = None) -> str:
    """Route guard: where a request for a protected view should end up."""
    if session.loading:
        return LOADING
    if not session.is_authenticated:
        return LOGIN_REQUIRED
    if roles is not None and session.role not in set(roles):
        return UNAUTHORIZED
    return ALLOWED


# (filename, content, content_type)
ImageFile = Tuple[str, bytes, str]


def listing_form(fields: dict) -> dict:
    """Multipart form values for a listing: nested values travel as JSON text."""
    form = {}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            form[key] = json.dumps(value)
        elif isinstance(value, date):
            form[key] = value.isoformat()
        else:
            form[key] = str(value)
    return form


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class ApiClient:
    def __init__(self, session: Session, base_url: str = "http://localhost:8000", http: Optional[httpx.Client] = None):
        self.session = session
        self.http = http or httpx.Client(base_url=base_url, timeout=10.0)

    # ---------------------------------------------------------
    # Transport
    # ---------------------------------------------------------
    def _request(self, method: str, path: str, **kwargs) -> dict:
        headers = kwargs.pop("headers", {})
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        response = self.http.request(method, f"/api{path}", headers=headers, **kwargs)

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = body.get("detail") or response.reason_phrase
            if response.status_code == 401 and self.session.token:
                logger.info("Token rejected by the API, clearing session")
                self.session.clear()
            raise ApiError(response.status_code, str(message), body.get("errors"))
        return response.json()

    # ---------------------------------------------------------
    # Auth
    # ---------------------------------------------------------
    def load_user(self) -> Optional[dict]:
        """Startup: resolve the stored token into a user, or end up signed out."""
        if not self.session.token:
            self.session.clear()
            return None
        try:
            body = self._request("GET", "/auth/me")
        except ApiError:
            self.session.clear()
            return None
        self.session.user_loaded(body["user"])
        return body["user"]

    def register(self, name: str, email: str, password: str, role: str = "renter", phone: Optional[str] = None) -> dict:
        payload = {"name": name, "email": email, "password": password, "role": role}
        if phone:
            payload["phone"] = phone
        body = self._request("POST", "/auth/register", json=payload)
        self.session.signed_in(body["token"], body["user"])
        return body["user"]

    def login(self, email: str, password: str) -> dict:
        body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.session.signed_in(body["token"], body["user"])
        return body["user"]

    def logout(self) -> None:
        self.session.clear()

    def update_profile(self, **changes) -> dict:
        body = self._request("PUT", "/auth/profile", json=changes)
        self.session.user_loaded(body["user"])
        return body["user"]

    # ---------------------------------------------------------
    # Properties
    # ---------------------------------------------------------
    def list_properties(self, **filters) -> dict:
        params = {k: v for k, v in filters.items() if v is not None and v != ""}
        return self._request("GET", "/properties", params=params)

    def get_property(self, property_id: str) -> dict:
        return self._request("GET", f"/properties/{property_id}")["data"]

    def my_properties(self) -> List[dict]:
        return self._request("GET", "/properties/owner/my-properties")["data"]

    def _send_listing(self, method: str, path: str, fields: dict, images: Optional[Sequence[ImageFile]]) -> dict:
        files = [("images", image) for image in images or []]
        return self._request(method, path, data=listing_form(fields), files=files or None)["data"]

    def create_property(self, images: Optional[Sequence[ImageFile]] = None, **fields) -> dict:
        return self._send_listing("POST", "/properties", fields, images)

    def update_property(self, property_id: str, images: Optional[Sequence[ImageFile]] = None, **changes) -> dict:
        return self._send_listing("PUT", f"/properties/{property_id}", changes, images)

    def delete_property(self, property_id: str) -> None:
        self._request("DELETE", f"/properties/{property_id}")

    # ---------------------------------------------------------
    # Bookings
    # ---------------------------------------------------------
    def create_booking(self, property_id: str, move_in_date: str, duration: int, message: Optional[str] = None) -> dict:
        payload = {"property_id": property_id, "move_in_date": move_in_date, "duration": duration}
        if message:
            payload["message"] = message
        return self._request("POST", "/bookings", json=payload)["data"]

    def list_bookings(self) -> List[dict]:
        return self._request("GET", "/bookings")["data"]

    def get_booking(self, booking_id: str) -> dict:
        return self._request("GET", f"/bookings/{booking_id}")["data"]

    def respond_to_booking(self, booking_id: str, status: str, owner_response: Optional[str] = None) -> dict:
        payload = {"status": status}
        if owner_response:
            payload["owner_response"] = owner_response
        return self._request("PUT", f"/bookings/{booking_id}/status", json=payload)["data"]

    def cancel_booking(self, booking_id: str) -> dict:
        return self._request("PUT", f"/bookings/{booking_id}/cancel")["data"]

    def owner_stats(self) -> dict:
        return self._request("GET", "/bookings/owner/stats")["data"]

    # ---------------------------------------------------------
    # Admin
    # ---------------------------------------------------------
    def admin_stats(self) -> dict:
        return self._request("GET", "/admin/stats")["data"]

    def admin_users(self, **params) -> dict:
        return self._request("GET", "/admin/users", params=params)

    def set_user_status(self, user_id: str, is_active: bool) -> dict:
        return self._request("PUT", f"/admin/users/{user_id}/status", json={"is_active": is_active})["data"]

    def set_property_approval(self, property_id: str, is_approved: bool) -> dict:
        return self._request(
            "PUT", f"/admin/properties/{property_id}/approval", json={"is_approved": is_approved}
        )["data"]

    def admin_user(self, user_id: str) -> dict:
        return self._request("GET", f"/admin/users/{user_id}")["data"]

    def admin_delete_user(self, user_id: str) -> None:
        self._request("DELETE", f"/admin/users/{user_id}")

    def admin_properties(self, **params) -> dict:
        return self._request("GET", "/admin/properties", params={k: v for k, v in params.items() if v is not None})

    def admin_delete_property(self, property_id: str) -> None:
        self._request("DELETE", f"/admin/properties/{property_id}")

    def admin_bookings(self, **params) -> dict:
        return self._request("GET", "/admin/bookings", params={k: v for k, v in params.items() if v is not None})
