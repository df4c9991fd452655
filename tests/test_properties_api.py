# tests/test_properties_api.py

"""
Tests for the property endpoints, including multipart image uploads.
"""

import json
import os

from fastapi.testclient import TestClient

from core.config import settings
from database import to_object_id

ADDRESS = {"street": "5 Pine St", "city": "Denver", "state": "CO", "zip_code": "80202"}


def listing_form(**overrides):
    form = {
        "title": "Mountain View",
        "description": "Two bedrooms with a view",
        "address": json.dumps(ADDRESS),
        "rent_per_month": "2100",
        "property_type": "condo",
        "bedrooms": "2",
        "bathrooms": "1",
        "available_from": "2024-09-01",
        "amenities": json.dumps(["balcony"]),
    }
    form.update(overrides)
    return form


def image(name="front.jpg", content_type="image/jpeg", size=16):
    return ("images", (name, b"\xff" * size, content_type))


def test_public_listing(client: TestClient, owner, make_property):
    make_property(owner)
    make_property(owner, is_approved=False)

    response = client.get("/api/properties", params={"location": "austin", "page": 1, "limit": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["pagination"] == {"page": 1, "pages": 1, "total": 1}
    assert body["data"][0]["available_from"] == "2024-01-01"


def test_public_listing_rejects_unknown_type(client: TestClient):
    assert client.get("/api/properties", params={"property_type": "castle"}).status_code == 400


def test_get_property(client: TestClient, listing):
    assert client.get(f"/api/properties/{listing}").json()["data"]["_id"] == listing
    assert client.get("/api/properties/nope").status_code == 404


def test_owner_creates_property_with_images(client: TestClient, owner, auth_header):
    response = client.post(
        "/api/properties",
        data=listing_form(),
        files=[image(), image("back.png", "image/png")],
        headers=auth_header(owner),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["is_approved"] is False
    assert data["address"]["city"] == "Denver"
    assert data["amenities"] == ["balcony"]
    assert len(data["images"]) == 2
    for path in data["images"]:
        assert path.startswith("/uploads/properties/")
        assert os.path.exists(os.path.join(settings.UPLOAD_DIR, "properties", os.path.basename(path)))


def test_renter_cannot_create_property(client: TestClient, renter, auth_header):
    response = client.post("/api/properties", data=listing_form(), headers=auth_header(renter))

    assert response.status_code == 403


def test_create_property_rejects_non_images(client: TestClient, owner, auth_header):
    response = client.post(
        "/api/properties",
        data=listing_form(),
        files=[image("notes.txt", "text/plain")],
        headers=auth_header(owner),
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Only image files are allowed"


def test_create_property_rejects_too_many_images(client: TestClient, owner, auth_header):
    files = [image(f"{i}.jpg") for i in range(settings.MAX_UPLOAD_FILES + 1)]

    response = client.post("/api/properties", data=listing_form(), files=files, headers=auth_header(owner))

    assert response.status_code == 400


def test_create_property_with_bad_address_json(client: TestClient, owner, auth_header):
    response = client.post(
        "/api/properties", data=listing_form(address="{not json"), headers=auth_header(owner)
    )

    assert response.status_code == 400


def test_update_resets_approval_and_appends_images(client: TestClient, db, owner, listing, auth_header):
    response = client.put(
        f"/api/properties/{listing}",
        data={"rent_per_month": "1250"},
        files=[image()],
        headers=auth_header(owner),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["rent_per_month"] == 1250
    assert data["is_approved"] is False
    assert len(data["images"]) == 1
    assert client.get("/api/properties").json()["count"] == 0


def stored_images():
    target = os.path.join(settings.UPLOAD_DIR, "properties")
    return set(os.listdir(target)) if os.path.isdir(target) else set()


def test_rejected_create_leaves_no_images_behind(client: TestClient, owner, auth_header):
    before = stored_images()
    address = dict(ADDRESS, city="")

    response = client.post(
        "/api/properties",
        data=listing_form(address=json.dumps(address)),
        files=[image("front.png", "image/png")],
        headers=auth_header(owner),
    )

    assert response.status_code == 400
    assert stored_images() == before


def test_rejected_update_leaves_no_images_behind(client: TestClient, db, owner, listing, auth_header):
    before = stored_images()

    response = client.put(
        f"/api/properties/{listing}",
        data={"address": json.dumps({"street": "1"})},
        files=[image("front.png", "image/png")],
        headers=auth_header(owner),
    )

    assert response.status_code == 400
    assert stored_images() == before
    assert db["property"].find_one({"_id": to_object_id(listing)})["images"] == []


def test_update_by_stranger(client: TestClient, make_user, listing, auth_header):
    response = client.put(
        f"/api/properties/{listing}", data={"title": "Hijacked"}, headers=auth_header(make_user("owner"))
    )

    assert response.status_code == 403


def test_delete_property(client: TestClient, db, owner, make_user, listing, auth_header):
    forbidden = client.delete(f"/api/properties/{listing}", headers=auth_header(make_user("owner")))
    deleted = client.delete(f"/api/properties/{listing}", headers=auth_header(owner))

    assert forbidden.status_code == 403
    assert deleted.status_code == 200
    assert db["property"].find_one({"_id": to_object_id(listing)}) is None


def test_my_properties(client: TestClient, owner, make_property, auth_header):
    make_property(owner, is_approved=False)
    make_property(owner)

    response = client.get("/api/properties/owner/my-properties", headers=auth_header(owner))

    assert response.status_code == 200
    assert response.json()["count"] == 2
