# tests/test_bookings_api.py

"""
Tests for the booking endpoints and their role checks.
"""

from datetime import date

from fastapi.testclient import TestClient


def request_booking(client, headers, property_id, move_in="2024-03-15", duration=4, **extra):
    payload = {"property_id": property_id, "move_in_date": move_in, "duration": duration, **extra}
    return client.post("/api/bookings", json=payload, headers=headers)


def test_renter_creates_booking(client: TestClient, renter, make_property, owner, auth_header):
    property_id = make_property(owner, rent_per_month=1000)

    response = request_booking(client, auth_header(renter), property_id)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["move_out_date"] == "2024-07-15"
    assert data["total_amount"] == 4000
    assert data["status"] == "pending"
    assert data["property"]["title"] == "Sunny Loft"


def test_owner_cannot_create_booking(client: TestClient, owner, listing, auth_header):
    response = request_booking(client, auth_header(owner), listing)

    assert response.status_code == 403


def test_booking_requires_authentication(client: TestClient, listing):
    assert request_booking(client, {}, listing).status_code == 401


def test_booking_before_availability(client: TestClient, renter, owner, make_property, auth_header):
    property_id = make_property(owner, available_from=date(2024, 6, 1))

    response = request_booking(client, auth_header(renter), property_id, move_in="2024-05-01")

    assert response.status_code == 400
    assert "availability" in response.json()["detail"]


def test_booking_unavailable_property(client: TestClient, renter, owner, make_property, auth_header):
    property_id = make_property(owner, is_approved=False)

    response = request_booking(client, auth_header(renter), property_id)

    assert response.status_code == 400
    assert response.json()["detail"] == "Property is not available for booking"


def test_booking_missing_property(client: TestClient, renter, auth_header):
    response = request_booking(client, auth_header(renter), "64b7f0c2a1b2c3d4e5f60718")

    assert response.status_code == 404


def test_booking_invalid_payload(client: TestClient, renter, listing, auth_header):
    response = request_booking(client, auth_header(renter), listing, move_in="soon", duration=0)

    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert {"move_in_date", "duration"} <= fields


def test_owner_confirms_then_cannot_change(client: TestClient, renter, owner, listing, auth_header):
    booking_id = request_booking(client, auth_header(renter), listing).json()["data"]["_id"]

    confirmed = client.put(
        f"/api/bookings/{booking_id}/status",
        json={"status": "confirmed", "owner_response": "See you then"},
        headers=auth_header(owner),
    )
    again = client.put(
        f"/api/bookings/{booking_id}/status", json={"status": "rejected"}, headers=auth_header(owner)
    )

    assert confirmed.status_code == 200
    assert confirmed.json()["data"]["status"] == "confirmed"
    assert confirmed.json()["data"]["responded_at"] is not None
    assert again.status_code == 400
    assert again.json()["detail"] == "Booking status can only be updated for pending requests"


def test_renter_cannot_use_status_endpoint(client: TestClient, renter, listing, auth_header):
    booking_id = request_booking(client, auth_header(renter), listing).json()["data"]["_id"]

    response = client.put(
        f"/api/bookings/{booking_id}/status", json={"status": "confirmed"}, headers=auth_header(renter)
    )

    assert response.status_code == 403


def test_status_endpoint_rejects_cancelled(client: TestClient, renter, owner, listing, auth_header):
    booking_id = request_booking(client, auth_header(renter), listing).json()["data"]["_id"]

    response = client.put(
        f"/api/bookings/{booking_id}/status", json={"status": "cancelled"}, headers=auth_header(owner)
    )

    assert response.status_code == 400


def test_other_owner_cannot_respond(client: TestClient, renter, make_user, listing, auth_header):
    booking_id = request_booking(client, auth_header(renter), listing).json()["data"]["_id"]

    response = client.put(
        f"/api/bookings/{booking_id}/status", json={"status": "rejected"}, headers=auth_header(make_user("owner"))
    )

    assert response.status_code == 403


def test_renter_cancels(client: TestClient, renter, owner, listing, auth_header):
    booking_id = request_booking(client, auth_header(renter), listing).json()["data"]["_id"]

    cancelled = client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_header(renter))
    too_late = client.put(
        f"/api/bookings/{booking_id}/status", json={"status": "confirmed"}, headers=auth_header(owner)
    )

    assert cancelled.status_code == 200
    assert cancelled.json()["data"]["status"] == "cancelled"
    assert too_late.status_code == 400


def test_cancel_after_confirmation_fails(client: TestClient, renter, owner, listing, auth_header):
    booking_id = request_booking(client, auth_header(renter), listing).json()["data"]["_id"]
    client.put(f"/api/bookings/{booking_id}/status", json={"status": "confirmed"}, headers=auth_header(owner))

    response = client.put(f"/api/bookings/{booking_id}/cancel", headers=auth_header(renter))

    assert response.status_code == 400
    assert response.json()["detail"] == "Only pending bookings can be cancelled"


def test_list_and_get_bookings(client: TestClient, renter, owner, make_user, listing, auth_header):
    booking_id = request_booking(client, auth_header(renter), listing).json()["data"]["_id"]

    as_renter = client.get("/api/bookings", headers=auth_header(renter)).json()
    as_owner = client.get("/api/bookings", headers=auth_header(owner)).json()
    as_stranger = client.get("/api/bookings", headers=auth_header(make_user("renter"))).json()

    assert as_renter["count"] == 1
    assert as_owner["data"][0]["_id"] == booking_id
    assert as_stranger["count"] == 0

    assert client.get(f"/api/bookings/{booking_id}", headers=auth_header(owner)).status_code == 200
    assert client.get(f"/api/bookings/{booking_id}", headers=auth_header(make_user("owner"))).status_code == 403
    assert client.get("/api/bookings/not-an-id", headers=auth_header(owner)).status_code == 404


def test_owner_stats(client: TestClient, renter, owner, listing, auth_header):
    first = request_booking(client, auth_header(renter), listing).json()["data"]["_id"]
    request_booking(client, auth_header(renter), listing)
    client.put(f"/api/bookings/{first}/status", json={"status": "rejected"}, headers=auth_header(owner))

    response = client.get("/api/bookings/owner/stats", headers=auth_header(owner))

    assert response.status_code == 200
    assert response.json()["data"] == {"pending": 1, "confirmed": 0, "rejected": 1, "cancelled": 0}
    assert client.get("/api/bookings/owner/stats", headers=auth_header(renter)).status_code == 403
