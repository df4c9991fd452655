# tests/test_schemas.py

from datetime import date

import pytest
from pydantic import ValidationError

from schemas import Booking, Property, add_months


def make_booking(**overrides):
    fields = {
        "property_id": "p",
        "renter_id": "r",
        "owner_id": "o",
        "move_in_date": date(2024, 3, 15),
        "duration": 4,
        "total_amount": 4000,
    }
    fields.update(overrides)
    return Booking(**fields)


@pytest.mark.parametrize(
    "start, months, expected",
    [
        (date(2024, 3, 15), 4, date(2024, 7, 15)),
        (date(2024, 11, 30), 3, date(2025, 2, 28)),
        (date(2023, 12, 31), 2, date(2024, 2, 29)),
        (date(2024, 1, 1), 12, date(2025, 1, 1)),
    ],
)
def test_add_months(start, months, expected):
    assert add_months(start, months) == expected


def test_move_out_follows_inputs():
    booking = make_booking()
    assert booking.move_out_date == date(2024, 7, 15)

    booking.duration = 6
    assert booking.move_out_date == date(2024, 9, 15)

    booking.move_in_date = date(2024, 4, 1)
    assert booking.move_out_date == date(2024, 10, 1)
    assert booking.model_dump()["move_out_date"] == date(2024, 10, 1)


def test_booking_defaults_to_pending():
    assert make_booking().status == "pending"


def test_booking_limits():
    with pytest.raises(ValidationError):
        make_booking(duration=0)
    with pytest.raises(ValidationError):
        make_booking(message="x" * 501)

    booking = make_booking()
    with pytest.raises(ValidationError):
        booking.owner_response = "y" * 501


def test_property_amenities_are_a_set():
    prop = Property(
        owner_id="o",
        title="t",
        description="d",
        address={"street": "s", "city": "c", "state": "st", "zip_code": "z"},
        rent_per_month=0,
        property_type="studio",
        bedrooms=0,
        bathrooms=0,
        amenities=["wifi", " wifi ", "pool", ""],
        available_from=date(2024, 1, 1),
    )

    assert prop.amenities == ["wifi", "pool"]
    assert prop.is_approved is False
