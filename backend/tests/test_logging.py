"""
Tests for the contact-masking log processor.
"""

from festival_booking.core.logging import mask_contact_details


def test_contact_details_are_masked():
    event = mask_contact_details(
        None,
        "info",
        {
            "event": "notification_dispatched",
            "to": "asha.v@college.edu",
            "phone": "9876543210",
            "roll_number": "21BCE0001",
        },
    )

    assert event["to"] == "a***@college.edu"
    assert event["phone"] == "******3210"
    assert event["roll_number"] == "21BCE0001"


def test_missing_and_empty_contact_fields_are_left_alone():
    event = mask_contact_details(None, "info", {"event": "booking_created", "email": ""})

    assert event == {"event": "booking_created", "email": ""}
