"""
Tests for booking request validation.
"""

import pytest

from conftest import make_participant
from festival_booking.core.errors import InvalidArgumentError
from festival_booking.schemas.booking import ParticipantIn
from festival_booking.services.validation import validate_booking_request


def test_valid_request_is_normalized():
    request = validate_booking_request(
        " E1 ", "sA", make_participant("21bce1234", email=" Asha@College.EDU "), "PAY-1"
    )

    assert request.event_id == "E1"
    assert request.roll_number == "21BCE1234"
    assert request.email == "asha@college.edu"
    assert request.extra == {}


def test_missing_everything():
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_booking_request("", "", ParticipantIn(), "")

    assert exc_info.value.fields == [
        "eventId",
        "slotId",
        "participant.name",
        "participant.email",
        "participant.phone",
        "participant.rollNumber",
        "paymentRef",
    ]


def test_whitespace_only_counts_as_missing():
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_booking_request("E1", "sA", make_participant("21BCE1", name="   "), "PAY-1")

    assert exc_info.value.fields == ["participant.name"]


@pytest.mark.parametrize("phone", ["12345", "98765432101", "98765abcde", "+919876543210"])
def test_phone_must_be_ten_digits(phone):
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_booking_request("E1", "sA", make_participant("21BCE1", phone=phone), "PAY-1")

    assert exc_info.value.fields == ["participant.phone"]


@pytest.mark.parametrize(
    "email",
    [
        "asha",
        "asha@college",
        "asha @college.edu",
        "@college.edu",
        "a@b..c",
        "a@-.x",
        "a..b@c.d",
    ],
)
def test_email_format(email):
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_booking_request("E1", "sA", make_participant("21BCE1", email=email), "PAY-1")

    assert exc_info.value.fields == ["participant.email"]


@pytest.mark.parametrize("roll_number", ["12345", "21-BCE-1", "21BCE 1234", "A" * 33])
def test_roll_number_format(roll_number):
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_booking_request("E1", "sA", make_participant(roll_number), "PAY-1")

    assert "participant.rollNumber" in exc_info.value.fields


def test_all_format_problems_reported_at_once():
    participant = make_participant("12345", email="nope", phone="123")

    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_booking_request("E1", "sA", participant, "PAY-1")

    assert set(exc_info.value.fields) == {
        "participant.email",
        "participant.phone",
        "participant.rollNumber",
    }
    body = exc_info.value.to_response()
    assert body["success"] is False
    assert body["errorKind"] == "InvalidArgument"


def test_overlong_payment_reference():
    with pytest.raises(InvalidArgumentError) as exc_info:
        validate_booking_request("E1", "sA", make_participant("21BCE1"), "P" * 129)

    assert exc_info.value.fields == ["paymentRef"]


def test_extra_participant_fields_are_kept():
    participant = ParticipantIn(
        name="Ravi",
        email="ravi@college.edu",
        phone="9123456780",
        rollNumber="20MIS0042",
        college="VIT",
        department="Mechanical",
    )

    request = validate_booking_request("E1", "sA", participant, "PAY-9")

    assert request.extra == {"college": "VIT", "department": "Mechanical"}
