"""
Input validation for booking requests.

Runs before any storage access: a request that fails here never opens a
session. All violations are collected so the caller can show every bad
field at once.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from email_validator import EmailNotValidError, validate_email

from festival_booking.core.config import get_settings
from festival_booking.core.errors import InvalidArgumentError
from festival_booking.schemas.booking import ParticipantIn

# wire name -> max length (matches the column sizes)
_MAX_LENGTHS = {
    "eventId": 64,
    "slotId": 64,
    "participant.name": 255,
    "participant.email": 255,
    "paymentRef": 128,
}


@dataclass(frozen=True)
class ValidatedBooking:
    event_id: str
    slot_id: str
    roll_number: str
    name: str
    email: str
    phone: str
    payment_ref: str
    extra: dict[str, Any] = field(default_factory=dict)


@lru_cache(maxsize=8)
def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern)


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def validate_booking_request(
    event_id: Any,
    slot_id: Any,
    participant: ParticipantIn,
    payment_ref: Any,
) -> ValidatedBooking:
    settings = get_settings()

    values = {
        "eventId": _clean(event_id),
        "slotId": _clean(slot_id),
        "participant.name": _clean(participant.name),
        "participant.email": _clean(participant.email).lower(),
        "participant.phone": _clean(participant.phone),
        "participant.rollNumber": _clean(participant.roll_number).upper(),
        "paymentRef": _clean(payment_ref),
    }

    missing = [name for name, value in values.items() if not value]
    if missing:
        raise InvalidArgumentError(
            f"Missing required fields: {', '.join(missing)}",
            fields=missing,
        )

    problems: dict[str, str] = {}
    for name, limit in _MAX_LENGTHS.items():
        if len(values[name]) > limit:
            problems[name] = f"must be at most {limit} characters"

    try:
        checked = validate_email(values["participant.email"], check_deliverability=False)
        values["participant.email"] = checked.normalized.lower()
    except EmailNotValidError as e:
        problems["participant.email"] = f"invalid email format ({e})"
    if not _compile(settings.PHONE_PATTERN).match(values["participant.phone"]):
        problems["participant.phone"] = "phone number must be exactly 10 digits"
    if not _compile(settings.ROLL_NUMBER_PATTERN).match(values["participant.rollNumber"]):
        problems["participant.rollNumber"] = "invalid roll number format"

    if problems:
        detail = "; ".join(f"{name}: {reason}" for name, reason in problems.items())
        raise InvalidArgumentError(f"Invalid booking request ({detail})", fields=list(problems))

    return ValidatedBooking(
        event_id=values["eventId"],
        slot_id=values["slotId"],
        roll_number=values["participant.rollNumber"],
        name=values["participant.name"],
        email=values["participant.email"],
        phone=values["participant.phone"],
        payment_ref=values["paymentRef"],
        extra=dict(participant.model_extra or {}),
    )
