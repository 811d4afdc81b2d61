"""
Logging for the booking service, built on structlog.

Events worth knowing about:
  booking_created / booking_rejected   one per registration attempt, with
                                       event_id, slot_id and error_kind
  transaction_retry / transaction_failed
                                       lost races and storage trouble
  slot_full, duplicate_registration_blocked, payment_reuse_blocked
                                       the guard that turned a request away
  booking_confirmed, booking_rejected_by_admin, slot_updated
                                       admin state changes with admin_id
  notification_failed                  post-commit sends that did not go out

Every line carries the request context (request_id, method, path) bound by
the middleware. Production output is JSON with participant email addresses
and phone numbers masked; elsewhere it is console output in the clear.
"""

import logging
import sys
import structlog
from festival_booking.core.config import get_settings

_CONTACT_KEYS = ("email", "to", "phone")


def mask_contact_details(logger, method_name, event_dict):
    """Reduce participant emails and phone numbers to a recognisable stub."""
    for key in _CONTACT_KEYS:
        value = event_dict.get(key)
        if not isinstance(value, str) or not value:
            continue
        if "@" in value:
            local, _, domain = value.partition("@")
            event_dict[key] = f"{local[:1]}***@{domain}"
        else:
            event_dict[key] = f"******{value[-4:]}"
    return event_dict


def setup_logging() -> None:
    settings = get_settings()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.ENVIRONMENT == "production":
        shared_processors.append(mask_contact_details)
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ]
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # setup_logging may run more than once (tests, reloads)
    for existing in list(root_logger.handlers):
        if isinstance(existing.formatter, structlog.stdlib.ProcessorFormatter):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
