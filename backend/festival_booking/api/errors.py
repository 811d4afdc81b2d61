"""
Exception handlers: every failure leaves the API as
{"success": false, "errorKind": ..., "message": ...}.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from festival_booking.core.errors import BookingError, ErrorKind, InternalError, InvalidArgumentError
from festival_booking.core.logging import get_logger

logger = get_logger(__name__)


def _wire_field(loc: tuple) -> str:
    # ("body", "participant", "phone") -> "participant.phone"
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("request_error", error_kind=exc.kind.value, message=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({_wire_field(tuple(err.get("loc", ()))) for err in exc.errors()})
    error = InvalidArgumentError(f"Invalid request: {', '.join(fields)}", fields=fields)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_response())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "errorKind": ErrorKind.INTERNAL.value,
            "message": InternalError.default_message,
        },
    )


EXCEPTION_HANDLERS = {
    BookingError: booking_error_handler,
    RequestValidationError: validation_error_handler,
    Exception: unhandled_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
