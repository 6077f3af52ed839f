import logging
from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Error taxonomy for the booking ticket lifecycle"""
    # Token codec failures
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"

    # Lifecycle failures surfaced to callers
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    ALREADY_REDEEMED = "already_redeemed"
    RENDER_FAILURE = "render_failure"
    STORE_UNAVAILABLE = "store_unavailable"


ERROR_STATUS_CODES = {
    ErrorKind.MALFORMED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.BAD_SIGNATURE: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_REDEEMED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.RENDER_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.STORE_UNAVAILABLE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

DEFAULT_MESSAGES = {
    ErrorKind.MALFORMED: "Invalid or expired token",
    ErrorKind.BAD_SIGNATURE: "Invalid or expired token",
    ErrorKind.EXPIRED: "Invalid or expired token",
    ErrorKind.INVALID_TOKEN: "Invalid or expired token",
    ErrorKind.NOT_FOUND: "Booking not found",
    ErrorKind.ALREADY_REDEEMED: "Booking already verified",
    ErrorKind.RENDER_FAILURE: "Failed to generate ticket",
    ErrorKind.STORE_UNAVAILABLE: "Internal server error",
}


class BookingError(Exception):
    """Domain error raised by booking services and mapped at the request boundary"""

    def __init__(self, kind: ErrorKind, message: str = None):
        self.kind = kind
        self.message = message or DEFAULT_MESSAGES[kind]
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self.kind]


class VerificationError(BookingError):
    """Raised by the token codec; kind is MALFORMED, BAD_SIGNATURE or EXPIRED"""


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.kind.value)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
