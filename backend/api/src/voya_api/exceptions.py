"""FastAPI exception handlers converting VoyaError to HTTP responses.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: Booking validation failures
- 401 Unauthorized: Authentication required or failed
- 402 Payment Required: Payment failures
- 403 Forbidden: Acting on another user's resource
- 404 Not Found: Unknown booking or property
- 409 Conflict: Status transition or duplicate submission
- 503 Service Unavailable: Record store or notification collaborator failures
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_402_PAYMENT_REQUIRED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from voya.models.errors import ErrorCode, VoyaError
from voya.utils.logging import get_logger

logger = get_logger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Validation errors -> 400 Bad Request
    ErrorCode.INVALID_DATE_RANGE: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_RATE: HTTP_400_BAD_REQUEST,
    ErrorCode.GUEST_LIMIT_EXCEEDED: HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_REQUIRED_FIELD: HTTP_400_BAD_REQUEST,
    # Authentication errors -> 401 Unauthorized
    ErrorCode.AUTH_REQUIRED: HTTP_401_UNAUTHORIZED,
    ErrorCode.INVALID_CREDENTIALS: HTTP_401_UNAUTHORIZED,
    ErrorCode.SESSION_EXPIRED: HTTP_401_UNAUTHORIZED,
    # Authorization errors -> 403 Forbidden
    ErrorCode.UNAUTHORIZED: HTTP_403_FORBIDDEN,
    # Not found errors -> 404 Not Found
    ErrorCode.BOOKING_NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.PROPERTY_NOT_FOUND: HTTP_404_NOT_FOUND,
    # State conflicts -> 409 Conflict
    ErrorCode.INVALID_STATUS_TRANSITION: HTTP_409_CONFLICT,
    ErrorCode.BOOKING_IN_PROGRESS: HTTP_409_CONFLICT,
    # Payment errors -> 402 Payment Required
    ErrorCode.PAYMENT_FAILED: HTTP_402_PAYMENT_REQUIRED,
    # Collaborator failures -> 503 Service Unavailable
    ErrorCode.STORE_ERROR: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.NOTIFICATION_FAILED: HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.FETCH_FAILED: HTTP_503_SERVICE_UNAVAILABLE,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, 400 if not explicitly mapped."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def voya_error_handler(request: Request, exc: VoyaError) -> JSONResponse:
    """Convert a VoyaError to its ErrorResponse JSON body and HTTP status."""
    status_code = get_http_status_for_error(exc.code)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.code.value)

    return JSONResponse(
        status_code=status_code,
        content=exc.to_error_response().model_dump(mode="json"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for uncaught exceptions; internal details are not exposed."""
    logger.exception("Unhandled exception: %s", exc)

    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error_code": "ERR_INTERNAL",
            "message": "An unexpected error occurred",
            "recovery": "Please try again later or contact support",
            "details": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Example:
        app = FastAPI()
        register_exception_handlers(app)
    """
    app.add_exception_handler(VoyaError, voya_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
