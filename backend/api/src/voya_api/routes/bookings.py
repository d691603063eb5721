"""Booking endpoints.

Provides REST endpoints for:
- Pricing a stay (public)
- Submitting a booking through the lifecycle controller (user required)
- Listing and reading the caller's bookings (user required)
- Cancelling a booking (traveler or property host)

API Gateway validates the JWT and passes the user identity via the
x-user-sub header.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
)

from voya.models.booking import Booking, BookingOutcome, BookingRequest, PriceQuote
from voya.models.enums import LifecycleState
from voya.models.errors import AuthenticationError, ErrorCode
from voya.services import booking_calculator
from voya.services.container import ServiceContainer
from voya_api.dependencies import get_container, get_current_user_id
from voya_api.exceptions import get_http_status_for_error
from voya_api.models.bookings import BookingListResponse, BookingSubmitRequest, QuoteRequest

router = APIRouter(tags=["bookings"])


def _outcome_status(outcome: BookingOutcome) -> int:
    if outcome.status == LifecycleState.COMPLETED:
        return HTTP_201_CREATED
    if outcome.status == LifecycleState.REJECTED or not outcome.errors:
        return HTTP_400_BAD_REQUEST
    return get_http_status_for_error(outcome.errors[0].error_code)


@router.post(
    "/bookings/quote",
    summary="Price a stay",
    description="Nights and total price for a property and date range.",
    response_model=PriceQuote,
    responses={
        400: {"description": "Check-out not after check-in"},
        404: {"description": "Property not found"},
    },
)
async def quote_booking(
    body: QuoteRequest,
    container: ServiceContainer = Depends(get_container),
) -> PriceQuote:
    listing = container.catalog.require_property(body.property_id)
    return booking_calculator.quote(body.check_in, body.check_out, listing.price_per_night)


@router.post(
    "/bookings",
    summary="Submit booking",
    description="""
Validate, persist, pay for and confirm a booking.

**Requires user identity.**

The body is the lifecycle outcome. Its `status` is the terminal state:
- `completed` (201): booking confirmed; `notification_errors` lists best-effort failures
- `rejected` (400): `errors` holds every validation failure
- `failed` (503): the booking could not be stored
- `partially_failed` (402 or 503): booking stored but payment or confirmation failed;
  contact support
""",
    response_model=BookingOutcome,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Validation failed"},
        401: {"description": "User identity required"},
        402: {"description": "Booking created but payment failed"},
        409: {"description": "A submission is already in progress"},
    },
)
async def submit_booking(
    body: BookingSubmitRequest,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> JSONResponse:
    request = BookingRequest(
        traveler_id=user_id,
        currency=body.currency or container.settings.default_currency,
        **body.model_dump(exclude={"currency"}),
    )
    outcome = container.booking_controller(user_id).submit_booking(request)
    return JSONResponse(
        status_code=_outcome_status(outcome),
        content=outcome.model_dump(mode="json"),
    )


@router.get(
    "/bookings",
    summary="List my bookings",
    response_model=BookingListResponse,
    responses={401: {"description": "User identity required"}},
)
async def list_bookings(
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> BookingListResponse:
    bookings = container.bookings.list_for_traveler(user_id)
    return BookingListResponse(bookings=bookings, total_count=len(bookings))


@router.get(
    "/bookings/{booking_id}",
    summary="Get booking",
    response_model=Booking,
    responses={
        403: {"description": "Not the traveler or host of this booking"},
        404: {"description": "Booking not found"},
    },
)
async def get_booking(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> Booking:
    booking = container.bookings.require_booking(booking_id)
    if booking.traveler_id != user_id:
        listing = container.catalog.get_property(booking.property_id)
        if listing is None or listing.host_id != user_id:
            raise AuthenticationError(
                code=ErrorCode.UNAUTHORIZED, details={"booking_id": booking_id}
            )
    return booking


@router.post(
    "/bookings/{booking_id}/cancel",
    summary="Cancel booking",
    description="Cancel a pending or confirmed booking. Cancelled bookings are kept.",
    response_model=Booking,
    responses={
        403: {"description": "Not the traveler or host of this booking"},
        404: {"description": "Booking not found"},
        409: {"description": "Booking already cancelled"},
    },
)
async def cancel_booking(
    booking_id: str,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container),
) -> Booking:
    return container.booking_controller(user_id).cancel_booking(booking_id, user_id)
