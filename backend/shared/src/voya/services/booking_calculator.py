"""Pure booking calculations: nights, price and request validation.

Nothing in this module performs I/O. Nights are whole calendar days: a
checkout at any time of day only occupies through the prior night, so
datetimes are reduced to their date before subtracting.
"""

import datetime as dt
from decimal import Decimal

from voya.models.booking import BookingRequest, PriceQuote
from voya.models.catalog import Property
from voya.models.errors import (
    ErrorCode,
    ErrorResponse,
    GuestLimitExceeded,
    InvalidDateRange,
    InvalidRate,
    VoyaError,
)

# Traveler contact fields the booking form must carry
REQUIRED_TRAVELER_FIELDS = ("first_name", "last_name", "email")


def _as_date(value: dt.date) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def _as_decimal(value: Decimal | int | float | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 keep their printed value
    return Decimal(str(value))


def compute_nights(check_in: dt.date, check_out: dt.date) -> int:
    """Whole nights between two dates.

    Raises:
        InvalidDateRange: If check_out is not after check_in.
    """
    nights = (_as_date(check_out) - _as_date(check_in)).days
    if nights < 1:
        raise InvalidDateRange(
            details={
                "check_in": _as_date(check_in).isoformat(),
                "check_out": _as_date(check_out).isoformat(),
            }
        )
    return nights


def compute_total_price(nights: int, nightly_rate: Decimal | int | float | str) -> Decimal:
    """Total stay price, ``nights * nightly_rate`` in exact decimal arithmetic.

    Raises:
        InvalidRate: If nightly_rate is zero or negative.
        InvalidDateRange: If nights is negative.
    """
    rate = _as_decimal(nightly_rate)
    if rate <= 0:
        raise InvalidRate(details={"nightly_rate": str(rate)})
    if nights < 0:
        raise InvalidDateRange(details={"nights": str(nights)})
    return rate * nights


def validate_guest_count(requested: int, max_allowed: int) -> None:
    """Check the party size against the property capacity.

    Raises:
        GuestLimitExceeded: If requested < 1 or requested > max_allowed.
    """
    if requested < 1 or requested > max_allowed:
        raise GuestLimitExceeded(
            details={"requested": str(requested), "maximum": str(max_allowed)}
        )


def quote(
    check_in: dt.date, check_out: dt.date, nightly_rate: Decimal | int | float | str
) -> PriceQuote:
    """Price a stay for display before submission."""
    nights = compute_nights(check_in, check_out)
    rate = _as_decimal(nightly_rate)
    return PriceQuote(
        check_in=_as_date(check_in),
        check_out=_as_date(check_out),
        nights=nights,
        nightly_rate=rate,
        total_price=compute_total_price(nights, rate),
    )


def validate_booking_request(
    request: BookingRequest, listing: Property
) -> list[ErrorResponse]:
    """Run every booking check and collect all failures.

    Checks never short-circuit so the form can show every problem at once.

    Returns:
        Empty list when the request is valid.
    """
    errors: list[ErrorResponse] = []

    for field in ("check_in", "check_out", *REQUIRED_TRAVELER_FIELDS):
        value = getattr(request, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(
                ErrorResponse.from_code(
                    ErrorCode.MISSING_REQUIRED_FIELD, details={"field": field}
                )
            )

    nights: int | None = None
    if request.check_in is not None and request.check_out is not None:
        try:
            nights = compute_nights(request.check_in, request.check_out)
        except VoyaError as e:
            errors.append(e.to_error_response())

    try:
        validate_guest_count(request.guests, listing.max_guests)
    except VoyaError as e:
        errors.append(e.to_error_response())

    try:
        compute_total_price(nights or 0, listing.price_per_night)
    except VoyaError as e:
        errors.append(e.to_error_response())

    return errors
