"""Booking lifecycle controller.

Drives one submission from the validated request to a confirmed booking:

    idle -> validating -> persisting -> paying_for_booking -> confirming
         -> notifying_user -> completed

with three failure exits: rejected (validation), failed (booking not
stored) and partially_failed (booking stored, payment or confirmation
failed). A failed payment leaves the booking pending and never cancels it.
Email, in-app notification and analytics in notifying_user are best
effort: their failures are reported but the outcome stays completed.
"""

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from voya.models.booking import Booking, BookingCreate, BookingOutcome, BookingRequest
from voya.models.catalog import Property
from voya.models.enums import LifecycleState, NotificationType
from voya.models.errors import (
    AuthenticationError,
    BookingInProgressError,
    ErrorCode,
    ErrorResponse,
    NotificationError,
    PropertyNotFound,
    VoyaError,
)
from voya.models.notification import Notification, NotificationCreate
from voya.utils.logging import get_logger, log_booking_operation

from . import booking_calculator

if TYPE_CHECKING:
    from .analytics_service import AnalyticsService
    from .booking_service import BookingService
    from .catalog_service import CatalogService
    from .email_service import EmailService
    from .notification_service import NotificationService
    from .payment_service import PaymentService

logger = get_logger(__name__)

PAYMENT_FAILED_MESSAGE = "Booking created but payment failed. Please contact support to complete your booking."
CONFIRMATION_FAILED_MESSAGE = (
    "Payment received but the booking could not be confirmed. "
    "Please contact support with your booking reference."
)


class _Attempt:
    """Visited states of one submission."""

    def __init__(self, controller: "BookingLifecycleController", request: BookingRequest) -> None:
        self.controller = controller
        self.request = request
        self.states: list[LifecycleState] = [LifecycleState.IDLE]
        self.booking_id: str | None = None

    def enter(self, state: LifecycleState, error: str | None = None) -> None:
        self.states.append(state)
        self.controller.state = state
        log_booking_operation(
            logger,
            "lifecycle",
            booking_id=self.booking_id,
            property_id=self.request.property_id,
            state=state.value,
            error=error,
        )

    def outcome(self, **fields: object) -> BookingOutcome:
        return BookingOutcome(
            status=self.states[-1],
            booking_id=self.booking_id,
            states=list(self.states),
            **fields,
        )


class BookingLifecycleController:
    """Coordinates booking submission across the booking, payment and email services.

    One controller serves one booking form: a second ``submit_booking`` while
    one is running raises BookingInProgressError instead of creating a
    duplicate booking. Notifications it writes are also handed to
    ``on_notification`` so a loaded notification mirror sees them at once.
    """

    def __init__(
        self,
        bookings: "BookingService",
        payments: "PaymentService",
        emails: "EmailService",
        notifications: "NotificationService",
        catalog: "CatalogService | None" = None,
        analytics: "AnalyticsService | None" = None,
        on_notification: Callable[[Notification], None] | None = None,
    ) -> None:
        self.bookings = bookings
        self.payments = payments
        self.emails = emails
        self.notifications = notifications
        self.catalog = catalog
        self.analytics = analytics
        self.on_notification = on_notification
        self.state = LifecycleState.IDLE
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def submit_booking(
        self, request: BookingRequest, listing: Property | None = None
    ) -> BookingOutcome:
        """Run one submission to a terminal state.

        Args:
            request: Booking form contents
            listing: The property being booked; looked up when omitted

        Returns:
            BookingOutcome whose status is the terminal state reached

        Raises:
            BookingInProgressError: If another submission is running.
        """
        if not self._lock.acquire(blocking=False):
            raise BookingInProgressError(details={"property_id": request.property_id})
        try:
            self.state = LifecycleState.IDLE
            return self._run(_Attempt(self, request), listing)
        finally:
            self._lock.release()

    def _run(self, attempt: _Attempt, listing: Property | None) -> BookingOutcome:
        request = attempt.request

        attempt.enter(LifecycleState.VALIDATING)
        if listing is None:
            try:
                listing = self._load_property(request.property_id)
            except PropertyNotFound as e:
                attempt.enter(LifecycleState.REJECTED, error=e.message)
                return attempt.outcome(errors=[e.to_error_response()], message=e.message)
            except VoyaError as e:
                attempt.enter(LifecycleState.FAILED, error=e.message)
                return attempt.outcome(errors=[e.to_error_response()], message=e.message)

        errors = booking_calculator.validate_booking_request(request, listing)
        if errors:
            attempt.enter(LifecycleState.REJECTED, error=f"{len(errors)} validation error(s)")
            return attempt.outcome(
                errors=errors, message="Please correct the highlighted fields"
            )

        # Validation guarantees both dates are present
        assert request.check_in is not None and request.check_out is not None
        quote = booking_calculator.quote(
            request.check_in, request.check_out, listing.price_per_night
        )

        attempt.enter(LifecycleState.PERSISTING)
        try:
            booking = self.bookings.create_booking(
                BookingCreate(
                    property_id=listing.id,
                    traveler_id=request.traveler_id,
                    check_in_date=quote.check_in,
                    check_out_date=quote.check_out,
                    guests=request.guests,
                    nights=quote.nights,
                    total_price=quote.total_price,
                    special_requests=request.special_requests,
                )
            )
        except VoyaError as e:
            attempt.enter(LifecycleState.FAILED, error=e.message)
            return attempt.outcome(errors=[e.to_error_response()], message=e.message)
        attempt.booking_id = booking.id

        attempt.enter(LifecycleState.PAYING_FOR_BOOKING)
        try:
            self.payments.submit_payment(
                booking.id,
                booking.total_price,
                currency=request.currency,
                method=request.payment_method,
            )
        except VoyaError as e:
            attempt.enter(LifecycleState.PARTIALLY_FAILED, error=e.message)
            return attempt.outcome(
                total_price=booking.total_price,
                errors=[
                    ErrorResponse.from_code(ErrorCode.PAYMENT_FAILED, details=e.details)
                ],
                message=PAYMENT_FAILED_MESSAGE,
            )

        attempt.enter(LifecycleState.CONFIRMING)
        try:
            booking = self.bookings.confirm(booking.id)
        except VoyaError as e:
            attempt.enter(LifecycleState.PARTIALLY_FAILED, error=e.message)
            return attempt.outcome(
                total_price=booking.total_price,
                errors=[e.to_error_response()],
                message=CONFIRMATION_FAILED_MESSAGE,
            )

        attempt.enter(LifecycleState.NOTIFYING_USER)
        notification_errors = self._notify_user(request, booking, listing)

        attempt.enter(LifecycleState.COMPLETED)
        return attempt.outcome(
            total_price=booking.total_price,
            notification_errors=notification_errors,
            message="Booking confirmed",
        )

    def _load_property(self, property_id: str) -> Property:
        if self.catalog is None:
            raise PropertyNotFound(details={"property_id": property_id})
        return self.catalog.require_property(property_id)

    def _create_notification(self, data: NotificationCreate) -> Notification:
        notification = self.notifications.create(data)
        if self.on_notification is not None:
            self.on_notification(notification)
        return notification

    def _notify_user(
        self, request: BookingRequest, booking: Booking, listing: Property
    ) -> list[ErrorResponse]:
        """Best-effort confirmation side effects; failures are returned, not raised."""
        errors: list[ErrorResponse] = []

        if request.email:
            try:
                self.emails.send_booking_confirmation(
                    request.email,
                    {
                        "booking_id": booking.id,
                        "first_name": request.first_name or "",
                        "property_name": listing.name,
                        "check_in": booking.check_in_date.isoformat(),
                        "check_out": booking.check_out_date.isoformat(),
                        "guests": str(booking.guests),
                        "total_price": str(booking.total_price),
                        "currency": request.currency,
                    },
                )
            except NotificationError as e:
                log_booking_operation(
                    logger, "send_confirmation", booking_id=booking.id, error=e.message
                )
                errors.append(e.to_error_response())

        try:
            self._create_notification(
                NotificationCreate(
                    user_id=booking.traveler_id,
                    type=NotificationType.BOOKING,
                    title="Booking confirmed",
                    message=(
                        f"Your stay at {listing.name} from {booking.check_in_date.isoformat()} "
                        f"to {booking.check_out_date.isoformat()} is confirmed."
                    ),
                )
            )
        except NotificationError as e:
            log_booking_operation(
                logger, "create_notification", booking_id=booking.id, error=e.message
            )
            errors.append(e.to_error_response())

        if self.analytics is not None:
            self.analytics.track_booking(
                booking.id,
                booking.property_id,
                booking.total_price,
                currency=request.currency,
                user_id=booking.traveler_id,
            )

        return errors

    def cancel_booking(self, booking_id: str, actor_id: str) -> Booking:
        """Cancel a booking on behalf of its traveler or the property host.

        Raises:
            BookingNotFound: If the booking does not exist.
            AuthenticationError: UNAUTHORIZED if the actor may not cancel it.
            InvalidStatusTransition: If the booking is already cancelled.
        """
        booking = self.bookings.require_booking(booking_id)
        if actor_id != booking.traveler_id:
            listing = self.catalog.get_property(booking.property_id) if self.catalog else None
            if listing is None or listing.host_id != actor_id:
                raise AuthenticationError(
                    code=ErrorCode.UNAUTHORIZED, details={"booking_id": booking_id}
                )

        cancelled = self.bookings.cancel(booking_id)
        log_booking_operation(
            logger,
            "cancel_booking",
            booking_id=booking_id,
            property_id=booking.property_id,
            status=cancelled.status.value,
        )

        try:
            self._create_notification(
                NotificationCreate(
                    user_id=booking.traveler_id,
                    type=NotificationType.BOOKING,
                    title="Booking cancelled",
                    message=f"Booking {booking_id} has been cancelled.",
                )
            )
        except NotificationError as e:
            log_booking_operation(
                logger, "create_notification", booking_id=booking_id, error=e.message
            )

        if self.analytics is not None:
            self.analytics.track_action(
                "booking_cancelled",
                {"booking_id": booking_id, "property_id": booking.property_id},
                user_id=actor_id,
            )
        return cancelled
