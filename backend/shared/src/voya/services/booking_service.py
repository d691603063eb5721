"""Booking persistence and status transitions."""

import datetime as dt
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr

from voya.models.booking import Booking, BookingCreate, BookingReport
from voya.models.enums import BookingStatus
from voya.models.errors import BookingNotFound, InvalidStatusTransition, StoreError
from voya.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)

# Allowed status moves; cancelled is terminal
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}


class BookingService:
    """Service for creating bookings and moving them through their statuses."""

    TABLE = "bookings"

    def __init__(self, db: "DynamoDBService") -> None:
        """Initialize booking service.

        Args:
            db: DynamoDB service instance
        """
        self.db = db

    def _generate_booking_id(self) -> str:
        """Generate a unique booking ID like BKG-2024-1A2B3C4D."""
        year = dt.datetime.now(dt.UTC).year
        return f"BKG-{year}-{uuid.uuid4().hex[:8].upper()}"

    def create_booking(self, data: BookingCreate) -> Booking:
        """Persist a new booking in pending status.

        Raises:
            StoreError: If the record could not be written.
        """
        now = dt.datetime.now(dt.UTC)
        booking = Booking(
            id=self._generate_booking_id(),
            property_id=data.property_id,
            traveler_id=data.traveler_id,
            check_in_date=data.check_in_date,
            check_out_date=data.check_out_date,
            guests=data.guests,
            nights=data.nights,
            total_price=data.total_price,
            status=BookingStatus.PENDING,
            special_requests=data.special_requests,
            created_at=now,
            updated_at=now,
        )

        created = self.db.put_item(
            self.TABLE,
            self._booking_to_item(booking),
            condition_expression="attribute_not_exists(id)",
        )
        if not created:
            raise StoreError(details={"operation": "create_booking", "booking_id": booking.id})

        return booking

    def get_booking(self, booking_id: str) -> Booking | None:
        """Get a booking by ID."""
        item = self.db.get_item(self.TABLE, {"id": booking_id})
        return self._item_to_booking(item) if item else None

    def require_booking(self, booking_id: str) -> Booking:
        """Get a booking by ID or raise BookingNotFound."""
        booking = self.get_booking(booking_id)
        if booking is None:
            raise BookingNotFound(details={"booking_id": booking_id})
        return booking

    def list_for_traveler(self, traveler_id: str) -> list[Booking]:
        """Bookings made by a traveler, newest first."""
        items = self.db.query_by_gsi(
            self.TABLE,
            "traveler_id-index",
            "traveler_id",
            traveler_id,
            scan_index_forward=False,
        )
        return [self._item_to_booking(item) for item in items]

    def list_for_property(self, property_id: str) -> list[Booking]:
        """Bookings of a property, newest first."""
        items = self.db.query_by_gsi(
            self.TABLE,
            "property_id-index",
            "property_id",
            property_id,
            scan_index_forward=False,
        )
        return [self._item_to_booking(item) for item in items]

    def update_status(self, booking_id: str, new_status: BookingStatus) -> Booking:
        """Move a booking to a new status if the transition is allowed.

        The write is conditional on the status read, so a concurrent change
        surfaces as InvalidStatusTransition instead of being overwritten.

        Raises:
            BookingNotFound: If the booking does not exist.
            InvalidStatusTransition: If the move is not allowed.
            StoreError: If the record store call fails.
        """
        booking = self.require_booking(booking_id)
        if new_status not in ALLOWED_TRANSITIONS[booking.status]:
            raise InvalidStatusTransition(
                details={
                    "booking_id": booking_id,
                    "from": booking.status.value,
                    "to": new_status.value,
                }
            )

        now = dt.datetime.now(dt.UTC)
        attrs = self.db.update_fields(
            self.TABLE,
            {"id": booking_id},
            {"status": new_status, "updated_at": now},
            condition_expression="#status = :expected",
            condition_values={":expected": booking.status.value},
        )
        if attrs is None:
            raise InvalidStatusTransition(
                details={"booking_id": booking_id, "to": new_status.value}
            )

        logger.info(
            "Booking %s moved %s -> %s", booking_id, booking.status.value, new_status.value
        )
        return self._item_to_booking(attrs)

    def confirm(self, booking_id: str) -> Booking:
        return self.update_status(booking_id, BookingStatus.CONFIRMED)

    def cancel(self, booking_id: str) -> Booking:
        return self.update_status(booking_id, BookingStatus.CANCELLED)

    def generate_report(self, start: dt.date, end: dt.date) -> BookingReport:
        """Count and revenue of bookings created between two dates (inclusive).

        Cancelled bookings are counted but excluded from revenue.
        """
        items = self.db.scan(
            self.TABLE,
            filter_expression=Attr("created_at").between(
                start.isoformat(), (end + dt.timedelta(days=1)).isoformat()
            ),
        )
        bookings = [self._item_to_booking(item) for item in items]

        by_status: dict[str, int] = {}
        revenue = Decimal("0")
        for booking in bookings:
            by_status[booking.status.value] = by_status.get(booking.status.value, 0) + 1
            if booking.status != BookingStatus.CANCELLED:
                revenue += booking.total_price

        return BookingReport(
            start=start,
            end=end,
            total_bookings=len(bookings),
            total_revenue=revenue,
            by_status=by_status,
        )

    # Conversion helpers

    def _booking_to_item(self, booking: Booking) -> dict[str, Any]:
        """Convert Booking model to DynamoDB item."""
        return {
            "id": booking.id,
            "property_id": booking.property_id,
            "traveler_id": booking.traveler_id,
            "check_in_date": booking.check_in_date.isoformat(),
            "check_out_date": booking.check_out_date.isoformat(),
            "guests": booking.guests,
            "nights": booking.nights,
            "total_price": booking.total_price,
            "status": booking.status.value,
            "special_requests": booking.special_requests,
            "created_at": booking.created_at.isoformat(),
            "updated_at": booking.updated_at.isoformat(),
        }

    def _item_to_booking(self, item: dict[str, Any]) -> Booking:
        """Convert DynamoDB item to Booking model."""
        return Booking(
            id=item["id"],
            property_id=item["property_id"],
            traveler_id=item["traveler_id"],
            check_in_date=dt.date.fromisoformat(item["check_in_date"]),
            check_out_date=dt.date.fromisoformat(item["check_out_date"]),
            guests=int(item["guests"]),
            nights=int(item["nights"]),
            total_price=Decimal(str(item["total_price"])),
            status=BookingStatus(item["status"]),
            special_requests=item.get("special_requests"),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
            updated_at=dt.datetime.fromisoformat(item["updated_at"]),
        )
