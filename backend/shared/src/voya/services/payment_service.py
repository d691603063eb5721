"""Payment service for processing booking transactions.

Payments go through a PaymentGateway. The bundled MockPaymentGateway
simulates the provider (success by default); a real processor plugs in by
implementing the same ``charge`` method.
"""

import datetime as dt
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

from voya.models.enums import PaymentMethod, PaymentStatus
from voya.models.errors import PaymentError, StoreError
from voya.models.payment import GatewayResult, Payment
from voya.utils.logging import get_logger, log_booking_operation

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)


class PaymentGateway(Protocol):
    """External payment processor."""

    def charge(self, payment: Payment) -> GatewayResult:
        """Attempt to capture ``payment.amount`` for the booking."""
        ...


class MockPaymentGateway:
    """Gateway stand-in that approves or declines every charge.

    Args:
        succeed: Whether charges are approved
        error_code: Provider error code reported on decline
    """

    def __init__(self, succeed: bool = True, error_code: str = "card_declined") -> None:
        self.succeed = succeed
        self.error_code = error_code
        self.charges: list[str] = []

    def charge(self, payment: Payment) -> GatewayResult:
        self.charges.append(payment.id)
        if not self.succeed:
            return GatewayResult(
                success=False,
                error_code=self.error_code,
                error_message="Payment was declined by the processor.",
            )
        return GatewayResult(
            success=True,
            transaction_id=f"txn_{uuid.uuid4().hex[:16]}",
        )


class PaymentService:
    """Service for processing payments and managing transactions."""

    PAYMENTS_TABLE = "payments"

    def __init__(self, db: "DynamoDBService", gateway: PaymentGateway | None = None) -> None:
        """Initialize payment service.

        Args:
            db: DynamoDB service instance
            gateway: Payment processor, defaults to an approving mock
        """
        self.db = db
        self.gateway = gateway or MockPaymentGateway()

    def _generate_payment_id(self) -> str:
        """Generate a unique payment ID like PAY-ABC123DEF456."""
        return f"PAY-{uuid.uuid4().hex[:12].upper()}"

    def submit_payment(
        self,
        booking_id: str,
        amount: Decimal,
        currency: str = "USD",
        method: PaymentMethod = PaymentMethod.CARD,
    ) -> Payment:
        """Charge a booking and record the transaction.

        The payment row is written as processing before the gateway is
        called and finalized afterwards, so an interrupted charge leaves an
        auditable record.

        Returns:
            The completed Payment

        Raises:
            PaymentError: If the gateway declines or the payment could not be recorded.
        """
        now = dt.datetime.now(dt.UTC)
        payment = Payment(
            id=self._generate_payment_id(),
            booking_id=booking_id,
            amount=amount,
            currency=currency,
            method=method,
            status=PaymentStatus.PROCESSING,
            created_at=now,
        )

        try:
            self.db.put_item(self.PAYMENTS_TABLE, self._payment_to_item(payment))
        except StoreError as e:
            log_booking_operation(
                logger,
                "submit_payment",
                booking_id=booking_id,
                amount=amount,
                error="payment record could not be created",
            )
            raise PaymentError(
                details={"booking_id": booking_id, "reason": "store_error"}
            ) from e

        result = self.gateway.charge(payment)

        if not result.success:
            self._finalize(payment.id, PaymentStatus.FAILED, error_message=result.error_message)
            log_booking_operation(
                logger,
                "submit_payment",
                booking_id=booking_id,
                amount=amount,
                error=result.error_code or "declined",
                payment_id=payment.id,
            )
            raise PaymentError(
                details={
                    "booking_id": booking_id,
                    "payment_id": payment.id,
                    "reason": result.error_code or "declined",
                }
            )

        completed_at = dt.datetime.now(dt.UTC)
        try:
            self._finalize(
                payment.id,
                PaymentStatus.COMPLETED,
                transaction_id=result.transaction_id,
                completed_at=completed_at,
            )
        except StoreError:
            # Charge captured; the processing row is reconciled from the gateway
            logger.error(
                "Payment %s captured but status update failed", payment.id
            )

        log_booking_operation(
            logger,
            "submit_payment",
            booking_id=booking_id,
            amount=amount,
            payment_id=payment.id,
            status=PaymentStatus.COMPLETED.value,
        )
        return payment.model_copy(
            update={
                "status": PaymentStatus.COMPLETED,
                "transaction_id": result.transaction_id,
                "completed_at": completed_at,
            }
        )

    def _finalize(
        self,
        payment_id: str,
        status: PaymentStatus,
        transaction_id: str | None = None,
        completed_at: dt.datetime | None = None,
        error_message: str | None = None,
    ) -> None:
        updates: dict[str, Any] = {"status": status}
        if transaction_id:
            updates["transaction_id"] = transaction_id
        if completed_at:
            updates["completed_at"] = completed_at
        if error_message:
            updates["error_message"] = error_message
        self.db.update_fields(self.PAYMENTS_TABLE, {"id": payment_id}, updates)

    def get_payment(self, payment_id: str) -> Payment | None:
        """Get a payment by ID."""
        item = self.db.get_item(self.PAYMENTS_TABLE, {"id": payment_id})
        return self._item_to_payment(item) if item else None

    def get_payments_for_booking(self, booking_id: str) -> list[Payment]:
        """Get all payments recorded against a booking."""
        items = self.db.query_by_gsi(
            self.PAYMENTS_TABLE,
            "booking_id-index",
            "booking_id",
            booking_id,
        )
        return [self._item_to_payment(item) for item in items]

    # Conversion helpers

    def _payment_to_item(self, payment: Payment) -> dict[str, Any]:
        """Convert Payment model to DynamoDB item."""
        return {
            "id": payment.id,
            "booking_id": payment.booking_id,
            "amount": payment.amount,
            "currency": payment.currency,
            "method": payment.method.value,
            "status": payment.status.value,
            "transaction_id": payment.transaction_id,
            "error_message": payment.error_message,
            "created_at": payment.created_at.isoformat(),
            "completed_at": payment.completed_at.isoformat() if payment.completed_at else None,
        }

    def _item_to_payment(self, item: dict[str, Any]) -> Payment:
        """Convert DynamoDB item to Payment model."""
        return Payment(
            id=item["id"],
            booking_id=item["booking_id"],
            amount=Decimal(str(item["amount"])),
            currency=item.get("currency", "USD"),
            method=PaymentMethod(item["method"]),
            status=PaymentStatus(item["status"]),
            transaction_id=item.get("transaction_id"),
            error_message=item.get("error_message"),
            created_at=dt.datetime.fromisoformat(item["created_at"]),
            completed_at=(
                dt.datetime.fromisoformat(item["completed_at"])
                if item.get("completed_at")
                else None
            ),
        )
