"""Transactional email through SES with an audit row per message."""

import datetime as dt
import uuid
from string import Template
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from voya.models.enums import EmailStatus
from voya.models.errors import NotificationError, StoreError
from voya.models.notification import EmailNotification
from voya.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)

# template name -> (subject, text body)
EMAIL_TEMPLATES: dict[str, tuple[str, str]] = {
    "booking_confirmation": (
        "Your Voya booking $booking_id is confirmed",
        "Hi $first_name,\n\n"
        "Your stay at $property_name is confirmed.\n"
        "Check-in: $check_in\n"
        "Check-out: $check_out\n"
        "Guests: $guests\n"
        "Total: $total_price $currency\n\n"
        "Booking reference: $booking_id\n",
    ),
    "booking_cancelled": (
        "Your Voya booking $booking_id was cancelled",
        "Hi $first_name,\n\n"
        "Your booking $booking_id has been cancelled.\n",
    ),
}


class EmailService:
    """Renders templates, records them in email-notifications and sends via SES."""

    TABLE = "email-notifications"

    def __init__(
        self,
        db: "DynamoDBService",
        sender: str,
        client: Any | None = None,
        region_name: str | None = None,
    ) -> None:
        """Initialize email service.

        Args:
            db: DynamoDB service instance
            sender: Verified SES source address
            client: Pre-built SES client (tests)
            region_name: AWS region for the default client
        """
        self.db = db
        self.sender = sender
        self._ses = client or boto3.client("ses", region_name=region_name)

    def render(self, template_name: str, variables: dict[str, str]) -> tuple[str, str]:
        """Return (subject, body) for a template.

        Raises:
            NotificationError: If the template does not exist.
        """
        if template_name not in EMAIL_TEMPLATES:
            raise NotificationError(details={"template": template_name, "reason": "unknown_template"})
        subject, body = EMAIL_TEMPLATES[template_name]
        return (
            Template(subject).safe_substitute(variables),
            Template(body).safe_substitute(variables),
        )

    def send(
        self, to: str, template_name: str, variables: dict[str, str]
    ) -> EmailNotification:
        """Send one templated email.

        The audit row is written as pending before the SES call and updated
        to sent or failed afterwards.

        Returns:
            The sent EmailNotification

        Raises:
            NotificationError: If the email could not be sent.
        """
        subject, body = self.render(template_name, variables)
        record = EmailNotification(
            id=str(uuid.uuid4()),
            template_name=template_name,
            recipient_email=to,
            subject=subject,
            variables=variables,
            status=EmailStatus.PENDING,
            created_at=dt.datetime.now(dt.UTC),
        )

        try:
            self.db.put_item(self.TABLE, self._email_to_item(record))
        except StoreError:
            # The audit row is not a precondition for delivery
            logger.warning("Could not log email %s before sending", record.id)

        try:
            response = self._ses.send_email(
                Source=self.sender,
                Destination={"ToAddresses": [to]},
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
                },
            )
        except (ClientError, BotoCoreError) as e:
            self._mark(record.id, EmailStatus.FAILED, error_message=str(e))
            logger.error("Failed to send %s email %s", template_name, record.id)
            raise NotificationError(
                details={"template": template_name, "email_id": record.id}
            ) from e

        sent_at = dt.datetime.now(dt.UTC)
        message_id = response.get("MessageId")
        self._mark(
            record.id,
            EmailStatus.SENT,
            provider_message_id=message_id,
            sent_at=sent_at,
        )
        logger.info("Sent %s email %s", template_name, record.id)
        return record.model_copy(
            update={
                "status": EmailStatus.SENT,
                "provider_message_id": message_id,
                "sent_at": sent_at,
            }
        )

    def send_booking_confirmation(self, to: str, variables: dict[str, str]) -> EmailNotification:
        return self.send(to, "booking_confirmation", variables)

    def _mark(self, email_id: str, status: EmailStatus, **fields: Any) -> None:
        updates: dict[str, Any] = {"status": status}
        updates.update({k: v for k, v in fields.items() if v is not None})
        try:
            self.db.update_fields(self.TABLE, {"id": email_id}, updates)
        except StoreError:
            logger.warning("Could not update email %s to %s", email_id, status.value)

    def _email_to_item(self, record: EmailNotification) -> dict[str, Any]:
        return {
            "id": record.id,
            "template_name": record.template_name,
            "recipient_email": record.recipient_email,
            "subject": record.subject,
            "variables": record.variables,
            "status": record.status.value,
            "created_at": record.created_at.isoformat(),
        }
