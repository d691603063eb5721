"""Logging setup for Voya: request correlation and structured event lines.

Every record logged through ``get_logger`` carries the correlation id of the
request (or feed poll) that produced it. Services describe lifecycle steps
with ``log_booking_operation`` and notification store changes with
``log_notification_event`` so log searches can key on the same fields.

Example:
    logger = get_logger(__name__)
    set_correlation_id(request.headers.get("X-Correlation-ID"))
    log_booking_operation(logger, "submit_payment", booking_id="BKG-2024-1A2B3C4D")
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

NO_CORRELATION_ID = "no-correlation-id"

# Per request in FastAPI; per thread for feed pollers
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation id to the current context.

    Args:
        correlation_id: Id received from the caller; a new one is generated when empty

    Returns:
        The id now in effect
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Stamps ``record.correlation_id`` from the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """Prefixes each line with ``[correlation-id]``."""

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", None) or (
            get_correlation_id() or NO_CORRELATION_ID
        )
        return f"[{correlation_id}] {super().format(record)}"


def configure_logging(level: int = logging.INFO) -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; an existing Voya handler is reused.
    """
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        if isinstance(handler.formatter, StructuredFormatter):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(
        StructuredFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def log_booking_operation(
    logger: logging.Logger,
    operation: str,
    *,
    booking_id: str | None = None,
    property_id: str | None = None,
    state: str | None = None,
    amount: Any | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a booking lifecycle step with structured context.

    Args:
        logger: Logger instance
        operation: Operation name (e.g., "persist_booking", "submit_payment")
        booking_id: Booking ID if available
        property_id: Property ID if available
        state: Lifecycle state reached
        amount: Monetary amount if relevant
        error: Error message if the step failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"operation": operation}

    if booking_id:
        context["booking_id"] = booking_id
    if property_id:
        context["property_id"] = property_id
    if state:
        context["state"] = state
    if amount is not None:
        context["amount"] = str(amount)
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Booking operation: {operation}"]
    for key, value in context.items():
        if key != "operation":
            msg_parts.append(f"{key}={value}")

    message = " | ".join(msg_parts)

    if error:
        logger.error(message, extra=context)
    else:
        logger.info(message, extra=context)


def log_notification_event(
    logger: logging.Logger,
    action: str,
    notification_id: str | None,
    *,
    user_id: str | None = None,
    result: str | None = None,
    unread_count: int | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a notification store event with structured context.

    Args:
        logger: Logger instance
        action: Store action (push, mark_read, mark_all_read, delete, load)
        notification_id: Notification ID, None for bulk actions
        user_id: Owning user
        result: Outcome (applied, duplicate, ignored, rolled_back, error)
        unread_count: Unread counter after the action
        error: Error message if the action failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"action": action}

    if notification_id:
        context["notification_id"] = notification_id
    if user_id:
        context["user_id"] = user_id
    if result:
        context["result"] = result
    if unread_count is not None:
        context["unread_count"] = unread_count
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Notification {action}"]
    if notification_id:
        msg_parts.append(f"id={notification_id}")
    if result:
        msg_parts.append(f"result={result}")
    if unread_count is not None:
        msg_parts.append(f"unread={unread_count}")
    if error:
        msg_parts.append(f"error={error}")

    message = " | ".join(msg_parts)

    if result in ("error", "rolled_back"):
        logger.error(message, extra=context)
    elif result in ("duplicate", "ignored"):
        logger.warning(message, extra=context)
    else:
        logger.info(message, extra=context)
