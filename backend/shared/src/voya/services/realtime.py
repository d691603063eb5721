"""Change feed over DynamoDB Streams.

A subscription follows every open shard of a table's stream from the
latest record onward. Subscriptions are scoped: leaving the ``subscribe``
block (or calling ``ChangeFeed.close``) always releases them.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import boto3
from boto3.dynamodb.types import TypeDeserializer
from botocore.exceptions import BotoCoreError, ClientError

from voya.models.enums import ChangeEventType
from voya.models.errors import StoreError
from voya.models.realtime import ChangeEvent
from voya.utils.logging import get_logger

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)

# Stream eventName to change type
EVENT_NAMES: dict[str, ChangeEventType] = {
    "INSERT": ChangeEventType.INSERT,
    "MODIFY": ChangeEventType.UPDATE,
    "REMOVE": ChangeEventType.DELETE,
}


class Subscription:
    """Cursor over the open shards of one table stream.

    Args:
        client: boto3 ``dynamodbstreams`` client
        stream_arn: ARN of the table stream
        table: Table name without prefix
        filters: Attribute equality filters a record must match
        event_types: Change types to deliver, all when None
    """

    def __init__(
        self,
        client: Any,
        stream_arn: str,
        table: str,
        filters: dict[str, Any] | None = None,
        event_types: Iterable[ChangeEventType] | None = None,
        iterator_type: str = "LATEST",
    ) -> None:
        self._client = client
        self.stream_arn = stream_arn
        self.table = table
        self.filters = dict(filters or {})
        self.event_types = frozenset(event_types) if event_types else frozenset(ChangeEventType)
        self._iterator_type = iterator_type
        self._iterators: dict[str, str] = {}
        self._deserializer = TypeDeserializer()
        self.closed = False

    @property
    def shard_count(self) -> int:
        return len(self._iterators)

    def open(self) -> None:
        """Acquire an iterator for every open shard.

        Raises:
            StoreError: If the stream could not be described.
        """
        try:
            description = self._client.describe_stream(StreamArn=self.stream_arn)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(
                details={"operation": "subscribe", "table": self.table}
            ) from e

        for shard in description["StreamDescription"].get("Shards", []):
            # Closed shards have an ending sequence number and no new records
            if shard.get("SequenceNumberRange", {}).get("EndingSequenceNumber"):
                continue
            self._iterators[shard["ShardId"]] = self._shard_iterator(shard["ShardId"])
        logger.info(
            "Subscribed to %s changes on %d shard(s)", self.table, len(self._iterators)
        )

    def _shard_iterator(self, shard_id: str) -> str:
        try:
            response = self._client.get_shard_iterator(
                StreamArn=self.stream_arn,
                ShardId=shard_id,
                ShardIteratorType=self._iterator_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(
                details={"operation": "get_shard_iterator", "table": self.table}
            ) from e
        iterator: str = response["ShardIterator"]
        return iterator

    def poll(self, limit: int = 100) -> list[ChangeEvent]:
        """Read the records committed since the last poll.

        Raises:
            StoreError: If the stream could not be read.
        """
        if self.closed:
            return []

        events: list[ChangeEvent] = []
        for shard_id, iterator in list(self._iterators.items()):
            try:
                response = self._client.get_records(ShardIterator=iterator, Limit=limit)
            except ClientError as e:
                if e.response["Error"]["Code"] == "ExpiredIteratorException":
                    logger.warning("Shard iterator expired for %s, re-acquiring", shard_id)
                    self._iterators[shard_id] = self._shard_iterator(shard_id)
                    continue
                raise StoreError(
                    details={"operation": "poll", "table": self.table}
                ) from e
            except BotoCoreError as e:
                raise StoreError(
                    details={"operation": "poll", "table": self.table}
                ) from e

            next_iterator = response.get("NextShardIterator")
            if next_iterator:
                self._iterators[shard_id] = next_iterator
            else:
                # Shard closed
                del self._iterators[shard_id]

            for record in response.get("Records", []):
                event = self._decode(record)
                if event is not None:
                    events.append(event)
        return events

    def _decode(self, record: dict[str, Any]) -> ChangeEvent | None:
        event_type = EVENT_NAMES.get(record.get("eventName", ""))
        if event_type is None or event_type not in self.event_types:
            return None

        data = record.get("dynamodb", {})
        new_image = self._deserialize(data.get("NewImage"))
        old_image = self._deserialize(data.get("OldImage"))
        matched = new_image if event_type != ChangeEventType.DELETE else old_image
        if not self._matches(matched or {}):
            return None

        return ChangeEvent(
            event_id=record.get("eventID", ""),
            event_type=event_type,
            table=self.table,
            record=new_image or {},
            old_record=old_image,
        )

    def _deserialize(self, image: dict[str, Any] | None) -> dict[str, Any] | None:
        if image is None:
            return None
        return {key: self._deserializer.deserialize(value) for key, value in image.items()}

    def _matches(self, record: dict[str, Any]) -> bool:
        return all(record.get(field) == value for field, value in self.filters.items())

    def close(self) -> None:
        """Drop every shard iterator. Safe to call more than once."""
        if self.closed:
            return
        self._iterators.clear()
        self.closed = True
        logger.info("Unsubscribed from %s changes", self.table)


class ChangeFeed:
    """Factory and owner of change-feed subscriptions.

    Args:
        db: DynamoDB service used to resolve stream ARNs
        client: Pre-built ``dynamodbstreams`` client (tests)
        region_name: AWS region for the default client
    """

    def __init__(
        self,
        db: "DynamoDBService",
        client: Any | None = None,
        region_name: str | None = None,
    ) -> None:
        self.db = db
        self._client = client or boto3.client("dynamodbstreams", region_name=region_name)
        self._active: list[Subscription] = []

    @property
    def active_subscriptions(self) -> int:
        return len(self._active)

    def open_subscription(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        event_types: Iterable[ChangeEventType] | None = None,
    ) -> Subscription:
        """Open a subscription owned by the feed until ``release`` or ``close``.

        Raises:
            StoreError: If the table has no stream or it could not be read.
        """
        stream_arn = self.db.stream_arn(table)
        if not stream_arn:
            raise StoreError(
                details={"operation": "subscribe", "table": table, "reason": "stream_disabled"}
            )
        subscription = Subscription(self._client, stream_arn, table, filters, event_types)
        subscription.open()
        self._active.append(subscription)
        return subscription

    def release(self, subscription: Subscription) -> None:
        subscription.close()
        if subscription in self._active:
            self._active.remove(subscription)

    @contextmanager
    def subscribe(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        event_types: Iterable[ChangeEventType] | None = None,
    ) -> Iterator[Subscription]:
        """Scoped subscription released on every exit path.

        Example:
            with feed.subscribe("notifications", {"user_id": uid}) as sub:
                store.consume(sub)
        """
        subscription = self.open_subscription(table, filters, event_types)
        try:
            yield subscription
        finally:
            self.release(subscription)

    def close(self) -> None:
        """Release every subscription still open."""
        for subscription in list(self._active):
            self.release(subscription)
