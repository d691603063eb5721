"""DynamoDB service wrapper: the record store behind every Voya entity."""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, NoReturn

import boto3
from boto3.dynamodb.conditions import Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from voya.models.errors import StoreError
from voya.utils.logging import get_logger

logger = get_logger(__name__)

# Tables owned by the application, without prefix
TABLES = (
    "profiles",
    "destinations",
    "properties",
    "bookings",
    "payments",
    "notifications",
    "reviews",
    "analytics-events",
    "email-notifications",
)


def to_dynamodb_value(value: Any) -> Any:
    """Convert a Python value into something boto3's resource layer accepts.

    Dates become ISO strings, enums their value and floats Decimals
    (DynamoDB rejects float).
    """
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, list):
        return [to_dynamodb_value(v) for v in value]
    if isinstance(value, dict):
        return {k: to_dynamodb_value(v) for k, v in value.items()}
    return value


def to_item(data: dict[str, Any]) -> dict[str, Any]:
    """Serialize a record dict, dropping None attributes."""
    return {k: to_dynamodb_value(v) for k, v in data.items() if v is not None}


class DynamoDBService:
    """Service for DynamoDB operations with environment-aware table names.

    botocore failures are translated to StoreError so callers only deal with
    the Voya error taxonomy. Conditional-write failures are not errors: they
    are reported as False/None results.
    """

    # DynamoDB limit on items per TransactWriteItems call
    TRANSACT_MAX_ITEMS = 100

    def __init__(
        self,
        table_prefix: str,
        region_name: str | None = None,
        resource: Any | None = None,
        client: Any | None = None,
    ) -> None:
        """Initialize DynamoDB service.

        Args:
            table_prefix: Prefix joined to every table name with a dash
            region_name: AWS region, defaults to the boto3 configuration
            resource: Pre-built boto3 DynamoDB resource (tests)
            client: Pre-built boto3 DynamoDB client (tests)
        """
        self.name_prefix = table_prefix
        self._dynamodb = resource or boto3.resource("dynamodb", region_name=region_name)
        self._client = client or boto3.client("dynamodb", region_name=region_name)
        self._serializer = TypeSerializer()

    def _table_name(self, table: str) -> str:
        """Get full table name with prefix."""
        return f"{self.name_prefix}-{table}"

    def _get_table(self, table: str) -> Any:
        """Get DynamoDB table resource."""
        return self._dynamodb.Table(self._table_name(table))

    def _raise_store_error(
        self, operation: str, table: str, exc: Exception
    ) -> NoReturn:
        """Log and re-raise a botocore failure as StoreError."""
        if isinstance(exc, ClientError):
            aws_code = exc.response.get("Error", {}).get("Code", "Unknown")
        else:
            aws_code = type(exc).__name__
        logger.error(
            "DynamoDB %s on %s failed: %s",
            operation,
            self._table_name(table),
            aws_code,
        )
        raise StoreError(
            details={"operation": operation, "table": table, "aws_error": aws_code}
        ) from exc

    @staticmethod
    def _is_conditional_failure(exc: ClientError) -> bool:
        return exc.response["Error"]["Code"] == "ConditionalCheckFailedException"

    # Generic CRUD operations

    def get_item(
        self,
        table: str,
        key: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Get a single item by key.

        Args:
            table: Table name without prefix
            key: Primary key dict

        Returns:
            Item dict or None if not found
        """
        try:
            response = self._get_table(table).get_item(Key=key)
        except (ClientError, BotoCoreError) as e:
            self._raise_store_error("get_item", table, e)
        item: dict[str, Any] | None = response.get("Item")
        return item

    def put_item(
        self,
        table: str,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> bool:
        """Put an item into the table.

        Args:
            table: Table name without prefix
            item: Item to store
            condition_expression: Optional condition for write

        Returns:
            True if successful, False if condition failed
        """
        try:
            kwargs: dict[str, Any] = {"Item": to_item(item)}
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression

            self._get_table(table).put_item(**kwargs)
            return True
        except ClientError as e:
            if self._is_conditional_failure(e):
                return False
            self._raise_store_error("put_item", table, e)
        except BotoCoreError as e:
            self._raise_store_error("put_item", table, e)

    def update_item(
        self,
        table: str,
        key: dict[str, Any],
        update_expression: str,
        expression_attribute_values: dict[str, Any],
        expression_attribute_names: dict[str, str] | None = None,
        condition_expression: str | None = None,
    ) -> dict[str, Any] | None:
        """Update an item with expressions.

        Args:
            table: Table name without prefix
            key: Primary key dict
            update_expression: DynamoDB update expression
            expression_attribute_values: Values for expression
            expression_attribute_names: Names for expression (for reserved words)
            condition_expression: Optional condition for update

        Returns:
            Updated attributes or None if condition failed
        """
        try:
            kwargs: dict[str, Any] = {
                "Key": key,
                "UpdateExpression": update_expression,
                "ExpressionAttributeValues": {
                    k: to_dynamodb_value(v)
                    for k, v in expression_attribute_values.items()
                },
                "ReturnValues": "ALL_NEW",
            }
            if expression_attribute_names:
                kwargs["ExpressionAttributeNames"] = expression_attribute_names
            if condition_expression:
                kwargs["ConditionExpression"] = condition_expression

            response = self._get_table(table).update_item(**kwargs)
            attrs: dict[str, Any] | None = response.get("Attributes")
            return attrs
        except ClientError as e:
            if self._is_conditional_failure(e):
                return None
            self._raise_store_error("update_item", table, e)
        except BotoCoreError as e:
            self._raise_store_error("update_item", table, e)

    def update_fields(
        self,
        table: str,
        key: dict[str, Any],
        updates: dict[str, Any],
        condition_expression: str | None = None,
        condition_values: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """SET each field in ``updates`` on one item.

        Every attribute goes through an expression name so reserved words
        such as ``status`` and ``read`` need no special casing.

        Args:
            table: Table name without prefix
            key: Primary key dict
            updates: Attribute name to new value
            condition_expression: Optional condition using ``#``/``:`` placeholders
            condition_values: Extra values referenced by the condition

        Returns:
            Updated attributes or None if condition failed
        """
        names: dict[str, str] = {}
        values: dict[str, Any] = {}
        assignments: list[str] = []
        for index, (attr, value) in enumerate(updates.items()):
            names[f"#f{index}"] = attr
            values[f":v{index}"] = value
            assignments.append(f"#f{index} = :v{index}")

        if condition_values:
            values.update(condition_values)

        # Condition expressions may reference attribute names via #name
        if condition_expression:
            for token in condition_expression.replace("(", " ").replace(")", " ").split():
                if token.startswith("#") and token not in names:
                    names[token] = token[1:]

        return self.update_item(
            table,
            key,
            "SET " + ", ".join(assignments),
            values,
            names,
            condition_expression,
        )

    def transact_update_fields(
        self,
        table: str,
        keys: list[dict[str, Any]],
        updates: dict[str, Any],
    ) -> None:
        """Apply the same SET to many existing items in one transaction.

        Every item must already exist; a missing key cancels the whole
        transaction instead of creating a partial item.

        Raises:
            StoreError: If there are more keys than one transaction holds or
                the transaction was rejected. Nothing is written in either case.
        """
        if len(keys) > self.TRANSACT_MAX_ITEMS:
            logger.error(
                "Transaction on %s rejected: %d items exceeds %d",
                self._table_name(table),
                len(keys),
                self.TRANSACT_MAX_ITEMS,
            )
            raise StoreError(
                details={
                    "operation": "transact_write_items",
                    "table": table,
                    "reason": "too_many_items",
                    "count": len(keys),
                }
            )

        names = {f"#f{i}": attr for i, attr in enumerate(updates)}
        values = {
            f":v{i}": self._serializer.serialize(to_dynamodb_value(value))
            for i, value in enumerate(updates.values())
        }
        expression = "SET " + ", ".join(f"#f{i} = :v{i}" for i in range(len(updates)))
        table_name = self._table_name(table)

        transact_items = []
        for key in keys:
            key_names = {f"#k{i}": attr for i, attr in enumerate(key)}
            transact_items.append(
                {
                    "Update": {
                        "TableName": table_name,
                        "Key": {k: self._serializer.serialize(v) for k, v in key.items()},
                        "UpdateExpression": expression,
                        "ConditionExpression": " AND ".join(
                            f"attribute_exists({name})" for name in key_names
                        ),
                        "ExpressionAttributeNames": {**names, **key_names},
                        "ExpressionAttributeValues": values,
                    }
                }
            )
        try:
            self._client.transact_write_items(TransactItems=transact_items)
        except (ClientError, BotoCoreError) as e:
            self._raise_store_error("transact_write_items", table, e)

    def delete_item(
        self,
        table: str,
        key: dict[str, Any],
    ) -> bool:
        """Delete an item by key.

        Args:
            table: Table name without prefix
            key: Primary key dict

        Returns:
            True if deleted (or didn't exist)
        """
        try:
            self._get_table(table).delete_item(Key=key)
        except (ClientError, BotoCoreError) as e:
            self._raise_store_error("delete_item", table, e)
        return True

    def query(
        self,
        table: str,
        key_condition: Any,
        index_name: str | None = None,
        filter_expression: Any | None = None,
        limit: int | None = None,
        scan_index_forward: bool = True,
    ) -> list[dict[str, Any]]:
        """Query table or GSI.

        Args:
            table: Table name without prefix
            key_condition: Boto3 Key condition
            index_name: GSI name (optional)
            filter_expression: Additional filter (optional)
            limit: Max items to return
            scan_index_forward: Sort order (True=ascending)

        Returns:
            List of items
        """
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": key_condition,
            "ScanIndexForward": scan_index_forward,
        }
        if index_name:
            kwargs["IndexName"] = index_name
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression
        if limit and filter_expression is None:
            kwargs["Limit"] = limit

        items: list[dict[str, Any]] = []
        try:
            while True:
                response = self._get_table(table).query(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key or (limit and len(items) >= limit):
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            self._raise_store_error("query", table, e)

        return items[:limit] if limit else items

    def scan(
        self,
        table: str,
        filter_expression: Any | None = None,
    ) -> list[dict[str, Any]]:
        """Scan a whole table, following pagination.

        Only used for small catalog tables and reports.
        """
        kwargs: dict[str, Any] = {}
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items: list[dict[str, Any]] = []
        try:
            while True:
                response = self._get_table(table).scan(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            self._raise_store_error("scan", table, e)
        return items

    def batch_get(
        self,
        table: str,
        keys: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """Batch get items by keys.

        Args:
            table: Table name without prefix
            keys: List of primary key dicts

        Returns:
            List of found items
        """
        if not keys:
            return []

        table_name = self._table_name(table)
        try:
            response = self._dynamodb.batch_get_item(
                RequestItems={table_name: {"Keys": keys}}
            )
        except (ClientError, BotoCoreError) as e:
            self._raise_store_error("batch_get", table, e)
        items: list[dict[str, Any]] = response.get("Responses", {}).get(table_name, [])
        return items

    # Convenience methods for common patterns

    def query_by_gsi(
        self,
        table: str,
        index_name: str,
        partition_key_name: str,
        partition_key_value: str,
        sort_key_condition: Any | None = None,
        filter_expression: Any | None = None,
        limit: int | None = None,
        scan_index_forward: bool = True,
    ) -> list[dict[str, Any]]:
        """Query a GSI by partition key.

        Args:
            table: Table name without prefix
            index_name: GSI name
            partition_key_name: Name of partition key attribute
            partition_key_value: Value to query
            sort_key_condition: Optional sort key condition
            filter_expression: Optional non-key filter
            limit: Max items to return
            scan_index_forward: Sort order (True=ascending)

        Returns:
            List of items
        """
        key_condition = Key(partition_key_name).eq(partition_key_value)
        if sort_key_condition is not None:
            key_condition = key_condition & sort_key_condition

        return self.query(
            table,
            key_condition,
            index_name=index_name,
            filter_expression=filter_expression,
            limit=limit,
            scan_index_forward=scan_index_forward,
        )

    def stream_arn(self, table: str) -> str | None:
        """Return the latest stream ARN of a table, if streams are enabled."""
        try:
            response = self._client.describe_table(TableName=self._table_name(table))
        except (ClientError, BotoCoreError) as e:
            self._raise_store_error("describe_table", table, e)
        arn: str | None = response["Table"].get("LatestStreamArn")
        return arn
