"""
Key-value store abstraction for DynamoDB and an in-memory test implementation.

Point reads, writes and index queries work with plain Python dicts. Scans
return items in the DynamoDB wire format (type-tagged attributes) together
with the last evaluated key, exactly as the low-level ``Scan`` API does.
"""

from __future__ import annotations

import copy
import json
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Protocol

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from playerfeed.errors import UpstreamError

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


class DbClient(Protocol):
    """Interface for key-value store access."""

    def put_item(self, table: str, item: dict) -> None:
        ...

    def get_item(self, table: str, key: dict) -> Optional[dict]:
        ...

    def update_item(self, table: str, key: dict, changes: dict) -> bool:
        """Apply ``changes`` to an existing item; return False if the key is absent."""
        ...

    def delete_item(self, table: str, key: dict) -> None:
        ...

    def query_index(
        self, table: str, index: str, attribute: str, value: Any
    ) -> list[dict]:
        ...

    def scan(
        self, table: str, limit: int, start_key: Optional[dict] = None
    ) -> "ScanPage":
        ...


@dataclass
class ScanPage:
    items: list[dict]
    last_evaluated_key: Optional[dict] = None


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def serialize_value(value: Any) -> dict:
    # TypeSerializer rejects floats, so route numbers through Decimal.
    prepared = json.loads(json.dumps(value), parse_float=Decimal)
    return _serializer.serialize(prepared)


def serialize_item(item: dict) -> dict:
    return {key: serialize_value(value) for key, value in item.items()}


def deserialize_item(item: dict) -> dict:
    return {key: _plain(_deserializer.deserialize(value)) for key, value in item.items()}


class InMemoryDbClient:
    """Simple in-memory key-value store for development and tests."""

    def __init__(self, key_attribute: str = "id"):
        self.key_attribute = key_attribute
        self.tables: Dict[str, Dict[str, dict]] = {}
        # Scan order per table. Deleted keys keep their slot so a cursor
        # anchored on one can still resume.
        self._order: Dict[str, list] = {}
        self._lock = threading.Lock()

    def _table(self, name: str) -> Dict[str, dict]:
        return self.tables.setdefault(name, {})

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.tables.clear()
            self._order.clear()

    def put_item(self, table: str, item: dict) -> None:
        key = item[self.key_attribute]
        with self._lock:
            order = self._order.setdefault(table, [])
            if key not in order:
                order.append(key)
            self._table(table)[key] = copy.deepcopy(item)

    def get_item(self, table: str, key: dict) -> Optional[dict]:
        with self._lock:
            item = self._table(table).get(key[self.key_attribute])
            return copy.deepcopy(item) if item is not None else None

    def update_item(self, table: str, key: dict, changes: dict) -> bool:
        with self._lock:
            item = self._table(table).get(key[self.key_attribute])
            if item is None:
                return False
            item.update(copy.deepcopy(changes))
        return True

    def delete_item(self, table: str, key: dict) -> None:
        with self._lock:
            self._table(table).pop(key[self.key_attribute], None)

    def query_index(
        self, table: str, index: str, attribute: str, value: Any
    ) -> list[dict]:
        with self._lock:
            return [
                copy.deepcopy(item)
                for item in self._table(table).values()
                if item.get(attribute) == value
            ]

    def scan(
        self, table: str, limit: int, start_key: Optional[dict] = None
    ) -> ScanPage:
        with self._lock:
            order = list(self._order.get(table, []))
            rows = self._table(table)
            start = 0
            if start_key:
                resume_after = deserialize_item(start_key)[self.key_attribute]
                if resume_after not in order:
                    return ScanPage(items=[])
                start = order.index(resume_after) + 1

            live = [key for key in order[start:] if key in rows]
            page_keys = live[:limit]
            items = [serialize_item(rows[key]) for key in page_keys]

        last_key = None
        if page_keys and len(live) > limit:
            last_key = serialize_item({self.key_attribute: page_keys[-1]})
        return ScanPage(items=items, last_evaluated_key=last_key)


@dataclass
class DynamoDbClient:
    """
    boto3-backed implementation using the low-level DynamoDB client.
    """

    region: str
    endpoint: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    def __post_init__(self):
        self._client = boto3.client(
            "dynamodb",
            region_name=self.region,
            endpoint_url=self.endpoint,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def _call(self, operation: str, **params) -> dict:
        try:
            return getattr(self._client, operation)(**params)
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamError(f"DynamoDB {operation} failed") from exc

    def put_item(self, table: str, item: dict) -> None:
        self._call("put_item", TableName=table, Item=serialize_item(item))

    def get_item(self, table: str, key: dict) -> Optional[dict]:
        response = self._call("get_item", TableName=table, Key=serialize_item(key))
        item = response.get("Item")
        return deserialize_item(item) if item else None

    def update_item(self, table: str, key: dict, changes: dict) -> bool:
        key_attribute = next(iter(key))
        names = {"#pk": key_attribute}
        values = {}
        assignments = []
        for index, (name, value) in enumerate(changes.items()):
            names[f"#f{index}"] = name
            values[f":f{index}"] = serialize_value(value)
            assignments.append(f"#f{index} = :f{index}")

        try:
            self._client.update_item(
                TableName=table,
                Key=serialize_item(key),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(#pk)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
        except ClientError as exc:
            if exc.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            raise UpstreamError("DynamoDB update_item failed") from exc
        except BotoCoreError as exc:
            raise UpstreamError("DynamoDB update_item failed") from exc
        return True

    def delete_item(self, table: str, key: dict) -> None:
        self._call("delete_item", TableName=table, Key=serialize_item(key))

    def query_index(
        self, table: str, index: str, attribute: str, value: Any
    ) -> list[dict]:
        params: Dict[str, Any] = {
            "TableName": table,
            "IndexName": index,
            "KeyConditionExpression": "#attr = :value",
            "ExpressionAttributeNames": {"#attr": attribute},
            "ExpressionAttributeValues": {":value": serialize_value(value)},
        }
        items: list[dict] = []
        while True:
            response = self._call("query", **params)
            items.extend(deserialize_item(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            params["ExclusiveStartKey"] = last_key
        return items

    def scan(
        self, table: str, limit: int, start_key: Optional[dict] = None
    ) -> ScanPage:
        params: Dict[str, Any] = {"TableName": table, "Limit": limit}
        if start_key:
            params["ExclusiveStartKey"] = start_key
        response = self._call("scan", **params)
        return ScanPage(
            items=response.get("Items", []),
            last_evaluated_key=response.get("LastEvaluatedKey"),
        )
