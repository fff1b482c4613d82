"""
Storage abstraction for S3 and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from playerfeed.errors import UpstreamError


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def put_object(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        metadata: dict[str, str],
        acl: str = "private",
    ) -> None:
        ...

    def delete_object(self, key: str) -> None:
        ...


@dataclass
class StoredObject:
    body: bytes
    content_type: str
    metadata: dict
    acl: str


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def put_object(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        metadata: dict[str, str],
        acl: str = "private",
    ) -> None:
        self.stored_objects[key] = StoredObject(
            body=body, content_type=content_type, metadata=dict(metadata), acl=acl
        )

    def delete_object(self, key: str) -> None:
        self.stored_objects.pop(key, None)


@dataclass
class S3StorageClient:
    """
    S3 storage client for uploaded videos.
    """

    bucket: str
    region: str
    endpoint: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    def __post_init__(self):
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name=self.region,
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
        )

    def put_object(
        self,
        key: str,
        body: bytes,
        *,
        content_type: str,
        metadata: dict[str, str],
        acl: str = "private",
    ) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ACL=acl,
                ContentType=content_type,
                Metadata=metadata,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamError("S3 put_object failed") from exc

    def delete_object(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamError("S3 delete_object failed") from exc
