"""Unit tests for StorageService against a moto S3 bucket."""

from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from voya.models.errors import StoreError
from voya.services.storage_service import MAX_UPLOAD_BYTES, StorageService

BUCKET = "voya-test-media"
REGION = "eu-west-1"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def storage(s3_bucket: Any) -> StorageService:
    return StorageService(BUCKET, region_name=REGION, client=s3_bucket)


def test_upload_returns_public_url(storage: StorageService, s3_bucket: Any) -> None:
    url = storage.upload("properties/p1/cover.png", PNG_BYTES, "image/png")

    assert url == f"https://{BUCKET}.s3.{REGION}.amazonaws.com/properties/p1/cover.png"
    stored = s3_bucket.get_object(Bucket=BUCKET, Key="properties/p1/cover.png")
    assert stored["ContentType"] == "image/png"
    assert stored["Body"].read() == PNG_BYTES


def test_upload_avatar_path(storage: StorageService, s3_bucket: Any) -> None:
    url = storage.upload_avatar("user-001", "Me.PNG", PNG_BYTES, "image/png")

    assert url.endswith("/avatars/user-001.png")
    s3_bucket.head_object(Bucket=BUCKET, Key="avatars/user-001.png")


def test_rejects_unsupported_type(storage: StorageService, s3_bucket: Any) -> None:
    with pytest.raises(StoreError) as exc_info:
        storage.upload("docs/run.sh", b"#!/bin/sh", "text/x-shellscript")

    assert exc_info.value.details["reason"] == "unsupported_type"
    assert s3_bucket.list_objects_v2(Bucket=BUCKET).get("KeyCount", 0) == 0


def test_rejects_oversized_file(storage: StorageService) -> None:
    with pytest.raises(StoreError) as exc_info:
        storage.upload("big.png", b"\x00" * (MAX_UPLOAD_BYTES + 1), "image/png")

    assert exc_info.value.details["reason"] == "file_too_large"


def test_delete(storage: StorageService, s3_bucket: Any) -> None:
    storage.upload("avatars/user-001.png", PNG_BYTES, "image/png")

    storage.delete("avatars/user-001.png")

    assert s3_bucket.list_objects_v2(Bucket=BUCKET).get("KeyCount", 0) == 0


def test_s3_failure_raises_store_error() -> None:
    client = MagicMock()
    client.put_object.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
    )
    storage = StorageService(BUCKET, region_name=REGION, client=client)

    with pytest.raises(StoreError):
        storage.upload("avatars/user-001.png", PNG_BYTES, "image/png")
