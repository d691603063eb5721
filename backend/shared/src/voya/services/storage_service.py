"""Object storage on S3 for avatars and property images."""

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from voya.models.errors import StoreError
from voya.utils.logging import get_logger

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp", "application/pdf"}
)
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class StorageService:
    """Uploads objects and returns their public URL.

    Args:
        bucket: Default bucket name
        region_name: AWS region of the bucket
        client: Pre-built S3 client (tests)
    """

    def __init__(
        self,
        bucket: str,
        region_name: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.bucket = bucket
        self.region_name = region_name or "us-east-1"
        self._s3 = client or boto3.client("s3", region_name=region_name)

    def validate(self, data: bytes, content_type: str) -> None:
        """Reject oversized files and unsupported types.

        Raises:
            StoreError: If the file is not accepted.
        """
        if len(data) > MAX_UPLOAD_BYTES:
            raise StoreError(details={"operation": "upload", "reason": "file_too_large"})
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise StoreError(
                details={"operation": "upload", "reason": "unsupported_type", "content_type": content_type}
            )

    def public_url(self, path: str, bucket: str | None = None) -> str:
        return f"https://{bucket or self.bucket}.s3.{self.region_name}.amazonaws.com/{path}"

    def upload(
        self,
        path: str,
        data: bytes,
        content_type: str,
        bucket: str | None = None,
    ) -> str:
        """Store an object, replacing any existing one at ``path``.

        Returns:
            Public URL of the object

        Raises:
            StoreError: If validation or the upload failed.
        """
        self.validate(data, content_type)
        target = bucket or self.bucket
        try:
            self._s3.put_object(
                Bucket=target,
                Key=path,
                Body=data,
                ContentType=content_type,
                CacheControl="max-age=3600",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Upload of %s to %s failed", path, target)
            raise StoreError(details={"operation": "upload", "path": path}) from e
        logger.info("Uploaded %s (%d bytes) to %s", path, len(data), target)
        return self.public_url(path, target)

    def upload_avatar(self, user_id: str, filename: str, data: bytes, content_type: str) -> str:
        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        return self.upload(f"avatars/{user_id}.{extension}", data, content_type)

    def delete(self, path: str, bucket: str | None = None) -> None:
        try:
            self._s3.delete_object(Bucket=bucket or self.bucket, Key=path)
        except (ClientError, BotoCoreError) as e:
            raise StoreError(details={"operation": "delete_object", "path": path}) from e
