"""S3 backed implementation of the storage collaborator."""

from typing import Optional, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import FetchError, StoreError, with_error_handling
from .protocols import LoggerProtocol, S3ClientProtocol


def _client_error_code(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


class S3Storage:
    """Fetches and stores objects through a boto3 S3 client.

    No retries happen here; failures surface as FetchError or StoreError.
    """

    def __init__(self, s3_client: S3ClientProtocol, logger: Optional[LoggerProtocol] = None):
        self._s3_client = s3_client
        self._logger = logger

    @with_error_handling(FetchError)
    def fetch(self, bucket: str, key: str) -> Tuple[bytes, str]:
        """Download an object, returning its bytes and content-type hint."""
        try:
            response = self._s3_client.get_object(Bucket=bucket, Key=key)
            body = response["Body"].read()
        except (ClientError, BotoCoreError) as exc:
            code = _client_error_code(exc)
            if code in ("NoSuchKey", "404"):
                raise FetchError(f"Object s3://{bucket}/{key} does not exist") from exc
            raise FetchError(f"Could not read s3://{bucket}/{key}: {exc}") from exc

        if self._logger:
            self._logger.debug(f"Fetched s3://{bucket}/{key} ({len(body)} bytes)")
        return body, response.get("ContentType", "") or ""

    @with_error_handling(StoreError)
    def store(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        """Upload an object with the given content-type."""
        try:
            self._s3_client.put_object(
                Bucket=bucket, Key=key, Body=body, ContentType=content_type
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(f"Could not write s3://{bucket}/{key}: {exc}") from exc

        if self._logger:
            self._logger.debug(f"Stored s3://{bucket}/{key} ({len(body)} bytes, {content_type})")
