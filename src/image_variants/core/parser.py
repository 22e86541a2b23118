"""Parser for S3 event notification documents carried in queue messages."""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import MalformedBatchError
from .models import ChangeRecord


class _EventBucket(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class _EventObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    size: int = Field(ge=0)


class _EventS3(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bucket: _EventBucket
    object: _EventObject


class _EventRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    eventName: Optional[str] = None
    s3: _EventS3


class S3EventDocument(BaseModel):
    """S3 event notification as delivered in a message body."""

    model_config = ConfigDict(extra="ignore")

    Records: List[_EventRecord]


def parse_change_batch(body: Union[str, bytes]) -> List[ChangeRecord]:
    """
    Parse one message body into its change records.

    Args:
        body: Raw JSON document, as text or bytes

    Returns:
        Change records in document order (possibly empty)

    Raises:
        MalformedBatchError: If the body is not JSON or misses a required field
    """
    try:
        document = S3EventDocument.model_validate_json(body)
    except ValidationError as exc:
        raise MalformedBatchError(
            f"Message body is not a valid S3 event document: "
            f"{exc.error_count()} error(s), first: {exc.errors()[0]['msg']}"
        ) from exc
    except ValueError as exc:
        raise MalformedBatchError(f"Message body could not be read: {exc}") from exc

    return [
        ChangeRecord(
            bucket=record.s3.bucket.name,
            key=record.s3.object.key,
            size_bytes=record.s3.object.size,
            event_name=record.eventName or "",
        )
        for record in document.Records
    ]
