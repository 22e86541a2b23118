"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol, Sequence, Tuple

from .models import BatchResult, ChangeBatchMessage, ProcessOutcome
from .observability import LogContext


class S3ClientProtocol(Protocol):
    """Subset of the boto3 S3 client used by the storage adapter."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class StorageProtocol(Protocol):
    """Opaque fetch/store primitives of the object storage."""

    def fetch(self, bucket: str, key: str) -> Tuple[bytes, str]:
        """Return the object bytes and its content-type hint."""
        ...

    def store(self, bucket: str, key: str, body: bytes, content_type: str) -> None:
        """Write an object."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...


class ProcessingService(ABC):
    """Abstract service turning one changed object into its variants."""

    @abstractmethod
    def process(
        self, bucket: str, key: str, context: Optional[LogContext] = None
    ) -> ProcessOutcome:
        """Process a single changed object."""
        ...


class BatchProcessor(ABC):
    """Abstract batch processor."""

    @abstractmethod
    def process_batch(self, messages: Sequence[ChangeBatchMessage]) -> BatchResult:
        """Process a batch of queued messages."""
        ...
