"""Error taxonomy and error handling utilities for the image variants pipeline."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Type, TypeVar

from .logging_config import get_logger


class ImageVariantsError(Exception):
    """Base exception for all image variants errors."""


class ConfigurationError(ImageVariantsError):
    """Error raised for invalid configuration options."""


class MalformedBatchError(ImageVariantsError):
    """Message body does not match the expected change notification schema."""


class SizeLimitExceededError(ImageVariantsError):
    """A change record declares an object larger than the accepted maximum."""

    def __init__(self, key: str, size_bytes: int, max_size_bytes: int):
        self.key = key
        self.size_bytes = size_bytes
        self.max_size_bytes = max_size_bytes
        super().__init__(
            f"Object {key} is too large: {size_bytes} bytes "
            f"(maximum {max_size_bytes} bytes)"
        )


class ProcessingStageError(ImageVariantsError):
    """Base class for failures raised by a stage of the image pipeline."""

    stage = "process"


class FetchError(ProcessingStageError):
    """The source object is missing or unreadable."""

    stage = "fetch"


class DecodeError(ProcessingStageError):
    """No decoder recognizes the source content."""

    stage = "decode"


class EncodeError(ProcessingStageError):
    """A resized variant could not be encoded."""

    stage = "encode"


class StoreError(ProcessingStageError):
    """A variant could not be written to storage."""

    stage = "store"


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(error_cls: Type[ImageVariantsError]) -> Callable[[F], F]:
    """Wrap a stage function so unexpected errors surface as ``error_cls``.

    Errors already belonging to the taxonomy pass through untouched.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except ImageVariantsError:
                raise
            except Exception as exc:  # noqa: BLE001
                get_logger("image-variants.errors").debug(
                    f"{func.__name__} failed: {exc}", exc_info=True
                )
                raise error_cls(f"{func.__name__} failed: {exc}") from exc

        return wrapper  # type: ignore[return-value]

    return decorator
