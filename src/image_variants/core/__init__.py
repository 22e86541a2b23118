"""Core components of the image variants pipeline."""

from .logging_config import get_logger, setup_logger
from .exceptions import (
    ImageVariantsError,
    ConfigurationError,
    MalformedBatchError,
    SizeLimitExceededError,
    ProcessingStageError,
    FetchError,
    DecodeError,
    EncodeError,
    StoreError,
    with_error_handling,
)
from .models import (
    BatchResult,
    ChangeBatchMessage,
    ChangeRecord,
    EncodedVariant,
    FormatPolicy,
    ImageFormat,
    PipelineSettings,
    ProcessOutcome,
    VariantSpec,
    default_variants,
)
from .parser import parse_change_batch
from .services import BatchIntakeLoop, ImagePipeline, VariantGenerator
from .storage import S3Storage

__all__ = [
    "setup_logger",
    "get_logger",
    "ImageVariantsError",
    "ConfigurationError",
    "MalformedBatchError",
    "SizeLimitExceededError",
    "ProcessingStageError",
    "FetchError",
    "DecodeError",
    "EncodeError",
    "StoreError",
    "with_error_handling",
    "BatchResult",
    "ChangeBatchMessage",
    "ChangeRecord",
    "EncodedVariant",
    "FormatPolicy",
    "ImageFormat",
    "PipelineSettings",
    "ProcessOutcome",
    "VariantSpec",
    "default_variants",
    "parse_change_batch",
    "BatchIntakeLoop",
    "ImagePipeline",
    "VariantGenerator",
    "S3Storage",
]
