"""Shared data models and configuration for the image variants pipeline."""

import os
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError
from .logging_config import get_logger

DEFAULT_OUTPUT_BUCKET = "image-processor-out"
DEFAULT_MAX_OBJECT_SIZE_BYTES = 50 * 1024 * 1024
DEFAULT_JPEG_QUALITY = 85


class ImageFormat(str, Enum):
    """Source format resolved once per record."""

    PNG = "PNG"
    JPEG = "JPEG"
    UNKNOWN = "UNKNOWN"


class FormatPolicy(BaseModel):
    """Maps a resolved source format to the encoding of its variants.

    PNG sources stay lossless PNG; anything else is written as JPEG.
    """

    model_config = ConfigDict(frozen=True)

    jpeg_quality: int = Field(default=DEFAULT_JPEG_QUALITY, ge=1, le=95)

    def output_format(self, source_format: ImageFormat) -> ImageFormat:
        if source_format is ImageFormat.PNG:
            return ImageFormat.PNG
        return ImageFormat.JPEG

    def content_type(self, source_format: ImageFormat) -> str:
        if self.output_format(source_format) is ImageFormat.PNG:
            return "image/png"
        return "image/jpeg"


class VariantSpec(BaseModel):
    """Target bounding box and key prefix of one derived variant."""

    model_config = ConfigDict(frozen=True)

    name: str
    max_width: int = Field(gt=0)
    max_height: int = Field(gt=0)
    output_key_prefix: str
    encoding_policy: FormatPolicy = Field(default_factory=FormatPolicy)

    def output_key(self, key: str) -> str:
        """Key of this variant for an original key; the key is kept verbatim."""
        return f"{self.output_key_prefix.rstrip('/')}/{key}"


def default_variants(
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    thumbnail_size: Tuple[int, int] = (200, 200),
    medium_size: Tuple[int, int] = (800, 600),
) -> List[VariantSpec]:
    """Thumbnail and medium variants, in the order they are written."""
    policy = FormatPolicy(jpeg_quality=jpeg_quality)
    return [
        VariantSpec(
            name="thumbnail",
            max_width=thumbnail_size[0],
            max_height=thumbnail_size[1],
            output_key_prefix="thumbnails",
            encoding_policy=policy,
        ),
        VariantSpec(
            name="medium",
            max_width=medium_size[0],
            max_height=medium_size[1],
            output_key_prefix="medium",
            encoding_policy=policy,
        ),
    ]


def _parse_size(value: str, env_name: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError as exc:
        raise ConfigurationError(
            f"{env_name} must look like WIDTHxHEIGHT, got {value!r}"
        ) from exc
    return width, height


def _parse_int(value: str, env_name: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{env_name} must be an integer, got {value!r}") from exc


class PipelineSettings(BaseModel):
    """Configuration read once at process start."""

    output_bucket: str = Field(min_length=1)
    max_object_size_bytes: int = Field(default=DEFAULT_MAX_OBJECT_SIZE_BYTES, gt=0)
    jpeg_quality: int = Field(default=DEFAULT_JPEG_QUALITY, ge=1, le=95)
    variants: List[VariantSpec] = Field(default_factory=default_variants)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "PipelineSettings":
        """Build settings from environment variables, applying defaults once.

        Environment Variables:
            OUTPUT_BUCKET: Bucket receiving the variants
            MAX_OBJECT_SIZE_BYTES: Largest accepted source object
            JPEG_QUALITY: Quality of JPEG encoded variants
            THUMBNAIL_SIZE: Thumbnail bounding box, e.g. "200x200"
            MEDIUM_SIZE: Medium bounding box, e.g. "800x600"
        """
        env = os.environ if environ is None else environ
        logger = get_logger("image-variants.config")

        output_bucket = env.get("OUTPUT_BUCKET", "")
        if not output_bucket:
            output_bucket = DEFAULT_OUTPUT_BUCKET
            logger.warning(
                f"OUTPUT_BUCKET not configured, using default: {output_bucket}"
            )

        max_size = _parse_int(
            env.get("MAX_OBJECT_SIZE_BYTES", str(DEFAULT_MAX_OBJECT_SIZE_BYTES)),
            "MAX_OBJECT_SIZE_BYTES",
        )
        quality = _parse_int(
            env.get("JPEG_QUALITY", str(DEFAULT_JPEG_QUALITY)), "JPEG_QUALITY"
        )
        thumbnail_size = _parse_size(env.get("THUMBNAIL_SIZE", "200x200"), "THUMBNAIL_SIZE")
        medium_size = _parse_size(env.get("MEDIUM_SIZE", "800x600"), "MEDIUM_SIZE")

        try:
            return cls(
                output_bucket=output_bucket,
                max_object_size_bytes=max_size,
                jpeg_quality=quality,
                variants=default_variants(quality, thumbnail_size, medium_size),
            )
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid pipeline configuration: {exc}") from exc


class ChangeBatchMessage(BaseModel):
    """One queued message; the identifier is only used for failure reporting."""

    message_id: str
    body: Union[str, bytes]


class ChangeRecord(BaseModel):
    """A storage object changed event parsed from a message body."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    size_bytes: int
    event_name: str = ""


class EncodedVariant(BaseModel):
    """Encoded bytes of one variant, ready to be stored."""

    name: str
    key: str
    body: bytes
    content_type: str
    width: int
    height: int


class ProcessOutcome(BaseModel):
    """Result of a successfully processed change record."""

    original_key: str
    variant_keys: Dict[str, str] = Field(default_factory=dict)


class BatchResult(BaseModel):
    """Failed message identifiers accumulated over one batch."""

    failed_message_ids: Set[str] = Field(default_factory=set)

    def mark_failed(self, message_id: str) -> None:
        self.failed_message_ids.add(message_id)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed_message_ids

    def to_batch_response(self) -> Dict[str, List[Dict[str, str]]]:
        """Partial batch response understood by the SQS event source mapping."""
        return {
            "batchItemFailures": [
                {"itemIdentifier": message_id}
                for message_id in sorted(self.failed_message_ids)
            ]
        }
