"""Service implementations: variant generation, image pipeline and batch intake."""

import time
from typing import Dict, List, Optional, Sequence, Tuple

from .exceptions import (
    EncodeError,
    ImageVariantsError,
    MalformedBatchError,
    SizeLimitExceededError,
)
from .image_utils import (
    DecodedImage,
    decode_object,
    encode_image,
    fit_within,
    resize_image,
)
from .models import (
    BatchResult,
    ChangeBatchMessage,
    ChangeRecord,
    EncodedVariant,
    ProcessOutcome,
    VariantSpec,
    DEFAULT_MAX_OBJECT_SIZE_BYTES,
)
from .observability import LogContext
from .parser import parse_change_batch
from .protocols import (
    BatchProcessor,
    LoggerProtocol,
    ProcessingService,
    StorageProtocol,
)


class VariantGenerator:
    """Pure resize and encode step with no I/O dependencies."""

    @staticmethod
    def target_size(width: int, height: int, spec: VariantSpec) -> Tuple[int, int]:
        """Dimensions of the variant of a ``width x height`` source."""
        return fit_within(width, height, spec.max_width, spec.max_height)

    def render(self, image: DecodedImage, spec: VariantSpec) -> Tuple[bytes, str, int, int]:
        """Resize and encode, also reporting the output dimensions."""
        size = self.target_size(image.width, image.height, spec)
        try:
            resized = resize_image(image.image, size)
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Could not resize to {size[0]}x{size[1]}: {exc}") from exc

        policy = spec.encoding_policy
        output_format = policy.output_format(image.source_format)
        body = encode_image(resized, output_format, policy.jpeg_quality)
        return body, policy.content_type(image.source_format), size[0], size[1]

    def generate(self, image: DecodedImage, spec: VariantSpec) -> Tuple[bytes, str]:
        """
        Produce the encoded bytes and content-type of one variant.

        Raises:
            EncodeError: If resizing or encoding fails
        """
        body, content_type, _, _ = self.render(image, spec)
        return body, content_type


class ImagePipeline(ProcessingService):
    """Fetch, decode, derive and store every configured variant of an object."""

    def __init__(
        self,
        storage: StorageProtocol,
        output_bucket: str,
        variants: Sequence[VariantSpec],
        logger: LoggerProtocol,
        generator: Optional[VariantGenerator] = None,
    ):
        self._storage = storage
        self._output_bucket = output_bucket
        self._variants = list(variants)
        self._logger = logger
        self._generator = generator or VariantGenerator()

    @property
    def output_bucket(self) -> str:
        return self._output_bucket

    @property
    def variants(self) -> List[VariantSpec]:
        return list(self._variants)

    def process(
        self, bucket: str, key: str, context: Optional[LogContext] = None
    ) -> ProcessOutcome:
        """
        Derive and store all variants of ``s3://bucket/key``.

        Variants are written in configuration order; a failed write leaves
        earlier variants in place.

        Raises:
            FetchError, DecodeError, EncodeError, StoreError
        """
        log_context = (context or LogContext(component="image_pipeline")).with_metadata(
            bucket=bucket, key=key
        )
        start_time = time.time()

        self._logger.debug("Fetching original", log_context.with_operation("fetch"))
        data, content_type = self._storage.fetch(bucket, key)

        image = decode_object(key, data, content_type)
        self._logger.info(
            f"Decoded {image.width}x{image.height} image",
            log_context.with_operation("decode"),
            source_format=image.source_format.value,
            detected_format=image.detected_format or "unknown",
        )

        variant_keys: Dict[str, str] = {}
        for spec in self._variants:
            variant = self._build_variant(image, spec, key)
            self._logger.debug(
                f"Storing {variant.name} variant",
                log_context.with_operation("store"),
                variant_key=variant.key,
                size=f"{variant.width}x{variant.height}",
                bytes=len(variant.body),
            )
            self._storage.store(
                self._output_bucket, variant.key, variant.body, variant.content_type
            )
            variant_keys[spec.name] = variant.key

        self._logger.info(
            "Variants stored",
            log_context.with_operation("process"),
            output_bucket=self._output_bucket,
            variants=",".join(variant_keys.values()),
            processing_time_ms=round((time.time() - start_time) * 1000, 1),
        )
        return ProcessOutcome(original_key=key, variant_keys=variant_keys)

    def _build_variant(self, image: DecodedImage, spec: VariantSpec, key: str) -> EncodedVariant:
        body, content_type, width, height = self._generator.render(image, spec)
        return EncodedVariant(
            name=spec.name,
            key=spec.output_key(key),
            body=body,
            content_type=content_type,
            width=width,
            height=height,
        )


class BatchIntakeLoop(BatchProcessor):
    """Walks a batch of messages and reports the ones that failed."""

    def __init__(
        self,
        pipeline: ProcessingService,
        logger: LoggerProtocol,
        max_object_size_bytes: int = DEFAULT_MAX_OBJECT_SIZE_BYTES,
    ):
        self._pipeline = pipeline
        self._logger = logger
        self._max_object_size_bytes = max_object_size_bytes

    def process_batch(self, messages: Sequence[ChangeBatchMessage]) -> BatchResult:
        """Process messages in order; one message's failure never affects another."""
        result = BatchResult()
        self._logger.info(f"Received {len(messages)} message(s)")

        for index, message in enumerate(messages, start=1):
            context = LogContext(
                correlation_id=message.message_id, component="batch_intake"
            ).with_metadata(position=f"{index}/{len(messages)}")
            if not self._process_message(message, context):
                result.mark_failed(message.message_id)

        if result.all_succeeded:
            self._logger.info(f"All {len(messages)} message(s) processed successfully")
        else:
            self._logger.warning(
                f"{len(result.failed_message_ids)} message(s) failed and will be retried"
            )
        return result

    def _process_message(self, message: ChangeBatchMessage, context: LogContext) -> bool:
        try:
            records = parse_change_batch(message.body)
        except MalformedBatchError as exc:
            self._logger.error(f"Could not parse message body: {exc}", context.with_operation("parse"))
            return False

        for record in records:
            try:
                self._process_record(record, context)
            except ImageVariantsError as exc:
                self._logger.error(
                    f"Record failed: {exc}",
                    context.with_operation(getattr(exc, "stage", "validate")),
                    error_type=type(exc).__name__,
                    bucket=record.bucket,
                    key=record.key,
                )
                return False
            except Exception as exc:  # noqa: BLE001
                self._logger.error(
                    f"Unexpected error processing record: {exc}",
                    context.with_operation("process"),
                    error_type=type(exc).__name__,
                    bucket=record.bucket,
                    key=record.key,
                    exc_info=True,
                )
                return False
        return True

    def _process_record(self, record: ChangeRecord, context: LogContext) -> ProcessOutcome:
        self._validate_size(record)
        return self._pipeline.process(record.bucket, record.key, context)

    def _validate_size(self, record: ChangeRecord) -> None:
        if record.size_bytes > self._max_object_size_bytes:
            raise SizeLimitExceededError(
                record.key, record.size_bytes, self._max_object_size_bytes
            )
