"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3

from .models import PipelineSettings
from .observability import StructuredLogger
from .protocols import LoggerProtocol, S3ClientProtocol, StorageProtocol
from .services import BatchIntakeLoop, ImagePipeline, VariantGenerator
from .storage import S3Storage


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str = "image-variants") -> LoggerProtocol:
        return StructuredLogger(name)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(**kwargs: Any) -> S3ClientProtocol:
        """Create S3 client with optional configuration."""
        session = boto3.Session()
        return session.client("s3", **kwargs)  # type: ignore


class ProcessingPipelineFactory:
    """Factory for creating the complete batch intake pipeline."""

    @staticmethod
    def create_pipeline(
        settings: Optional[PipelineSettings] = None,
        s3_client: Optional[S3ClientProtocol] = None,
        storage: Optional[StorageProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> BatchIntakeLoop:
        """Wire storage, image pipeline and intake loop from settings."""
        if settings is None:
            settings = PipelineSettings.from_env()

        if logger is None:
            logger = LoggerFactory.create_logger()

        if storage is None:
            if s3_client is None:
                s3_client = S3ClientFactory.create_s3_client()
            storage = S3Storage(s3_client, logger)

        image_pipeline = ImagePipeline(
            storage=storage,
            output_bucket=settings.output_bucket,
            variants=settings.variants,
            logger=logger,
            generator=VariantGenerator(),
        )
        return BatchIntakeLoop(
            pipeline=image_pipeline,
            logger=logger,
            max_object_size_bytes=settings.max_object_size_bytes,
        )
