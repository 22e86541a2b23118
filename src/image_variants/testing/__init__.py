"""Testing utilities and fakes for the image variants pipeline."""

from .fakes import (
    FakeS3Client,
    FakeLogger,
    S3Object,
    S3Bucket,
    build_s3_event_body,
    build_sqs_event,
    create_test_image,
    setup_test_s3_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeLogger",
    "S3Object",
    "S3Bucket",
    "build_s3_event_body",
    "build_sqs_event",
    "create_test_image",
    "setup_test_s3_environment",
]
