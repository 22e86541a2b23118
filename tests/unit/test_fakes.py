"""Tests for fake implementations to ensure they work correctly."""

import io
import json

import pytest
from botocore.exceptions import ClientError
from PIL import Image

from image_variants.testing.fakes import (
    FakeLogger,
    FakeS3Client,
    build_s3_event_body,
    build_sqs_event,
    create_test_image,
    setup_test_s3_environment,
)


class TestFakeS3Client:
    """Tests for FakeS3Client."""

    def test_get_object_success(self):
        client = FakeS3Client()
        client.create_bucket("test-bucket").add_object("test.jpg", b"data")

        response = client.get_object(Bucket="test-bucket", Key="test.jpg")

        assert response["Body"].read() == b"data"
        assert response["ContentType"] == "image/jpeg"
        assert response["ContentLength"] == 4

    def test_get_object_not_found(self):
        client = FakeS3Client()
        client.create_bucket("test-bucket")

        with pytest.raises(ClientError) as exc_info:
            client.get_object(Bucket="test-bucket", Key="missing.jpg")
        assert exc_info.value.response["Error"]["Code"] == "NoSuchKey"

    def test_fail_puts_for_specific_key(self):
        client = FakeS3Client()
        client.create_bucket("b")
        client.fail_puts_for("bad")

        client.put_object(Bucket="b", Key="good", Body=b"1", ContentType="image/png")
        with pytest.raises(ClientError):
            client.put_object(Bucket="b", Key="bad", Body=b"1", ContentType="image/png")

        assert client.put_calls == [("b", "good"), ("b", "bad")]
        assert client.operation_count == 2


class TestFakeLogger:
    def test_records_context(self):
        logger = FakeLogger()
        context = type("Ctx", (), {"correlation_id": "m1", "operation": "fetch", "metadata": {"key": "k"}})()

        logger.error("failed", context, error_type="FetchError")

        (entry,) = logger.get_logs("ERROR")
        assert entry["correlation_id"] == "m1"
        assert entry["operation"] == "fetch"
        assert entry["key"] == "k"
        assert entry["error_type"] == "FetchError"


class TestBuilders:
    @pytest.mark.parametrize("format", ["JPEG", "PNG"])
    def test_create_test_image(self, format):
        image = Image.open(io.BytesIO(create_test_image(30, 20, format=format)))

        assert image.format == format
        assert image.size == (30, 20)

    def test_build_s3_event_body(self):
        document = json.loads(build_s3_event_body([("b", "k.jpg", 7)]))

        (record,) = document["Records"]
        assert record["s3"]["bucket"]["name"] == "b"
        assert record["s3"]["object"] == {"key": "k.jpg", "size": 7, "eTag": "0123456789abcdef"}

    def test_build_sqs_event(self):
        event = build_sqs_event({"m1": "body-1"})

        assert event["Records"][0]["messageId"] == "m1"
        assert event["Records"][0]["body"] == "body-1"

    def test_setup_environment(self):
        client = setup_test_s3_environment()

        assert client.get_bucket("test-source").get_object("uploads/square.jpg") is not None
        assert client.get_bucket("test-dest").objects == {}
