"""Tests for core data models and settings."""

import pytest
from pydantic import ValidationError

from image_variants.core.exceptions import ConfigurationError
from image_variants.core.models import (
    BatchResult,
    ChangeRecord,
    FormatPolicy,
    ImageFormat,
    PipelineSettings,
    VariantSpec,
    default_variants,
)


class TestVariantSpec:
    """Tests for VariantSpec."""

    def test_output_key_keeps_original_key(self):
        spec = VariantSpec(name="thumbnail", max_width=200, max_height=200, output_key_prefix="thumbnails")

        assert spec.output_key("a/b/c.jpg") == "thumbnails/a/b/c.jpg"

    def test_output_key_trailing_slash_prefix(self):
        spec = VariantSpec(name="medium", max_width=800, max_height=600, output_key_prefix="medium/")

        assert spec.output_key("c.jpg") == "medium/c.jpg"

    @pytest.mark.parametrize("width,height", [(0, 200), (200, 0), (-1, 10)])
    def test_dimensions_must_be_positive(self, width, height):
        with pytest.raises(ValidationError):
            VariantSpec(name="x", max_width=width, max_height=height, output_key_prefix="x")

    def test_default_variants(self):
        """Test the thumbnail and medium boxes and their order."""
        thumbnail, medium = default_variants()

        assert (thumbnail.name, thumbnail.max_width, thumbnail.max_height) == ("thumbnail", 200, 200)
        assert thumbnail.output_key_prefix == "thumbnails"
        assert (medium.name, medium.max_width, medium.max_height) == ("medium", 800, 600)
        assert medium.output_key_prefix == "medium"
        assert thumbnail.encoding_policy.jpeg_quality == 85


class TestFormatPolicy:
    """Tests for FormatPolicy."""

    def test_png_stays_png(self):
        policy = FormatPolicy()

        assert policy.output_format(ImageFormat.PNG) is ImageFormat.PNG
        assert policy.content_type(ImageFormat.PNG) == "image/png"

    @pytest.mark.parametrize("source", [ImageFormat.JPEG, ImageFormat.UNKNOWN])
    def test_everything_else_is_jpeg(self, source):
        policy = FormatPolicy()

        assert policy.output_format(source) is ImageFormat.JPEG
        assert policy.content_type(source) == "image/jpeg"

    @pytest.mark.parametrize("quality", [0, 96])
    def test_quality_range(self, quality):
        with pytest.raises(ValidationError):
            FormatPolicy(jpeg_quality=quality)


class TestChangeRecord:
    def test_change_record_is_immutable(self):
        record = ChangeRecord(bucket="b", key="k.jpg", size_bytes=1)

        with pytest.raises(ValidationError):
            record.key = "other.jpg"


class TestBatchResult:
    """Tests for BatchResult."""

    def test_empty_result(self):
        result = BatchResult()

        assert result.all_succeeded
        assert result.to_batch_response() == {"batchItemFailures": []}

    def test_mark_failed_is_idempotent(self):
        result = BatchResult()

        result.mark_failed("m1")
        result.mark_failed("m1")

        assert result.failed_message_ids == {"m1"}
        assert not result.all_succeeded

    def test_batch_response_shape(self):
        result = BatchResult()
        result.mark_failed("m2")
        result.mark_failed("m1")

        assert result.to_batch_response() == {
            "batchItemFailures": [{"itemIdentifier": "m1"}, {"itemIdentifier": "m2"}]
        }


class TestPipelineSettings:
    """Tests for PipelineSettings.from_env."""

    def test_defaults(self):
        settings = PipelineSettings.from_env({})

        assert settings.output_bucket == "image-processor-out"
        assert settings.max_object_size_bytes == 52428800
        assert settings.jpeg_quality == 85
        assert [v.name for v in settings.variants] == ["thumbnail", "medium"]

    def test_from_environment_variables(self):
        settings = PipelineSettings.from_env(
            {
                "OUTPUT_BUCKET": "renditions",
                "MAX_OBJECT_SIZE_BYTES": "1024",
                "JPEG_QUALITY": "70",
                "THUMBNAIL_SIZE": "150x100",
                "MEDIUM_SIZE": "1024X768",
            }
        )

        thumbnail, medium = settings.variants
        assert settings.output_bucket == "renditions"
        assert settings.max_object_size_bytes == 1024
        assert (thumbnail.max_width, thumbnail.max_height) == (150, 100)
        assert (medium.max_width, medium.max_height) == (1024, 768)
        assert medium.encoding_policy.jpeg_quality == 70

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("OUTPUT_BUCKET", "from-env")

        assert PipelineSettings.from_env().output_bucket == "from-env"

    @pytest.mark.parametrize(
        "environ",
        [
            {"MAX_OBJECT_SIZE_BYTES": "lots"},
            {"MAX_OBJECT_SIZE_BYTES": "0"},
            {"JPEG_QUALITY": "200"},
            {"THUMBNAIL_SIZE": "200"},
            {"MEDIUM_SIZE": "0x600"},
        ],
    )
    def test_invalid_values(self, environ):
        with pytest.raises(ConfigurationError):
            PipelineSettings.from_env(environ)
