"""Image codec helpers: format resolution, decoding, resizing and encoding."""

import io
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .exceptions import DecodeError, EncodeError
from .models import ImageFormat

EXTENSION_FORMATS = {
    ".png": ImageFormat.PNG,
    ".jpg": ImageFormat.JPEG,
    ".jpeg": ImageFormat.JPEG,
}

# Errors Pillow raises for truncated, corrupt or hostile input
PIL_DECODE_ERRORS = (
    UnidentifiedImageError,
    Image.DecompressionBombError,
    OSError,
    SyntaxError,
    ValueError,
)

JPEG_COMPATIBLE_MODES = ("RGB", "L")


@dataclass
class DecodedImage:
    """In-memory pixel buffer of one source object."""

    image: Image.Image
    source_format: ImageFormat
    detected_format: str = ""

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


def format_from_extension(key: str) -> ImageFormat:
    """Resolve the format implied by the key extension, case-insensitively."""
    _, ext = os.path.splitext(key)
    return EXTENSION_FORMATS.get(ext.lower(), ImageFormat.UNKNOWN)


def format_from_content_type(content_type: Optional[str]) -> ImageFormat:
    if not content_type:
        return ImageFormat.UNKNOWN
    lowered = content_type.lower()
    if "png" in lowered:
        return ImageFormat.PNG
    if "jpeg" in lowered or "jpg" in lowered:
        return ImageFormat.JPEG
    return ImageFormat.UNKNOWN


def resolve_format(key: str, content_type: Optional[str] = None) -> ImageFormat:
    """
    Resolve the source format of an object.

    The key extension wins; the storage content-type hint is consulted only
    when the extension is not recognized.

    Args:
        key: Object key
        content_type: Content-type reported by storage, if any

    Returns:
        PNG, JPEG or UNKNOWN (content sniffing happens at decode time)
    """
    resolved = format_from_extension(key)
    if resolved is ImageFormat.UNKNOWN:
        resolved = format_from_content_type(content_type)
    return resolved


def decode_image(data: bytes, source_format: ImageFormat) -> DecodedImage:
    """
    Decode raw bytes into a DecodedImage.

    A known source format restricts Pillow to that decoder. UNKNOWN lets
    Pillow sniff the content; a sniffed PNG or JPEG is reported as such.

    Raises:
        DecodeError: If no decoder recognizes the content
    """
    if source_format is ImageFormat.UNKNOWN:
        formats = None
    else:
        formats = [source_format.value]

    try:
        image = Image.open(io.BytesIO(data), formats=formats)
        image.load()
    except PIL_DECODE_ERRORS as exc:
        raise DecodeError(f"Could not decode image ({source_format.value}): {exc}") from exc

    detected = image.format or ""
    if source_format is ImageFormat.UNKNOWN:
        try:
            source_format = ImageFormat(detected)
        except ValueError:
            source_format = ImageFormat.UNKNOWN

    return DecodedImage(image=image, source_format=source_format, detected_format=detected)


def decode_object(key: str, data: bytes, content_type: Optional[str] = None) -> DecodedImage:
    """
    Decode the bytes of a stored object.

    Only the key extension restricts the decoders. Without a recognized
    extension the content is sniffed, and the storage content-type hint
    then only decides whether the variants stay PNG.

    Raises:
        DecodeError: If no decoder recognizes the content
    """
    decoded = decode_image(data, format_from_extension(key))
    if decoded.source_format is not ImageFormat.PNG:
        if resolve_format(key, content_type) is ImageFormat.PNG:
            decoded.source_format = ImageFormat.PNG
    return decoded


def fit_within(
    width: int, height: int, max_width: int, max_height: int
) -> Tuple[int, int]:
    """
    Dimensions of a box fitting ``width x height`` inside the bounds.

    Scales down only, keeps the aspect ratio within one pixel of rounding
    and never exceeds either bound.
    """
    if width <= max_width and height <= max_height:
        return width, height

    scale = min(max_width / width, max_height / height)
    new_width = min(max_width, max(1, round(width * scale)))
    new_height = min(max_height, max(1, round(height * scale)))
    return new_width, new_height


def resize_image(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Resample to ``size`` with a 3-lobe Lanczos filter."""
    if image.size == size:
        return image.copy()
    if image.mode == "P":
        image = image.convert("RGBA")
    return image.resize(size, Image.Resampling.LANCZOS)


def encode_image(image: Image.Image, output_format: ImageFormat, quality: int) -> bytes:
    """
    Encode an image as PNG (lossless) or JPEG at the given quality.

    Raises:
        EncodeError: If Pillow cannot write the image
    """
    stream = io.BytesIO()
    try:
        if output_format is ImageFormat.PNG:
            image.save(stream, format="PNG", optimize=True)
        else:
            if image.mode not in JPEG_COMPATIBLE_MODES:
                image = image.convert("RGB")
            image.save(stream, format="JPEG", quality=quality)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeError(f"Could not encode image as {output_format.value}: {exc}") from exc
    return stream.getvalue()
