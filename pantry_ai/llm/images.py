"""Validate and prepare uploaded photos for image detection.

Accepts raw bytes, plain base64 or ``data:`` URLs. Uploads are checked against
the MIME allow-list, the actual format sniffed from magic bytes (``filetype``)
and MAX_IMAGE_SIZE_MB before anything is sent to the model. Large JPEG/PNG
images are re-encoded with Pillow when COMPRESS_IMG is enabled.
"""

import base64
import binascii
from io import BytesIO
from typing import Optional, Union

import filetype
from PIL import Image

from pantry_ai.models.models import ImageAttachment
from pantry_ai.utils.config import config
from pantry_ai.utils.errors import ImageValidationError, safe_execute_sync
from pantry_ai.utils.logger import logger

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/heif", "image/heic")

# Formats Pillow can re-encode without extra plugins
COMPRESSIBLE_MIME_TYPES = ("image/jpeg", "image/png")


def decode_image_source(image_source: Union[bytes, str]) -> bytes:
    """Raw bytes from bytes, a data URL or a plain base64 string.

    Raises:
        ImageValidationError: If the string is not valid base64.
    """
    if isinstance(image_source, bytes):
        return image_source

    encoded = image_source.split(",", 1)[1] if image_source.startswith("data:") else image_source
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageValidationError("Invalid image data", details={"reason": str(e)}) from e


def sniff_mime_type(image_bytes: bytes) -> Optional[str]:
    kind = filetype.guess(image_bytes)
    return kind.mime if kind else None


def validate_image_size(image_bytes: bytes) -> None:
    size_mb = len(image_bytes) / (1024 * 1024)
    if size_mb > config.MAX_IMAGE_SIZE_MB:
        logger.warning(f"Image size {size_mb:.2f}MB exceeds limit of {config.MAX_IMAGE_SIZE_MB}MB")
        raise ImageValidationError(
            f"Image too large. Maximum size is {config.MAX_IMAGE_SIZE_MB}MB",
            details={"size_mb": round(size_mb, 2), "max_size_mb": config.MAX_IMAGE_SIZE_MB},
        )


def validate_image_format(image_bytes: bytes, declared_mime: Optional[str] = None) -> str:
    """Check the declared and sniffed MIME types against the allow-list.

    Args:
        image_bytes: Raw image bytes.
        declared_mime: MIME type reported by the uploader, if any.

    Returns:
        str: The MIME type to send to the model (sniffed when available).

    Raises:
        ImageValidationError: If either type is outside the allow-list, or the
            declared type contradicts the magic bytes.
    """
    declared = declared_mime.lower().strip() if declared_mime else None
    if declared and declared not in ALLOWED_MIME_TYPES:
        raise ImageValidationError(
            "Invalid file type. Only JPEG, PNG, and HEIC images are allowed",
            details={"mime_type": declared},
        )

    sniffed = sniff_mime_type(image_bytes)
    if sniffed is None:
        if declared is None:
            raise ImageValidationError("Unable to determine image format")
        # HEIF variants are not always recognized from magic bytes; trust the declared type
        return declared

    if sniffed not in ALLOWED_MIME_TYPES:
        logger.warning(f"Invalid image format: {sniffed}")
        raise ImageValidationError(
            "Invalid file type. Only JPEG, PNG, and HEIC images are allowed",
            details={"mime_type": sniffed},
        )

    # HEIC and HEIF share a container; only JPEG/PNG mismatches are rejected
    if declared and declared in COMPRESSIBLE_MIME_TYPES and declared != sniffed:
        raise ImageValidationError(
            "Image content does not match its declared type",
            details={"declared": declared, "detected": sniffed},
        )
    return sniffed


def compress_image(image_bytes: bytes, max_width: int = 1024) -> bytes:
    """Re-encode an image as JPEG (quality 85), resizing wide images.

    Images below COMPRESS_IMG_THRESHOLD_KB are returned unchanged. Any
    Pillow failure also returns the original bytes.
    """
    size_kb = len(image_bytes) / 1024
    if size_kb < config.COMPRESS_IMG_THRESHOLD_KB:
        logger.debug(
            f"Image size {size_kb:.1f}KB below compression threshold "
            f"({config.COMPRESS_IMG_THRESHOLD_KB}KB), skipping compression"
        )
        return image_bytes

    def _compress():
        img = Image.open(BytesIO(image_bytes))

        if img.mode in ("RGBA", "LA", "P"):
            if img.mode == "P":
                img = img.convert("RGBA")
            rgb_img = Image.new("RGB", img.size, (255, 255, 255))
            rgb_img.paste(img, mask=img.split()[-1])
            img = rgb_img
        elif img.mode != "RGB":
            img = img.convert("RGB")

        if img.width > max_width:
            ratio = max_width / img.width
            img = img.resize((max_width, int(img.height * ratio)), Image.Resampling.LANCZOS)

        output = BytesIO()
        img.save(output, format="JPEG", quality=85, optimize=True, progressive=True)
        compressed = output.getvalue()
        logger.debug(f"Image compressed: {size_kb:.1f}KB -> {len(compressed) / 1024:.1f}KB")
        return compressed

    return safe_execute_sync(_compress, "Image compression", log_level="warning", default_return=image_bytes)


def prepare_image(image_source: Union[bytes, str], mime_type: Optional[str] = None) -> ImageAttachment:
    """Validate an upload and build the attachment sent to the model.

    Args:
        image_source: Raw bytes, data URL or plain base64 string.
        mime_type: Declared MIME type of the upload. A data URL's own type is
            used when this is omitted.

    Returns:
        ImageAttachment: Possibly compressed bytes with their final MIME type.

    Raises:
        ImageValidationError: On empty, oversized, undecodable or disallowed images.
    """
    if mime_type is None and isinstance(image_source, str) and image_source.startswith("data:"):
        mime_type = image_source[5:].split(";", 1)[0].split(",", 1)[0] or None

    image_bytes = decode_image_source(image_source)
    if not image_bytes:
        raise ImageValidationError("No image provided")

    validate_image_size(image_bytes)
    final_mime = validate_image_format(image_bytes, mime_type)

    if config.COMPRESS_IMG and final_mime in COMPRESSIBLE_MIME_TYPES:
        compressed = compress_image(image_bytes)
        if compressed is not image_bytes:
            return ImageAttachment(data=compressed, mime_type="image/jpeg")

    return ImageAttachment(data=image_bytes, mime_type=final_mime)
