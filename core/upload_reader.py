"""
Upload Reader - decodes user-selected files into image payloads
"""

import logging
from typing import Optional

from core.constants import UploadConstants
from core.exceptions import UploadDecodeError
from core.frame_capturer import EncodedImage
from core.image.converters import ImageConverters

logger = logging.getLogger(__name__)


def read_upload(
    data: bytes,
    declared_type: Optional[str] = None,
    max_size_mb: float = UploadConstants.DEFAULT_MAX_SIZE_MB,
    max_pixels: int = UploadConstants.MAX_PIXELS,
) -> EncodedImage:
    """
    Decode an uploaded file into the payload form used by captures.

    The file bytes are kept as-is. The header dimensions are checked against
    the pixel limit before the file is fully decoded once to validate it.

    Args:
        data: Raw file contents
        declared_type: MIME type declared by the client
        max_size_mb: Upload size limit
        max_pixels: Largest accepted width x height

    Returns:
        EncodedImage with the original bytes

    Raises:
        UploadDecodeError: If the file is empty, too large, not an image or
            exceeds the pixel limit
    """
    if not data:
        raise UploadDecodeError("Uploaded file is empty")

    if len(data) > max_size_mb * 1024 * 1024:
        raise UploadDecodeError(f"Uploaded file exceeds {max_size_mb} MB")

    if declared_type and not declared_type.startswith(UploadConstants.ALLOWED_MIME_PREFIX):
        raise UploadDecodeError(f"Unsupported file type: {declared_type}")

    dimensions = ImageConverters.read_dimensions(data)
    if dimensions is not None and dimensions[0] * dimensions[1] > max_pixels:
        width, height = dimensions
        logger.warning(f"Rejected upload: {width}x{height} exceeds {max_pixels} pixels")
        raise UploadDecodeError(f"Image dimensions exceed {max_pixels} pixels")

    try:
        image = ImageConverters.decode(data)
    except ValueError as e:
        logger.warning(f"Rejected upload: {e}")
        raise UploadDecodeError("Invalid image file") from e

    height, width = image.shape[:2]
    mime_type = ImageConverters.detect_mime_type(data) or declared_type

    logger.info(f"Decoded upload {width}x{height} ({mime_type}, {len(data)} bytes)")
    return EncodedImage(
        data=data,
        mime_type=mime_type or "application/octet-stream",
        width=width,
        height=height,
    )
