"""
Image processing operations.

Handles image manipulation tasks:
- Thumbnail creation
- Resizing
"""

import base64
import logging
from typing import Optional

import cv2
import numpy as np

from core.image.converters import ImageConverters

logger = logging.getLogger(__name__)

THUMBNAIL_WIDTH = 320
THUMBNAIL_QUALITY = 70


def create_thumbnail(
    data: bytes, width: int = THUMBNAIL_WIDTH, quality: int = THUMBNAIL_QUALITY
) -> str:
    """
    Create a JPEG thumbnail from encoded image bytes.

    Args:
        data: Encoded image (any format PIL can read)
        width: Maximum thumbnail dimension in pixels
        quality: JPEG quality (1-100)

    Returns:
        Thumbnail as base64 string
    """
    try:
        image = ImageConverters.decode(data)
        thumbnail = resize_image(image, max_dimension=width)
        return base64.b64encode(ImageConverters.encode_jpeg(thumbnail, quality)).decode("utf-8")

    except ValueError as e:
        logger.error(f"Failed to create thumbnail: {e}")
        raise


def resize_image(
    image: np.ndarray,
    width: Optional[int] = None,
    height: Optional[int] = None,
    max_dimension: Optional[int] = None,
) -> np.ndarray:
    """
    Resize image with various options.

    Args:
        image: Input image as NumPy array
        width: Target width (if height not specified, maintains aspect)
        height: Target height (if width not specified, maintains aspect)
        max_dimension: Maximum dimension (width or height)

    Returns:
        Resized image as NumPy array
    """
    h, w = image.shape[:2]

    if max_dimension:
        # Scale to fit within max_dimension
        scale = min(max_dimension / w, max_dimension / h)
        if scale < 1:
            width = max(int(w * scale), 1)
            height = max(int(h * scale), 1)
        else:
            return image

    elif width and not height:
        # Scale by width, maintain aspect
        height = int(h * width / w)

    elif height and not width:
        # Scale by height, maintain aspect
        width = int(w * height / h)

    elif not width and not height:
        return image

    return cv2.resize(image, (width, height), interpolation=cv2.INTER_AREA)
