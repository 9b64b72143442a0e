"""
Image payload utilities.

- converters: Format conversions (NumPy, PIL, encoded bytes, data URIs)
- processors: Image operations (thumbnail, resize)
"""

from core.image.converters import ImageConverters
from core.image.processors import create_thumbnail, resize_image

__all__ = ["ImageConverters", "create_thumbnail", "resize_image"]
