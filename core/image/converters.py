"""
Image payload conversion utilities.

Handles conversions between the payload forms used by captures and uploads:
- NumPy arrays (OpenCV BGR format)
- PIL Images (RGB format)
- Encoded bytes and base64 data URIs
"""

import base64
import binascii
import io
import logging
import re
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]+)*),(?P<data>.*)$", re.S
)


class ImageConverters:
    """Utilities for converting between image formats."""

    @staticmethod
    def pil_to_numpy(image: Image.Image, bgr: bool = True) -> np.ndarray:
        """
        Convert PIL Image to NumPy array.

        Args:
            image: PIL Image
            bgr: If True, convert to BGR format (OpenCV), else keep RGB

        Returns:
            NumPy array
        """
        array = np.array(image.convert("RGB"))

        if bgr:
            array = cv2.cvtColor(array, cv2.COLOR_RGB2BGR)

        return array

    @staticmethod
    def to_data_uri(data: bytes, mime_type: str) -> str:
        """Encode raw image bytes as a base64 data URI"""
        return f"data:{mime_type};base64,{base64.b64encode(data).decode('utf-8')}"

    @staticmethod
    def from_data_uri(uri: str) -> Tuple[bytes, Optional[str]]:
        """
        Decode a base64 data URI.

        Returns:
            Tuple of (raw bytes, MIME type or None)

        Raises:
            ValueError: If the string is not a base64 data URI
        """
        match = DATA_URI_PATTERN.match(uri)
        if not match or ";base64" not in (match.group("params") or ""):
            raise ValueError("Not a base64 data URI")
        try:
            data = base64.b64decode(match.group("data"), validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 payload: {e}") from e
        return data, match.group("mime")

    @staticmethod
    def read_dimensions(data: bytes) -> Optional[Tuple[int, int]]:
        """
        Read pixel dimensions from encoded image bytes.

        Only the image header is parsed. Returns None for undecodable data.
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                return image.size
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.debug(f"Could not read image dimensions: {e}")
            return None

    @staticmethod
    def detect_mime_type(data: bytes) -> Optional[str]:
        """MIME type of encoded image bytes, from the decoded format"""
        try:
            with Image.open(io.BytesIO(data)) as image:
                return Image.MIME.get(image.format)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
            return None

    @staticmethod
    def decode(data: bytes) -> np.ndarray:
        """
        Fully decode encoded image bytes to a NumPy array (BGR).

        Raises:
            ValueError: If the bytes are not a decodable image
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                return ImageConverters.pil_to_numpy(image, bgr=True)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise ValueError(f"Failed to decode image: {e}") from e

    @staticmethod
    def encode_jpeg(image: np.ndarray, quality: int = 85) -> bytes:
        """
        Encode OpenCV image (NumPy array) to JPEG bytes.

        Args:
            image: OpenCV image (NumPy array)
            quality: JPEG quality (1-100)

        Returns:
            Encoded JPEG bytes
        """
        ok, buffer = cv2.imencode(".jpg", image, [int(cv2.IMWRITE_JPEG_QUALITY), quality])
        if not ok:
            raise ValueError("JPEG encoding failed")
        return buffer.tobytes()
