"""
Capture Gallery - append-only collection of captured and uploaded images
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import RLock
from typing import Any, Dict, List, Optional

from core.enums import SourceType
from core.frame_capturer import EncodedImage
from schemas.metadata import CaptureMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CapturedImage:
    """Single captured or uploaded image"""

    id: str
    payload: EncodedImage
    metadata: CaptureMetadata
    source_type: SourceType
    timestamp: datetime

    def to_dict(self, include_payload: bool = True) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "source_type": self.source_type.value,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata.model_dump(by_alias=True),
        }
        if include_payload:
            data["payload"] = self.payload.to_data_uri()
        return data


class CaptureGallery:
    """
    Append-only image collection for the lifetime of the process.

    Images are never removed or mutated; readers get snapshots.
    """

    def __init__(self):
        self._images: List[CapturedImage] = []
        self._index: Dict[str, CapturedImage] = {}
        self.lock = RLock()

        logger.info("Capture Gallery initialized")

    def add(
        self,
        payload: EncodedImage,
        metadata: CaptureMetadata,
        source_type: SourceType,
        timestamp: Optional[datetime] = None,
    ) -> CapturedImage:
        """
        Append an image to the gallery

        Args:
            payload: Encoded image
            metadata: Synthesized metadata
            source_type: camera or upload
            timestamp: Creation time (defaults to now)

        Returns:
            The stored CapturedImage
        """
        timestamp = timestamp or datetime.now().astimezone()
        if timestamp.tzinfo is None:
            timestamp = timestamp.astimezone()

        with self.lock:
            image = CapturedImage(
                id=f"img_{uuid.uuid4().hex[:8]}",
                payload=payload,
                metadata=metadata,
                source_type=source_type,
                timestamp=timestamp,
            )
            self._images.append(image)
            self._index[image.id] = image

            logger.debug(f"Added {source_type.value} image {image.id} ({payload.size} bytes)")
            return image

    def get(self, image_id: str) -> Optional[CapturedImage]:
        """Get specific image by ID"""
        with self.lock:
            return self._index.get(image_id)

    def __len__(self) -> int:
        with self.lock:
            return len(self._images)

    def get_recent(
        self, limit: int = 10, source_type: Optional[SourceType] = None
    ) -> List[CapturedImage]:
        """
        Get recent images, newest first

        Args:
            limit: Maximum number of images to return
            source_type: Only return images from this source

        Returns:
            List of captured images
        """
        with self.lock:
            images = list(self._images)

        if source_type:
            images = [i for i in images if i.source_type == source_type]

        images.reverse()
        return images[:limit]

    def get_statistics(self) -> Dict[str, Any]:
        """Get gallery statistics"""
        with self.lock:
            images = list(self._images)

        camera = sum(1 for i in images if i.source_type == SourceType.CAMERA)
        recent_cutoff = datetime.now().astimezone() - timedelta(hours=1)

        return {
            "total": len(images),
            "camera": camera,
            "upload": len(images) - camera,
            "total_bytes": sum(i.payload.size for i in images),
            "recent_hour": sum(1 for i in images if i.timestamp > recent_cutoff),
        }

    def export_to_dict(self, include_payload: bool = False) -> Dict[str, Any]:
        """Export gallery to dictionary"""
        with self.lock:
            images = list(self._images)

        return {
            "images": [i.to_dict(include_payload=include_payload) for i in images],
            "statistics": self.get_statistics(),
        }
