"""
API Routers for Camera Studio
"""

from . import camera, images, system

__all__ = ["camera", "images", "system"]
