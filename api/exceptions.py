"""
API exception handling.

Maps camera core errors to HTTP responses and provides the safe_endpoint
decorator used by the routers.
"""

import functools
import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from core.exceptions import (
    CameraError,
    CaptureNotReadyError,
    ConstraintRejectedError,
    DeviceBusyError,
    DeviceNotFoundError,
    ImageNotFoundError,
    InsecureContextError,
    PermissionDeniedError,
    SessionNotReadyError,
    UploadDecodeError,
)
from schemas import ErrorResponse

logger = logging.getLogger(__name__)


# Most specific classes first
STATUS_CODES = [
    (CaptureNotReadyError, 409),
    (ConstraintRejectedError, 409),
    (SessionNotReadyError, 409),
    (PermissionDeniedError, 403),
    (InsecureContextError, 403),
    (DeviceNotFoundError, 404),
    (ImageNotFoundError, 404),
    (DeviceBusyError, 503),
    (UploadDecodeError, 400),
]


def status_code_for(error: CameraError) -> int:
    for error_class, status_code in STATUS_CODES:
        if isinstance(error, error_class):
            return status_code
    return 500


async def camera_error_handler(request: Request, exc: CameraError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.code}): {exc.message}")
    body = ErrorResponse(detail=exc.message, code=exc.code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_exception_handlers(app: FastAPI):
    """Register handlers for camera core errors"""
    app.add_exception_handler(CameraError, camera_error_handler)


def safe_endpoint(func):
    """
    Decorator for endpoints: lets HTTP and camera errors through to their
    handlers and converts anything else into a logged 500 response.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except (HTTPException, CameraError):
            raise
        except Exception as e:
            logger.error(f"Unhandled error in {func.__name__}: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=f"Internal server error: {e}")

    return wrapper
