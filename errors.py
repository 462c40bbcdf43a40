"""Error taxonomy and HTTP status mapping."""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ThumbnailServerError(Exception):
    """Base class for every failure the service knows how to report."""
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class StorageError(ThumbnailServerError):
    """Database unreachable or constraint violated."""


class IoError(ThumbnailServerError):
    """Filesystem read or write failed."""


class NotFound(ThumbnailServerError):
    status_code = 404


class AlreadyExists(ThumbnailServerError):
    """A blob is already stored for this id."""


class DecodeError(ThumbnailServerError):
    """Bytes are not a recognizable image."""


class MalformedRequest(ThumbnailServerError):
    status_code = 400


async def handle_service_error(request: Request, exc: ThumbnailServerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc.message,
        )
    return JSONResponse({"detail": exc.message}, status_code=exc.status_code)


def register_error_handlers(app: FastAPI) -> None:
    """Map every ThumbnailServerError raised by a handler to its status code."""
    app.add_exception_handler(ThumbnailServerError, handle_service_error)
