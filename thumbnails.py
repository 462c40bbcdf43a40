"""Thumbnail generation and the background queue that runs it."""
import io
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from contextlib import contextmanager
from pathlib import PurePath
from typing import Dict, Optional, Tuple

from PIL import Image as PILImage, ImageFile, ImageOps, UnidentifiedImageError

from errors import DecodeError
from storage import ImageStore

logger = logging.getLogger(__name__)

THUMB_SIZE = (100, 100)
DEFAULT_NAME = "original.jpg"

# LOAD_TRUNCATED_IMAGES is a Pillow module global shared by every thread.
_truncated_lock = threading.Lock()


@contextmanager
def _tolerate_truncation():
    with _truncated_lock:
        previous = ImageFile.LOAD_TRUNCATED_IMAGES
        ImageFile.LOAD_TRUNCATED_IMAGES = True
        try:
            yield
        finally:
            ImageFile.LOAD_TRUNCATED_IMAGES = previous


def guess_format(filename: str) -> Optional[str]:
    """Pillow format name registered for the file's extension, e.g. 'JPEG' for .jpg."""
    return PILImage.registered_extensions().get(PurePath(filename).suffix.lower())


def _open_and_load(data: bytes, formats=None) -> PILImage.Image:
    im = PILImage.open(io.BytesIO(data), formats=formats)
    im.load()
    return im


def _decode(data: bytes, filename: str = DEFAULT_NAME) -> PILImage.Image:
    """Decode by sniffing the content; if that fails, retry as the format the name suggests.

    The retry accepts truncated data, so a damaged upload still yields the
    part of the picture that survived.
    """
    try:
        return _open_and_load(data)
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        first_error = e

    guess = guess_format(filename)
    if guess is None:
        raise DecodeError(f"Not a recognizable image: {first_error}") from first_error
    logger.warning("Could not decode %s (%s); retrying as partial %s", filename, first_error, guess)
    try:
        with _tolerate_truncation():
            return _open_and_load(data, formats=[guess])
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise DecodeError(f"Not a recognizable image: {e}") from e


def make_thumbnail(
    data: bytes, size: Tuple[int, int] = THUMB_SIZE, filename: str = DEFAULT_NAME
) -> bytes:
    """Resize image bytes to fit within `size`, keeping aspect ratio. Returns JPEG bytes."""
    im = _decode(data, filename)
    im = ImageOps.exif_transpose(im)
    im.thumbnail(size)
    rgb = im.convert("RGB")
    out = io.BytesIO()
    rgb.save(out, format="JPEG", quality=88)
    return out.getvalue()


class ThumbnailGenerator:
    """Reads an original from the store and writes its thumbnail back."""

    def __init__(self, images: ImageStore, size: Tuple[int, int] = THUMB_SIZE):
        self.images = images
        self.size = size

    def generate(self, image_id: int) -> None:
        name = self.images.original_path(image_id).name
        data = self.images.read_original(image_id)
        self.images.write_thumbnail(image_id, make_thumbnail(data, self.size, name))
        logger.debug("Generated thumbnail for id %s", image_id)


class ThumbnailQueue:
    """Runs thumbnail generation on worker threads, off the event loop.

    Submitting does not wait for the result. Failures are logged and kept so
    `status` can report them.
    """

    def __init__(self, generator: ThumbnailGenerator, max_workers: Optional[int] = None):
        self.generator = generator
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="thumbnail"
        )
        self._lock = threading.Lock()
        self._jobs: Dict[int, Future] = {}
        self._failed: Dict[int, str] = {}

    def submit(self, image_id: int) -> Future:
        with self._lock:
            self._failed.pop(image_id, None)
            future = self._executor.submit(self._run, image_id)
            self._jobs[image_id] = future
        return future

    def _run(self, image_id: int) -> None:
        try:
            self.generator.generate(image_id)
        except Exception as e:
            logger.exception("Thumbnail generation failed for id %s", image_id)
            with self._lock:
                self._failed[image_id] = str(e)
            raise
        finally:
            with self._lock:
                self._jobs.pop(image_id, None)

    def status(self, image_id: int) -> str:
        with self._lock:
            if image_id in self._jobs:
                return "pending"
            failed = image_id in self._failed
        if self.generator.images.thumbnail_exists(image_id):
            return "ready"
        return "failed" if failed else "missing"

    def wait(self, image_id: int, timeout: Optional[float] = None) -> None:
        """Block until the in-flight job for `image_id`, if any, has finished."""
        with self._lock:
            future = self._jobs.get(image_id)
        if future is not None:
            wait_futures([future], timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
