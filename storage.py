"""Filesystem storage for original and thumbnail blobs."""
import os
import tempfile
from pathlib import Path

from errors import AlreadyExists, IoError, NotFound


class ImageStore:
    """Loose files named `{id}.jpg` and `{id}_thumb.jpg` under one directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoError(f"Cannot create image directory {self.root}: {e}") from e

    def _original(self, image_id: int) -> Path:
        return self.root / f"{image_id}.jpg"

    def _thumbnail(self, image_id: int) -> Path:
        return self.root / f"{image_id}_thumb.jpg"

    def write_original(self, image_id: int, data: bytes) -> None:
        path = self._original(image_id)
        try:
            with path.open("xb") as f:
                f.write(data)
        except FileExistsError as e:
            raise AlreadyExists(f"Original for id {image_id} already stored") from e
        except OSError as e:
            raise IoError(f"Failed to write {path.name}: {e}") from e

    def original_path(self, image_id: int) -> Path:
        path = self._original(image_id)
        if not path.is_file():
            raise NotFound(f"No image with id {image_id}")
        return path

    def read_original(self, image_id: int) -> bytes:
        return self._read(self.original_path(image_id))

    def write_thumbnail(self, image_id: int, data: bytes) -> None:
        path = self._thumbnail(image_id)
        # temp file + rename so readers never see a partial thumbnail
        try:
            fd, tmp = tempfile.mkstemp(dir=self.root, suffix=".tmp")
        except OSError as e:
            raise IoError(f"Failed to write {path.name}: {e}") from e
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except OSError as e:
            Path(tmp).unlink(missing_ok=True)
            raise IoError(f"Failed to write {path.name}: {e}") from e

    def thumbnail_path(self, image_id: int) -> Path:
        path = self._thumbnail(image_id)
        if not path.is_file():
            raise NotFound(f"No thumbnail for id {image_id}")
        return path

    def read_thumbnail(self, image_id: int) -> bytes:
        return self._read(self.thumbnail_path(image_id))

    def thumbnail_exists(self, image_id: int) -> bool:
        return self._thumbnail(image_id).is_file()

    @staticmethod
    def _read(path: Path) -> bytes:
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFound(f"{path.name} is missing") from e
        except OSError as e:
            raise IoError(f"Failed to read {path.name}: {e}") from e
