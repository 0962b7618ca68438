"""
Image Service
Stores uploaded product images and removes files that records no longer use.

File removal is always scheduled after the database write it depends on has
committed, and never fails the request that triggered it.
"""

import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Optional, Protocol
from uuid import uuid4

from ..errors import ImageRequiredError, InvalidRequestError

logger = logging.getLogger(__name__)

# Runs a callable after the response is sent (BackgroundTasks.add_task)
Scheduler = Callable[..., None]

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

_CHUNK_SIZE = 64 * 1024


class Upload(Protocol):
    """The parts of an uploaded file this service reads."""

    filename: Optional[str]
    content_type: Optional[str]
    file: BinaryIO


class ImageStorage:
    """
    Local-disk storage for product images.

    Only files inside ``root`` are ever deleted.
    """

    def __init__(
        self,
        root: str,
        allowed_types: Iterable[str] = ("image/jpeg", "image/png", "image/webp"),
        max_bytes: int = 5 * 1024 * 1024,
    ):
        self.root = Path(root)
        self.allowed_types = set(allowed_types)
        self.max_bytes = max_bytes

    def save(self, upload: Upload) -> str:
        """
        Write an upload to disk under a fresh name.

        Returns:
            The stored path, used as the product's image reference

        Raises:
            InvalidRequestError: unsupported type or file too large
        """
        content_type = (upload.content_type or "").lower()
        if content_type not in self.allowed_types:
            raise InvalidRequestError(
                "Unsupported image type",
                details={"content_type": content_type, "allowed": sorted(self.allowed_types)},
            )

        self.root.mkdir(parents=True, exist_ok=True)
        suffix = _EXTENSIONS.get(content_type, Path(upload.filename or "").suffix.lower())
        target = self.root / f"image-{uuid4().hex}{suffix}"

        written = 0
        with target.open("wb") as out:
            while True:
                chunk = upload.file.read(_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.max_bytes:
                    break
                out.write(chunk)

        if written > self.max_bytes:
            target.unlink(missing_ok=True)
            raise InvalidRequestError(
                "Image too large",
                details={"max_bytes": self.max_bytes},
            )

        if written == 0:
            target.unlink(missing_ok=True)
            raise ImageRequiredError("Uploaded image is empty")

        logger.info(f"Stored image {target} ({written} bytes)")
        return target.as_posix()

    def owns(self, path: str) -> bool:
        """True if ``path`` points inside the storage root."""
        try:
            return Path(path).resolve().is_relative_to(self.root.resolve())
        except (OSError, ValueError):
            return False

    def delete(self, path: str) -> bool:
        """
        Remove a stored image.

        Failures are logged and reported through the return value only; a
        leftover file is an accepted inconsistency.
        """
        if not path:
            return False

        if not self.owns(path):
            logger.warning(f"Skipping delete of image outside upload dir: {path}")
            return False

        try:
            Path(path).unlink()
        except FileNotFoundError:
            logger.warning(f"Image already missing, nothing to delete: {path}")
            return False
        except OSError as e:
            logger.warning(f"Failed to delete image {path}, leaving orphaned file: {e}")
            return False

        logger.info(f"Deleted image {path}")
        return True

    def copy_from(self, source: Path) -> str:
        """Import an existing file into storage (used by seeding)."""
        self.root.mkdir(parents=True, exist_ok=True)
        target = self.root / f"image-{uuid4().hex}{source.suffix.lower()}"
        shutil.copyfile(source, target)
        return target.as_posix()


class ImageLifecycle:
    """Ties a product's image reference to its file on disk."""

    def __init__(self, storage: ImageStorage):
        self.storage = storage

    def accept_upload(self, upload: Optional[Upload]) -> str:
        """Store the image for a new record; an image is mandatory."""
        if upload is None or not upload.filename:
            raise ImageRequiredError()
        return self.storage.save(upload)

    def after_update(self, previous: Optional[str], current: Optional[str], schedule: Scheduler) -> bool:
        """
        Call only once the update has committed.

        Schedules removal of the previous file when the reference changed.
        Two spellings of the same file (``a/../a/x.png``) count as unchanged.
        """
        if not previous or self._same_file(previous, current):
            return False
        schedule(self.storage.delete, previous)
        return True

    @staticmethod
    def _same_file(a: str, b: Optional[str]) -> bool:
        if not b:
            return False
        if a == b:
            return True
        try:
            return Path(a).resolve() == Path(b).resolve()
        except (OSError, ValueError):
            return False

    def after_delete(self, image: Optional[str], schedule: Scheduler) -> None:
        """Call only once the record deletion has committed."""
        if image:
            schedule(self.storage.delete, image)
