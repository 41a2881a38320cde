"""Local image blob storage.

Layout: ``<upload_dir>/<uuid4><ext>``. A blob is referenced by its public URL
path (``/uploads/<name>``); every reference is resolved against the storage
root and rejected when it points anywhere else.
"""
import logging
import os
import uuid
from pathlib import Path

from errors import InvalidPath, StorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


class ImageStore:
    """Stores raw image bytes and deletes them by reference."""

    def __init__(self, root: str | os.PathLike | None = None, url_prefix: str = "/uploads/"):
        self._root = Path(root) if root is not None else None
        self.url_prefix = url_prefix

    def init_app(self, app) -> None:
        self._root = Path(app.config["UPLOAD_FOLDER"])
        self.url_prefix = app.config.get("UPLOAD_URL_PREFIX", self.url_prefix)
        self._root.mkdir(parents=True, exist_ok=True)
        app.extensions["image_store"] = self

    @property
    def root(self) -> Path:
        if self._root is None:
            raise StorageError("Image store is not initialised")
        return self._root

    def save(self, content: bytes, filename: str) -> str:
        """Write ``content`` under a generated name and return its reference."""
        suffix = Path(filename or "").suffix.lower()
        if suffix not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(
                {"images": f"{filename!r} is not an allowed image type"},
                "Only image files are allowed",
            )
        name = f"{uuid.uuid4()}{suffix}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / name).write_bytes(content)
        except OSError as exc:
            raise StorageError(f"Cannot store image {filename!r}: {exc}") from exc
        logger.info("Stored image %s (%d bytes)", name, len(content))
        return f"{self.url_prefix}{name}"

    def resolve(self, reference: str) -> Path:
        """Absolute path of a reference; raises InvalidPath outside the root."""
        if not isinstance(reference, str) or not reference.strip():
            raise InvalidPath(str(reference))
        relative = reference.strip()
        if relative.startswith(self.url_prefix):
            relative = relative[len(self.url_prefix):]
        if not relative or "\x00" in relative or Path(relative).is_absolute():
            raise InvalidPath(reference)

        root = self.root.resolve()
        candidate = (root / relative).resolve()
        if candidate == root or not candidate.is_relative_to(root):
            raise InvalidPath(reference)
        return candidate

    def exists(self, reference: str) -> bool:
        return self.resolve(reference).is_file()

    def delete(self, reference: str) -> bool:
        """Delete the blob; False when it was already gone."""
        path = self.resolve(reference)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted image %s", reference)
        return True
