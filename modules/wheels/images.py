"""
Image attachments of wheel records.

The wheel owns its ``images`` list; the blobs behind it live in the
``ImageStore``. All list changes and blob deletions run under the wheels slot
lock, so a blob is never deleted while a concurrent update re-attaches it.
"""
import logging
from typing import Iterable, Optional

from blobs import ImageStore
from errors import InvalidPath, NotFound
from store import RecordStore

from .models import WHEELS_SLOT

logger = logging.getLogger(__name__)


class ImageAttachmentManager:
    def __init__(self, store: RecordStore, image_store: ImageStore):
        self.store = store
        self.image_store = image_store

    def store_uploads(self, uploads: Iterable[tuple[str, bytes]]) -> list[str]:
        """Write raw uploads to blob storage; all or nothing."""
        refs: list[str] = []
        try:
            for filename, content in uploads:
                refs.append(self.image_store.save(content, filename))
        except Exception:
            self.discard(refs)
            raise
        return refs

    def discard(self, refs: Iterable[str]) -> None:
        """Best-effort removal of blobs that never made it into a record."""
        for ref in refs:
            try:
                self.image_store.delete(ref)
            except (OSError, InvalidPath) as exc:
                logger.warning("Could not discard orphan image %s: %s", ref, exc)

    def attach_images(self, wheel_id: str, refs: Iterable[str], principal: Optional[str] = None) -> dict:
        """Append references to the wheel's list; existing images are kept."""
        refs = list(refs)
        for ref in refs:
            self.image_store.resolve(ref)

        def append(current: dict) -> dict:
            return {"images": list(current.get("images") or []) + refs}

        try:
            return self.store.update_by_id(WHEELS_SLOT, wheel_id, append, principal)
        except NotFound as exc:
            raise NotFound("Wheel", wheel_id) from exc

    def detach_image(self, wheel_id: str, ref: str, principal: Optional[str] = None) -> dict:
        """Remove one reference from the wheel and delete its blob."""
        self.image_store.resolve(ref)

        with self.store.lock_for(WHEELS_SLOT):
            def remove(current: dict) -> dict:
                images = list(current.get("images") or [])
                if ref not in images:
                    raise NotFound("Image", ref, f"Image {ref!r} is not attached to wheel '{wheel_id}'")
                images.remove(ref)
                return {"images": images}

            try:
                record = self.store.update_by_id(WHEELS_SLOT, wheel_id, remove, principal)
            except NotFound as exc:
                if exc.entity == "Image":
                    raise
                raise NotFound("Wheel", wheel_id) from exc
            try:
                self.image_store.delete(ref)
            except OSError as exc:
                logger.warning("Image %s detached but its file could not be deleted: %s", ref, exc)
        return record

    def delete_wheel_cascade(self, wheel_id: str) -> dict:
        """
        Delete every blob of the wheel, then the record itself.

        A blob that is missing or cannot be deleted is logged and skipped; it
        never blocks the record deletion.
        """
        def delete_blobs(wheel: dict) -> None:
            for ref in wheel.get("images") or []:
                try:
                    if not self.image_store.delete(ref):
                        logger.warning("Image %s of wheel %s was already missing", ref, wheel_id)
                except (OSError, InvalidPath) as exc:
                    logger.warning("Could not delete image %s of wheel %s: %s", ref, wheel_id, exc)

        try:
            return self.store.delete_by_id(WHEELS_SLOT, wheel_id, before_delete=delete_blobs)
        except NotFound as exc:
            raise NotFound("Wheel", wheel_id) from exc
