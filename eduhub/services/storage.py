"""File storage adapters.

Upload handlers only depend on :class:`StorageAdapter`; which backend is used
is decided by :func:`get_storage`, so tests and deployments can swap it with a
FastAPI dependency override.
"""

import logging
import os
import re
import uuid
from contextlib import contextmanager
from pathlib import Path

from fastapi import UploadFile

from eduhub.core import config
from eduhub.core.errors import BadRequest, Internal

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def file_extension(filename: str) -> str:
    _, _, extension = filename.rpartition(".")
    return extension.lower() if extension != filename else ""


def safe_filename(filename: str) -> str:
    base = os.path.basename(filename).strip().replace(" ", "_")
    return _UNSAFE_CHARS.sub("", base) or "upload"


class StorageError(Exception):
    pass


class StorageAdapter:
    def upload(self, data: bytes, filename: str) -> str:
        """Persist ``data`` and return a durable URL for it."""
        raise NotImplementedError

    def delete(self, url: str) -> None:
        raise NotImplementedError


class LocalDiskStorage(StorageAdapter):
    def __init__(self, root: str, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, data: bytes, filename: str) -> str:
        if not data:
            raise StorageError("Refusing to store an empty file.")

        stored_name = f"{uuid.uuid4().hex[:12]}_{safe_filename(filename)}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / stored_name).write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Could not write {stored_name}") from exc

        logger.info("Stored upload %s (%d bytes)", stored_name, len(data))
        return f"{self.base_url}/{stored_name}"

    def delete(self, url: str) -> None:
        stored_name = safe_filename(url.rsplit("/", 1)[-1])
        try:
            (self.root / stored_name).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not remove {stored_name}") from exc


_default_storage = LocalDiskStorage(config.UPLOAD_DIR, config.UPLOAD_BASE_URL)


def get_storage() -> StorageAdapter:
    return _default_storage


def store_upload(storage: StorageAdapter, upload: UploadFile | None, what: str) -> tuple[str, str]:
    """Push an uploaded file to storage and return ``(url, extension)``."""
    if upload is None or not upload.filename:
        raise BadRequest("No file uploaded!")

    data = upload.file.read()
    if not data:
        raise BadRequest("Uploaded file is empty.")

    try:
        url = storage.upload(data, upload.filename)
    except StorageError as exc:
        logger.exception("Storage failure while adding %s", what)
        raise Internal(f"Error adding {what}.") from exc
    return url, file_extension(upload.filename)


@contextmanager
def discard_on_failure(storage: StorageAdapter, url: str):
    """Delete the stored object at ``url`` if the enclosed block raises."""
    try:
        yield
    except Exception:
        try:
            storage.delete(url)
        except StorageError:
            logger.exception("Orphaned upload left at %s", url)
        else:
            logger.warning("Removed upload %s after a failed save", url)
        raise
