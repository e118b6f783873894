# services/file_portal/core/file_store.py
"""
Byte storage on the host filesystem.

All methods block on disk I/O. Async callers hand them to a worker thread
(``run_in_threadpool``) rather than calling them on the event loop.
"""

import logging
import os
import shutil
from pathlib import Path
from posixpath import join
from typing import BinaryIO, List, Union

from shared.config import settings
from shared.exceptions import NotFoundError, StorageIOError, ValidationError
from services.file_portal.core.path_policy import (
    CLASS_DIR_PREFIX,
    UPLOADS_DIR,
    class_directory,
    subject_directory,
    unique_file_name,
)

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 1024 * 1024


class FileStore:
    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def _resolve(self, relative_path: str) -> Path:
        """Map a stored relative path to an absolute one inside the root."""
        candidate = (self.root / relative_path.replace("\\", "/").lstrip("/")).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            raise ValidationError("Stored path escapes the storage root", details={"path": relative_path})
        return candidate

    # --- Files ---

    def save(
        self,
        content: Union[bytes, BinaryIO],
        file_name: str,
        class_code: str,
        subject: str,
        uploader_id: int,
    ) -> str:
        """
        Write an upload under its class/subject directory and return the
        stored path relative to the root. The random token in the name makes
        a second upload of the same file land next to the first.
        """
        relative_dir = subject_directory(class_code, subject)
        target_dir = self._resolve(relative_dir)
        relative_path = join(relative_dir, unique_file_name(file_name))
        target = self._resolve(relative_path)

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as out:
                if isinstance(content, (bytes, bytearray)):
                    out.write(content)
                else:
                    shutil.copyfileobj(content, out, _COPY_CHUNK_SIZE)
        except OSError as e:
            raise StorageIOError(f"Could not save file: {e}", path=relative_path) from e

        logger.info(f"File saved: {relative_path} by user {uploader_id}")
        return relative_path

    def locate(self, relative_path: str) -> Path:
        """Absolute path of stored bytes; NotFound when the record has drifted from disk."""
        path = self._resolve(relative_path)
        if not path.is_file():
            raise NotFoundError("File", relative_path, message="File not found on disk")
        return path

    def open(self, relative_path: str) -> BinaryIO:
        path = self.locate(relative_path)
        try:
            return open(path, "rb")
        except OSError as e:
            raise StorageIOError(f"Could not read file: {e}", path=relative_path) from e

    def read(self, relative_path: str) -> bytes:
        with self.open(relative_path) as stream:
            return stream.read()

    def delete(self, relative_path: str) -> bool:
        """Remove stored bytes. A file that is already gone is not an error."""
        path = self._resolve(relative_path)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info(f"File already absent on delete: {relative_path}")
            return False
        except OSError as e:
            raise StorageIOError(f"Could not delete file: {e}", path=relative_path) from e

        logger.info(f"File deleted: {relative_path}")
        return True

    # --- Class directories ---

    def ensure_class_directory(self, class_code: str) -> Path:
        path = self._resolve(class_directory(class_code))
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Could not create class directory: {e}", path=str(path)) from e
        return path

    def class_directory_exists(self, class_code: str) -> bool:
        return self._resolve(class_directory(class_code)).is_dir()

    def move_class_directory(self, old_code: str, new_code: str) -> bool:
        """
        Rename ``Class <old>`` to ``Class <new>``.

        Returns False when there is nothing to move. Raises StorageIOError if
        the destination already exists or the rename itself fails, leaving
        the source untouched.
        """
        source = self._resolve(class_directory(old_code))
        destination = self._resolve(class_directory(new_code))

        if not source.is_dir():
            return False
        if destination.exists():
            # Case-only renames map to the same directory on case-insensitive filesystems.
            if not (destination.is_dir() and os.path.samefile(source, destination)):
                raise StorageIOError("Destination class directory already exists", path=str(destination))

        try:
            source.rename(destination)
        except OSError as e:
            raise StorageIOError(f"Could not move class directory: {e}", path=str(source)) from e

        logger.info(f"Moved class directory from {source} to {destination}")
        return True

    def remove_class_directory_if_empty(self, class_code: str) -> bool:
        """Delete the class directory only when it holds nothing."""
        path = self._resolve(class_directory(class_code))
        if not path.is_dir():
            return False
        if any(path.iterdir()):
            logger.warning(f"Class directory not empty, left in place: {path}")
            return False
        try:
            path.rmdir()
        except OSError as e:
            logger.warning(f"Could not delete directory for class {class_code}: {e}")
            return False

        logger.info(f"Deleted empty directory for class: {class_code}")
        return True

    def list_class_directories(self) -> List[str]:
        uploads = self._resolve(UPLOADS_DIR)
        if not uploads.is_dir():
            return []
        return sorted(
            entry.name for entry in uploads.iterdir()
            if entry.is_dir() and entry.name.startswith(CLASS_DIR_PREFIX)
        )

    def list_subject_directories(self, class_code: str) -> List[str]:
        path = self._resolve(class_directory(class_code))
        if not path.is_dir():
            return []
        return sorted(entry.name for entry in path.iterdir() if entry.is_dir())


def get_file_store() -> FileStore:
    return FileStore(settings.STORAGE_ROOT)
