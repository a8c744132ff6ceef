"""File storage interface and implementations.

Provides a unified interface for persisting uploaded files and handing back
an opaque reference, with a local-disk backend and an in-memory one.
"""

from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

from loguru import logger

from src.userhub.runtime.config.config_data import UploadConfig


class FileStorageError(Exception):
    """Base class for storage failures surfaced to callers unchanged."""


class EmptyFileError(FileStorageError):
    pass


class DisallowedExtensionError(FileStorageError):
    def __init__(self, extension: str) -> None:
        super().__init__(f"File extension {extension or '(none)'} is not allowed.")
        self.extension = extension


class FileTooLargeError(FileStorageError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"File size exceeds limit ({limit} bytes).")
        self.size = size
        self.limit = limit


class FileStorage(ABC):
    """Abstract interface for file storage backends."""

    def __init__(self, allowed_extensions: list[str], max_bytes: int) -> None:
        self._allowed_extensions = {ext.lower() for ext in allowed_extensions}
        self._max_bytes = max_bytes

    def _validate(self, content: bytes, filename: str) -> str:
        """Check an upload and return its normalized extension."""
        if not content:
            raise EmptyFileError("File is empty")

        extension = PurePosixPath(filename).suffix.lower()
        if extension not in self._allowed_extensions:
            raise DisallowedExtensionError(extension)

        if len(content) > self._max_bytes:
            raise FileTooLargeError(len(content), self._max_bytes)

        return extension

    @staticmethod
    def _object_name(folder: str, extension: str) -> str:
        file_name = f"{uuid.uuid4().hex}{extension}"
        folder = folder.strip("/")
        return f"{folder}/{file_name}" if folder else file_name

    @abstractmethod
    def save(self, content: bytes, filename: str, folder: str) -> str:
        """Persist a file.

        Args:
            content: Raw file bytes
            filename: Client-supplied name, used only for its extension
            folder: Logical folder to store under

        Returns:
            Reference to the stored file

        Raises:
            FileStorageError: If the file is empty, too large or of a
                disallowed type, or the backend fails
        """

    @abstractmethod
    def delete(self, reference: str) -> bool:
        """Delete a stored file.

        Returns:
            True if a file was removed, False if nothing matched
        """

    @abstractmethod
    def exists(self, reference: str) -> bool:
        pass


class LocalFileStorage(FileStorage):
    """Stores files on the local filesystem beneath a root directory.

    References are POSIX paths relative to the root, e.g.
    ``uploads/avatars/3f2a....png``.
    """

    def __init__(
        self, root_dir: str | Path, allowed_extensions: list[str], max_bytes: int
    ) -> None:
        super().__init__(allowed_extensions, max_bytes)
        self._root = Path(root_dir).resolve()

    @classmethod
    def from_config(cls, config: UploadConfig) -> LocalFileStorage:
        return cls(config.root_dir, config.allowed_extensions, config.max_avatar_bytes)

    def _resolve(self, reference: str) -> Path:
        path = (self._root / reference.lstrip("/")).resolve()
        if not path.is_relative_to(self._root):
            raise FileStorageError(f"Reference escapes storage root: {reference}")
        return path

    def save(self, content: bytes, filename: str, folder: str) -> str:
        extension = self._validate(content, filename)
        reference = self._object_name(folder, extension)
        path = self._resolve(reference)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise FileStorageError(f"Failed to store file: {e}") from e

        logger.info("Stored file {} (size: {})", reference, len(content))
        return reference

    def delete(self, reference: str) -> bool:
        if not reference or not reference.strip():
            return False

        path = self._resolve(reference)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("File not found {}", reference)
            return False

        logger.info("Deleted file {}", reference)
        return True

    def exists(self, reference: str) -> bool:
        return self._resolve(reference).is_file()


class InMemoryFileStorage(FileStorage):
    """In-memory file storage, used for development and tests."""

    def __init__(self, allowed_extensions: list[str], max_bytes: int) -> None:
        super().__init__(allowed_extensions, max_bytes)
        self._files: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def save(self, content: bytes, filename: str, folder: str) -> str:
        extension = self._validate(content, filename)
        reference = self._object_name(folder, extension)
        with self._lock:
            self._files[reference] = content
        return reference

    def delete(self, reference: str) -> bool:
        with self._lock:
            return self._files.pop(reference, None) is not None

    def exists(self, reference: str) -> bool:
        with self._lock:
            return reference in self._files

    def read(self, reference: str) -> bytes | None:
        with self._lock:
            return self._files.get(reference)
