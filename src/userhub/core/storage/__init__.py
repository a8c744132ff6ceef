"""File storage abstractions for uploaded avatars."""

from .file_storage import (
    DisallowedExtensionError,
    EmptyFileError,
    FileStorage,
    FileStorageError,
    FileTooLargeError,
    InMemoryFileStorage,
    LocalFileStorage,
)

__all__ = [
    "DisallowedExtensionError",
    "EmptyFileError",
    "FileStorage",
    "FileStorageError",
    "FileTooLargeError",
    "InMemoryFileStorage",
    "LocalFileStorage",
]
