"""
Blob storage backends for the security core.

A blob store maps a short name (e.g. "sessions") to a JSON text blob. All
persistent state goes through one injected store, so tests can use the
in-memory store and the CLI can use the file store.
"""

import os
import re
import stat
import tempfile
import logging
import platform
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from . import config

logger = logging.getLogger(__name__)

_BLOB_NAME_RE = re.compile(r'^[A-Za-z0-9_-]+$')


class StorageError(Exception):
    """Base error for storage failures."""


class StorageCorruptedError(StorageError):
    """A stored blob could not be parsed."""

    def __init__(self, name: str, reason: str):
        super().__init__(f"Stored blob '{name}' is corrupted: {reason}")
        self.name = name
        self.reason = reason


class BlobStore(ABC):
    """Interface for named blob storage."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Return the blob stored under name, or None when absent."""
        ...

    @abstractmethod
    def set(self, name: str, value: str) -> None:
        """Store value under name, replacing any previous blob."""
        ...

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove the blob stored under name. Missing blobs are ignored."""
        ...


class MemoryBlobStore(BlobStore):
    """Process-local blob store backed by a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._blobs: Dict[str, str] = dict(initial or {})

    def get(self, name: str) -> Optional[str]:
        return self._blobs.get(name)

    def set(self, name: str, value: str) -> None:
        self._blobs[name] = value

    def delete(self, name: str) -> None:
        self._blobs.pop(name, None)


class JsonFileBlobStore(BlobStore):
    """Stores each blob as <directory>/<name>.json, readable by the owner only."""

    def __init__(self, directory: str):
        """
        Initialize the file store.
        Args:
            directory: Directory holding the blob files. Created if missing.
        """
        self.directory = directory
        self._lock = threading.Lock()
        os.makedirs(self.directory, exist_ok=True)

    @classmethod
    def default(cls) -> 'JsonFileBlobStore':
        """Open the store in the default per-user data directory."""
        return cls(os.path.join(os.path.expanduser("~"), config.CONFIG_DIR_NAME))

    def _path(self, name: str) -> str:
        if not _BLOB_NAME_RE.match(name):
            raise ValueError(f"Invalid blob name: {name!r}")
        return os.path.join(self.directory, name + config.BLOB_FILE_SUFFIX)

    def get(self, name: str) -> Optional[str]:
        path = self._path(name)
        if not os.path.exists(path):
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def set(self, name: str, value: str) -> None:
        path = self._path(name)
        with self._lock:
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=name, suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(value)

                if not self._set_file_permissions(tmp_path):
                    logger.warning(f"Failed to set secure file permissions for blob: {path}")

                # Atomic replace; concurrent writers each use their own temp file
                os.replace(tmp_path, path)

            except OSError as e:
                logger.error(f"Error saving blob file {path}: {e}", exc_info=True)
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
                raise

    def delete(self, name: str) -> None:
        path = self._path(name)
        with self._lock:
            if os.path.exists(path):
                os.remove(path)

    def _set_file_permissions(self, filepath: str) -> bool:
        """
        Set file to be readable/writable by owner only."""
        if platform.system() == 'Windows':
            logger.debug(f"Skipping owner-only permissions for {filepath} on Windows.")
            return True
        try:
            os.chmod(filepath, stat.S_IRUSR | stat.S_IWUSR)  # 600
        except OSError as e:
            logger.error(f"Failed to chmod {filepath}: {e}")
            return False
        return True
