"""
Repositories, one per persisted collection.

Every mutation is a read-modify-write of the whole collection. Callers hold
``repository.locked()`` around the read and the write so that writers in the
same process are serialized at this seam.
"""

import json
import threading
from contextlib import contextmanager
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from . import config
from .models import (
    LoginAttemptRecord,
    SecureNote,
    SecurityLogEntry,
    Session,
    SyncQueueItem,
    SyncStatus,
)
from .storage import BlobStore, StorageCorruptedError

T = TypeVar('T')


class JsonRepository:
    """Reads and writes one JSON blob of a BlobStore."""

    def __init__(self, store: BlobStore, name: str):
        self.store = store
        self.name = name
        self._lock = threading.RLock()

    @contextmanager
    def locked(self):
        with self._lock:
            yield

    def _read(self) -> Any:
        raw = self.store.get(self.name)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptedError(self.name, str(e)) from e

    def _write(self, data: Any) -> None:
        self.store.set(self.name, json.dumps(data))

    def clear(self) -> None:
        with self._lock:
            self.store.delete(self.name)


class ListRepository(JsonRepository, Generic[T]):
    """A JSON list of records. An absent blob is an empty list."""

    record_cls: Type[T]

    def load(self) -> List[T]:
        data = self._read()
        if data is None:
            return []
        if not isinstance(data, list):
            raise StorageCorruptedError(self.name, "expected a list")
        try:
            return [self.record_cls.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageCorruptedError(self.name, f"bad record: {e}") from e

    def save(self, records: List[T]) -> None:
        self._write([r.to_dict() for r in records])


class NoteRepository(ListRepository[SecureNote]):
    record_cls = SecureNote

    def __init__(self, store: BlobStore):
        super().__init__(store, config.NOTES_KEY)


class SessionRepository(ListRepository[Session]):
    record_cls = Session

    def __init__(self, store: BlobStore):
        super().__init__(store, config.SESSIONS_KEY)


class SecurityLogRepository(ListRepository[SecurityLogEntry]):
    record_cls = SecurityLogEntry

    def __init__(self, store: BlobStore):
        super().__init__(store, config.SECURITY_LOGS_KEY)


class SyncQueueRepository(ListRepository[SyncQueueItem]):
    record_cls = SyncQueueItem

    def __init__(self, store: BlobStore):
        super().__init__(store, config.SYNC_QUEUE_KEY)


class LoginAttemptRepository(JsonRepository):
    """Login attempt records keyed by user id. An absent blob is an empty mapping."""

    def __init__(self, store: BlobStore):
        super().__init__(store, config.LOGIN_ATTEMPTS_KEY)

    def load(self) -> Dict[str, LoginAttemptRecord]:
        data = self._read()
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StorageCorruptedError(self.name, "expected an object")
        try:
            return {user_id: LoginAttemptRecord.from_dict(rec) for user_id, rec in data.items()}
        except (AttributeError, TypeError) as e:
            raise StorageCorruptedError(self.name, f"bad record: {e}") from e

    def save(self, records: Dict[str, LoginAttemptRecord]) -> None:
        self._write({user_id: rec.to_dict() for user_id, rec in records.items()})


class StringRepository(JsonRepository):
    """A single JSON string value."""

    def load(self) -> Optional[str]:
        data = self._read()
        if data is not None and not isinstance(data, str):
            raise StorageCorruptedError(self.name, "expected a string")
        return data

    def save(self, value: str) -> None:
        self._write(value)


class DeviceKeyRepository(StringRepository):
    def __init__(self, store: BlobStore):
        super().__init__(store, config.DEVICE_KEY_KEY)


class TwoFactorRepository(StringRepository):
    def __init__(self, store: BlobStore):
        super().__init__(store, config.TWO_FACTOR_KEY)


class MasterPasswordRepository(JsonRepository):
    """The master password record: {"hash": <argon2 encoded hash>}."""

    def __init__(self, store: BlobStore):
        super().__init__(store, config.MASTER_PASSWORD_KEY)

    def load(self) -> Optional[str]:
        data = self._read()
        if data is None:
            return None
        if not isinstance(data, dict) or not isinstance(data.get('hash'), str):
            raise StorageCorruptedError(self.name, "expected an object with a string hash")
        return data['hash']

    def save(self, password_hash: str) -> None:
        self._write({'hash': password_hash})


class SyncStatusRepository(JsonRepository):
    def __init__(self, store: BlobStore):
        super().__init__(store, config.SYNC_STATUS_KEY)

    def load(self) -> SyncStatus:
        data = self._read()
        if data is None:
            return SyncStatus()
        if not isinstance(data, dict):
            raise StorageCorruptedError(self.name, "expected an object")
        return SyncStatus.from_dict(data)

    def save(self, status: SyncStatus) -> None:
        self._write(status.to_dict())
