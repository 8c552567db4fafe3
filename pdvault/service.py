"""
The security service: wires every component to one blob store.
"""

import logging
from typing import Optional

from .auth import MasterPasswordManager, TwoFactorManager
from .crypto import CryptoManager
from .notes import SecureNoteStore
from .repositories import (
    DeviceKeyRepository,
    LoginAttemptRepository,
    MasterPasswordRepository,
    NoteRepository,
    SecurityLogRepository,
    SessionRepository,
    SyncQueueRepository,
    SyncStatusRepository,
    TwoFactorRepository,
)
from .security_log import SecurityLog
from .sessions import SessionManager
from .storage import BlobStore, JsonFileBlobStore
from .sync import SyncQueue
from .throttle import LoginThrottle
from .utils import Clock, utc_now

logger = logging.getLogger(__name__)


class SecurityService:
    """
    Security core of the personal data vault.

    Construct one instance per data store and pass it to whatever drives the
    user interface. Components are exposed as attributes.
    """

    def __init__(self, store: BlobStore, clock: Clock = utc_now):
        """
        Initialize the service.
        Args:
            store: Blob store holding every persisted collection
            clock: Returns the current aware datetime; injectable for tests
        """
        self.store = store
        self.clock = clock
        self.crypto = CryptoManager()
        self.device_key = self._load_device_key()

        self.log = SecurityLog(SecurityLogRepository(store), clock=clock)
        self.sessions = SessionManager(SessionRepository(store), self.log, clock=clock)
        self.throttle = LoginThrottle(LoginAttemptRepository(store), self.log, clock=clock)
        self.notes = SecureNoteStore(
            NoteRepository(store), self.crypto, self.device_key, self.log, clock=clock
        )
        self.master_password = MasterPasswordManager(MasterPasswordRepository(store), self.crypto, self.log)
        self.two_factor = TwoFactorManager(TwoFactorRepository(store), self.log, clock=clock)
        self.sync = SyncQueue(SyncQueueRepository(store), SyncStatusRepository(store), clock=clock)

    @classmethod
    def open(cls, directory: Optional[str] = None, clock: Clock = utc_now) -> 'SecurityService':
        """Open the service on a file store, by default in the per-user data directory."""
        store = JsonFileBlobStore(directory) if directory else JsonFileBlobStore.default()
        return cls(store, clock=clock)

    def _load_device_key(self) -> str:
        """Return the persisted device key, generating and storing it on first use."""
        repository = DeviceKeyRepository(self.store)
        with repository.locked():
            device_key = repository.load()
            if device_key is None:
                device_key = self.crypto.generate_device_key()
                repository.save(device_key)
                logger.info("Generated new device key")
        return device_key

    def encrypt(self, plaintext, key: Optional[str] = None) -> str:
        """Encrypt with the given key, or the device key when none is given."""
        return self.crypto.encrypt(plaintext, key if key is not None else self.device_key)

    def decrypt(self, token: str, key: Optional[str] = None):
        return self.crypto.decrypt(token, key if key is not None else self.device_key)
