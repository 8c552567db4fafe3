"""
Cryptographic operations for the security core.

Note content and other small values are encrypted with AES-256-GCM under a key
derived from the device key. The master password is hashed with Argon2id.
"""

import os
import json
import base64
import struct
import logging
from dataclasses import dataclass
from typing import Any, Optional
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.backends import default_backend
from cryptography.exceptions import InvalidTag
from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError

from . import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecryptResult:
    """Outcome of a decrypt call.

    ``ok`` tells a successfully decrypted value (which may be an empty string)
    apart from a token that could not be decrypted.
    """
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any) -> 'DecryptResult':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> 'DecryptResult':
        return cls(ok=False, value=None, error=error)


class CryptoManager:
    """Handles all cryptographic operations for the security core."""

    HEADER = struct.Struct('<3sB')
    HKDF_INFO = b'pdvault-content-key'

    def __init__(self):
        """Initialize the crypto manager."""
        self.backend = default_backend()
        self.ph = PasswordHasher(
            time_cost=config.ARGON2_TIME_COST,
            memory_cost=config.ARGON2_MEMORY_COST,
            parallelism=config.ARGON2_PARALLELISM,
            hash_len=config.KEY_SIZE,
            type=Type.ID
        )

    def generate_device_key(self) -> str:
        """Generate a new random device key, hex encoded."""
        return os.urandom(config.DEVICE_KEY_SIZE).hex()

    def _derive_key(self, key: str, salt: bytes) -> bytes:
        """Derive a 32-byte AES key from an arbitrary key string and salt."""
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=config.KEY_SIZE,
            salt=salt,
            info=self.HKDF_INFO,
            backend=self.backend
        )
        return hkdf.derive(key.encode('utf-8', 'surrogatepass'))

    def encrypt(self, plaintext: Any, key: str) -> str:
        """
        Encrypt a value using AES-256-GCM.

        The value is serialized to canonical JSON first, so any JSON
        compatible value survives a round trip unchanged.

        Args:
            plaintext: Value to encrypt
            key: Key string, normally the device key

        Returns:
            URL-safe base64 token holding header, salt, nonce, tag and ciphertext
        """
        if not isinstance(key, str):
            raise TypeError("Encryption key must be a string")

        data = json.dumps(plaintext, sort_keys=True, separators=(',', ':')).encode('utf-8')
        salt = os.urandom(config.SALT_SIZE)
        nonce = os.urandom(config.NONCE_SIZE)
        cipher = Cipher(
            algorithms.AES(self._derive_key(key, salt)),
            modes.GCM(nonce),
            backend=self.backend
        )
        encryptor = cipher.encryptor()
        ciphertext = encryptor.update(data) + encryptor.finalize()

        raw = self.HEADER.pack(config.TOKEN_MAGIC, config.TOKEN_VERSION) + salt + nonce + encryptor.tag + ciphertext
        return base64.urlsafe_b64encode(raw).decode('ascii')

    def decrypt(self, token: str, key: str) -> DecryptResult:
        """
        Decrypt a token produced by encrypt().

        Never raises for a wrong key or malformed input; the failure is
        reported through the returned DecryptResult instead.
        """
        try:
            raw = base64.urlsafe_b64decode(token.encode('ascii'))
            header_size = self.HEADER.size
            prefix_size = header_size + config.SALT_SIZE + config.NONCE_SIZE + config.TAG_SIZE
            if len(raw) < prefix_size:
                return DecryptResult.failure("token too short")

            magic, version = self.HEADER.unpack(raw[:header_size])
            if magic != config.TOKEN_MAGIC or version != config.TOKEN_VERSION:
                return DecryptResult.failure("unknown token format")

            offset = header_size
            salt = raw[offset:offset + config.SALT_SIZE]
            offset += config.SALT_SIZE
            nonce = raw[offset:offset + config.NONCE_SIZE]
            offset += config.NONCE_SIZE
            tag = raw[offset:offset + config.TAG_SIZE]
            ciphertext = raw[offset + config.TAG_SIZE:]

            cipher = Cipher(
                algorithms.AES(self._derive_key(key, salt)),
                modes.GCM(nonce, tag),
                backend=self.backend
            )
            decryptor = cipher.decryptor()
            data = decryptor.update(ciphertext) + decryptor.finalize()
            return DecryptResult.success(json.loads(data.decode('utf-8')))

        except InvalidTag:
            return DecryptResult.failure("authentication failed")
        except (ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Decrypt: malformed token: {e}")
            return DecryptResult.failure("malformed token")

    def hash_password(self, password: str) -> str:
        """Hash a password with Argon2id. The salt is embedded in the result."""
        return self.ph.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password against an Argon2id hash."""
        try:
            return self.ph.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False
