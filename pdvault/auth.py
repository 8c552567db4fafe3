"""
Master password and TOTP two-factor authentication.

Both keep their secret in the blob store and record every set, verify and
disable action in the security log.
"""

import os
import base64
import logging
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.twofactor import InvalidToken
from cryptography.hazmat.primitives.twofactor.totp import TOTP

from . import config
from .crypto import CryptoManager
from .models import LogStatus, LogType
from .repositories import MasterPasswordRepository, TwoFactorRepository
from .security_log import SecurityLog
from .utils import Clock, utc_now

logger = logging.getLogger(__name__)


class MasterPasswordManager:
    """Stores and checks the Argon2id hash of the master password."""

    def __init__(self, repository: MasterPasswordRepository, crypto: CryptoManager,
                 security_log: SecurityLog):
        self.repository = repository
        self.crypto = crypto
        self.security_log = security_log

    def has_master_password(self) -> bool:
        return self.repository.load() is not None

    def set_master_password(self, password: str) -> None:
        """
        Set or replace the master password.
        Raises:
            ValueError: If the password is shorter than PASSWORD_MIN_LENGTH
        """
        if len(password) < config.PASSWORD_MIN_LENGTH:
            raise ValueError(f"Master password must be at least {config.PASSWORD_MIN_LENGTH} characters")

        with self.repository.locked():
            self.repository.save(self.crypto.hash_password(password))

        logger.info("Master password set")
        self.security_log.log_security_event(LogType.PASSWORD_CHANGE, LogStatus.SUCCESS, "Master password set")

    def verify_master_password(self, password: str) -> bool:
        """Check password against the stored hash. False when no master password is set."""
        stored = self.repository.load()
        if stored is None:
            return False

        is_valid = self.crypto.verify_password(password, stored)
        self.security_log.log_security_event(
            LogType.LOGIN,
            LogStatus.SUCCESS if is_valid else LogStatus.FAILURE,
            "Master password verification"
        )
        return is_valid


class TwoFactorManager:
    """TOTP (RFC 6238) secret provisioning and code verification."""

    def __init__(self, repository: TwoFactorRepository, security_log: SecurityLog,
                 clock: Clock = utc_now):
        self.repository = repository
        self.security_log = security_log
        self.clock = clock

    def is_enabled(self) -> bool:
        return self.repository.load() is not None

    def generate_2fa_secret(self) -> str:
        """Generate, store and return a new base32 TOTP secret."""
        secret = base64.b32encode(os.urandom(config.TOTP_SECRET_SIZE)).decode('ascii')
        with self.repository.locked():
            self.repository.save(secret)

        self.security_log.log_security_event(LogType.TWO_FACTOR, LogStatus.SUCCESS, "2FA secret generated")
        return secret

    def provisioning_uri(self, account: str) -> Optional[str]:
        """otpauth:// URI for authenticator apps, or None when 2FA is not set up."""
        totp = self._totp()
        if totp is None:
            return None
        return totp.get_provisioning_uri(account, config.TOTP_ISSUER)

    def current_token(self) -> Optional[str]:
        totp = self._totp()
        if totp is None:
            return None
        return totp.generate(int(self.clock().timestamp())).decode('ascii')

    def verify_2fa_token(self, token: str) -> bool:
        """
        Check a TOTP code, accepting TOTP_VALID_WINDOW steps of clock drift
        either way. False when no secret is stored.
        """
        totp = self._totp()
        if totp is None:
            return False

        is_valid = False
        if token.isdigit() and len(token) == config.TOTP_DIGITS:
            now = int(self.clock().timestamp())
            for step in range(-config.TOTP_VALID_WINDOW, config.TOTP_VALID_WINDOW + 1):
                try:
                    totp.verify(token.encode('ascii'), now + step * config.TOTP_PERIOD_SECONDS)
                    is_valid = True
                    break
                except InvalidToken:
                    continue

        self.security_log.log_security_event(
            LogType.TWO_FACTOR,
            LogStatus.SUCCESS if is_valid else LogStatus.FAILURE,
            "2FA verification"
        )
        return is_valid

    def disable_2fa(self) -> None:
        self.repository.clear()
        logger.info("Two-factor authentication disabled")
        self.security_log.log_security_event(LogType.SECURITY_SETTINGS, LogStatus.SUCCESS, "2FA disabled")

    def _totp(self) -> Optional[TOTP]:
        secret = self.repository.load()
        if secret is None:
            return None
        return TOTP(
            base64.b32decode(secret, casefold=True),
            config.TOTP_DIGITS,
            hashes.SHA1(),
            config.TOTP_PERIOD_SECONDS,
        )
