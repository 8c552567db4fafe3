"""Tests for master password and TOTP two-factor authentication."""

import base64

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.twofactor.totp import TOTP

from pdvault.auth import MasterPasswordManager, TwoFactorManager
from pdvault.crypto import CryptoManager
from pdvault.models import LogStatus, LogType
from pdvault.repositories import MasterPasswordRepository, TwoFactorRepository


@pytest.fixture
def master(store, security_log) -> MasterPasswordManager:
    return MasterPasswordManager(MasterPasswordRepository(store), CryptoManager(), security_log)


@pytest.fixture
def two_factor(store, security_log, clock) -> TwoFactorManager:
    return TwoFactorManager(TwoFactorRepository(store), security_log, clock=clock)


class TestMasterPassword:
    def test_verify_without_password_set(self, master) -> None:
        assert master.has_master_password() is False
        assert master.verify_master_password("anything") is False

    def test_set_and_verify(self, master, store, security_log) -> None:
        master.set_master_password("correct horse battery")

        assert master.has_master_password() is True
        assert "correct horse" not in store.get("masterPassword")
        assert master.verify_master_password("correct horse battery") is True
        assert master.verify_master_password("wrong password") is False

        logs = security_log.get_security_logs()
        assert [(e.type, e.status) for e in logs] == [
            (LogType.LOGIN, LogStatus.FAILURE),
            (LogType.LOGIN, LogStatus.SUCCESS),
            (LogType.PASSWORD_CHANGE, LogStatus.SUCCESS),
        ]

    def test_short_password_rejected(self, master) -> None:
        with pytest.raises(ValueError):
            master.set_master_password("short")
        assert master.has_master_password() is False

    def test_change_replaces_old_password(self, master) -> None:
        master.set_master_password("first password")
        master.set_master_password("second password")

        assert master.verify_master_password("first password") is False
        assert master.verify_master_password("second password") is True


def expected_code(secret: str, when: int) -> str:
    totp = TOTP(base64.b32decode(secret), 6, hashes.SHA1(), 30)
    return totp.generate(when).decode("ascii")


class TestTwoFactor:
    def test_verify_without_secret(self, two_factor) -> None:
        assert two_factor.is_enabled() is False
        assert two_factor.verify_2fa_token("123456") is False

    def test_generate_secret(self, two_factor, security_log) -> None:
        secret = two_factor.generate_2fa_secret()

        assert len(secret) == 32
        assert two_factor.is_enabled() is True
        assert security_log.get_security_logs()[0].details == "2FA secret generated"

    def test_current_code_is_accepted(self, two_factor, clock) -> None:
        secret = two_factor.generate_2fa_secret()
        code = expected_code(secret, int(clock.now.timestamp()))

        assert two_factor.current_token() == code
        assert two_factor.verify_2fa_token(code) is True

    def test_adjacent_step_is_accepted(self, two_factor, clock) -> None:
        secret = two_factor.generate_2fa_secret()
        code = expected_code(secret, int(clock.now.timestamp()))

        clock.advance(seconds=30)
        assert two_factor.verify_2fa_token(code) is True

    def test_stale_code_is_rejected(self, two_factor, clock, security_log) -> None:
        secret = two_factor.generate_2fa_secret()
        code = expected_code(secret, int(clock.now.timestamp()))

        clock.advance(minutes=5)
        assert two_factor.verify_2fa_token(code) is False
        assert security_log.get_security_logs()[0].status == LogStatus.FAILURE

    @pytest.mark.parametrize("token", ["", "12345", "abcdef", "1234567"])
    def test_malformed_code_is_rejected(self, two_factor, token) -> None:
        two_factor.generate_2fa_secret()

        assert two_factor.verify_2fa_token(token) is False

    def test_provisioning_uri(self, two_factor) -> None:
        assert two_factor.provisioning_uri("alice") is None
        secret = two_factor.generate_2fa_secret()

        uri = two_factor.provisioning_uri("alice")
        assert uri.startswith("otpauth://totp/NHCE:alice?")
        assert f"secret={secret}" in uri

    def test_disable(self, two_factor, security_log) -> None:
        two_factor.generate_2fa_secret()
        two_factor.disable_2fa()

        assert two_factor.is_enabled() is False
        assert security_log.get_security_logs()[0].type == LogType.SECURITY_SETTINGS
