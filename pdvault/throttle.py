"""
Login attempt throttling with a temporary lockout.
"""

import datetime
import logging
from typing import Optional

from . import config
from .models import LoginAttemptRecord, LogStatus, LogType
from .repositories import LoginAttemptRepository
from .security_log import SecurityLog
from .utils import Clock, to_millis, utc_now

logger = logging.getLogger(__name__)


class LoginThrottle:
    """Counts login attempts per user and locks a user out after too many."""

    def __init__(self, repository: LoginAttemptRepository, security_log: SecurityLog,
                 clock: Clock = utc_now,
                 max_attempts: int = config.MAX_LOGIN_ATTEMPTS,
                 lockout_duration: datetime.timedelta = datetime.timedelta(minutes=config.LOCKOUT_DURATION_MINUTES)):
        self.repository = repository
        self.security_log = security_log
        self.clock = clock
        self.max_attempts = max_attempts
        self.lockout_duration = lockout_duration

    def track_login_attempt(self, user_id: str) -> bool:
        """
        Record a login attempt for user_id.

        Returns:
            True if the attempt is accepted and the user is not locked out,
            False if the user was already locked out (nothing is recorded) or
            this attempt reached the limit and started a lockout.
        """
        now = to_millis(self.clock())
        with self.repository.locked():
            attempts = self.repository.load()
            record = attempts.setdefault(user_id, LoginAttemptRecord(count=0, last_attempt=now))

            if record.locked_until is not None and now < record.locked_until:
                logger.warning(f"Login attempt rejected, user {user_id} is locked out")
                return False

            if record.locked_until is not None:
                record.count = 0
                record.locked_until = None

            record.count += 1
            record.last_attempt = now

            newly_locked = record.count >= self.max_attempts
            if newly_locked:
                record.locked_until = now + int(self.lockout_duration.total_seconds() * 1000)

            self.repository.save(attempts)

        if newly_locked:
            logger.warning(f"User {user_id} locked out after {record.count} attempts")
            self.security_log.log_security_event(
                LogType.LOGIN, LogStatus.FAILURE,
                f"Account locked after {record.count} login attempts"
            )
            return False

        self.security_log.log_security_event(
            LogType.LOGIN, LogStatus.FAILURE,
            f"Login attempt {record.count} of {self.max_attempts} recorded"
        )
        return True

    def reset_login_attempts(self, user_id: str) -> None:
        """Forget every recorded attempt for user_id, e.g. after a successful login."""
        with self.repository.locked():
            attempts = self.repository.load()
            if attempts.pop(user_id, None) is None:
                return
            self.repository.save(attempts)

        self.security_log.log_security_event(LogType.LOGIN, LogStatus.SUCCESS, "Login attempts reset")

    def get_attempt_record(self, user_id: str) -> Optional[LoginAttemptRecord]:
        return self.repository.load().get(user_id)

    def is_locked_out(self, user_id: str) -> bool:
        record = self.get_attempt_record(user_id)
        if record is None or record.locked_until is None:
            return False
        return to_millis(self.clock()) < record.locked_until
