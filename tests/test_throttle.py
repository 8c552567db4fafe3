"""Tests for login attempt throttling."""

import datetime
import threading

from pdvault.models import LogStatus, LogType
from pdvault.repositories import LoginAttemptRepository
from pdvault.throttle import LoginThrottle
from pdvault.utils import to_millis


def make_throttle(store, security_log, clock) -> LoginThrottle:
    return LoginThrottle(LoginAttemptRepository(store), security_log, clock=clock)


class TestTrackLoginAttempt:
    def test_first_four_attempts_accepted(self, store, security_log, clock) -> None:
        throttle = make_throttle(store, security_log, clock)

        assert [throttle.track_login_attempt("alice") for _ in range(4)] == [True] * 4
        assert throttle.get_attempt_record("alice").count == 4
        assert throttle.is_locked_out("alice") is False

    def test_fifth_attempt_locks_user(self, store, security_log, clock) -> None:
        """The fifth consecutive attempt returns False and locks for 15 minutes."""
        throttle = make_throttle(store, security_log, clock)

        results = [throttle.track_login_attempt("alice") for _ in range(5)]

        assert results == [True, True, True, True, False]
        record = throttle.get_attempt_record("alice")
        assert record.count == 5
        assert record.locked_until == to_millis(clock.now + datetime.timedelta(minutes=15))
        assert throttle.is_locked_out("alice") is True

        entry = security_log.get_security_logs(status=LogStatus.FAILURE)[0]
        assert entry.type == LogType.LOGIN
        assert entry.details == "Account locked after 5 login attempts"

    def test_attempt_during_lockout_does_not_count(self, store, security_log, clock) -> None:
        throttle = make_throttle(store, security_log, clock)
        for _ in range(5):
            throttle.track_login_attempt("alice")

        clock.advance(minutes=1)

        assert throttle.track_login_attempt("alice") is False
        assert throttle.get_attempt_record("alice").count == 5

    def test_lockout_expiry_resets_counter(self, store, security_log, clock) -> None:
        """After the lockout the next attempt starts counting from one."""
        throttle = make_throttle(store, security_log, clock)
        for _ in range(5):
            throttle.track_login_attempt("alice")

        clock.advance(minutes=15)

        assert throttle.is_locked_out("alice") is False
        assert throttle.track_login_attempt("alice") is True
        record = throttle.get_attempt_record("alice")
        assert record.count == 1
        assert record.locked_until is None

    def test_users_are_tracked_independently(self, store, security_log, clock) -> None:
        throttle = make_throttle(store, security_log, clock)
        for _ in range(5):
            throttle.track_login_attempt("alice")

        assert throttle.track_login_attempt("bob") is True
        assert throttle.get_attempt_record("bob").count == 1

    def test_custom_limits(self, store, security_log, clock) -> None:
        throttle = LoginThrottle(
            LoginAttemptRepository(store), security_log, clock=clock,
            max_attempts=2, lockout_duration=datetime.timedelta(seconds=30),
        )

        assert throttle.track_login_attempt("alice") is True
        assert throttle.track_login_attempt("alice") is False
        clock.advance(seconds=30)
        assert throttle.track_login_attempt("alice") is True

    def test_concurrent_attempts_are_counted_exactly(self, store, security_log, clock) -> None:
        throttle = LoginThrottle(
            LoginAttemptRepository(store), security_log, clock=clock, max_attempts=1000,
        )

        def attempt() -> None:
            for _ in range(50):
                throttle.track_login_attempt("alice")

        threads = [threading.Thread(target=attempt) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert throttle.get_attempt_record("alice").count == 200


class TestResetLoginAttempts:
    def test_reset_clears_record(self, store, security_log, clock) -> None:
        throttle = make_throttle(store, security_log, clock)
        for _ in range(5):
            throttle.track_login_attempt("alice")

        throttle.reset_login_attempts("alice")

        assert throttle.get_attempt_record("alice") is None
        assert throttle.track_login_attempt("alice") is True

    def test_reset_unknown_user_is_noop(self, store, security_log, clock) -> None:
        throttle = make_throttle(store, security_log, clock)

        throttle.reset_login_attempts("nobody")

        assert throttle.get_attempt_record("nobody") is None
        assert security_log.get_security_logs() == []
