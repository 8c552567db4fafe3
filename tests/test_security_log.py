"""Tests for the security event log."""

import threading
from unittest.mock import MagicMock

import pytest

from pdvault.models import LogStatus, LogType
from pdvault.repositories import SecurityLogRepository
from pdvault.security_log import SecurityLog


class TestLogSecurityEvent:
    def test_entries_are_newest_first(self, security_log) -> None:
        security_log.log_security_event("login", "success", "first")
        security_log.log_security_event(LogType.LOGOUT, LogStatus.SUCCESS, "second")

        logs = security_log.get_security_logs()
        assert [e.details for e in logs] == ["second", "first"]
        assert logs[0].ip == "local"
        assert logs[0].type == LogType.LOGOUT

    def test_log_is_capped_and_drops_oldest(self, security_log) -> None:
        """1001 events leave 1000 entries; the very first one is gone."""
        for i in range(1001):
            security_log.log_security_event("login", "success", f"event {i}")

        logs = security_log.get_security_logs()
        assert len(logs) == 1000
        assert logs[0].details == "event 1000"
        assert logs[-1].details == "event 1"

    def test_filters_and_limit(self, security_log) -> None:
        security_log.log_security_event("login", "success", "ok")
        security_log.log_security_event("login", "failure", "bad")
        security_log.log_security_event("2fa", "failure", "bad code")

        assert [e.details for e in security_log.get_security_logs(type="login")] == ["bad", "ok"]
        assert [e.details for e in security_log.get_security_logs(status="failure")] == ["bad code", "bad"]
        assert len(security_log.get_security_logs(limit=1)) == 1

    def test_unknown_filter_value_raises(self, security_log) -> None:
        with pytest.raises(ValueError):
            security_log.get_security_logs(type="reboot")

    def test_invalid_event_is_not_recorded(self, security_log) -> None:
        """A bad event type is swallowed and nothing is stored."""
        assert security_log.log_security_event("reboot", "success", "x") is None
        assert security_log.get_security_logs() == []

    def test_storage_failure_does_not_propagate(self, clock) -> None:
        """Logging is best-effort: a failing store never breaks the caller."""
        store = MagicMock()
        store.get.return_value = None
        store.set.side_effect = OSError("disk full")
        log = SecurityLog(SecurityLogRepository(store), clock=clock)

        assert log.log_security_event("login", "success", "x") is None

    def test_concurrent_events_are_all_kept(self, security_log) -> None:
        """Writers on separate threads never lose each other's entries."""
        def write_events(n: int) -> None:
            for i in range(100):
                security_log.log_security_event("login", "success", f"thread {n} event {i}")

        threads = [threading.Thread(target=write_events, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(security_log.get_security_logs()) == 400

    def test_clear_leaves_only_clear_event(self, security_log) -> None:
        security_log.log_security_event("login", "success", "x")

        security_log.clear_security_logs()

        logs = security_log.get_security_logs()
        assert len(logs) == 1
        assert logs[0].type == LogType.SECURITY_SETTINGS
        assert logs[0].details == "Security log cleared"
