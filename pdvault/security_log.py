"""
Append-only security event log.

Entries are kept newest first and capped; the oldest entries are dropped once
the cap is exceeded. Writing an entry is best-effort: a failure is reported
through the logging module and never reaches the caller.
"""

import logging
from typing import List, Optional, Union

from . import config
from .models import LogStatus, LogType, SecurityLogEntry
from .repositories import SecurityLogRepository
from .utils import Clock, new_id, to_iso, utc_now

logger = logging.getLogger(__name__)


class SecurityLog:
    """Records security-relevant actions."""

    def __init__(self, repository: SecurityLogRepository, clock: Clock = utc_now,
                 max_entries: int = config.SECURITY_LOG_MAX_ENTRIES):
        self.repository = repository
        self.clock = clock
        self.max_entries = max_entries

    def log_security_event(self, type: Union[LogType, str], status: Union[LogStatus, str],
                           details: str) -> Optional[SecurityLogEntry]:
        """
        Insert an entry at the head of the log and drop entries past the cap.

        Args:
            type: Event type, a LogType or its string value
            status: "success" or "failure"
            details: Human readable description

        Returns:
            The stored entry, or None when the entry could not be written
        """
        try:
            entry = SecurityLogEntry(
                id=new_id(),
                timestamp=to_iso(self.clock()),
                type=LogType(type),
                status=LogStatus(status),
                details=details,
                ip=config.SECURITY_LOG_SOURCE_IP,
            )
            with self.repository.locked():
                logs = self.repository.load()
                logs.insert(0, entry)
                del logs[self.max_entries:]
                self.repository.save(logs)
            return entry
        except Exception as e:
            logger.error(f"Failed to record security event {type}/{status}: {e}", exc_info=True)
            return None

    def get_security_logs(self, type: Union[LogType, str, None] = None,
                          status: Union[LogStatus, str, None] = None,
                          limit: Optional[int] = None) -> List[SecurityLogEntry]:
        """Return log entries newest first, optionally filtered by type and status."""
        wanted_type = LogType(type) if type is not None else None
        wanted_status = LogStatus(status) if status is not None else None

        logs = [
            entry for entry in self.repository.load()
            if (wanted_type is None or entry.type == wanted_type)
            and (wanted_status is None or entry.status == wanted_status)
        ]
        if limit is not None:
            logs = logs[:limit]
        return logs

    def clear_security_logs(self) -> None:
        """Remove every entry, then record that the log was cleared."""
        self.repository.clear()
        logger.info("Security log cleared")
        self.log_security_event(LogType.SECURITY_SETTINGS, LogStatus.SUCCESS, "Security log cleared")
