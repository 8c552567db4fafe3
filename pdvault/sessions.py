"""
Local session lifecycle with a sliding idle timeout.

A session is created active, stays valid while it keeps being validated
within the timeout, and ends either by idling past its expiry or by an
explicit invalidation. This is the local lock-screen session; it is not the
bearer token issued by the remote auth service.
"""

import datetime
import logging
from typing import List, Optional

from . import config
from .models import LogStatus, LogType, Session
from .repositories import SessionRepository
from .security_log import SecurityLog
from .utils import Clock, from_iso, new_id, to_iso, utc_now

logger = logging.getLogger(__name__)


class SessionManager:
    """Creates, validates and invalidates local sessions."""

    def __init__(self, repository: SessionRepository, security_log: SecurityLog,
                 clock: Clock = utc_now,
                 timeout: datetime.timedelta = datetime.timedelta(minutes=config.SESSION_TIMEOUT_MINUTES)):
        self.repository = repository
        self.security_log = security_log
        self.clock = clock
        self.timeout = timeout

    def create_session(self, user_id: str) -> Session:
        """Start an active session for user_id that expires after the idle timeout."""
        now = self.clock()
        session = Session(
            id=new_id(),
            user_id=user_id,
            created_at=to_iso(now),
            last_activity=to_iso(now),
            expires_at=to_iso(now + self.timeout),
            is_active=True,
        )
        with self.repository.locked():
            sessions = self.repository.load()
            sessions.append(session)
            self.repository.save(sessions)

        logger.info(f"Session created for user {user_id}")
        self.security_log.log_security_event(LogType.LOGIN, LogStatus.SUCCESS, "Session created")
        return session

    def validate_session(self, session_id: str) -> bool:
        """
        Check a session and slide its expiry forward.

        Returns False for an unknown or inactive session. An expired session is
        invalidated and False is returned. A valid session gets its last
        activity set to now and its expiry moved to now + timeout.
        """
        now = self.clock()
        expired = False
        with self.repository.locked():
            sessions = self.repository.load()
            session = next((s for s in sessions if s.id == session_id), None)
            if session is None or not session.is_active:
                return False

            if now >= from_iso(session.expires_at):
                expired = True
            else:
                session.last_activity = to_iso(now)
                session.expires_at = to_iso(now + self.timeout)
                self.repository.save(sessions)

        if expired:
            logger.info(f"Session {session_id} expired")
            self.invalidate_session(session_id)
            return False
        return True

    def invalidate_session(self, session_id: str) -> None:
        """Mark a session inactive. Unknown ids and repeated calls are no-ops."""
        with self.repository.locked():
            sessions = self.repository.load()
            for session in sessions:
                if session.id == session_id:
                    session.is_active = False
            self.repository.save(sessions)

        self.security_log.log_security_event(LogType.LOGOUT, LogStatus.SUCCESS, "Session invalidated")

    def get_session(self, session_id: str) -> Optional[Session]:
        return next((s for s in self.repository.load() if s.id == session_id), None)

    def get_sessions(self) -> List[Session]:
        return self.repository.load()

    def get_active_sessions(self) -> List[Session]:
        """Sessions that are active and not yet past their expiry."""
        now = self.clock()
        return [
            s for s in self.repository.load()
            if s.is_active and now < from_iso(s.expires_at)
        ]
