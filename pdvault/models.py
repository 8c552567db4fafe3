"""
Records persisted by the security core.

Each record serializes to the camelCase JSON shape stored in its blob.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class LogType(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    TWO_FACTOR = "2fa"
    PASSWORD_CHANGE = "password_change"
    SECURITY_SETTINGS = "security_settings"
    SECURE_NOTE = "secure_note"


class LogStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class SyncItemType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class SyncItemStatus(str, Enum):
    PENDING = "pending"
    SYNCED = "synced"
    FAILED = "failed"


def unique_tags(tags) -> List[str]:
    """Drop duplicate tags, keeping first-seen order."""
    return list(dict.fromkeys(tags or ()))


@dataclass
class SecureNote:
    """A note whose content is ciphertext unless fetched by id."""
    id: str
    title: str
    content: Optional[str]
    encrypted: bool
    created_at: str
    updated_at: str
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'encrypted': self.encrypted,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
            'tags': list(self.tags),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SecureNote':
        """Create from dictionary."""
        return cls(
            id=data['id'],
            title=data['title'],
            content=data.get('content'),
            encrypted=data.get('encrypted', True),
            created_at=data['createdAt'],
            updated_at=data['updatedAt'],
            tags=unique_tags(data.get('tags')),
        )


@dataclass
class Session:
    """A local idle-timeout session."""
    id: str
    user_id: str
    created_at: str
    last_activity: str
    expires_at: str
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'createdAt': self.created_at,
            'lastActivity': self.last_activity,
            'expiresAt': self.expires_at,
            'isActive': self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        return cls(
            id=data['id'],
            user_id=data['userId'],
            created_at=data['createdAt'],
            last_activity=data['lastActivity'],
            expires_at=data['expiresAt'],
            is_active=data.get('isActive', False),
        )


@dataclass
class LoginAttemptRecord:
    """Login attempt counter for one user. Timestamps are epoch milliseconds."""
    count: int = 0
    last_attempt: int = 0
    locked_until: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'count': self.count,
            'lastAttempt': self.last_attempt,
            'lockedUntil': self.locked_until,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoginAttemptRecord':
        return cls(
            count=data.get('count', 0),
            last_attempt=data.get('lastAttempt', 0),
            locked_until=data.get('lockedUntil'),
        )


@dataclass
class SecurityLogEntry:
    """One entry of the security event log."""
    id: str
    timestamp: str
    type: LogType
    status: LogStatus
    details: str
    ip: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'type': self.type.value,
            'status': self.status.value,
            'details': self.details,
            'ip': self.ip,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SecurityLogEntry':
        return cls(
            id=data['id'],
            timestamp=data['timestamp'],
            type=LogType(data['type']),
            status=LogStatus(data['status']),
            details=data.get('details', ''),
            ip=data.get('ip', ''),
        )


@dataclass
class SyncQueueItem:
    """A local change waiting to be synced."""
    id: str
    timestamp: str
    type: SyncItemType
    entity: str
    data: Any
    status: SyncItemStatus = SyncItemStatus.PENDING
    retry_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'type': self.type.value,
            'entity': self.entity,
            'data': self.data,
            'status': self.status.value,
            'retryCount': self.retry_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SyncQueueItem':
        return cls(
            id=data['id'],
            timestamp=data['timestamp'],
            type=SyncItemType(data['type']),
            entity=data['entity'],
            data=data.get('data'),
            status=SyncItemStatus(data.get('status', 'pending')),
            retry_count=data.get('retryCount', 0),
        )


@dataclass
class SyncStatus:
    last_sync: Optional[str] = None
    is_online: bool = True
    pending_changes: int = 0
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'lastSync': self.last_sync,
            'isOnline': self.is_online,
            'pendingChanges': self.pending_changes,
            'lastError': self.last_error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SyncStatus':
        return cls(
            last_sync=data.get('lastSync'),
            is_online=data.get('isOnline', True),
            pending_changes=data.get('pendingChanges', 0),
            last_error=data.get('lastError'),
        )
