import uuid
import datetime
from typing import Callable

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    """Current time as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def to_iso(moment: datetime.datetime) -> str:
    return moment.isoformat()


def from_iso(value: str) -> datetime.datetime:
    """
    Parse an ISO-8601 timestamp.
    Naive values are taken to be UTC.
    """
    moment = datetime.datetime.fromisoformat(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return moment


def to_millis(moment: datetime.datetime) -> int:
    """Epoch milliseconds of an aware datetime."""
    return int(moment.timestamp() * 1000)
