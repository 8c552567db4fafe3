"""Shared fixtures: an in-memory store and a controllable clock."""

import datetime

import pytest

from pdvault.repositories import SecurityLogRepository
from pdvault.security_log import SecurityLog
from pdvault.service import SecurityService
from pdvault.storage import MemoryBlobStore


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime.datetime) -> None:
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += datetime.timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime.datetime(2025, 3, 1, 12, 0, tzinfo=datetime.timezone.utc))


@pytest.fixture
def store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def security_log(store: MemoryBlobStore, clock: FakeClock) -> SecurityLog:
    return SecurityLog(SecurityLogRepository(store), clock=clock)


@pytest.fixture
def service(store: MemoryBlobStore, clock: FakeClock) -> SecurityService:
    return SecurityService(store, clock=clock)
