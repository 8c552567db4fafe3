"""
Offline change queue with a simulated sync pass.

There is no remote endpoint: a sync pass waits a fixed delay and then marks
the pending changes as synced.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Union

from . import config
from .models import SyncItemStatus, SyncItemType, SyncQueueItem, SyncStatus
from .repositories import SyncQueueRepository, SyncStatusRepository
from .utils import Clock, new_id, to_iso, utc_now

logger = logging.getLogger(__name__)


class SyncQueue:
    """Queues local changes and processes them on sync."""

    def __init__(self, queue_repository: SyncQueueRepository, status_repository: SyncStatusRepository,
                 clock: Clock = utc_now,
                 delay: float = config.SYNC_DELAY_SECONDS,
                 max_retry_count: int = config.SYNC_MAX_RETRY_COUNT,
                 processor: Optional[Callable[[SyncQueueItem], None]] = None):
        self.queue_repository = queue_repository
        self.status_repository = status_repository
        self.clock = clock
        self.delay = delay
        self.max_retry_count = max_retry_count
        self.processor = processor or (lambda item: None)

    def add_to_sync_queue(self, type: Union[SyncItemType, str], entity: str, data: Any) -> SyncQueueItem:
        item = SyncQueueItem(
            id=new_id(),
            timestamp=to_iso(self.clock()),
            type=SyncItemType(type),
            entity=entity,
            data=data,
        )
        with self.queue_repository.locked():
            queue = self.queue_repository.load()
            queue.append(item)
            self.queue_repository.save(queue)
        self._update_pending_changes()
        return item

    def get_sync_status(self) -> SyncStatus:
        return self.status_repository.load()

    def set_online(self, is_online: bool) -> None:
        """Record connectivity. Coming back online processes the queue right away."""
        with self.status_repository.locked():
            status = self.status_repository.load()
            status.is_online = is_online
            self.status_repository.save(status)

        if is_online:
            self.process_sync_queue()

    async def sync_now(self) -> SyncStatus:
        """
        Wait the simulated network delay, then process every pending change.
        Does nothing while offline.
        """
        if not self.get_sync_status().is_online:
            logger.info("Sync skipped, offline")
            return self.get_sync_status()

        await asyncio.sleep(self.delay)
        return self.process_sync_queue()

    def process_sync_queue(self) -> SyncStatus:
        """Process every pending change without the simulated delay."""
        last_error = None
        synced = 0
        with self.queue_repository.locked():
            queue = self.queue_repository.load()
            for item in queue:
                if item.status != SyncItemStatus.PENDING:
                    continue
                try:
                    self.processor(item)
                    item.status = SyncItemStatus.SYNCED
                    synced += 1
                except Exception as e:
                    logger.warning(f"Sync of {item.entity} {item.id} failed: {e}")
                    item.retry_count += 1
                    if item.retry_count >= self.max_retry_count:
                        item.status = SyncItemStatus.FAILED
                    last_error = str(e)
            self.queue_repository.save(queue)

        with self.status_repository.locked():
            status = self.status_repository.load()
            if synced:
                status.last_sync = to_iso(self.clock())
            if last_error is not None:
                status.last_error = last_error
            status.pending_changes = sum(1 for item in queue if item.status == SyncItemStatus.PENDING)
            self.status_repository.save(status)

        logger.info(f"Sync pass finished: {synced} synced, {status.pending_changes} pending")
        return status

    def clear_sync_queue(self) -> None:
        self.queue_repository.clear()
        self._update_pending_changes()

    def retry_failed_items(self) -> int:
        """
        Put failed changes back into the pending state and, when online,
        process them again. Returns how many were reset.
        """
        with self.queue_repository.locked():
            queue = self.queue_repository.load()
            reset = 0
            for item in queue:
                if item.status == SyncItemStatus.FAILED:
                    item.status = SyncItemStatus.PENDING
                    item.retry_count = 0
                    reset += 1
            self.queue_repository.save(queue)
        self._update_pending_changes()

        if self.get_sync_status().is_online:
            self.process_sync_queue()
        return reset

    def _update_pending_changes(self) -> None:
        pending = sum(1 for item in self.queue_repository.load() if item.status == SyncItemStatus.PENDING)
        with self.status_repository.locked():
            status = self.status_repository.load()
            status.pending_changes = pending
            self.status_repository.save(status)
