"""Background retention sweep for booking notifications."""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from loguru import logger

from hkapi.constants import Database as DbConstants
from hkapi.constants import Notifications
from hkapi.repositories.notification_repository import NotificationRepository, chunked
from hkapi.utils.clock import Clock, utc_now


class NotificationRetentionSweeper:
    """Deletes booking notifications older than the retention horizon."""

    def __init__(
        self,
        notifications: NotificationRepository,
        retention_hours: int = Notifications.RETENTION_HOURS,
        batch_size: int = DbConstants.BATCH_SIZE,
        clock: Clock = utc_now,
    ):
        """
        Initialize retention sweeper.

        Args:
            notifications: Notification storage
            retention_hours: Age threshold in hours (default 24)
            batch_size: Maximum deletes per all-or-nothing batch (default 500)
            clock: Source of the current UTC time
        """
        self.notifications = notifications
        self.retention_hours = retention_hours
        self.batch_size = batch_size
        self._clock = clock
        self._last_run: Optional[datetime] = None
        self._last_deleted = 0
        self._consecutive_errors = 0

    def cutoff(self) -> datetime:
        """Instant before which notifications are expired."""
        return self._clock() - timedelta(hours=self.retention_hours)

    async def sweep(self) -> int:
        """
        Delete notifications received strictly before the cutoff.

        Failures are logged, never raised. A failed batch ends the run;
        batches already committed stay deleted.

        Returns:
            Number of notifications deleted
        """
        deleted = 0
        self._last_run = self._clock()
        try:
            ids = await self.notifications.find_ids_older_than(self.cutoff())
            for batch in chunked(ids, self.batch_size):
                deleted += await self.notifications.delete_many(batch)
            self._consecutive_errors = 0
        except Exception as e:
            self._consecutive_errors += 1
            logger.error(f"Notification cleanup error: {e}")

        self._last_deleted = deleted
        if deleted > 0:
            logger.info(f"Cleaned up {deleted} old notifications")
        return deleted

    def get_status(self) -> Dict[str, Any]:
        """
        Get current status of the sweeper.

        Returns:
            Dictionary with status information
        """
        return {
            "retention_hours": self.retention_hours,
            "batch_size": self.batch_size,
            "last_run": self._last_run.isoformat() if self._last_run else None,
            "last_deleted": self._last_deleted,
            "consecutive_errors": self._consecutive_errors,
        }
