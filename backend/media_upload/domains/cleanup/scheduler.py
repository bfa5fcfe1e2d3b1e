"""
Daily cleanup scheduler.

Wraps an APScheduler AsyncIOScheduler that fires one sweep per crontab
match (default "0 2 * * *"). Each sweep:
    1. is skipped if another sweep is still in flight,
    2. asks the in-use provider for referenced names (skipped if there is no
       provider or it fails),
    3. runs the reaper over the storage directory.

Missed runs are not caught up.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from media_upload.domains.cleanup.in_use import InUseProvider
from media_upload.domains.cleanup.reaper import purge

logger = logging.getLogger(__name__)

JOB_ID = "purge_unused_files"


class CleanupScheduler:
    def __init__(
        self,
        storage_dir: str | Path,
        in_use_provider: Optional[InUseProvider],
        *,
        crontab: str = "0 2 * * *",
        timezone: Optional[str] = None,
    ) -> None:
        self.storage_dir = Path(storage_dir)
        self.in_use_provider = in_use_provider
        self.crontab = crontab
        self.timezone = timezone
        self._sweep_lock = asyncio.Lock()
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return bool(self._scheduler and self._scheduler.running)

    @property
    def sweep_in_progress(self) -> bool:
        return self._sweep_lock.locked()

    async def run_sweep(self) -> bool:
        """
        Run one sweep now.

        Returns True if the reaper ran, False if the sweep was skipped.
        """
        if self._sweep_lock.locked():
            logger.warning("[Cleanup] Previous sweep still running, skipping")
            return False

        async with self._sweep_lock:
            if self.in_use_provider is None:
                logger.warning("[Cleanup] No in-use provider configured, skipping sweep")
                return False

            try:
                in_use = await self.in_use_provider.fetch()
            except Exception as e:  # noqa: BLE001
                logger.error("[Cleanup] Could not fetch in-use files, skipping sweep: %s", e)
                return False

            logger.info("[Cleanup] Running sweep of %s (%d files in use)", self.storage_dir, len(in_use))
            await purge(self.storage_dir, in_use)
            return True

    def start(self) -> None:
        """Start the scheduler. Must be called with a running event loop."""
        if self.running:
            return

        trigger = CronTrigger.from_crontab(self.crontab, timezone=self.timezone)
        scheduler = AsyncIOScheduler(timezone=self.timezone) if self.timezone else AsyncIOScheduler()
        scheduler.add_job(
            self.run_sweep,
            trigger=trigger,
            id=JOB_ID,
            name="Delete unused uploaded files",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info("[Cleanup] Scheduler started (cron=%r)", self.crontab)

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("[Cleanup] Scheduler stopped")


__all__ = ["CleanupScheduler", "JOB_ID"]
