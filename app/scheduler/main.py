"""
Scheduler
Runs the recurring transaction sweep once a day
"""

import asyncio
import logging
from datetime import date
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
import pytz

from app.config import settings
from app.core.logging import setup_logging
from app.domain.models import SweepReport
from app.domain.services.recurring_sweep_service import RecurringSweepService, SweepError
from app.infrastructure.db import database
from app.utils.time import today_local

logger = logging.getLogger(__name__)


class RecurringScheduler:
    """
    Daily recurring-transaction scheduler.
    Fires at RECURRING_SWEEP_TIME in the configured timezone.
    """

    JOB_ID = "recurring_sweep"

    def __init__(self):
        """Initialize scheduler"""
        self.scheduler = AsyncIOScheduler(timezone=pytz.timezone(settings.TIMEZONE))

    async def recurring_sweep_job(self, reference_date: Optional[date] = None) -> Optional[SweepReport]:
        """
        Daily job: materialize every rule due today.
        A failed sweep is logged; the next tick tries again.
        """
        ref = reference_date or today_local()
        logger.info(f"⏰ Running recurring sweep job for {ref}")

        async with database.async_session_factory() as session:
            try:
                return await RecurringSweepService(session).run_sweep(ref)
            except SweepError as e:
                logger.error(f"❌ Recurring sweep job failed: {e}")
                return None

    def start(self):
        """Start the scheduler"""
        hour, minute = settings.sweep_hour_minute
        logger.info(f"🚀 Starting scheduler (recurring sweep daily at {hour:02d}:{minute:02d} {settings.TIMEZONE})")

        self.scheduler.add_job(
            self.recurring_sweep_job,
            CronTrigger(hour=hour, minute=minute),
            id=self.JOB_ID,
            name="Recurring Transaction Sweep",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.start()
        logger.info("✅ Scheduler started")

    def stop(self):
        """Stop the scheduler"""
        logger.info("🛑 Stopping scheduler...")
        self.scheduler.shutdown(wait=False)
        logger.info("✅ Scheduler stopped")

    @property
    def running(self) -> bool:
        return bool(getattr(self.scheduler, "running", False))


async def main():
    """Standalone entry point (scheduler without the API)"""
    setup_logging(settings.LOG_LEVEL)
    await database.init_db()

    scheduler = RecurringScheduler()
    scheduler.start()

    try:
        # Keep running
        while True:
            await asyncio.sleep(1)
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        scheduler.stop()
        await database.close_db()


if __name__ == "__main__":
    asyncio.run(main())
