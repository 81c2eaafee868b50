from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
import logging

from .daily_rollover import run_daily_rollover

logger = logging.getLogger(__name__)


def setup_scheduler(development_mode=False):
    """
    Set up the APScheduler to run background tasks
    """
    scheduler = AsyncIOScheduler()

    scheduler.configure(
        job_defaults={
            'misfire_grace_time': 30,  # Allow jobs to start up to 30 seconds late without warning
            'max_instances': 1  # Prevent multiple instances of the same job from running
        }
    )

    if development_mode:
        scheduler.add_job(
            run_daily_rollover,
            CronTrigger(minute='*/5'),
            id="daily_rollover",
            replace_existing=True
        )
    else:
        # Hourly so every timezone is rolled over shortly after its local midnight
        scheduler.add_job(
            run_daily_rollover,
            CronTrigger(minute=5),
            id="daily_rollover",
            replace_existing=True
        )

    logger.info(f"Scheduler configured with {len(scheduler.get_jobs())} job(s)")
    return scheduler
