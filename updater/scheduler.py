import logging
from typing import Optional, Sequence

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from schemas.descriptor import SourceDescriptor
from updater.datasets import DATASETS
from updater.service import run_datasets

logger = logging.getLogger(__name__)

JOB_ID = "dataset_updater"


class UpdaterScheduler:
    def __init__(
        self,
        datasets: Optional[Sequence[SourceDescriptor]] = None,
        interval_minutes: Optional[int] = None,
        session_maker=None
    ):
        self.scheduler = AsyncIOScheduler()
        self.datasets = list(datasets) if datasets is not None else list(DATASETS.values())
        self.interval_minutes = interval_minutes or settings.SCHEDULER_INTERVAL_MINUTES
        self.session_maker = session_maker

    async def run_update_job(self):
        """Job to refresh every dataset"""
        logger.info(f"Scheduler: Starting update job for {len(self.datasets)} dataset(s)")
        try:
            outcomes = await run_datasets(self.datasets, self.session_maker)
        except Exception as e:
            logger.error(f"Scheduler: update job failed - {e}")
            return

        failed = [d.name for d, o in zip(self.datasets, outcomes) if isinstance(o, BaseException)]
        if failed:
            logger.error(f"Scheduler: {len(failed)} dataset(s) failed: {', '.join(failed)}")
        else:
            logger.info("Scheduler: update job completed")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_update_job,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Updater scheduler started (every {self.interval_minutes} minutes)")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Updater scheduler stopped")
