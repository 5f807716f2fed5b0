import logging
import os
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from examcore.core.config import settings
from examcore.core.database import SessionLocal
from examcore.core.exceptions import ExamEngineError
from examcore.services.attempt_scheduler import attempt_scheduler

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def sweep_expired_attempts():
    db = SessionLocal()
    try:
        reports = attempt_scheduler.sweep_expired_attempts(db)
        if reports:
            logger.info(f"Expiry sweep timed out {len(reports)} attempt(s)")
    except ExamEngineError as e:
        logger.error(f"Expiry sweep failed: {e.code} {e.message}")
    except Exception as e:
        logger.error(f"Error sweeping expired attempts: {e}", exc_info=True)
    finally:
        db.close()


def start_scheduler():
    if os.getenv("TESTING") == "true":
        logger.info("Scheduler disabled in test environment")
        return

    if not settings.SWEEP_ENABLED:
        logger.info("Expiry sweep disabled by configuration")
        return

    if not scheduler.running:
        scheduler.add_job(
            sweep_expired_attempts,
            'interval',
            seconds=settings.SWEEP_INTERVAL_SECONDS,
            id='sweep_expired_attempts',
            name='Time Out Expired Exam Attempts',
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        scheduler.start()
        logger.info(f"Scheduler started with expiry sweep every {settings.SWEEP_INTERVAL_SECONDS}s")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
