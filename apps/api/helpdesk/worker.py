"""
Background worker for processing scheduled jobs.

Usage:
    python -m helpdesk.worker

The worker polls for pending jobs, claims them and runs their handlers.
For production, run this as a separate process (e.g., systemd service, Docker container).
"""

import asyncio
import logging

from helpdesk.core.config import settings
from helpdesk.db.session import SessionLocal
from helpdesk.jobs.runner import execute_claimed_job
from helpdesk.services import job_service

logger = logging.getLogger(__name__)


async def process_pending_jobs(batch_size: int) -> int:
    """Claim and run one batch of due jobs. Returns how many ran."""
    with SessionLocal() as db:
        jobs = job_service.claim_pending_jobs(db, limit=batch_size)
        if jobs:
            logger.info("Claimed %d pending jobs", len(jobs))
        for job in jobs:
            await execute_claimed_job(db, job)
        return len(jobs)


async def worker_loop(
    poll_interval: int = settings.WORKER_POLL_INTERVAL,
    batch_size: int = settings.WORKER_BATCH_SIZE,
) -> None:
    """Main worker loop - polls for and processes pending jobs."""
    logger.info(
        "Worker starting (poll interval: %ss, batch size: %s)", poll_interval, batch_size
    )
    while True:
        try:
            await process_pending_jobs(batch_size)
        except Exception:
            logger.exception("Error in worker loop")
        await asyncio.sleep(poll_interval)


def main() -> None:
    """Entry point for the worker."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Worker shutting down")


if __name__ == "__main__":
    main()
