#!/usr/bin/env python3
"""
Worker Dyno - Scheduler Service
Runs the scheduled tasks independently from the web dynos.
"""

import asyncio
import logging
import os
import signal
import sys

from morningproof.tasks.scheduler import setup_scheduler

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [SCHEDULER] %(levelname)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


async def main():
    """Main scheduler worker entry point"""
    development_mode = os.getenv("DEVELOPMENT", "false").lower() == "true"
    logger.info(f"Starting MorningProof scheduler worker ({'development' if development_mode else 'production'})")

    scheduler = setup_scheduler(development_mode=development_mode)
    scheduler.start()
    try:
        for job in scheduler.get_jobs():
            logger.info(f"   • {job.id}: {job.trigger} (next: {getattr(job, 'next_run_time', 'Unknown')})")

        while True:
            await asyncio.sleep(3600)
            logger.debug("Scheduler worker heartbeat")
    except asyncio.CancelledError:
        logger.info("Received shutdown signal (CancelledError)")
    finally:
        logger.info("Shutting down scheduler...")
        scheduler.shutdown(wait=True)


def signal_handler(signum, frame):
    """Handle SIGTERM from dyno restarts"""
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    raise KeyboardInterrupt()


if __name__ == "__main__":
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Scheduler worker terminated gracefully")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Scheduler worker crashed: {e}")
        sys.exit(1)
