"""
Celery worker entry point
Runs calendar sync and notification tasks off the booking path
"""
import logging
from celery.signals import worker_ready, worker_shutdown

from courtside.config.celery_config import celery_app
from courtside.utils.my_logging import setup_logging

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    """Handle worker startup"""
    logger.info("Celery worker ready")
    logger.info(f"Registered tasks: {sorted(t for t in celery_app.tasks.keys() if t.startswith('courtside.'))}")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    """Handle worker shutdown"""
    logger.info("Celery worker shutting down...")


if __name__ == "__main__":
    # Run worker directly
    celery_app.start([
        'worker',
        '--loglevel=info',
        '--queues=calendar,notifications',
        '--concurrency=4',
        '--max-tasks-per-child=1000'
    ])
