# courtside/config/celery_config.py
"""Celery configuration and task routing"""
from celery import Celery
from kombu import Queue

from courtside.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure Celery application"""

    celery_app = Celery(
        "courtside_booking",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
    )

    # Configure Celery
    celery_app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,

        # Task routing
        task_routes={
            "courtside.tasks.calendar_tasks.*": {"queue": "calendar"},
            "courtside.tasks.email_tasks.*": {"queue": "notifications"},
        },

        # Queue definitions
        task_queues=(
            Queue("calendar", routing_key="calendar"),
            Queue("notifications", routing_key="notifications"),
        ),

        # Worker settings
        worker_max_tasks_per_child=1000,
        worker_prefetch_multiplier=1,
        task_acks_late=True,

        # Retry settings
        task_retry_max_retries=3,
        task_retry_delay=60,  # 1 minute

        broker_connection_retry_on_startup=True,
    )

    # Auto-discover tasks
    celery_app.autodiscover_tasks([
        "courtside.tasks.calendar_tasks",
        "courtside.tasks.email_tasks",
    ])

    return celery_app


# Create the Celery app instance
celery_app = create_celery_app()
