"""
Celery Application Configuration

Configures Celery for background task processing with Redis broker.
Defines beat schedule for the periodic alert check and notification cleanup.
"""

from celery import Celery
from celery.schedules import crontab
from app.config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, ALERT_CHECK_INTERVAL

# Create Celery app
celery_app = Celery(
    "watchlist_alerts",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["app.tasks.alert_monitoring"],  # Import task modules
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    worker_prefetch_multiplier=1,  # Process one task at a time
    worker_max_tasks_per_child=100,  # Restart worker after 100 tasks (prevent memory leaks)
)

# Beat schedule (periodic tasks)
celery_app.conf.beat_schedule = {
    # Evaluate all enabled alerts
    "check-price-alerts": {
        "task": "app.tasks.alert_monitoring.check_price_alerts",
        "schedule": float(ALERT_CHECK_INTERVAL),  # Every 1 minute by default
        "options": {
            "expires": max(ALERT_CHECK_INTERVAL - 5, 1),  # Drop stale runs instead of stacking them
        },
    },

    # Delete notifications past the retention period (daily at 03:00 UTC)
    "cleanup-old-notifications": {
        "task": "app.tasks.alert_monitoring.cleanup_old_notifications",
        "schedule": crontab(hour=3, minute=0),
    },
}

if __name__ == "__main__":
    celery_app.start()
