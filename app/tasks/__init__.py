"""
Background Tasks

Celery tasks for periodic alert evaluation and notification cleanup.
"""

from app.tasks.alert_monitoring import (
    check_price_alerts,
    cleanup_old_notifications,
)

__all__ = [
    "check_price_alerts",
    "cleanup_old_notifications",
]
