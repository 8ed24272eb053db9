"""
Alert Monitoring Background Tasks

Celery tasks for price alert evaluation:
1. check_price_alerts: Runs every minute, evaluates all enabled alerts
2. cleanup_old_notifications: Runs daily, deletes notifications older than 30 days
"""

from redis.exceptions import LockError

from app.celery_app import celery_app
from app.database import SessionLocal
from app.dependencies import get_alert_engine, get_redis_client
from app.services.notification_service import NotificationService
from app.utils.logger import create_logger

logger = create_logger(__name__)

CHECK_LOCK_NAME = "lock:check_price_alerts"
CHECK_LOCK_TIMEOUT = 300  # Matches task_time_limit


def run_alert_check(engine, redis_client) -> dict:
    """
    Run one alert check pass unless another one holds the lock.

    Args:
        engine: AlertEngine instance
        redis_client: Redis client used for the run lock

    Returns:
        dict: Task status with checked / triggered counters
    """
    lock = redis_client.lock(CHECK_LOCK_NAME, timeout=CHECK_LOCK_TIMEOUT, blocking=False)

    if not lock.acquire(blocking=False):
        logger.info("Alert check already running, skipping")
        return {"status": "skipped", "reason": "already_running"}

    try:
        result = engine.run()
    finally:
        try:
            lock.release()
        except LockError as e:
            logger.warning(f"Alert check lock expired before release: {e}")

    return {"status": "success", **result.as_dict()}


@celery_app.task(bind=True)
def check_price_alerts(self):
    """
    Check all active and enabled price alerts.

    - Runs every minute (ALERT_CHECK_INTERVAL)
    - Redis lock keeps passes from overlapping
    - Failures loading the alert set propagate to Celery
    """
    redis_client = get_redis_client()

    try:
        result = run_alert_check(get_alert_engine(), redis_client)
        logger.info(f"Alert check task finished: {result}")
        return result

    except Exception as e:
        logger.error(f"Error in alert check: {e}", exc_info=True)
        raise

    finally:
        redis_client.close()


@celery_app.task(bind=True, max_retries=3)
def cleanup_old_notifications(self):
    """Delete notifications older than the retention period for all users."""
    db = SessionLocal()

    try:
        deleted_count = NotificationService(db).cleanup_old_notifications()
        return {"status": "success", "deleted": deleted_count}

    except Exception as e:
        logger.error(f"Error cleaning up notifications: {e}", exc_info=True)
        raise self.retry(exc=e, countdown=600)

    finally:
        db.close()
