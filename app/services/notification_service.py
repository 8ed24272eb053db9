"""
Notification Service

Creates notifications for triggered price alerts.
Implements the dead bounce cooldown and keeps trigger bookkeeping
consistent with the notifications table.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from app.models.alert import Alert
from app.models.notification import Notification
from app.schemas.alert import AlertSnapshot, Quote
from app.services.alert_evaluator import parse_number, percent_change
from app.config import ALERT_COOLDOWN_PERIOD, NOTIFICATION_RETENTION_DAYS
from app.utils.logger import create_logger

logger = create_logger(__name__)


class NotificationService:
    """Service for recording alert notifications."""

    def __init__(
        self,
        db: Session,
        cooldown_period: int = ALERT_COOLDOWN_PERIOD,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        """
        Initialize notification service.

        Args:
            db: SQLAlchemy database session
            cooldown_period: Dead bounce window in seconds
            clock: Returns the current naive UTC time
        """
        self.db = db
        self.cooldown_period = cooldown_period
        self.clock = clock

    def is_in_cooldown(self, alert_id: int, now: Optional[datetime] = None) -> bool:
        """
        Check whether the alert already notified within the cooldown window.

        Args:
            alert_id: Alert to check
            now: Reference time (defaults to clock)

        Returns:
            bool: True if a notification exists for the alert inside the window
        """
        now = now or self.clock()
        window_start = now - timedelta(seconds=self.cooldown_period)

        recent = (
            self.db.query(Notification.id)
            .filter(
                Notification.alert_id == alert_id,
                Notification.created_at > window_start,
            )
            .first()
        )

        if recent is not None:
            logger.debug(f"Alert {alert_id} in cooldown (notified after {window_start.isoformat()})")

        return recent is not None

    def record_trigger(
        self, alert: AlertSnapshot, quote: Quote, now: Optional[datetime] = None
    ) -> Notification:
        """
        Insert the notification and update trigger bookkeeping atomically.

        Args:
            alert: Triggered alert
            quote: Quote that satisfied the condition
            now: Trigger time (defaults to clock)

        Returns:
            Notification: The committed notification row

        Side effects:
            - Inserts a notification row
            - Sets alert.last_triggered = now and increments alert.trigger_count
            - Rolls back both writes if either fails
        """
        now = now or self.clock()
        title, message = self.format_alert_message(alert, quote)

        try:
            notification = Notification(
                user_id=alert.user_id,
                alert_id=alert.id,
                title=title,
                message=message,
                notification_type="price_alert",
                is_read=False,
                created_at=now,
            )
            self.db.add(notification)

            updated = (
                self.db.query(Alert)
                .filter(Alert.id == alert.id)
                .update(
                    {
                        Alert.last_triggered: now,
                        Alert.trigger_count: Alert.trigger_count + 1,
                    },
                    synchronize_session=False,
                )
            )
            if updated != 1:
                raise LookupError(f"Alert {alert.id} no longer exists")

            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Notification created: alert_id={alert.id}, user_id={alert.user_id}, {message}")
        return notification

    def format_alert_message(self, alert: AlertSnapshot, quote: Quote):
        """
        Format notification title and message.

        Returns:
            tuple: (title, message)

        Example:
            ("Price Alert: AAPL", "AAPL rose above $100.00 (current: $101.00)")
        """
        symbol = alert.symbol
        current = parse_number(quote.price)
        threshold = parse_number(alert.threshold_value)
        title = f"Price Alert: {symbol}"

        if alert.alert_type == "percentage_move":
            baseline = parse_number(quote.previous_close)
            move = percent_change(current, baseline)
            sign = "+" if move >= 0 else ""
            message = (
                f"{symbol} moved {sign}{move:.2f}% from previous close "
                f"${baseline:.2f} (current: ${current:.2f})"
            )
        else:
            direction = "rose above" if alert.alert_type == "price_above" else "fell below"
            message = f"{symbol} {direction} ${threshold:.2f} (current: ${current:.2f})"

        return title, message

    def mark_read(self, notification_id: int, user_id: int) -> bool:
        """Mark one of the user's notifications as read."""
        updated = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated == 1

    def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of the user as read."""
        updated = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def unread_count(self, user_id: int) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
            .count()
        )

    def cleanup_old_notifications(
        self, user_id: Optional[int] = None, now: Optional[datetime] = None
    ) -> int:
        """
        Delete notifications older than the retention period.

        Args:
            user_id: Restrict cleanup to one user (all users when None)
            now: Reference time (defaults to clock)

        Returns:
            int: Number of deleted notifications
        """
        now = now or self.clock()
        cutoff = now - timedelta(days=NOTIFICATION_RETENTION_DAYS)

        query = self.db.query(Notification).filter(Notification.created_at < cutoff)
        if user_id is not None:
            query = query.filter(Notification.user_id == user_id)

        try:
            deleted_count = query.delete(synchronize_session=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if deleted_count > 0:
            logger.info(f"Cleaned up {deleted_count} old notification(s)")

        return deleted_count
