"""
Alert Service

Alert lifecycle operations:
- create with validation, duplicate check and per-user cap
- enable / disable
- threshold update
- delete (cascades to notifications)
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.exceptions import (
    AlertLimitExceeded,
    AlertNotFoundError,
    AlertValidationError,
    DuplicateAlertError,
)
from app.models.alert import Alert, ALERT_TYPES
from app.services.alert_evaluator import parse_number
from app.config import MAX_ALERTS_PER_USER
from app.utils.logger import create_logger

logger = create_logger(__name__)


def validate_threshold(alert_type: str, threshold_value) -> float:
    """
    Parse and validate an alert threshold.

    Raises:
        AlertValidationError: If the threshold is not a positive number,
            or outside 1-100 for percentage_move alerts
    """
    threshold = parse_number(threshold_value)

    if threshold is None or threshold <= 0:
        raise AlertValidationError("Invalid threshold value")

    if alert_type == "percentage_move" and not 1 <= threshold <= 100:
        raise AlertValidationError("Percentage must be between 1% and 100%")

    return threshold


class AlertService:
    """Service for managing user alerts."""

    def __init__(self, db: Session, max_alerts: int = MAX_ALERTS_PER_USER):
        self.db = db
        self.max_alerts = max_alerts

    def create_alert(self, user_id: int, symbol: str, alert_type: str, threshold_value) -> Alert:
        """
        Create a new alert.

        Args:
            user_id: Owner
            symbol: Asset symbol (stored uppercase)
            alert_type: price_above, price_below or percentage_move
            threshold_value: Price level, or percent for percentage_move

        Returns:
            Alert: The created alert

        Raises:
            AlertValidationError: Missing fields, bad type or bad threshold
            AlertLimitExceeded: User already has the maximum number of alerts
            DuplicateAlertError: Identical alert already exists
        """
        symbol = (symbol or "").strip().upper()

        if not symbol or not alert_type or threshold_value in (None, ""):
            raise AlertValidationError("Missing required fields: symbol, alert_type, threshold_value")

        if alert_type not in ALERT_TYPES:
            raise AlertValidationError(f"Invalid alert type: {alert_type}")

        threshold = validate_threshold(alert_type, threshold_value)

        if self.count_alerts(user_id) >= self.max_alerts:
            raise AlertLimitExceeded(f"Maximum alert limit reached ({self.max_alerts} alerts)")

        if self._find_duplicate(user_id, symbol, alert_type, threshold) is not None:
            raise DuplicateAlertError("An identical alert already exists")

        now = datetime.utcnow()
        alert = Alert(
            user_id=user_id,
            symbol=symbol,
            alert_type=alert_type,
            threshold_value=threshold,
            is_active=True,
            is_enabled=True,
            trigger_count=0,
            created_at=now,
            updated_at=now,
        )
        self.db.add(alert)
        self.db.commit()
        self.db.refresh(alert)

        logger.info(
            f"Alert created: id={alert.id}, user_id={user_id}, "
            f"{symbol} {alert_type} {threshold}"
        )
        return alert

    def list_alerts(self, user_id: int, symbol: Optional[str] = None) -> List[Alert]:
        query = self.db.query(Alert).filter(Alert.user_id == user_id)
        if symbol:
            query = query.filter(Alert.symbol == symbol.upper())
        return query.order_by(Alert.created_at.desc()).all()

    def count_alerts(self, user_id: int) -> int:
        return self.db.query(Alert).filter(Alert.user_id == user_id).count()

    def get_alert(self, alert_id: int, user_id: int) -> Alert:
        alert = (
            self.db.query(Alert)
            .filter(Alert.id == alert_id, Alert.user_id == user_id)
            .first()
        )
        if alert is None:
            raise AlertNotFoundError(f"Alert {alert_id} not found")
        return alert

    def set_enabled(self, alert_id: int, user_id: int, enabled: bool) -> Alert:
        alert = self.get_alert(alert_id, user_id)
        alert.is_enabled = enabled
        alert.updated_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"Alert {alert_id} {'enabled' if enabled else 'disabled'}")
        return alert

    def update_threshold(self, alert_id: int, user_id: int, threshold_value) -> Alert:
        """
        Change the threshold of an existing alert.

        Raises:
            AlertValidationError: Invalid threshold
            DuplicateAlertError: New threshold collides with another alert
        """
        alert = self.get_alert(alert_id, user_id)
        threshold = validate_threshold(alert.alert_type, threshold_value)

        duplicate = self._find_duplicate(user_id, alert.symbol, alert.alert_type, threshold)
        if duplicate is not None and duplicate.id != alert.id:
            raise DuplicateAlertError("An identical alert already exists")

        alert.threshold_value = threshold
        alert.updated_at = datetime.utcnow()
        self.db.commit()
        return alert

    def delete_alert(self, alert_id: int, user_id: int) -> None:
        alert = self.get_alert(alert_id, user_id)
        self.db.delete(alert)
        self.db.commit()
        logger.info(f"Alert {alert_id} deleted")

    def _find_duplicate(self, user_id: int, symbol: str, alert_type: str, threshold: float):
        return (
            self.db.query(Alert)
            .filter(
                Alert.user_id == user_id,
                Alert.symbol == symbol,
                Alert.alert_type == alert_type,
                Alert.threshold_value == threshold,
            )
            .first()
        )
