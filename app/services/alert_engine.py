"""
Alert Evaluation Engine

Runs one alert check pass:
1. Load all active and enabled alerts, oldest first
2. Split them into fixed-size batches
3. Fetch one batched quote request per batch (bounded by a timeout)
4. Evaluate each alert and apply the dead bounce cooldown
5. Record notifications and trigger bookkeeping, then dispatch delivery

Failures are contained at the smallest scope possible: a failed quote
request skips its batch, a failed write skips its alert. Only a failure to
load the alert set is raised to the caller.
"""

import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from app.exceptions import QuoteFetchTimeout
from app.models.alert import Alert
from app.models.available_asset import AvailableAsset
from app.schemas.alert import AlertSnapshot, CheckResult, Quote
from app.services.alert_evaluator import AlertEvaluator
from app.services.dispatch_service import NotificationDispatcher
from app.services.notification_service import NotificationService
from app.config import (
    ALERT_BATCH_SIZE,
    ALERT_BATCH_DELAY_MS,
    ALERT_COOLDOWN_PERIOD,
    QUOTE_REQUEST_TIMEOUT,
)
from app.utils.logger import create_logger

logger = create_logger(__name__)


class AlertEngine:
    """Batch evaluator for price alerts."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        quote_provider,
        dispatcher: Optional[NotificationDispatcher] = None,
        evaluator: Optional[AlertEvaluator] = None,
        batch_size: int = ALERT_BATCH_SIZE,
        batch_delay: float = ALERT_BATCH_DELAY_MS / 1000,
        fetch_timeout: float = QUOTE_REQUEST_TIMEOUT,
        cooldown_period: int = ALERT_COOLDOWN_PERIOD,
        clock: Callable[[], datetime] = datetime.utcnow,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the engine.

        Args:
            session_factory: Creates a SQLAlchemy session per pass
            quote_provider: Object exposing ``get_quotes(symbols, asset_types)``
            dispatcher: Delivers committed notifications (optional)
            evaluator: Alert condition evaluator
            batch_size: Alerts per quote request
            batch_delay: Pause between batches (seconds)
            fetch_timeout: Deadline for one batched quote request (seconds)
            cooldown_period: Dead bounce window (seconds)
            clock: Returns the current naive UTC time
            sleep: Sleep function used for the inter-batch delay
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.session_factory = session_factory
        self.quote_provider = quote_provider
        self.dispatcher = dispatcher
        self.evaluator = evaluator or AlertEvaluator()
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.fetch_timeout = fetch_timeout
        self.cooldown_period = cooldown_period
        self.clock = clock
        self.sleep = sleep

    def run(self) -> CheckResult:
        """
        Run one evaluation pass.

        Returns:
            CheckResult: checked / triggered counters and skip reasons

        Raises:
            Exception: If the alert set cannot be loaded
        """
        db = self.session_factory()
        try:
            return self._run(db)
        finally:
            db.close()

    def load_alerts(self, db: Session) -> List[AlertSnapshot]:
        """Load active and enabled alerts with their asset type, oldest first."""
        rows = (
            db.query(Alert, AvailableAsset.asset_type)
            .outerjoin(AvailableAsset, AvailableAsset.symbol == Alert.symbol)
            .filter(Alert.is_active == True, Alert.is_enabled == True)  # noqa: E712
            .order_by(Alert.created_at.asc(), Alert.id.asc())
            .all()
        )
        return [AlertSnapshot.from_row(alert, asset_type) for alert, asset_type in rows]

    def _run(self, db: Session) -> CheckResult:
        logger.info("Starting alert check process")

        alerts = self.load_alerts(db)
        result = CheckResult()

        if not alerts:
            logger.info("No active alerts to check")
            return result

        batches = [
            alerts[i:i + self.batch_size] for i in range(0, len(alerts), self.batch_size)
        ]
        logger.info(f"Found {len(alerts)} active alert(s) in {len(batches)} batch(es)")

        notifier = NotificationService(db, cooldown_period=self.cooldown_period, clock=self.clock)

        for index, batch in enumerate(batches):
            if index > 0 and self.batch_delay > 0:
                self.sleep(self.batch_delay)

            symbols = list(dict.fromkeys(alert.symbol for alert in batch))
            asset_types = {alert.symbol: alert.asset_type for alert in batch if alert.asset_type}

            try:
                logger.debug(f"Fetching quotes for symbols: {', '.join(symbols)}")
                quotes = self._fetch_quotes(symbols, asset_types)
            except Exception as e:
                logger.error(f"Error fetching quotes for batch {index + 1} ({', '.join(symbols)}): {e}")
                result.skipped_batches += 1
                result.skipped.append(f"batch {index + 1}: quote fetch failed ({e})")
                continue

            for alert in batch:
                result.checked += 1
                try:
                    if self._process_alert(db, notifier, alert, quotes.get(alert.symbol), result):
                        result.triggered += 1
                except Exception as e:
                    logger.error(f"Error processing alert {alert.id} ({alert.symbol}): {e}", exc_info=True)
                    db.rollback()
                    result.skipped.append(f"alert {alert.id}: {e}")

        logger.info(
            f"Alert check completed: {result.checked} checked, {result.triggered} triggered, "
            f"{result.skipped_batches} batch(es) skipped"
        )
        return result

    def _fetch_quotes(self, symbols: List[str], asset_types: Dict[str, str]) -> Dict[str, Quote]:
        """
        Fetch quotes for one batch, bounded by ``fetch_timeout``.

        Raises:
            QuoteFetchTimeout: If the request does not finish in time
        """
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self.quote_provider.get_quotes, symbols, asset_types)
        try:
            return future.result(timeout=self.fetch_timeout)
        except FutureTimeoutError:
            raise QuoteFetchTimeout(f"Quote request timed out after {self.fetch_timeout}s")
        finally:
            executor.shutdown(wait=False)

    def _process_alert(
        self,
        db: Session,
        notifier: NotificationService,
        alert: AlertSnapshot,
        quote: Optional[Quote],
        result: CheckResult,
    ) -> bool:
        """
        Evaluate one alert and record the notification when it fires.

        Returns:
            bool: True if a notification was created
        """
        if quote is None:
            result.skipped.append(f"alert {alert.id}: no price for {alert.symbol}")

        if not self.evaluator.should_trigger(alert, quote):
            return False

        now = self.clock()

        if notifier.is_in_cooldown(alert.id, now):
            logger.info(f"Alert {alert.id} for {alert.symbol} suppressed by cooldown")
            return False

        notification = notifier.record_trigger(alert, quote, now)
        logger.info(
            f"Alert triggered for {alert.symbol}: {alert.alert_type} {alert.threshold_value} "
            f"(current: {quote.price})"
        )

        self._dispatch(db, notification)
        return True

    def _dispatch(self, db: Session, notification) -> None:
        if self.dispatcher is None:
            return
        try:
            self.dispatcher.dispatch(db, notification)
        except Exception as e:
            logger.error(f"Notification dispatch failed for notification {notification.id}: {e}")
