"""
Alert Evaluation Service

Evaluates price alerts against current quote data:
1. price_above: trigger when current price is strictly above the threshold
2. price_below: trigger when current price is strictly below the threshold
3. percentage_move: trigger when the move from the previous close reaches N%
"""

import math
from typing import Optional

from app.schemas.alert import AlertSnapshot, Quote
from app.utils.logger import create_logger

logger = create_logger(__name__)


def parse_number(value) -> Optional[float]:
    """
    Convert a stored or provided value to a finite float.

    Returns:
        float or None if the value is missing, non-numeric or not finite
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class AlertEvaluator:
    """Service for evaluating price alert conditions."""

    def should_trigger(self, alert: AlertSnapshot, quote: Optional[Quote]) -> bool:
        """
        Check if alert condition is met.

        Missing quotes, non-numeric prices and unparseable thresholds are
        logged and treated as "no trigger".

        Args:
            alert: Alert to evaluate
            quote: Current quote for the alert's symbol (None if unavailable)

        Returns:
            bool: True if alert should be triggered
        """
        if quote is None:
            logger.info(f"No current price available for {alert.symbol}, skipping alert {alert.id}")
            return False

        current_price = parse_number(quote.price)
        if current_price is None:
            logger.warning(
                f"Non-numeric price {quote.price!r} for {alert.symbol}, skipping alert {alert.id}"
            )
            return False

        threshold = parse_number(alert.threshold_value)
        if threshold is None:
            logger.warning(
                f"Invalid threshold value {alert.threshold_value!r} for alert {alert.id} ({alert.symbol})"
            )
            return False

        alert_type = alert.alert_type

        if alert_type == "price_above":
            return current_price > threshold
        elif alert_type == "price_below":
            return current_price < threshold
        elif alert_type == "percentage_move":
            return self._evaluate_percentage_move(alert, quote, current_price, threshold)
        else:
            logger.warning(f"Unknown alert type: {alert_type} (alert {alert.id})")
            return False

    def _evaluate_percentage_move(
        self, alert: AlertSnapshot, quote: Quote, current_price: float, threshold: float
    ) -> bool:
        """
        Evaluate percentage move from the session baseline.

        The baseline is the previous close reported by the quote provider.
        Providers that do not report one (e.g. CoinGecko, whose 24h change
        is a rolling window) leave the alert untriggerable.

        Example:
        - Previous close: $200.00
        - Current: $189.00
        - Move: -5.5%
        - Threshold: 5
        - Result: TRIGGER
        """
        baseline = parse_number(quote.previous_close)

        if not baseline:
            logger.debug(
                f"No previous close for {alert.symbol}, percentage move alert {alert.id} not evaluated"
            )
            return False

        move_percent = percent_change(current_price, baseline)

        logger.debug(
            f"Percentage move check: {alert.symbol} - "
            f"Prev Close: ${baseline:.2f}, Current: ${current_price:.2f}, "
            f"Move: {move_percent:.2f}%, Threshold: {threshold}%"
        )

        return abs(move_percent) >= threshold


def percent_change(current: float, previous: float) -> float:
    """
    Calculate percentage change.

    Returns:
        float: Percentage change (e.g., -1.41 for 1.41% drop)
    """
    if previous == 0:
        return 0.0

    return ((current - previous) / previous) * 100
