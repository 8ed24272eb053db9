"""
Alert Model

Represents price alerts configured by users.
Supports:
- price_above: current price strictly above the threshold
- price_below: current price strictly below the threshold
- percentage_move: move of at least N% (1-100) from the previous close
"""

from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.database import Base

ALERT_TYPES = ("price_above", "price_below", "percentage_move")


class Alert(Base):
    """Alert model for price alerts."""

    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    symbol = Column(String, nullable=False, index=True)  # stored uppercase
    alert_type = Column(String, nullable=False)
    threshold_value = Column(Float, nullable=False)

    # Alert state
    is_active = Column(Boolean, default=True, nullable=False)
    is_enabled = Column(Boolean, default=True, nullable=False)

    # Trigger bookkeeping, written only by the evaluation engine
    last_triggered = Column(DateTime, nullable=True)
    trigger_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "user_id", "symbol", "alert_type", "threshold_value", name="uq_alert_definition"
        ),
    )

    # Relationships
    user = relationship("User", back_populates="alerts")
    notifications = relationship(
        "Notification", back_populates="alert", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return (
            f"<Alert(id={self.id}, user_id={self.user_id}, "
            f"symbol={self.symbol}, type={self.alert_type}, "
            f"threshold={self.threshold_value}, triggers={self.trigger_count})>"
        )
