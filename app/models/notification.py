"""
Notification Model

Records every notify decision made by the alert evaluation engine.
Also serves as the dead bounce history for the cooldown check.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship

from app.database import Base


class Notification(Base):
    """Notification model for triggered alerts."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    alert_id = Column(Integer, ForeignKey("alerts.id", ondelete="CASCADE"), nullable=False)

    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    notification_type = Column(String, default="price_alert", nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        # For cooldown queries: "any notification for alert 42 in the last 15 minutes"
        Index("ix_notifications_alert_created", "alert_id", "created_at"),
    )

    # Relationships
    user = relationship("User", back_populates="notifications")
    alert = relationship("Alert", back_populates="notifications")

    def __repr__(self):
        return (
            f"<Notification(id={self.id}, alert_id={self.alert_id}, "
            f"created_at={self.created_at}, read={self.is_read})>"
        )
