"""
Notification Dispatch Service

Delivers created notifications to users over WhatsApp.
Runs after the notification row is committed, so delivery
failures never affect the notification history.
"""

from typing import Optional

from sqlalchemy.orm import Session
from twilio.rest import Client as TwilioClient

from app.models.notification import Notification
from app.models.user import User
from app.config import TWILIO_WHATSAPP_NUMBER
from app.utils.logger import create_logger

logger = create_logger(__name__)


class NotificationDispatcher:
    """Service for delivering notifications via WhatsApp."""

    def __init__(self, twilio_client: Optional[TwilioClient], from_number: Optional[str] = TWILIO_WHATSAPP_NUMBER):
        """
        Initialize dispatcher.

        Args:
            twilio_client: Twilio client for sending messages (delivery disabled when None)
            from_number: Sender WhatsApp number
        """
        self.twilio = twilio_client
        self.from_number = from_number

    def dispatch(self, db: Session, notification: Notification) -> bool:
        """
        Send a notification to its owner.

        Args:
            db: SQLAlchemy database session
            notification: Committed notification row

        Returns:
            bool: True if a message was handed to Twilio
        """
        if self.twilio is None or not self.from_number:
            logger.debug("WhatsApp delivery not configured, skipping dispatch")
            return False

        user = db.get(User, notification.user_id)

        if user is None or not user.notifications_enabled:
            logger.debug(f"Notifications disabled for user {notification.user_id}")
            return False

        if not user.whatsapp_number:
            logger.debug(f"No delivery channel for user {user.id}")
            return False

        to_number = user.whatsapp_number
        if not to_number.startswith("whatsapp:"):
            to_number = f"whatsapp:{to_number}"

        try:
            response = self.twilio.messages.create(
                from_=f"whatsapp:{self.from_number}",
                body=f"{notification.title}\n\n{notification.message}",
                to=to_number,
            )
        except Exception as e:
            logger.error(f"Failed to deliver notification {notification.id} to user {user.id}: {e}")
            return False

        logger.info(f"Notification {notification.id} delivered: SID={response.sid}")
        return True
