"""
Database Models

All SQLAlchemy models for the application.
"""

from app.models.user import User
from app.models.available_asset import AvailableAsset
from app.models.alert import Alert
from app.models.notification import Notification

__all__ = ["User", "AvailableAsset", "Alert", "Notification"]
