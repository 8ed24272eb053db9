"""
Available Asset Model

Catalog of tradable symbols and their asset type.
The asset type decides which quote provider serves a symbol.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime

from app.database import Base

class AvailableAsset(Base):
    """Available asset model for symbol metadata."""

    __tablename__ = "available_assets"

    id = Column(Integer, primary_key=True, index=True)
    symbol = Column(String, unique=True, nullable=False, index=True)  # e.g., "AAPL", "BTC"
    name = Column(String, nullable=False, index=True)
    asset_type = Column(String, nullable=False, index=True)  # "stock" | "crypto" | "future"
    current_price = Column(Float, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_updated = Column(DateTime, default=datetime.utcnow, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<AvailableAsset(symbol={self.symbol}, type={self.asset_type})>"
