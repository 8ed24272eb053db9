"""
Alert Schemas

Typed structures crossing the persistence and provider boundaries,
plus the response models of the alert check endpoint.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Quote:
    """Current quote for one symbol as returned by a quote provider."""

    symbol: str
    price: Any
    as_of: datetime
    previous_close: Optional[float] = None
    change_percent: Optional[float] = None

    def to_cache(self) -> dict:
        return {
            "symbol": self.symbol,
            "price": self.price,
            "as_of": self.as_of.isoformat(),
            "previous_close": self.previous_close,
            "change_percent": self.change_percent,
        }

    @classmethod
    def from_cache(cls, data: dict) -> "Quote":
        return cls(
            symbol=data["symbol"],
            price=data["price"],
            as_of=datetime.fromisoformat(data["as_of"]),
            previous_close=data.get("previous_close"),
            change_percent=data.get("change_percent"),
        )


@dataclass(frozen=True)
class AlertSnapshot:
    """
    Read-only view of an alert row used by the evaluation engine.

    ``threshold_value`` is kept as stored; parsing happens during evaluation
    so that a corrupt value skips only its own alert.
    """

    id: int
    user_id: int
    symbol: str
    alert_type: str
    threshold_value: Any
    created_at: datetime
    asset_type: Optional[str] = None

    @classmethod
    def from_row(cls, alert, asset_type: Optional[str] = None) -> "AlertSnapshot":
        return cls(
            id=alert.id,
            user_id=alert.user_id,
            symbol=str(alert.symbol).upper(),
            alert_type=str(alert.alert_type),
            threshold_value=alert.threshold_value,
            created_at=alert.created_at,
            asset_type=asset_type,
        )


@dataclass
class CheckResult:
    """Aggregate counters of one evaluation pass."""

    checked: int = 0
    triggered: int = 0
    skipped_batches: int = 0
    skipped: List[str] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"checked": self.checked, "triggered": self.triggered}


class AlertCheckResponse(BaseModel):
    message: str = Field(..., description="Outcome of the alert check pass.")
    checked: int = Field(..., description="Number of alerts evaluated.")
    triggered: int = Field(..., description="Number of notifications created.")
