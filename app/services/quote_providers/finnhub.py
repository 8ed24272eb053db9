"""
Finnhub Quote Provider

Serves stock and futures quotes from the Finnhub REST API.
"""

from datetime import datetime
from typing import Optional

from app.schemas.alert import Quote
from app.services.quote_providers.base import BaseQuoteProvider
from app.utils.logger import create_logger

logger = create_logger(__name__)


class FinnhubProvider(BaseQuoteProvider):
    """Quote provider for stocks and futures."""

    name = "Finnhub"
    asset_types = ("stock", "future")

    def get_quote(self, symbol: str) -> Optional[Quote]:
        """
        Fetch a quote from ``/quote``.

        Response fields used:
        - c: current price (0 or missing means unknown symbol)
        - pc: previous close
        - dp: percent change from previous close
        """
        data = self._get_json("/quote", {"symbol": symbol, "token": self.api_key})

        current_price = data.get("c")
        if not current_price:
            logger.info(f"Finnhub returned no price for {symbol}")
            return None

        return Quote(
            symbol=symbol,
            price=current_price,
            as_of=datetime.utcnow(),
            previous_close=data.get("pc") or None,
            change_percent=data.get("dp"),
        )
