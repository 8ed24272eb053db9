"""
Quote Providers

Provider strategies selected by asset type (stock, crypto, future).
"""

from app.services.quote_providers.base import BaseQuoteProvider
from app.services.quote_providers.finnhub import FinnhubProvider
from app.services.quote_providers.coingecko import CoinGeckoProvider
from app.services.quote_providers.manager import QuoteManager

__all__ = ["BaseQuoteProvider", "FinnhubProvider", "CoinGeckoProvider", "QuoteManager"]
