"""
Quote Manager

Routes quote requests to a provider by asset type:
- crypto -> CoinGecko
- stock / future -> Finnhub

Fetches the symbols of one request concurrently and caches quotes in Redis.
"""

import json
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from redis import Redis as RedisClient

from app.exceptions import QuoteProviderError
from app.schemas.alert import Quote
from app.services.quote_providers.base import BaseQuoteProvider
from app.config import STOCK_PRICE_CACHE_TTL
from app.utils.logger import create_logger

logger = create_logger(__name__)


class QuoteManager:
    """Batched quote lookup across providers."""

    # Symbols routed to the crypto provider when no asset type is known
    CRYPTO_SYMBOLS = {
        "BTC", "ETH", "SOL", "ADA", "DOT", "LINK", "LTC", "BCH", "XRP", "XLM", "EOS",
        "TRX", "BNB", "AVAX", "MATIC", "ATOM", "ALGO", "VET", "DOGE", "SHIB", "UNI",
        "AAVE", "COMP", "MKR", "SNX", "YFI", "CRV", "ICP", "NEAR", "FTM", "MANA",
        "SAND", "AXS", "CHZ", "ENJ", "BAT", "ZRX", "KNC", "REN", "LRC", "OMG",
    }

    def __init__(
        self,
        providers: Iterable[BaseQuoteProvider],
        redis: Optional[RedisClient] = None,
        cache_ttl: int = STOCK_PRICE_CACHE_TTL,
        max_workers: int = 5,
    ):
        """
        Initialize quote manager.

        Args:
            providers: Configured quote providers
            redis: Redis client for quote caching (disabled when None)
            cache_ttl: Redis TTL (seconds)
            max_workers: Concurrent provider requests per call
        """
        self.providers: List[BaseQuoteProvider] = list(providers)
        self.redis = redis
        self.cache_ttl = cache_ttl
        self.max_workers = max_workers

    def resolve_asset_type(self, symbol: str, asset_type: Optional[str] = None) -> str:
        if asset_type:
            return asset_type
        return "crypto" if symbol.upper() in self.CRYPTO_SYMBOLS else "stock"

    def provider_for(self, symbol: str, asset_type: Optional[str] = None) -> Optional[BaseQuoteProvider]:
        resolved = self.resolve_asset_type(symbol, asset_type)
        for provider in self.providers:
            if provider.supports(resolved):
                return provider
        return None

    def get_quotes(
        self, symbols: List[str], asset_types: Optional[Dict[str, str]] = None
    ) -> Dict[str, Quote]:
        """
        Get current quotes for several symbols.

        Args:
            symbols: Symbols to quote
            asset_types: Known asset type per symbol

        Returns:
            dict: {symbol: Quote}; symbols without a price are absent

        Raises:
            QuoteProviderError: If every requested symbol failed with an error
        """
        asset_types = asset_types or {}
        quotes: Dict[str, Quote] = {}
        pending = []

        for symbol in symbols:
            cached = self._get_from_cache(symbol)
            if cached:
                quotes[symbol] = cached
            else:
                pending.append(symbol)

        if not pending:
            return quotes

        errors = {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pending))) as executor:
            futures = {
                symbol: executor.submit(self._fetch_quote, symbol, asset_types.get(symbol))
                for symbol in pending
            }
            for symbol, future in futures.items():
                try:
                    quote = future.result()
                except Exception as e:
                    logger.error(f"Quote fetch failed for {symbol}: {e}")
                    errors[symbol] = e
                    continue

                if quote is not None:
                    quotes[symbol] = quote
                    self._set_cache(symbol, quote)

        if errors and len(errors) == len(pending) and not quotes:
            raise QuoteProviderError(
                f"Quote request failed for all symbols: {', '.join(sorted(errors))}"
            )

        return quotes

    def _fetch_quote(self, symbol: str, asset_type: Optional[str]) -> Optional[Quote]:
        provider = self.provider_for(symbol, asset_type)
        if provider is None:
            logger.warning(f"No quote provider configured for {symbol} ({asset_type or 'unknown'})")
            return None
        return provider.get_quote(symbol)

    def _get_from_cache(self, symbol: str) -> Optional[Quote]:
        if self.redis is None:
            return None
        try:
            cached_json = self.redis.get(f"quote:{symbol}")
            if cached_json:
                return Quote.from_cache(json.loads(cached_json))
        except Exception as e:
            logger.error(f"Redis cache read error: {e}")
        return None

    def _set_cache(self, symbol: str, quote: Quote):
        if self.redis is None:
            return
        try:
            self.redis.setex(f"quote:{symbol}", self.cache_ttl, json.dumps(quote.to_cache()))
        except Exception as e:
            logger.error(f"Redis cache write error: {e}")
