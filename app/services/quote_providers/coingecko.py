"""
CoinGecko Quote Provider

Serves cryptocurrency quotes from the CoinGecko REST API.
CoinGecko addresses coins by id, so symbols are mapped first.
"""

from datetime import datetime
from typing import Dict, Optional

from app.schemas.alert import Quote
from app.services.quote_providers.base import BaseQuoteProvider
from app.utils.logger import create_logger

logger = create_logger(__name__)


class CoinGeckoProvider(BaseQuoteProvider):
    """Quote provider for cryptocurrencies."""

    name = "CoinGecko"
    asset_types = ("crypto",)

    # Known coin ids, avoids a /search round trip for common symbols
    COMMON_COINS = {
        "BTC": "bitcoin", "ETH": "ethereum", "SOL": "solana", "ADA": "cardano",
        "DOT": "polkadot", "LINK": "chainlink", "LTC": "litecoin", "BCH": "bitcoin-cash",
        "XRP": "ripple", "XLM": "stellar", "EOS": "eos", "TRX": "tron",
        "BNB": "binancecoin", "AVAX": "avalanche-2", "MATIC": "matic-network",
        "ATOM": "cosmos", "ALGO": "algorand", "VET": "vechain", "DOGE": "dogecoin",
        "SHIB": "shiba-inu", "UNI": "uniswap", "AAVE": "aave", "COMP": "compound-governance-token",
        "MKR": "maker", "SNX": "havven", "YFI": "yearn-finance", "CRV": "curve-dao-token",
        "ICP": "internet-computer", "NEAR": "near", "FTM": "fantom", "MANA": "decentraland",
        "SAND": "the-sandbox", "AXS": "axie-infinity", "CHZ": "chiliz", "ENJ": "enjincoin",
        "BAT": "basic-attention-token", "ZRX": "0x", "KNC": "kyber-network-crystal",
        "REN": "republic-protocol", "LRC": "loopring", "OMG": "omisego",
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._coin_ids: Dict[str, Optional[str]] = {}

    @property
    def _headers(self) -> dict:
        return {"x-cg-demo-api-key": self.api_key} if self.api_key else {}

    def get_quote(self, symbol: str) -> Optional[Quote]:
        """
        Fetch a quote from ``/simple/price``.

        The 24h change is kept as ``change_percent``; no previous close is
        reported because the 24h window is not a session baseline.
        """
        coin_id = self.get_coin_id(symbol)
        if not coin_id:
            logger.info(f"No CoinGecko coin id for {symbol}")
            return None

        data = self._get_json(
            "/simple/price",
            {"ids": coin_id, "vs_currencies": "usd", "include_24hr_change": "true"},
            headers=self._headers,
        )

        coin_data = data.get(coin_id)
        if not coin_data or not coin_data.get("usd"):
            return None

        return Quote(
            symbol=symbol.upper(),
            price=coin_data["usd"],
            as_of=datetime.utcnow(),
            previous_close=None,
            change_percent=coin_data.get("usd_24h_change"),
        )

    def get_coin_id(self, symbol: str) -> Optional[str]:
        """Resolve a ticker symbol to a CoinGecko coin id."""
        upper_symbol = symbol.upper()

        if upper_symbol in self.COMMON_COINS:
            return self.COMMON_COINS[upper_symbol]

        if upper_symbol in self._coin_ids:
            return self._coin_ids[upper_symbol]

        data = self._get_json("/search", {"query": upper_symbol}, headers=self._headers)
        coin_id = None
        for coin in data.get("coins", []):
            if str(coin.get("symbol", "")).upper() == upper_symbol:
                coin_id = coin.get("id")
                break

        self._coin_ids[upper_symbol] = coin_id
        return coin_id
