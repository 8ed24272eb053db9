"""
Base Quote Provider

Abstract base class for all quote providers.
"""

from abc import ABC, abstractmethod
from typing import Optional

import requests

from app.schemas.alert import Quote

REQUEST_HEADERS = {
    "User-Agent": "watchlist-alerts/1.0",
    "Accept": "application/json",
}


class BaseQuoteProvider(ABC):
    """Abstract base class for quote providers."""

    name = "base"
    asset_types = ()

    def __init__(self, api_key: str, base_url: str, timeout: float = 10, session=None):
        """
        Initialize quote provider.

        Args:
            api_key: Provider API key (may be empty for keyless tiers)
            base_url: Provider REST base URL
            timeout: HTTP timeout per request (seconds)
            session: Optional requests session
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def supports(self, asset_type: str) -> bool:
        return asset_type in self.asset_types

    @abstractmethod
    def get_quote(self, symbol: str) -> Optional[Quote]:
        """
        Fetch the current quote for one symbol.

        Returns:
            Quote or None if the provider has no price for the symbol

        Raises:
            requests.RequestException: If the request fails
        """
        pass

    def _get_json(self, path: str, params: dict, headers: Optional[dict] = None):
        response = self.http.get(
            f"{self.base_url}{path}",
            params=params,
            headers={**REQUEST_HEADERS, **(headers or {})},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()
