from functools import lru_cache
from typing import Optional

from twilio.rest import Client as TwilioClient
import redis
from redis import Redis as RedisClient

from app.config import (
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    REDIS_HOSTNAME,
    REDIS_PORT,
    FINNHUB_API_KEY,
    FINNHUB_BASE_URL,
    COINGECKO_API_KEY,
    COINGECKO_BASE_URL,
)
from app.database import SessionLocal
from app.services.alert_engine import AlertEngine
from app.services.dispatch_service import NotificationDispatcher
from app.services.quote_providers import CoinGeckoProvider, FinnhubProvider, QuoteManager


def get_twilio_client() -> Optional[TwilioClient]:
    """
    Dependency to provide a Twilio client instance.

    Returns:
        TwilioClient: A Twilio client configured with the application's credentials,
        or None when WhatsApp delivery is not configured.
    """
    if not TWILIO_ACCOUNT_SID or not TWILIO_AUTH_TOKEN:
        return None
    return TwilioClient(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN)


def get_redis_client() -> RedisClient:
    """
    Dependency to provide a redis client instance.

    Return:
        RedisClient: A redis client configured with the application's host params.
    """
    return redis.StrictRedis(
        host=REDIS_HOSTNAME,
        port=REDIS_PORT,
        decode_responses=True,
    )


def get_quote_manager(redis_client: Optional[RedisClient] = None) -> QuoteManager:
    """
    Build the quote manager with every configured provider.

    Finnhub requires an API key; CoinGecko also works keyless (rate limited).
    """
    providers = []
    if FINNHUB_API_KEY:
        providers.append(FinnhubProvider(FINNHUB_API_KEY, FINNHUB_BASE_URL))
    providers.append(CoinGeckoProvider(COINGECKO_API_KEY, COINGECKO_BASE_URL))
    return QuoteManager(providers, redis=redis_client)


@lru_cache
def get_alert_engine() -> AlertEngine:
    """
    Dependency to provide the process-wide alert engine.

    Built once per process with its collaborators injected.
    """
    return AlertEngine(
        session_factory=SessionLocal,
        quote_provider=get_quote_manager(get_redis_client()),
        dispatcher=NotificationDispatcher(get_twilio_client()),
    )
