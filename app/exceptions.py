"""
Application Exceptions

Domain errors raised by the alert services and quote providers.
"""


class WatchlistError(Exception):
    """Base class for application errors."""


class AlertValidationError(WatchlistError):
    """Alert definition is invalid (type, threshold or symbol)."""


class DuplicateAlertError(WatchlistError):
    """An identical alert already exists for the user."""


class AlertLimitExceeded(WatchlistError):
    """User reached the maximum number of alerts."""


class AlertNotFoundError(WatchlistError):
    """Alert does not exist or belongs to another user."""


class QuoteProviderError(WatchlistError):
    """A quote request failed for a whole batch of symbols."""


class QuoteFetchTimeout(QuoteProviderError):
    """A batched quote request did not finish within its deadline."""
