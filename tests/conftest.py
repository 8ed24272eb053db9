"""Shared fixtures: in-memory database, controllable clock and fake quote provider."""

import os
import time
from datetime import datetime, timedelta

# Configure the application before any ``app`` module is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["LOG_PATH"] = ""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, enable_sqlite_foreign_keys
from app.exceptions import QuoteProviderError
from app.models import Alert, AvailableAsset, Notification, User  # noqa: F401
from app.schemas.alert import Quote
from app.services.alert_engine import AlertEngine

T0 = datetime(2026, 3, 2, 15, 0, 0)


class MutableClock:
    """Clock returning a fixed time that tests move forward explicitly."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeQuoteProvider:
    """Records every batched request and answers from a price table."""

    def __init__(self, prices=None, previous_closes=None, fail_calls=(), slow_calls=(), delay=0.5):
        self.prices = dict(prices or {})
        self.previous_closes = dict(previous_closes or {})
        self.fail_calls = set(fail_calls)
        self.slow_calls = set(slow_calls)
        self.delay = delay
        self.calls = []

    def get_quotes(self, symbols, asset_types=None):
        self.calls.append(list(symbols))
        call_number = len(self.calls)

        if call_number in self.fail_calls:
            raise QuoteProviderError("provider unavailable")
        if call_number in self.slow_calls:
            time.sleep(self.delay)

        return {
            symbol: Quote(
                symbol=symbol,
                price=self.prices[symbol],
                as_of=T0,
                previous_close=self.previous_closes.get(symbol),
            )
            for symbol in symbols
            if symbol in self.prices
        }


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def clock():
    return MutableClock()


@pytest.fixture()
def user(db):
    user = User(email="trader@example.com", first_name="Test", whatsapp_number="+15551230000")
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def make_alert(db, user):
    """Create alerts with strictly increasing creation times."""
    created = []

    def _make_alert(symbol="AAPL", alert_type="price_above", threshold_value=100.0, **kwargs):
        alert = Alert(
            user_id=kwargs.pop("user_id", user.id),
            symbol=symbol,
            alert_type=alert_type,
            threshold_value=threshold_value,
            created_at=kwargs.pop("created_at", T0 - timedelta(days=1) + timedelta(seconds=len(created))),
            **kwargs,
        )
        db.add(alert)
        db.commit()
        created.append(alert)
        return alert

    return _make_alert


@pytest.fixture()
def make_engine(session_factory, clock):
    """Build an AlertEngine wired to the test database with no real sleeping."""
    sleeps = []

    def _make_engine(provider, **kwargs):
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("sleep", sleeps.append)
        engine = AlertEngine(session_factory, provider, **kwargs)
        engine.sleeps = sleeps
        return engine

    return _make_engine
