"""Tests for notification bookkeeping, formatting and cleanup."""

from datetime import timedelta

import pytest

from app.models import Alert, Notification
from app.schemas.alert import AlertSnapshot, Quote
from app.services.notification_service import NotificationService
from tests.conftest import T0


@pytest.fixture()
def service(db, clock):
    return NotificationService(db, cooldown_period=900, clock=clock)


def _snapshot(alert):
    return AlertSnapshot.from_row(alert)


def _add_notification(db, alert, created_at, is_read=False):
    notification = Notification(
        user_id=alert.user_id,
        alert_id=alert.id,
        title=f"Price Alert: {alert.symbol}",
        message="test",
        is_read=is_read,
        created_at=created_at,
    )
    db.add(notification)
    db.commit()
    return notification


def test_record_trigger_writes_notification_and_bookkeeping(db, service, make_alert, clock):
    alert = make_alert("AAPL", "price_above", 100)

    notification = service.record_trigger(_snapshot(alert), Quote("AAPL", 101, T0))

    db.expire_all()
    stored = db.get(Alert, alert.id)
    assert stored.trigger_count == 1
    assert stored.last_triggered == clock.now
    assert notification.created_at == clock.now
    assert notification.message == "AAPL rose above $100.00 (current: $101.00)"


def test_record_trigger_for_deleted_alert_rolls_back(db, service, make_alert):
    alert = make_alert("AAPL", "price_above", 100)
    snapshot = _snapshot(alert)
    db.delete(alert)
    db.commit()

    with pytest.raises(LookupError):
        service.record_trigger(snapshot, Quote("AAPL", 101, T0))

    assert db.query(Notification).count() == 0


def test_cooldown_window(db, service, make_alert, clock):
    alert = make_alert()
    assert service.is_in_cooldown(alert.id) is False

    _add_notification(db, alert, clock.now - timedelta(minutes=14))
    assert service.is_in_cooldown(alert.id) is True

    clock.advance(minutes=2)
    assert service.is_in_cooldown(alert.id) is False


def test_cooldown_is_per_alert(db, service, make_alert, clock):
    first = make_alert("AAPL", "price_above", 100)
    second = make_alert("AAPL", "price_above", 110)
    _add_notification(db, first, clock.now)

    assert service.is_in_cooldown(first.id) is True
    assert service.is_in_cooldown(second.id) is False


def test_percentage_move_message(service, make_alert):
    alert = make_alert("NVDA", "percentage_move", 5)
    quote = Quote("NVDA", 189, T0, previous_close=200)

    title, message = service.format_alert_message(_snapshot(alert), quote)

    assert title == "Price Alert: NVDA"
    assert message == "NVDA moved -5.50% from previous close $200.00 (current: $189.00)"


def test_cleanup_removes_only_old_notifications(db, service, make_alert, clock):
    alert = make_alert()
    _add_notification(db, alert, clock.now - timedelta(days=31))
    _add_notification(db, alert, clock.now - timedelta(days=29))

    deleted = service.cleanup_old_notifications()

    assert deleted == 1
    assert db.query(Notification).count() == 1


def test_cleanup_can_be_scoped_to_user(db, service, make_alert, clock):
    from app.models import User

    other = User(email="other@example.com")
    db.add(other)
    db.commit()

    mine = make_alert()
    theirs = make_alert(user_id=other.id)
    _add_notification(db, mine, clock.now - timedelta(days=40))
    _add_notification(db, theirs, clock.now - timedelta(days=40))

    assert service.cleanup_old_notifications(user_id=other.id) == 1
    assert db.query(Notification).filter(Notification.user_id == mine.user_id).count() == 1


def test_read_tracking(db, service, make_alert, clock):
    alert = make_alert()
    first = _add_notification(db, alert, clock.now)
    _add_notification(db, alert, clock.now)
    _add_notification(db, alert, clock.now, is_read=True)

    assert service.unread_count(alert.user_id) == 2
    assert service.mark_read(first.id, alert.user_id) is True
    assert service.mark_read(first.id, alert.user_id + 1) is False
    assert service.unread_count(alert.user_id) == 1
    assert service.mark_all_read(alert.user_id) == 1
    assert service.unread_count(alert.user_id) == 0
