"""Tests for the event type to notification content table."""

from __future__ import annotations

from app.application.use_cases.notifications import EVENT_TEMPLATES, render_event
from app.domain.entities import NotificationPriority


def test_user_created_template() -> None:
    template = render_event({"eventType": "USER_CREATED", "userId": "u1", "firstName": "Ann"})

    assert template.title == "Welcome to Marketplace!"
    assert template.message == "Hello Ann! Your account has been successfully created."
    assert template.priority is NotificationPriority.HIGH


def test_user_created_without_first_name() -> None:
    template = render_event({"eventType": "USER_CREATED", "userId": "u1"})

    assert template.message == "Hello there! Your account has been successfully created."


def test_user_logged_in_template_renders_timestamp() -> None:
    template = render_event(
        {"eventType": "USER_LOGGED_IN", "userId": "u1", "timestamp": "2024-03-01T10:15:30Z"}
    )

    assert template.title == "Login Detected"
    assert template.message == "You logged into your account at 2024-03-01 10:15:30 UTC."
    assert template.priority is NotificationPriority.LOW


def test_user_logged_in_accepts_epoch_milliseconds() -> None:
    template = render_event(
        {"eventType": "USER_LOGGED_IN", "userId": "u1", "timestamp": 1709288130000}
    )

    assert "2024-03-01 10:15:30" in template.message


def test_user_logged_in_without_timestamp_still_renders() -> None:
    template = render_event({"eventType": "USER_LOGGED_IN", "userId": "u1"})

    assert template.message.startswith("You logged into your account at ")


def test_unknown_event_uses_generic_template() -> None:
    template = render_event({"eventType": "PASSWORD_CHANGED", "userId": "u1"})

    assert template.title == "System Notification"
    assert template.message == "Event: PASSWORD_CHANGED"
    assert template.priority is NotificationPriority.MEDIUM


def test_known_types_without_template_are_generic() -> None:
    assert "FUND_CREATED" not in EVENT_TEMPLATES

    template = render_event({"eventType": "FUND_CREATED", "userId": "u1"})

    assert template.message == "Event: FUND_CREATED"
