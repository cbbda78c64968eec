"""Unit tests for portal/logging_config.py"""

from portal.config import settings
from portal.logging_config import add_service_context


def test_events_carry_service_and_environment():
    event = add_service_context(None, "info", {"event": "purchase_submitted"})
    assert event["service"] == settings.APP_NAME
    assert event["env"] == settings.ENVIRONMENT


def test_bound_values_are_not_overwritten():
    event = add_service_context(None, "info", {"event": "x", "env": "bound"})
    assert event["env"] == "bound"
