"""Tests for cotador.core.logging processors."""

import pytest
import structlog

from cotador.core.config import get_settings
from cotador.core.logging import add_app_context, add_component, bind_vendor_context, component_for


@pytest.mark.parametrize("name,expected", [
    ("cotador.services.cart.manager", "cart"),
    ("cotador.services.catalog", "catalog"),
    ("cotador.api.routes", "routes"),
    ("cotador.db.client", "client"),
    ("cotador.main", "main"),
    ("httpx", None),
    ("cotador", None),
    (None, None),
])
def test_component_for(name, expected):
    assert component_for(name) == expected


def test_add_component_tags_package_events():
    event = add_component(None, "info", {"event": "x", "logger": "cotador.services.rate_limit"})
    assert event["component"] == "rate_limit"


def test_add_component_leaves_third_party_events():
    event = add_component(None, "info", {"event": "x", "logger": "uvicorn.error"})
    assert "component" not in event


def test_app_context_includes_environment():
    settings = get_settings()
    event = add_app_context(None, "info", {"event": "x"})
    assert event["app"] == settings.app_name
    assert event["version"] == settings.app_version
    assert event["environment"] == settings.environment


def test_bind_vendor_context():
    structlog.contextvars.clear_contextvars()
    try:
        bind_vendor_context(7)
        assert structlog.contextvars.get_contextvars() == {"vendor_id": 7}
    finally:
        structlog.contextvars.clear_contextvars()
