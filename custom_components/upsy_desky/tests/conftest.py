"""Global fixtures for Upsy Desky integration."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.upsy_desky.const import DOMAIN
from custom_components.upsy_desky.models import DeviceIdentity

from .const import MOCK_ENTRY_DATA, MOCK_HOST, MOCK_IDENTITY


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> None:  # noqa: D103
    return


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a config entry for the mock desk."""
    return MockConfigEntry(
        domain=DOMAIN,
        title=MOCK_IDENTITY.display_name,
        unique_id=MOCK_IDENTITY.unique_id,
        data=dict(MOCK_ENTRY_DATA),
    )


@pytest.fixture
def mock_identity() -> DeviceIdentity:
    """Return the identity of the mock desk."""
    return MOCK_IDENTITY


@pytest.fixture
def mock_api() -> MagicMock:
    """Return an API client double that never opens a connection."""
    api = MagicMock()
    api.host = MOCK_HOST
    api.async_close = AsyncMock()
    api.async_press_preset = AsyncMock()
    return api
