"""Test the Upsy Desky coordinator."""

import asyncio
from collections.abc import AsyncIterator
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.upsy_desky.api import (
    StreamEvent,
    UpsyDeskApiError,
    UpsyDeskConnectionError,
)
from custom_components.upsy_desky.coordinator import UpsyDeskCoordinator
from custom_components.upsy_desky.models import DeviceIdentity, SessionState
from homeassistant.core import HomeAssistant

from .const import MOCK_INTRO
from .test_ingestor import EMPTY_PING, HEIGHT_STATE, INTRO_PING, TARGET_STATE


@pytest.fixture
def coordinator(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    mock_api: MagicMock,
    mock_identity: DeviceIdentity,
) -> UpsyDeskCoordinator:
    """Return a coordinator for the mock desk."""
    mock_config_entry.add_to_hass(hass)
    return UpsyDeskCoordinator(
        hass, mock_config_entry, mock_api, mock_identity, retry_after=7
    )


def _stream(*events):
    async def _listen() -> AsyncIterator:
        for event in events:
            yield event

    return _listen


async def test_initial_session(coordinator: UpsyDeskCoordinator) -> None:
    """Test the session starts empty."""
    assert coordinator.data == SessionState()
    assert await coordinator._async_update_data() is coordinator.data


async def test_follow_stream_publishes(
    coordinator: UpsyDeskCoordinator, mock_api: MagicMock
) -> None:
    """Test every session mutation is pushed to the listeners."""
    mock_api.async_listen_events = _stream(
        INTRO_PING, TARGET_STATE, HEIGHT_STATE, EMPTY_PING, TARGET_STATE
    )
    listener = MagicMock()
    unsub = coordinator.async_add_listener(listener)

    await coordinator._async_follow_stream()

    assert coordinator.data.connected is True
    assert coordinator.data.target_height == 50
    assert coordinator.data.current_height == 72
    assert coordinator.data.current_position == 77
    assert listener.call_count == 2
    unsub()


async def test_listen_reconnects_after_error(
    coordinator: UpsyDeskCoordinator, mock_api: MagicMock
) -> None:
    """Test the listener marks the desk disconnected and waits before reconnecting."""

    async def _broken() -> AsyncIterator:
        raise UpsyDeskConnectionError("refused")
        yield  # pragma: no cover

    mock_api.async_listen_events = _broken
    coordinator.data.connected = True
    listener = MagicMock()
    unsub = coordinator.async_add_listener(listener)

    sleep = AsyncMock(side_effect=asyncio.CancelledError)
    with patch("custom_components.upsy_desky.coordinator.asyncio.sleep", sleep):
        await coordinator.listen_events()

    sleep.assert_awaited_once_with(7)
    assert coordinator.data.connected is False
    listener.assert_called_once()
    unsub()


async def test_listen_reconnects_after_teardown(
    coordinator: UpsyDeskCoordinator, mock_api: MagicMock
) -> None:
    """Test an empty ping ends the connection but not the listener."""
    mock_api.async_listen_events = _stream(INTRO_PING, TARGET_STATE, EMPTY_PING)

    sleep = AsyncMock(side_effect=asyncio.CancelledError)
    with patch("custom_components.upsy_desky.coordinator.asyncio.sleep", sleep):
        await coordinator.listen_events()

    sleep.assert_awaited_once_with(7)
    assert coordinator.data.connected is False
    assert coordinator.data.target_height == 50


async def test_introduction_from_other_desk(
    hass: HomeAssistant,
    coordinator: UpsyDeskCoordinator,
    mock_api: MagicMock,
    mock_config_entry: MockConfigEntry,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Test another desk on the configured host never feeds this session."""
    other = {"title": "upsy-desky-ffffff", "ota": True, "lang": "en"}
    mock_api.async_listen_events = _stream(
        StreamEvent("ping", json.dumps(other)), TARGET_STATE, HEIGHT_STATE
    )
    listener = MagicMock()
    unsub = coordinator.async_add_listener(listener)

    with (
        patch.object(hass.config_entries, "async_schedule_reload") as reload,
        pytest.raises(UpsyDeskApiError),
    ):
        await coordinator._async_follow_stream()

    reload.assert_called_once_with(mock_config_entry.entry_id)
    assert coordinator.data == SessionState()
    listener.assert_not_called()
    assert "now introduces itself as upsy-desky-ffffff" in caplog.text
    unsub()


async def test_introduction_from_same_desk(
    hass: HomeAssistant, coordinator: UpsyDeskCoordinator
) -> None:
    """Test the configured desk reconnecting is followed as usual."""
    with patch.object(hass.config_entries, "async_schedule_reload") as reload:
        coordinator._handle_introduction(MOCK_INTRO)

    reload.assert_not_called()
