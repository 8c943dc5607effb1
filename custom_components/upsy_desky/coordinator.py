"""Data update coordinator for Upsy Desky devices."""

from __future__ import annotations

import asyncio
from contextlib import aclosing
import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .api import UpsyDeskApiClient, UpsyDeskApiError, UpsyDeskConnectionError
from .const import DEFAULT_RETRY_AFTER, DOMAIN
from .identity import derive_unique_id
from .ingestor import StreamIngestor
from .models import DeviceIdentity, SessionState
from .packets import IntroductionPacket

_LOGGER = logging.getLogger(__name__)


class UpsyDeskCoordinator(DataUpdateCoordinator[SessionState]):
    """Upsy Desky session coordinator, fed by the desk event stream."""

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        api: UpsyDeskApiClient,
        identity: DeviceIdentity,
        retry_after: int = DEFAULT_RETRY_AFTER,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            config_entry=entry,
            name=DOMAIN,
            update_interval=None,
        )
        self.api = api
        self.identity = identity
        self.retry_after = retry_after
        self.data = SessionState()

    async def listen_events(self) -> None:
        """Continuously follow the desk event stream, reconnecting when it ends."""
        while True:
            try:
                await self._async_follow_stream()
            except asyncio.CancelledError:
                _LOGGER.debug("Event listener task cancelled")
                return
            except (UpsyDeskConnectionError, UpsyDeskApiError) as err:
                _LOGGER.error(
                    "Event stream of %s disconnected: %s", self.identity.host, err
                )

            self._mark_disconnected()

            _LOGGER.info(
                "Reconnecting event stream of %s in %s seconds",
                self.identity.host,
                self.retry_after,
            )
            try:
                await asyncio.sleep(self.retry_after)
            except asyncio.CancelledError:
                _LOGGER.debug("Event listener sleep cancelled")
                return

    async def _async_follow_stream(self) -> None:
        """Feed one stream connection into the session until it ends."""
        ingestor = StreamIngestor(
            self.data,
            on_introduction=self._handle_introduction,
            on_change=self._publish,
        )
        async with aclosing(self.api.async_listen_events()) as events:
            await ingestor.async_consume(events)

        if ingestor.closed:
            _LOGGER.debug("Empty ping, teardown for %s", self.identity.host)
        else:
            _LOGGER.debug("Event stream of %s ended", self.identity.host)

    async def _async_update_data(self) -> SessionState:
        """Return the session; it is only ever updated by the event stream."""
        return self.data

    @callback
    def _handle_introduction(self, packet: IntroductionPacket) -> None:
        """Stop following the stream if another desk answers on the host.

        The entry is reloaded so setup can offer the new desk as its own entry.
        """
        if derive_unique_id(packet.title) == self.identity.unique_id:
            return

        _LOGGER.warning(
            "Desk at %s now introduces itself as %s, expected %s",
            self.identity.host,
            packet.title,
            self.identity.title,
        )
        self.hass.config_entries.async_schedule_reload(self.config_entry.entry_id)
        raise UpsyDeskApiError(
            f"Unexpected desk {packet.title} at {self.identity.host}"
        )

    @callback
    def _publish(self) -> None:
        """Push the mutated session to all entities."""
        self.async_set_updated_data(self.data)
        _LOGGER.debug(
            "internals connected=%s current=%s target=%s max=%s min=%s",
            self.data.connected,
            self.data.current_height,
            self.data.target_height,
            self.data.max_height,
            self.data.min_height,
        )

    @callback
    def _mark_disconnected(self) -> None:
        if self.data.connected:
            self.data.connected = False
            self.async_update_listeners()
