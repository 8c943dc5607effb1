"""API client for Upsy Desky standing desks."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass
import logging

import aiohttp
from aiohttp import ClientResponse, ClientTimeout
from aiohttp.client_exceptions import ClientError

from homeassistant.exceptions import HomeAssistantError

from .const import EVENTS_PATH, PRESET_PATH

_LOGGER = logging.getLogger(__name__)


class UpsyDeskApiError(HomeAssistantError):
    """Exception to indicate an API error occurred."""


class UpsyDeskConnectionError(HomeAssistantError):
    """Exception to indicate a connection error occurred."""


@dataclass(frozen=True)
class StreamEvent:
    """A named server-sent event."""

    event: str
    data: str


async def parse_event_stream(
    lines: AsyncIterable[bytes],
) -> AsyncIterator[StreamEvent]:
    """Split a text/event-stream body into named events.

    Unlike browsers, events carrying an empty data field are still dispatched
    because the desk signals teardown with an empty ping.
    """
    event: str | None = None
    data: list[str] | None = None

    async for raw_line in lines:
        line = raw_line.decode(errors="ignore").rstrip("\r\n")

        if not line:
            if event is not None or data is not None:
                yield StreamEvent(event or "message", "\n".join(data or []))
            event = None
            data = None
            continue

        if line.startswith(":"):
            continue

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if field == "event":
            event = value
        elif field == "data":
            if data is None:
                data = []
            data.append(value)
        elif field in ("id", "retry"):
            _LOGGER.debug("Ignoring stream field %s: %s", field, value)


class UpsyDeskApiClient:
    """API client for an Upsy Desky web server."""

    def __init__(self, host: str) -> None:
        """Initialize the API client.

        Args:
            host: IP address or hostname of the desk controller

        """
        self.host = host
        self.base_url = f"http://{host}"
        self._session = aiohttp.ClientSession()
        self._events_response: ClientResponse | None = None

    @property
    def events_url(self) -> str:
        """Return the URL of the event stream."""
        return f"{self.base_url}{EVENTS_PATH}"

    async def async_listen_events(self) -> AsyncIterator[StreamEvent]:
        """Listen to the desk event stream until it ends.

        Raises:
            UpsyDeskApiError: If the host does not serve an event stream
            UpsyDeskConnectionError: If the stream cannot be opened or drops

        """
        timeout = ClientTimeout(total=None, sock_connect=10)

        try:
            async with self._session.get(
                self.events_url,
                timeout=timeout,
                headers={"Accept": "text/event-stream"},
            ) as response:
                response.raise_for_status()
                if response.content_type != "text/event-stream":
                    raise UpsyDeskApiError(
                        f"Unexpected content type {response.content_type} "
                        f"from {self.host}"
                    )
                self._events_response = response
                _LOGGER.debug("Opened event stream %s", self.events_url)

                async for event in parse_event_stream(response.content):
                    yield event

        except ClientError as err:
            raise UpsyDeskConnectionError(
                f"Event stream connection error: {err}"
            ) from err
        finally:
            if self._events_response:
                self._events_response.close()
                self._events_response = None

    async def async_press_preset(self, preset: int) -> None:
        """Trigger a stored height preset.

        Args:
            preset: Preset number, starting at 1

        Raises:
            UpsyDeskConnectionError: If connection fails

        """
        url = f"{self.base_url}{PRESET_PATH.format(preset=preset)}"
        _LOGGER.debug("Pressing preset %s (%s)", preset, url)

        try:
            response = await self._session.post(url, timeout=ClientTimeout(total=10))
            response.raise_for_status()
        except ClientError as err:
            raise UpsyDeskConnectionError(
                f"Failed to press preset {preset} on {self.host}: {err}"
            ) from err

    async def async_close(self) -> None:
        """Close the API client session."""
        if self._events_response:
            self._events_response.close()
            self._events_response = None
        if self._session:
            await self._session.close()
