"""Fold an Upsy Desky event stream into session state."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from enum import Enum
import json
import logging
from typing import Any

from .api import StreamEvent, UpsyDeskApiClient, UpsyDeskConnectionError
from .const import DISCOVERY_TIMEOUT, EVENT_LOG, EVENT_PING, EVENT_STATE
from .models import SessionState
from .packets import (
    STATE_PACKET_TYPES,
    ButtonPacket,
    IntroductionPacket,
    NumberPacket,
    SelectPacket,
    SensorPacket,
    classify,
)

_LOGGER = logging.getLogger(__name__)

_UNDECODABLE = object()


class IngestorState(Enum):
    """Lifecycle of one event stream connection."""

    DISCOVERING = "discovering"
    STREAMING = "streaming"
    CLOSED = "closed"


class StreamIngestor:
    """Apply the events of a single stream connection to a session."""

    def __init__(
        self,
        session: SessionState,
        on_introduction: Callable[[IntroductionPacket], None] | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the ingestor.

        Args:
            session: Session state this connection writes to
            on_introduction: Called with the introduction packet of the stream
            on_change: Called after every session mutation

        """
        self.session = session
        self.state = IngestorState.DISCOVERING
        self._on_introduction = on_introduction
        self._on_change = on_change

    @property
    def closed(self) -> bool:
        """Return True once the desk requested teardown."""
        return self.state is IngestorState.CLOSED

    async def async_consume(self, events: AsyncIterator[StreamEvent]) -> None:
        """Handle events until the stream ends or the desk tears it down."""
        async for event in events:
            self.handle_event(event)
            if self.closed:
                return

    def handle_event(self, event: StreamEvent) -> None:
        """Handle one named event."""
        if self.closed:
            _LOGGER.debug("Dropping %s event after teardown", event.event)
            return

        if event.event == EVENT_PING:
            self._handle_ping(event.data)
        elif self.state is IngestorState.DISCOVERING:
            _LOGGER.debug("Ignoring %s event before introduction", event.event)
        elif event.event == EVENT_STATE:
            self._handle_state(event.data)
        elif event.event == EVENT_LOG:
            self._handle_log(event.data)
        else:
            _LOGGER.debug("Ignoring unknown event %s: %s", event.event, event.data)

    def _handle_ping(self, data: str) -> None:
        if not data.strip():
            _LOGGER.debug("Empty ping, tearing down stream")
            self.state = IngestorState.CLOSED
            return

        if self.state is IngestorState.STREAMING:
            self.session.connected = True
            return

        payload = self._decode(EVENT_PING, data)
        if payload is _UNDECODABLE:
            return

        packet = classify(payload, (IntroductionPacket,))
        if not isinstance(packet, IntroductionPacket):
            _LOGGER.error("Unknown ping message: %s", data)
            return

        _LOGGER.debug("Introduction received from %s", packet.title)
        if self._on_introduction:
            self._on_introduction(packet)
        self.state = IngestorState.STREAMING
        self.session.connected = True

    def _handle_state(self, data: str) -> None:
        payload = self._decode(EVENT_STATE, data)
        if payload is _UNDECODABLE:
            return
        _LOGGER.debug("STATE: %s", payload)
        self.session.connected = True

        packet = classify(payload, STATE_PACKET_TYPES)
        if isinstance(packet, NumberPacket):
            if not self.session.apply_number(packet):
                _LOGGER.warning("Unhandled number: %s", packet)
                return
        elif isinstance(packet, SensorPacket):
            if not self.session.apply_sensor(packet):
                return
        elif isinstance(packet, (ButtonPacket, SelectPacket)):
            return
        else:
            _LOGGER.warning("Unknown state packet: %s", payload)
            return

        if self._on_change:
            self._on_change()

    def _handle_log(self, data: str) -> None:
        payload = self._decode(EVENT_LOG, data)
        if payload is _UNDECODABLE:
            return
        self.session.connected = True
        _LOGGER.debug("LOG: %s", payload)

    @staticmethod
    def _decode(event: str, data: str) -> Any:
        try:
            return json.loads(data)
        except ValueError:
            _LOGGER.warning("Dropping %s event with invalid JSON: %s", event, data)
            return _UNDECODABLE


async def async_discover(
    api: UpsyDeskApiClient, timeout: float = DISCOVERY_TIMEOUT
) -> IntroductionPacket:
    """Open the event stream and wait for the desk to introduce itself.

    Returns:
        The introduction packet sent as first ping

    Raises:
        UpsyDeskConnectionError: If no introduction arrives in time

    """
    introductions: list[IntroductionPacket] = []
    ingestor = StreamIngestor(SessionState(), on_introduction=introductions.append)

    try:
        async with asyncio.timeout(timeout):
            async with aclosing(api.async_listen_events()) as events:
                async for event in events:
                    ingestor.handle_event(event)
                    if ingestor.state is not IngestorState.DISCOVERING:
                        break
    except TimeoutError as err:
        raise UpsyDeskConnectionError(
            f"No introduction from {api.host} within {timeout} seconds"
        ) from err

    if not introductions:
        raise UpsyDeskConnectionError(
            f"Event stream of {api.host} closed before introduction"
        )
    return introductions[0]
