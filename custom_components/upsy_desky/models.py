"""Data models for Upsy Desky integration."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .const import (
    CONF_DISPLAY_NAME,
    CONF_EVENTS_URL,
    CONF_HOST,
    CONF_PRESETS,
    CONF_RETRY_AFTER,
    CONF_TITLE,
    CONF_UNIQUE_ID,
    DEFAULT_PRESETS,
    DEFAULT_RETRY_AFTER,
    NUMBER_MAX_HEIGHT,
    NUMBER_MIN_HEIGHT,
    NUMBER_TARGET_HEIGHT,
    SENSOR_DESK_HEIGHT,
)
from .packets import NumberPacket, SensorPacket


class PositionState(StrEnum):
    """Direction the desk is travelling in."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STOPPED = "stopped"


@dataclass
class DeviceConfig:
    """Static per-device configuration."""

    host: str
    display_name: str | None = None
    presets: int = DEFAULT_PRESETS
    retry_after: int = DEFAULT_RETRY_AFTER

    @classmethod
    def from_entry_data(cls, data: dict[str, Any]) -> DeviceConfig:
        """Build the configuration from config entry data."""
        return cls(
            host=data[CONF_HOST],
            display_name=data.get(CONF_DISPLAY_NAME),
            presets=data.get(CONF_PRESETS, DEFAULT_PRESETS),
            retry_after=data.get(CONF_RETRY_AFTER, DEFAULT_RETRY_AFTER),
        )


@dataclass(frozen=True)
class DeviceIdentity:
    """Stable reference to a physical desk."""

    unique_id: str
    display_name: str
    host: str
    events_url: str
    preset_count: int
    title: str

    def as_context(self) -> dict[str, Any]:
        """Return the persisted form of this identity."""
        return {
            CONF_DISPLAY_NAME: self.display_name,
            CONF_HOST: self.host,
            CONF_EVENTS_URL: self.events_url,
            CONF_UNIQUE_ID: self.unique_id,
            CONF_PRESETS: self.preset_count,
            CONF_TITLE: self.title,
        }

    @classmethod
    def from_context(cls, context: dict[str, Any]) -> DeviceIdentity:
        """Rebuild an identity from a validated persisted context."""
        return cls(
            unique_id=context[CONF_UNIQUE_ID],
            display_name=context[CONF_DISPLAY_NAME],
            host=context[CONF_HOST],
            events_url=context[CONF_EVENTS_URL],
            preset_count=context.get(CONF_PRESETS, DEFAULT_PRESETS),
            title=context.get(CONF_TITLE, context[CONF_DISPLAY_NAME]),
        )


@dataclass
class SessionState:
    """Live state of one desk, derived from its event stream."""

    connected: bool = False
    current_height: float = 0
    target_height: float = 0
    max_height: float = 0
    min_height: float = 0
    height_step: float = 0

    def apply_number(self, packet: NumberPacket) -> bool:
        """Apply a set-point update.

        Returns:
            True if the packet id is one of the known set-points, False otherwise

        """
        if packet.id == NUMBER_TARGET_HEIGHT:
            self.target_height = packet.value
            if packet.min_value is not None:
                self.min_height = packet.min_value
            if packet.max_value is not None:
                self.max_height = packet.max_value
            if packet.step is not None:
                self.height_step = packet.step
        elif packet.id == NUMBER_MAX_HEIGHT:
            self.max_height = packet.value
        elif packet.id == NUMBER_MIN_HEIGHT:
            self.min_height = packet.value
        else:
            return False
        self.connected = True
        return True

    def apply_sensor(self, packet: SensorPacket) -> bool:
        """Apply a sensor reading; only the desk height sensor is tracked."""
        if packet.id != SENSOR_DESK_HEIGHT:
            return False
        self.current_height = packet.value
        self.connected = True
        return True

    @property
    def current_position(self) -> int | None:
        """Return the current height as a percentage of the calibrated range."""
        return calculate_position(self.current_height, self.min_height, self.max_height)

    @property
    def target_position(self) -> int | None:
        """Return the target height as a percentage of the calibrated range."""
        return calculate_position(self.target_height, self.min_height, self.max_height)

    @property
    def position_state(self) -> PositionState:
        """Return the direction of travel."""
        return position_state(self.current_height, self.target_height)


def calculate_position(
    height: float, min_height: float, max_height: float
) -> int | None:
    """Map a height onto 0-100 of the calibrated range.

    Returns:
        Position from 0 (lowest) to 100 (highest), None if the range was never
        calibrated or is inconsistent

    """
    if max_height == 0:
        return None
    if min_height > max_height:
        return None
    if height < min_height:
        return 0
    if height > max_height:
        return 100
    if max_height == min_height:
        # Zero-width range and height == min == max
        return 0
    return math.floor((height - min_height) * 100 / (max_height - min_height))


def position_state(current_height: float, target_height: float) -> PositionState:
    """Compare current and target height."""
    if current_height < target_height:
        return PositionState.INCREASING
    if current_height > target_height:
        return PositionState.DECREASING
    return PositionState.STOPPED
