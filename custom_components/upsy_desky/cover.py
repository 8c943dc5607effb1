"""Support for Upsy Desky desks as covers."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.cover import (
    ATTR_POSITION,
    CoverEntity,
    CoverEntityFeature,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    ATTR_CURRENT_HEIGHT,
    ATTR_MAX_HEIGHT,
    ATTR_MIN_HEIGHT,
    ATTR_TARGET_HEIGHT,
    ATTR_TARGET_POSITION,
    DOMAIN,
    MANUFACTURER,
    MODEL,
)
from .coordinator import UpsyDeskCoordinator
from .models import PositionState

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up the Upsy Desky cover."""
    coordinator: UpsyDeskCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([UpsyDeskCover(coordinator)])


def desk_device_info(coordinator: UpsyDeskCoordinator) -> DeviceInfo:
    """Return the device registry entry shared by all entities of a desk."""
    identity = coordinator.identity
    return DeviceInfo(
        identifiers={(DOMAIN, identity.unique_id)},
        name=identity.display_name,
        manufacturer=MANUFACTURER,
        model=MODEL,
        serial_number=identity.title,
        configuration_url=f"http://{identity.host}",
    )


class UpsyDeskCover(CoordinatorEntity[UpsyDeskCoordinator], CoverEntity):
    """Representation of a desk whose height is exposed as a cover position.

    Position 0 is the calibrated minimum height and 100 the maximum.
    """

    _attr_supported_features = CoverEntityFeature.SET_POSITION

    def __init__(self, coordinator: UpsyDeskCoordinator) -> None:
        """Initialize the cover."""
        super().__init__(coordinator)
        identity = coordinator.identity

        self._attr_unique_id = identity.unique_id
        self._attr_name = identity.display_name
        self._attr_device_info = desk_device_info(coordinator)

    @property
    def available(self) -> bool:  # type: ignore[override]
        """Return if entity is available.

        An uncalibrated or inconsistent height range makes the desk unavailable.
        """
        session = self.coordinator.data
        return (
            super().available
            and session.connected
            and session.current_position is not None
        )

    @property
    def current_cover_position(self) -> int | None:  # type: ignore[override]
        """Return current position of the desk.

        Returns:
            Position from 0 (lowest) to 100 (highest), None if unknown

        """
        return self.coordinator.data.current_position

    @property
    def target_cover_position(self) -> int | None:
        """Return the position the desk is moving to."""
        return self.coordinator.data.target_position

    @property
    def position_state(self) -> PositionState:
        """Return the direction the desk is travelling in."""
        return self.coordinator.data.position_state

    @property
    def is_closed(self) -> bool | None:  # type: ignore[override]
        """Return if the desk is at its lowest position."""
        position = self.current_cover_position
        if position is None:
            return None
        return position == 0

    @property
    def is_opening(self) -> bool:  # type: ignore[override]
        """Return if the desk is rising."""
        return self.position_state is PositionState.INCREASING

    @property
    def is_closing(self) -> bool:  # type: ignore[override]
        """Return if the desk is lowering."""
        return self.position_state is PositionState.DECREASING

    @property
    def extra_state_attributes(self) -> dict[str, Any]:  # type: ignore[override]
        """Return extra state attributes."""
        session = self.coordinator.data
        return {
            ATTR_TARGET_POSITION: self.target_cover_position,
            ATTR_CURRENT_HEIGHT: session.current_height,
            ATTR_TARGET_HEIGHT: session.target_height,
            ATTR_MIN_HEIGHT: session.min_height,
            ATTR_MAX_HEIGHT: session.max_height,
        }

    async def async_set_cover_position(self, **kwargs: Any) -> None:
        """Move the desk to a specific position.

        Moving the desk is not supported by the firmware stream yet, the request
        is only logged.
        """
        position = kwargs[ATTR_POSITION]
        _LOGGER.debug("Set target position -> %s for %s", position, self.name)
