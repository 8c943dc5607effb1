"""Preset triggers for Upsy Desky desks."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .api import UpsyDeskApiError, UpsyDeskConnectionError
from .const import DOMAIN
from .coordinator import UpsyDeskCoordinator
from .cover import desk_device_info

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up one switch per desk preset."""
    coordinator: UpsyDeskCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        UpsyDeskPresetSwitch(coordinator, preset)
        for preset in range(1, coordinator.identity.preset_count + 1)
    )


class UpsyDeskPresetSwitch(CoordinatorEntity[UpsyDeskCoordinator], SwitchEntity):
    """Momentary switch moving the desk to a stored preset.

    The stream does not report which preset is active, so the switch is always
    off and turns itself off again once the trigger was sent.
    """

    _attr_icon = "mdi:desk"

    def __init__(self, coordinator: UpsyDeskCoordinator, preset: int) -> None:
        """Initialize the preset switch."""
        super().__init__(coordinator)
        self._preset = preset
        identity = coordinator.identity

        self._attr_unique_id = f"{identity.unique_id}-{preset}"
        self._attr_name = f"{identity.display_name} Preset {preset}"
        self._attr_device_info = desk_device_info(coordinator)

    @property
    def preset(self) -> int:
        """Return the preset number."""
        return self._preset

    @property
    def is_on(self) -> bool:  # type: ignore[override]
        """Return False; preset state is not observable."""
        return False

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Trigger the preset."""
        _LOGGER.debug("Preset pressed -> %s", self._preset)
        try:
            await self.coordinator.api.async_press_preset(self._preset)
        except (UpsyDeskApiError, UpsyDeskConnectionError) as err:
            raise HomeAssistantError(
                f"Failed to trigger preset {self._preset} for {self.name}: {err}"
            ) from err
        finally:
            # Reset the switch in the UI
            self.async_write_ha_state()

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Nothing to do, presets cannot be released."""
        _LOGGER.debug("Preset released -> %s", self._preset)
