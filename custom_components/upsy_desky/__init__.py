"""Integration for Upsy Desky standing desks."""

from __future__ import annotations

import logging

from homeassistant.config_entries import SOURCE_INTEGRATION_DISCOVERY, ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from .api import UpsyDeskApiClient, UpsyDeskApiError, UpsyDeskConnectionError
from .const import CONF_HOST, CONF_RETRY_AFTER, DOMAIN, PLATFORMS
from .coordinator import UpsyDeskCoordinator
from .identity import DeviceIdentityResolver, ResolutionOutcome
from .ingestor import async_discover
from .models import DeviceConfig

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Upsy Desky from a config entry."""
    config = DeviceConfig.from_entry_data(dict(entry.data))

    # Create API instance
    api = UpsyDeskApiClient(config.host)

    # Wait for the desk to introduce itself
    try:
        intro = await async_discover(api)
    except (UpsyDeskConnectionError, UpsyDeskApiError) as err:
        await api.async_close()
        raise ConfigEntryNotReady(f"Failed to connect to desk: {err}") from err

    # Reconcile the introduced desk with the desks already configured
    resolver = DeviceIdentityResolver(
        {
            other.unique_id: other.data
            for other in hass.config_entries.async_entries(DOMAIN)
            if other.unique_id
        }
    )
    resolution = resolver.resolve(intro, config)

    if resolution.identity.unique_id != entry.unique_id:
        await api.async_close()
        if resolution.outcome is ResolutionOutcome.CREATED:
            hass.async_create_task(
                hass.config_entries.flow.async_init(
                    DOMAIN,
                    context={"source": SOURCE_INTEGRATION_DISCOVERY},
                    data=resolution.context,
                )
            )
        raise ConfigEntryNotReady(
            f"Desk at {config.host} is now {intro.title}, not {entry.title}"
        )

    if resolution.outcome is ResolutionOutcome.REPAIRED:
        hass.config_entries.async_update_entry(
            entry,
            data={**resolution.context, CONF_RETRY_AFTER: config.retry_after},
        )

    coordinator = UpsyDeskCoordinator(
        hass, entry, api, resolution.identity, retry_after=config.retry_after
    )

    # Store coordinator for platforms to access
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator

    # Follow the event stream in a background task
    # This will be automatically cancelled when the entry is unloaded
    entry.async_create_background_task(
        hass, coordinator.listen_events(), f"Upsy Desky events {entry.data[CONF_HOST]}"
    )

    # Set up platforms
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        coordinator = hass.data[DOMAIN].pop(entry.entry_id)
        await coordinator.api.async_close()

        if not hass.data[DOMAIN]:
            hass.data.pop(DOMAIN)

    return unload_ok

