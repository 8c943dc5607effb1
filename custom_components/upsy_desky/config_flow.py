"""Config flow for Upsy Desky integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import ConfigFlow, ConfigFlowResult

from .api import UpsyDeskApiClient, UpsyDeskApiError, UpsyDeskConnectionError
from .const import (
    CONF_DISPLAY_NAME,
    CONF_EVENTS_URL,
    CONF_HOST,
    CONF_PRESETS,
    CONF_RETRY_AFTER,
    CONF_UNIQUE_ID,
    DEFAULT_PRESETS,
    DEFAULT_RETRY_AFTER,
    DOMAIN,
    MAX_PRESETS,
)
from .identity import CONTEXT_SCHEMA, build_identity
from .ingestor import async_discover
from .models import DeviceConfig

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): str,
        vol.Optional(CONF_DISPLAY_NAME): str,
        vol.Optional(CONF_PRESETS, default=DEFAULT_PRESETS): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=MAX_PRESETS)
        ),
        vol.Optional(CONF_RETRY_AFTER, default=DEFAULT_RETRY_AFTER): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)


class UpsyDeskConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Upsy Desky."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the config flow."""
        self._discovered: dict[str, Any] | None = None

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            config = DeviceConfig(
                host=user_input[CONF_HOST],
                display_name=user_input.get(CONF_DISPLAY_NAME),
                presets=user_input.get(CONF_PRESETS, DEFAULT_PRESETS),
                retry_after=user_input.get(CONF_RETRY_AFTER, DEFAULT_RETRY_AFTER),
            )

            api = UpsyDeskApiClient(config.host)
            try:
                intro = await async_discover(api)
            except UpsyDeskConnectionError:
                errors["base"] = "cannot_connect"
            except UpsyDeskApiError:
                errors["base"] = "invalid_response"
            except Exception:  # pylint: disable=broad-except
                _LOGGER.exception("Unexpected exception")
                errors["base"] = "unknown"
            else:
                identity = build_identity(intro, config)
                context = identity.as_context()

                # Same desk under a new address only moves the existing entry
                await self.async_set_unique_id(identity.unique_id)
                self._abort_if_unique_id_configured(
                    updates={
                        CONF_HOST: identity.host,
                        CONF_EVENTS_URL: identity.events_url,
                    }
                )

                return self.async_create_entry(
                    title=identity.display_name,
                    data={**context, CONF_RETRY_AFTER: config.retry_after},
                )
            finally:
                await api.async_close()

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    async def async_step_integration_discovery(
        self, discovery_info: dict[str, Any]
    ) -> ConfigFlowResult:
        """Handle a desk found at the address of another configured desk."""
        try:
            context = CONTEXT_SCHEMA(dict(discovery_info))
        except vol.Invalid:
            return self.async_abort(reason="invalid_response")

        await self.async_set_unique_id(context[CONF_UNIQUE_ID])
        self._abort_if_unique_id_configured(
            updates={
                CONF_HOST: context[CONF_HOST],
                CONF_EVENTS_URL: context[CONF_EVENTS_URL],
            }
        )

        self._discovered = context
        self.context["title_placeholders"] = {"name": context[CONF_DISPLAY_NAME]}
        return await self.async_step_discovery_confirm()

    async def async_step_discovery_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Confirm adding a discovered desk."""
        assert self._discovered is not None

        if user_input is not None:
            return self.async_create_entry(
                title=self._discovered[CONF_DISPLAY_NAME],
                data={CONF_RETRY_AFTER: DEFAULT_RETRY_AFTER, **self._discovered},
            )

        self._set_confirm_only()
        return self.async_show_form(
            step_id="discovery_confirm",
            description_placeholders={"name": self._discovered[CONF_DISPLAY_NAME]},
        )
