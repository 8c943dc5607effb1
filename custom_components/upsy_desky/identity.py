"""Match desks against the identities already known to Home Assistant."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any
import uuid

import voluptuous as vol

from .const import (
    CONF_DISPLAY_NAME,
    CONF_EVENTS_URL,
    CONF_HOST,
    CONF_PRESETS,
    CONF_UNIQUE_ID,
    EVENTS_PATH,
)
from .models import DeviceConfig, DeviceIdentity
from .packets import IntroductionPacket

_LOGGER = logging.getLogger(__name__)

CONTEXT_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_DISPLAY_NAME): str,
        vol.Required(CONF_HOST): str,
        vol.Required(CONF_EVENTS_URL): vol.Url(),
        vol.Required(CONF_UNIQUE_ID): str,
        vol.Optional(CONF_PRESETS): int,
    },
    extra=vol.ALLOW_EXTRA,
)


class ResolutionOutcome(Enum):
    """What the caller has to do with a resolved identity."""

    CREATED = "created"  # unknown desk, register it
    RESTORED = "restored"  # known desk, nothing to persist
    REPAIRED = "repaired"  # known desk with a stale context, persist it again


@dataclass(frozen=True)
class IdentityResolution:
    """Result of resolving an introduction."""

    identity: DeviceIdentity
    outcome: ResolutionOutcome
    context: dict[str, Any]


def derive_unique_id(title: str) -> str:
    """Return the stable id of a desk; only the title is hashed, not the host."""
    return uuid.uuid5(uuid.NAMESPACE_OID, title).hex


def build_identity(intro: IntroductionPacket, config: DeviceConfig) -> DeviceIdentity:
    """Build the identity of a freshly introduced desk."""
    return DeviceIdentity(
        unique_id=derive_unique_id(intro.title),
        display_name=config.display_name or intro.title,
        host=config.host,
        events_url=f"http://{config.host}{EVENTS_PATH}",
        preset_count=config.presets,
        title=intro.title,
    )


def context_is_valid(context: Mapping[str, Any]) -> bool:
    """Return True if a persisted context matches the current schema."""
    try:
        CONTEXT_SCHEMA(dict(context))
    except vol.Invalid:
        return False
    return True


class DeviceIdentityResolver:
    """Id-indexed store of persisted device contexts."""

    def __init__(self, known_contexts: Mapping[str, Mapping[str, Any]]) -> None:
        """Initialize the resolver.

        Args:
            known_contexts: Persisted contexts keyed by unique id

        """
        self._contexts: dict[str, dict[str, Any]] = {
            unique_id: dict(context) for unique_id, context in known_contexts.items()
        }

    def get(self, unique_id: str) -> dict[str, Any] | None:
        """Return the persisted context of a unique id."""
        return self._contexts.get(unique_id)

    def resolve(
        self, intro: IntroductionPacket, config: DeviceConfig
    ) -> IdentityResolution:
        """Decide whether an introduced desk is new, known or stale."""
        identity = build_identity(intro, config)
        fresh = identity.as_context()
        existing = self._contexts.get(identity.unique_id)

        if existing is None:
            _LOGGER.info(
                "Adding new desk: %s (%s)", identity.display_name, identity.unique_id
            )
            self._contexts[identity.unique_id] = fresh
            return IdentityResolution(identity, ResolutionOutcome.CREATED, fresh)

        if not context_is_valid(existing):
            _LOGGER.debug("Persisted context is invalid, updating: %s", existing)
            self._contexts[identity.unique_id] = fresh
            return IdentityResolution(identity, ResolutionOutcome.REPAIRED, fresh)

        _LOGGER.debug(
            "Restoring existing desk: %s (%s)",
            existing[CONF_DISPLAY_NAME],
            identity.unique_id,
        )
        return IdentityResolution(
            DeviceIdentity.from_context(existing), ResolutionOutcome.RESTORED, existing
        )
