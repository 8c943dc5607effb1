"""Packet shapes sent by an Upsy Desky event stream."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, fields
from typing import Any, ClassVar

import voluptuous as vol

from .const import DEVICE_TITLE_PREFIX


def _prefixed(prefix: str) -> Callable[[Any], str]:
    """Return a validator accepting strings that start with ``prefix``."""

    def validator(value: Any) -> str:
        if not isinstance(value, str) or not value.startswith(prefix):
            raise vol.Invalid(f"expected a string starting with {prefix!r}")
        return value

    return validator


def _number(value: Any) -> int | float:
    """Accept JSON numbers only; ``bool`` is an ``int`` in Python but not here."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise vol.Invalid("expected a number")
    return value


@dataclass(frozen=True)
class _Packet:
    """Base class for typed packets."""

    SCHEMA: ClassVar[vol.Schema]

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> _Packet:
        """Build the packet from an already validated payload."""
        known = {field.name for field in fields(cls)}
        return cls(**{key: value for key, value in payload.items() if key in known})


@dataclass(frozen=True)
class IntroductionPacket(_Packet):
    """First ping of a stream, describing the desk firmware."""

    title: str
    ota: bool
    lang: str
    comment: str | None = None

    SCHEMA: ClassVar[vol.Schema] = vol.Schema(
        {
            vol.Required("title"): _prefixed(DEVICE_TITLE_PREFIX),
            vol.Optional("comment"): str,
            vol.Required("ota"): bool,
            vol.Required("lang"): str,
        },
        extra=vol.ALLOW_EXTRA,
    )


@dataclass(frozen=True)
class NumberPacket(_Packet):
    """Numeric set-point update."""

    id: str
    value: int | float
    state: str
    min_value: int | float | None = None
    max_value: int | float | None = None
    step: int | float | None = None

    SCHEMA: ClassVar[vol.Schema] = vol.Schema(
        {
            vol.Required("id"): _prefixed("number-"),
            vol.Required("value"): _number,
            vol.Required("state"): str,
            vol.Optional("min_value"): _number,
            vol.Optional("max_value"): _number,
            vol.Optional("step"): _number,
        },
        extra=vol.ALLOW_EXTRA,
    )


@dataclass(frozen=True)
class SensorPacket(_Packet):
    """Sensor reading."""

    id: str
    value: int | float
    name: str | None = None
    state: str | None = None

    SCHEMA: ClassVar[vol.Schema] = vol.Schema(
        {
            vol.Required("id"): _prefixed("sensor-"),
            vol.Optional("name"): str,
            vol.Required("value"): _number,
            vol.Optional("state"): str,
        },
        extra=vol.ALLOW_EXTRA,
    )


@dataclass(frozen=True)
class ButtonPacket(_Packet):
    """Button entity announcement."""

    id: str
    name: int | float | None = None

    SCHEMA: ClassVar[vol.Schema] = vol.Schema(
        {
            vol.Required("id"): _prefixed("button-"),
            vol.Optional("name"): _number,
        },
        extra=vol.ALLOW_EXTRA,
    )


@dataclass(frozen=True)
class SelectPacket(_Packet):
    """Select entity announcement."""

    id: str
    name: int | float | None = None

    SCHEMA: ClassVar[vol.Schema] = vol.Schema(
        {
            vol.Required("id"): _prefixed("select-"),
            vol.Optional("name"): _number,
        },
        extra=vol.ALLOW_EXTRA,
    )


@dataclass(frozen=True)
class UnrecognizedPacket:
    """A payload matching none of the known shapes."""

    raw: Any


type Packet = (
    IntroductionPacket
    | NumberPacket
    | SensorPacket
    | ButtonPacket
    | SelectPacket
    | UnrecognizedPacket
)

# Priority order used by classify
PACKET_TYPES: tuple[type[_Packet], ...] = (
    IntroductionPacket,
    NumberPacket,
    SensorPacket,
    ButtonPacket,
    SelectPacket,
)

STATE_PACKET_TYPES: tuple[type[_Packet], ...] = (
    NumberPacket,
    SensorPacket,
    ButtonPacket,
    SelectPacket,
)


def classify(
    raw: Any, packet_types: Sequence[type[_Packet]] = PACKET_TYPES
) -> Packet:
    """Classify a decoded JSON value into one of the known packet shapes.

    Args:
        raw: Any value produced by ``json.loads``
        packet_types: Shapes to try, in priority order

    Returns:
        The first matching typed packet, or ``UnrecognizedPacket``

    """
    for packet_type in packet_types:
        try:
            payload = packet_type.SCHEMA(raw)
        except vol.Invalid:
            continue
        return packet_type.from_payload(payload)  # type: ignore[return-value]
    return UnrecognizedPacket(raw)
