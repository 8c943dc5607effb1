"""Test classification of Upsy Desky packets."""

from typing import Any

import pytest

from custom_components.upsy_desky.packets import (
    PACKET_TYPES,
    STATE_PACKET_TYPES,
    ButtonPacket,
    IntroductionPacket,
    NumberPacket,
    SelectPacket,
    SensorPacket,
    UnrecognizedPacket,
    classify,
)

INTRO = {"title": "upsy-desky-a1b2c3", "comment": "Office", "ota": True, "lang": "en"}
NUMBER = {
    "id": "number-upsy_desky_target_desk_height",
    "value": 50,
    "state": "50.0 cm",
    "min_value": 10,
    "max_value": 90,
    "step": 0.1,
}
SENSOR = {
    "id": "sensor-upsy_desky_desk_height",
    "name": "Desk Height",
    "value": 72.4,
    "state": "72.4 cm",
}
BUTTON = {"id": "button-upsy_desky_preset_1"}
SELECT = {"id": "select-upsy_desky_units", "name": 2}


def test_classify_introduction() -> None:
    """Test the first ping of a stream."""
    packet = classify(INTRO)
    assert packet == IntroductionPacket(
        title="upsy-desky-a1b2c3", ota=True, lang="en", comment="Office"
    )


def test_classify_number() -> None:
    """Test a set-point update keeps its optional bounds."""
    packet = classify(NUMBER)
    assert isinstance(packet, NumberPacket)
    assert packet.id == "number-upsy_desky_target_desk_height"
    assert packet.value == 50
    assert packet.min_value == 10
    assert packet.max_value == 90
    assert packet.step == 0.1


def test_classify_number_without_bounds() -> None:
    """Test optional fields default to None."""
    packet = classify(
        {"id": "number-upsy_desky_max_target_height", "value": 120, "state": "120"}
    )
    assert packet == NumberPacket(
        id="number-upsy_desky_max_target_height", value=120, state="120"
    )


def test_classify_sensor() -> None:
    """Test a sensor reading."""
    packet = classify(SENSOR)
    assert isinstance(packet, SensorPacket)
    assert packet.value == 72.4
    assert packet.name == "Desk Height"


def test_classify_button_and_select() -> None:
    """Test packets that carry no desk state."""
    assert classify(BUTTON) == ButtonPacket(id="button-upsy_desky_preset_1")
    assert classify(SELECT) == SelectPacket(id="select-upsy_desky_units", name=2)


def test_extra_fields_are_ignored() -> None:
    """Test unknown keys do not prevent a match."""
    packet = classify({**SENSOR, "uom": "cm"})
    assert isinstance(packet, SensorPacket)


@pytest.mark.parametrize(
    "raw",
    [
        {"foo": "bar"},
        {},
        [],
        None,
        "ping",
        42,
        {"id": "light-upsy_desky_led", "value": 1, "state": "on"},
        # Title from another device family
        {**INTRO, "title": "esphome-web-123"},
        # Missing required fields
        {"title": "upsy-desky", "lang": "en"},
        {"id": "number-upsy_desky_target_desk_height", "value": 50},
        {"id": "sensor-upsy_desky_desk_height"},
        # Wrong types
        {"id": "number-upsy_desky_target_desk_height", "value": "50", "state": "ok"},
        {"id": "sensor-upsy_desky_desk_height", "value": None},
        {"id": "sensor-upsy_desky_desk_height", "value": True},
        {**INTRO, "ota": "yes"},
        {"id": "button-upsy_desky_preset_1", "name": "Preset 1"},
        {"id": 5},
    ],
)
def test_unrecognized(raw: Any) -> None:
    """Test payloads matching no known shape."""
    assert classify(raw) == UnrecognizedPacket(raw)


@pytest.mark.parametrize(
    ("raw", "packet_type"),
    [
        (INTRO, IntroductionPacket),
        (NUMBER, NumberPacket),
        (SENSOR, SensorPacket),
        (BUTTON, ButtonPacket),
        (SELECT, SelectPacket),
    ],
)
def test_each_shape_matches_only_itself(raw: dict[str, Any], packet_type: type) -> None:
    """Test that a payload is never classified as another shape."""
    assert isinstance(classify(raw), packet_type)
    assert isinstance(classify(raw, (packet_type,)), packet_type)
    for other in set(PACKET_TYPES) - {packet_type}:
        assert isinstance(classify(raw, (other,)), UnrecognizedPacket)


def test_state_classification_rejects_introduction() -> None:
    """Test that an introduction on the state channel is unrecognized."""
    assert classify(INTRO, STATE_PACKET_TYPES) == UnrecognizedPacket(INTRO)
