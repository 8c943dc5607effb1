"""Constants for the Upsy Desky integration."""

from homeassistant.const import Platform

DOMAIN = "upsy_desky"

# Platforms
PLATFORMS = [Platform.COVER, Platform.SWITCH]

# Config entry keys
CONF_HOST = "host"
CONF_DISPLAY_NAME = "display_name"
CONF_PRESETS = "presets"
CONF_RETRY_AFTER = "retry_after"
CONF_EVENTS_URL = "events_url"
CONF_UNIQUE_ID = "unique_id"
CONF_TITLE = "title"

DEFAULT_PRESETS = 4
MAX_PRESETS = 9
DEFAULT_RETRY_AFTER = 15  # seconds to wait after disconnect before reconnecting
DISCOVERY_TIMEOUT = 10  # seconds to wait for the introduction ping

# Every Upsy Desky firmware announces itself with a title starting with this
DEVICE_TITLE_PREFIX = "upsy"

MANUFACTURER = "TJHorner"
MODEL = "Upsy Desky"

# Event stream
EVENTS_PATH = "/events"
EVENT_PING = "ping"
EVENT_STATE = "state"
EVENT_LOG = "log"

# Outbound preset trigger, formatted with the preset index
PRESET_PATH = "/button/upsy_desky_preset_{preset:02d}/press"

# Well-known entity ids reported by the desk
SENSOR_DESK_HEIGHT = "sensor-upsy_desky_desk_height"
NUMBER_TARGET_HEIGHT = "number-upsy_desky_target_desk_height"
NUMBER_MAX_HEIGHT = "number-upsy_desky_max_target_height"
NUMBER_MIN_HEIGHT = "number-upsy_desky_min_target_height"

ATTR_TARGET_POSITION = "target_position"
ATTR_CURRENT_HEIGHT = "current_height"
ATTR_TARGET_HEIGHT = "target_height"
ATTR_MIN_HEIGHT = "min_height"
ATTR_MAX_HEIGHT = "max_height"
