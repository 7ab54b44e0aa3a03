# config_manager.py
"""
Reads and writes the user settings.

config.json holds the values, ui_strings.json holds one description per key
(shown next to the value in the settings dialog). Both live in the project root.
"""
import sys
import json
import logging
from pathlib import Path

from . import error as E
from .Transport import SerialTimeouts, parse_baudrate, DEFAULT_BAUDRATE

logger = logging.getLogger(__name__)

if getattr(sys, 'frozen', False):
    PROJECT_ROOT = Path(sys._MEIPASS)
else:
    PROJECT_ROOT = Path(__file__).resolve().parent.parent

config_json = PROJECT_ROOT / "config.json"
ui_strings = PROJECT_ROOT / "ui_strings.json"

# Used when config.json is missing a key (or missing entirely)
DEFAULT_SETTINGS = {
    "serial_port": "COM4",
    "baudrate": DEFAULT_BAUDRATE,
    "read_interval_timeout": 50,
    "read_total_timeout_constant": 50,
    "read_total_timeout_multiplier": 10,
    "write_total_timeout_constant": 50,
    "write_total_timeout_multiplier": 10,
    "darkmode": False,
}


def load_setting_value(key_value):
    try:
        with open(config_json, 'r', encoding='utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError):
        logger.warning("Could not read %s, using defaults.", config_json)
        return {}

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def load_setting_description(key_value):
    try:
        with open(ui_strings, 'r', encoding='utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError):
        return {}

    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def save_setting(settings_dict):
    try:
        with open(config_json, 'w', encoding='utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except (OSError, TypeError) as e:
        logger.error("%s %s", E.ERROR_MESSAGES["5002"], e)
        return {}


def load_settings():
    """All settings, with defaults filled in for missing keys."""
    settings = dict(DEFAULT_SETTINGS)
    settings.update(load_setting_value("all"))
    return settings


def get_serial_port():
    return str(load_settings()["serial_port"]).strip()


def get_baudrate():
    value = load_settings()["baudrate"]
    baudrate = parse_baudrate(value)
    if str(baudrate) != str(value).strip():
        logger.warning("%s%r", E.ERROR_MESSAGES["5001"], value)
    return baudrate


def get_timeouts():
    settings = load_settings()
    return SerialTimeouts(
        read_interval=int(settings["read_interval_timeout"]),
        read_total_constant=int(settings["read_total_timeout_constant"]),
        read_total_multiplier=int(settings["read_total_timeout_multiplier"]),
        write_total_constant=int(settings["write_total_timeout_constant"]),
        write_total_multiplier=int(settings["write_total_timeout_multiplier"]),
    )
