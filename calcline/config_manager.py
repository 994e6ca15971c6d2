# config_manager.py
import json
import logging
from pathlib import Path

from .LineEvaluator import ConstantDefinition
from .ScientificEngine import AngleUnit

logger = logging.getLogger(__name__)

config_json = Path(__file__).resolve().parent / "config.json"


def _config_path(path):
    return Path(path) if path is not None else config_json


def load_setting_value(key_value, path=None):
    try:
        with open(_config_path(path), 'r', encoding='utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError):
        logger.debug(f"No usable settings file at {_config_path(path)}")
        return {}


    if key_value == "all":
        return settings_dict

    else:
        return settings_dict.get(key_value, 0)


def save_setting(settings_dict, path=None):
    try:
        with open(_config_path(path), 'w', encoding='utf-8') as f:
            json.dump(settings_dict, f, indent=4)
            return settings_dict

    except OSError as e:
        logger.warning(f"Settings could not be saved: {e}")
        return {}


def load_angle_unit(path=None):
    """Configured angle unit; radians when unset."""
    value = load_setting_value("angle_unit", path)
    if not value:
        return AngleUnit.RADIANS
    return AngleUnit.parse(value)


def load_constants(path=None):
    """ConstantDefinitions from the 'constants' list; malformed entries are skipped."""
    definitions = []
    for entry in load_setting_value("constants", path) or []:
        try:
            definitions.append(ConstantDefinition(
                key=entry["key"],
                label=entry.get("label", entry["key"]),
                value=entry["value"],
            ))
        except (KeyError, TypeError, AttributeError):
            logger.debug(f"Skipping malformed constant entry: {entry!r}")
    return definitions
