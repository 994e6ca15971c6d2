import pytest

from calcline import config_manager
from calcline import error as E
from calcline.ScientificEngine import AngleUnit


def test_missing_file_gives_empty_settings(tmp_path):
    assert config_manager.load_setting_value("all", tmp_path / "nope.json") == {}


def test_corrupt_file_gives_empty_settings(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert config_manager.load_setting_value("all", path) == {}


def test_missing_key_defaults_to_zero(config_file):
    path = config_file({"angle_unit": "deg"})
    assert config_manager.load_setting_value("copy_result", path) == 0
    assert config_manager.load_setting_value("angle_unit", path) == "deg"


def test_save_then_load(tmp_path):
    path = tmp_path / "config.json"
    settings = {"angle_unit": "degrees", "copy_result": True}
    assert config_manager.save_setting(settings, path) == settings
    assert config_manager.load_setting_value("all", path) == settings


def test_save_to_unwritable_path(tmp_path):
    assert config_manager.save_setting({"a": 1}, tmp_path / "missing" / "config.json") == {}


def test_load_angle_unit(config_file):
    assert config_manager.load_angle_unit(config_file({"angle_unit": "deg"})) is AngleUnit.DEGREES
    assert config_manager.load_angle_unit(config_file({})) is AngleUnit.RADIANS


def test_load_angle_unit_rejects_unknown(config_file):
    with pytest.raises(E.ConfigurationError):
        config_manager.load_angle_unit(config_file({"angle_unit": "gradians"}))


def test_load_constants_skips_malformed_entries(config_file):
    path = config_file({"constants": [
        {"key": "g", "value": 9.8},
        {"label": "no key", "value": 1},
        "junk",
    ]})
    constants = config_manager.load_constants(path)
    assert len(constants) == 1
    assert constants[0].key == "g"
    assert constants[0].label == "g"
    assert constants[0].value == 9.8


def test_packaged_config():
    keys = [definition.key for definition in config_manager.load_constants()]
    assert "speed of sound" in keys
    assert config_manager.load_angle_unit() is AngleUnit.RADIANS
