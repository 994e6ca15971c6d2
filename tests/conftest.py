import json

import pytest

from calcline import ScientificEngine


@pytest.fixture
def scope():
    """Radian scope without user constants."""
    return ScientificEngine.build_scope()


@pytest.fixture
def degree_scope():
    return ScientificEngine.build_scope(ScientificEngine.AngleUnit.DEGREES)


@pytest.fixture
def config_file(tmp_path):
    """Write a settings dict to a temporary config.json and return its path."""
    def _write(settings):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(settings), encoding="utf-8")
        return path
    return _write
