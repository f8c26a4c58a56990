"""
Tests for configuration loading and validation.
"""

from dataclasses import replace
from pathlib import Path

import pytest
import yaml

import plinko
from plinko.core.config_loader import (
    ConfigurationError,
    load_config,
    reload_config,
    get_config,
    LAYOUT_GRID,
    LAYOUT_PYRAMID,
    BACKEND_PYMUNK,
)


DEFAULT_CONFIG = Path(plinko.__file__).parent / "game_config.yaml"


def write_config(tmp_path, overrides):
    """Dump the default YAML with overrides applied, return its path."""
    with open(DEFAULT_CONFIG) as f:
        raw = yaml.safe_load(f)
    for section, values in overrides.items():
        raw[section].update(values)
    path = tmp_path / "game_config.yaml"
    path.write_text(yaml.safe_dump(raw))
    return str(path)


class TestLoadConfig:
    """Test the default configuration."""

    def test_default_values(self, config):
        assert config.board.width == 800
        assert config.board.columns == 18
        assert config.board.rows == 12
        assert config.board.layout_kind == LAYOUT_GRID
        assert config.slots.values == (10, 5, 2, 1, 0, 1, 2, 5, 10)
        assert config.num_slots == 9
        assert config.session.starting_balance == 100
        assert config.session.stake == 10

    def test_config_is_frozen(self, config):
        with pytest.raises(Exception):
            config.board.width = 10

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_custom_file(self, tmp_path):
        path = write_config(tmp_path, {"board": {"layout_kind": "pyramid"}})
        assert load_config(path).board.layout_kind == LAYOUT_PYRAMID

    def test_cached_config(self, tmp_path):
        path = write_config(tmp_path, {"session": {"stake": 3}})
        try:
            assert reload_config(path).session.stake == 3
            assert get_config().session.stake == 3
        finally:
            reload_config()
        assert get_config().session.stake == 10


class TestValidation:
    """Test configuration errors."""

    @pytest.mark.parametrize("section,values", [
        ("board", {"columns": 1}),
        ("board", {"rows": 1}),
        ("board", {"pyramid_rows": 0}),
        ("board", {"width": 0}),
        ("board", {"height": -5}),
        ("board", {"left_pad": 400, "right_pad": 400}),
        ("board", {"layout_kind": "hexagon"}),
        ("slots", {"values": []}),
        ("slots", {"values": [1, -1]}),
        ("ball", {"radius": 0}),
        ("outcome", {"weighting": "uniform"}),
        ("session", {"stake": 0}),
        ("physics", {"backend": "box2d"}),
    ])
    def test_invalid_config_rejected(self, tmp_path, section, values):
        path = write_config(tmp_path, {section: values})
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)

    def test_with_layout(self, config):
        pyramid = config.with_layout(LAYOUT_PYRAMID)
        assert pyramid.board.layout_kind == LAYOUT_PYRAMID
        assert config.board.layout_kind == LAYOUT_GRID
        with pytest.raises(ConfigurationError):
            config.with_layout("hexagon")

    def test_with_backend(self, config):
        assert config.with_backend(BACKEND_PYMUNK).physics.backend == BACKEND_PYMUNK
        with pytest.raises(ConfigurationError):
            config.with_backend("box2d")

    def test_replace_keeps_other_sections(self, config):
        changed = replace(config, session=replace(config.session, stake=1))
        assert changed.board == config.board
