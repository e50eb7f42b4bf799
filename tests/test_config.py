"""
Tests for configuration loading and validation.
"""

from pathlib import Path

import pytest
import yaml

import fruit_harvest
from fruit_harvest.harvest_core.config_loader import load_config, get_config, reload_config

DEFAULT_CONFIG = Path(fruit_harvest.__file__).parent / "game_config.yaml"


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG, "r") as f:
        return yaml.safe_load(f)


def _write(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(raw, f)
    return str(path)


class TestDefaultConfig:
    """Test the shipped game_config.yaml."""

    def test_board_geometry(self, config):
        """Play area is the board minus the drop zone."""
        assert config.board.width == 100
        assert config.board.height == 100
        assert config.board.drop_zone_width == 16
        assert config.board.play_width == 84

    def test_session_defaults(self, config):
        """Three minute sessions with ten fruits."""
        assert config.session.duration_seconds == 180
        assert config.session.population == 10
        assert config.session.countdown_interval == 1.0

    def test_binding_table(self, config):
        """Each category has its gesture and points."""
        table = {c.key: (c.gesture, c.points) for c in config.categories}
        assert table == {
            "A": ("primary_click", 10),
            "B": ("double_click", 20),
            "C": ("secondary_click", 15),
            "D": ("drag_and_drop", 25),
        }

    def test_motion_starts_disabled(self, config):
        """Moving mode is opt-in."""
        assert config.motion.enabled is False
        assert config.motion.max_speed == 15.0

    def test_get_category(self, config):
        """Lookup by key works and rejects unknown keys."""
        assert config.get_category("D").name == "watermelon"
        with pytest.raises(ValueError):
            config.get_category("E")

    def test_cached_config(self):
        """get_config returns the same instance until reloaded."""
        first = get_config()
        assert get_config() is first
        reloaded = reload_config()
        assert reloaded is not first
        assert get_config() is reloaded


class TestValidation:
    """Test that broken configs are rejected."""

    def test_missing_file(self, tmp_path):
        """Missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_custom_file_loads(self, tmp_path, raw_config):
        """A modified copy is honoured."""
        raw_config["session"]["population"] = 4
        config = load_config(_write(tmp_path, raw_config))
        assert config.session.population == 4

    def test_duplicate_gesture_rejected(self, tmp_path, raw_config):
        """Two categories cannot share a gesture."""
        raw_config["categories"][1]["gesture"] = "primary_click"
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_unknown_gesture_rejected(self, tmp_path, raw_config):
        """Gestures must come from the fixed set."""
        raw_config["categories"][0]["gesture"] = "triple_click"
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_missing_category_rejected(self, tmp_path, raw_config):
        """All four categories are required."""
        raw_config["categories"] = raw_config["categories"][:3]
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_non_sequential_ids_rejected(self, tmp_path, raw_config):
        """Category ids must count up from zero."""
        raw_config["categories"][2]["id"] = 7
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_non_positive_points_rejected(self, tmp_path, raw_config):
        """Harvests always score."""
        raw_config["categories"][0]["points"] = 0
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_spawn_margin_too_large(self, tmp_path, raw_config):
        """Margin must leave room to spawn."""
        raw_config["board"]["spawn_margin"] = 45
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_drop_zone_wider_than_board(self, tmp_path, raw_config):
        """Drop zone must leave a play area."""
        raw_config["board"]["drop_zone_width"] = 100
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_zero_population_rejected(self, tmp_path, raw_config):
        """Population must be positive."""
        raw_config["session"]["population"] = 0
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))

    def test_wrong_sizes_rejected(self, tmp_path, raw_config):
        """Sizes are exactly small, medium, large."""
        raw_config["sizes"] = raw_config["sizes"][:2]
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, raw_config))
