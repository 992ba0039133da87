"""Tests for player settings validation and loading."""

import json

import pytest

from media_controls.settings import PlayerSetting, load_settings, parse_settings


class TestParseSettings:
    """Tests for parse_settings."""

    def test_valid_mapping(self):
        settings = parse_settings({"Elisa": {"enabled": True, "priority": 0}})
        assert settings == {"elisa": PlayerSetting(enabled=True, priority=0)}

    def test_player_setting_instances_accepted(self):
        setting = PlayerSetting(enabled=False, priority=3)
        assert parse_settings({"vlc": setting}) == {"vlc": setting}

    def test_defaults(self):
        assert parse_settings({"vlc": {}}) == {"vlc": PlayerSetting(enabled=False, priority=0)}

    @pytest.mark.parametrize("value,message", [
        ({"enabled": "yes", "priority": 0}, "enabled"),
        ({"enabled": True, "priority": "1"}, "priority"),
        ({"enabled": True, "priority": True}, "priority"),
        ({"enabled": True, "priority": -1}, ">= 0"),
        ("enabled", "expected an object"),
    ])
    def test_invalid_entries(self, value, message):
        with pytest.raises(ValueError, match=message):
            parse_settings({"vlc": value})

    def test_empty_name(self):
        with pytest.raises(ValueError, match="empty"):
            parse_settings({" ": {"enabled": True, "priority": 0}})


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_file_means_no_players(self, tmp_path):
        assert load_settings(tmp_path / "players.json") == {}

    def test_reads_json(self, tmp_path):
        path = tmp_path / "players.json"
        path.write_text(json.dumps({"elisa": {"enabled": True, "priority": 0}}))
        assert load_settings(path) == {"elisa": PlayerSetting(enabled=True, priority=0)}

    def test_non_object_rejected(self, tmp_path):
        path = tmp_path / "players.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="JSON object"):
            load_settings(path)
