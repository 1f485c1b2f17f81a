"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from app.config import Settings


class TestSettings:
    def test_reference_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("BOARD_ROWS", raising=False)

        settings = Settings(_env_file=None)

        assert settings.LOBBY_TIMEOUT_SECONDS == 300
        assert settings.GAME_CODE_LENGTH == 20
        assert settings.TURN_TIMEOUT_SECONDS is None
        assert settings.CHECK_CROSS_SIDE_COLLISIONS is False

    def test_match_settings_follow_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BOARD_ROWS", "30")
        monkeypatch.setenv("VISION_DEPTH", "6")
        monkeypatch.setenv("CHECK_CROSS_SIDE_COLLISIONS", "true")

        match_settings = Settings(_env_file=None).match_settings()

        assert match_settings.rows == 30
        assert match_settings.vision_depth == 6
        assert match_settings.check_cross_side_collisions is True
        assert match_settings.roster_size == 10

    def test_block_probability_out_of_range(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLOCK_PROBABILITY", "1.5")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_non_positive_timeout_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TURN_TIMEOUT_SECONDS", "0")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_roster_wider_than_board_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ROSTER_SIZE", "15")
        monkeypatch.setenv("ROSTER_FIRST_COLUMN", "6")
        monkeypatch.setenv("BOARD_COLS", "20")

        with pytest.raises(ValidationError, match="Roster does not fit"):
            Settings(_env_file=None)

    def test_spawn_lanes_must_fit_board(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BOARD_ROWS", "3")

        with pytest.raises(ValidationError, match="spawn lanes"):
            Settings(_env_file=None)
