import logging
import sys
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.schemas.game_engine import MatchSettings
from app.services.game.start_game import validate_match_settings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App config
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    DEBUG: bool = False
    STATIC_DIR: str | None = None

    # Lobby
    LOBBY_TIMEOUT_SECONDS: float = 5 * 60
    GAME_CODE_LENGTH: int = 20

    # Board and rosters
    BOARD_ROWS: int = 20
    BOARD_COLS: int = 20
    SPAWN_LANE_DEPTH: int = 2
    BLOCK_PROBABILITY: float = 0.1
    ROSTER_SIZE: int = 10
    ROSTER_FIRST_COLUMN: int = 6
    VISION_DEPTH: int = 4

    # Match rules
    CHECK_CROSS_SIDE_COLLISIONS: bool = False
    TURN_TIMEOUT_SECONDS: float | None = None
    NOTIFY_OPPONENT_ON_ABANDON: bool = False

    # WebSocket config
    WS_MAX_MESSAGE_SIZE: int = 64 * 1024

    @field_validator("BLOCK_PROBABILITY")
    @classmethod
    def validate_block_probability(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("BLOCK_PROBABILITY must be between 0 and 1")
        return v

    @field_validator("LOBBY_TIMEOUT_SECONDS", "TURN_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Timeouts must be positive")
        return v

    @field_validator("GAME_CODE_LENGTH")
    @classmethod
    def validate_code_length(cls, v: int) -> int:
        if v < 4:
            raise ValueError("GAME_CODE_LENGTH must be at least 4")
        return v

    @model_validator(mode="after")
    def validate_match_layout(self) -> "Settings":
        validate_match_settings(self.match_settings())
        return self

    def match_settings(self) -> MatchSettings:
        return MatchSettings(
            rows=self.BOARD_ROWS,
            cols=self.BOARD_COLS,
            spawn_lane_depth=self.SPAWN_LANE_DEPTH,
            block_probability=self.BLOCK_PROBABILITY,
            roster_size=self.ROSTER_SIZE,
            first_column=self.ROSTER_FIRST_COLUMN,
            vision_depth=self.VISION_DEPTH,
            check_cross_side_collisions=self.CHECK_CROSS_SIDE_COLLISIONS,
        )


def configure_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    configure_logging(settings.DEBUG)
    logger.info("Settings loaded successfully")
    logger.debug("Match settings: %s", settings.match_settings())
    return settings
