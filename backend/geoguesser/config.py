from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment variables."""

    APP_NAME: str = "Kingston GeoGuesser"
    LOG_LEVEL: str = "INFO"

    # Street View Static API (placeholder images when unset)
    STREET_VIEW_API_KEY: Optional[str] = None
    STREET_VIEW_URL: str = "https://maps.googleapis.com/maps/api/streetview"
    STREET_VIEW_TIMEOUT: float = 10.0

    # Database (best score + leaderboard); None keeps everything in memory
    DATABASE_URL: Optional[str] = "sqlite+aiosqlite:///./geoguesser.db"

    # Leaderboard
    LEADERBOARD_ENABLED: bool = True
    LEADERBOARD_SIZE: int = 10
    LEADERBOARD_WINDOW_HOURS: int = 24

    # Game Configuration
    HINT_PENALTY: int = 100
    RECENT_LANDMARK_WINDOW: int = 20
    GUESS_RESULT_DELAY_MS: int = 3000
    SKIP_RESULT_DELAY_MS: int = 2000
    BEST_SCORE_KEY: str = "queens_geoguesser_pb"

    # Live games kept in memory
    MAX_GAMES: int = 1000
    GAME_IDLE_MINUTES: int = 60

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
