from datetime import timedelta
from functools import lru_cache

from .config import get_settings
from .database.session import SessionLocal
from .services.best_score import InMemoryBestScoreStore, SqlBestScoreStore
from .services.games import GameRegistry
from .services.landmarks import get_catalog
from .services.leaderboard import LeaderboardService
from .services.street_view import StreetViewClient


@lru_cache()
def get_registry() -> GameRegistry:
    """Process-wide registry of live games."""
    settings = get_settings()

    if SessionLocal is not None:
        best_scores = SqlBestScoreStore(SessionLocal, key=settings.BEST_SCORE_KEY)
    else:
        best_scores = InMemoryBestScoreStore(key=settings.BEST_SCORE_KEY)

    image_provider = StreetViewClient(
        settings.STREET_VIEW_API_KEY,
        api_url=settings.STREET_VIEW_URL,
        timeout=settings.STREET_VIEW_TIMEOUT,
    )

    return GameRegistry(
        get_catalog(),
        best_scores,
        image_provider=image_provider,
        hint_penalty=settings.HINT_PENALTY,
        max_games=settings.MAX_GAMES,
        idle_timeout=settings.GAME_IDLE_MINUTES * 60,
    )


@lru_cache()
def get_leaderboard() -> LeaderboardService:
    """Leaderboard, disabled without a database or when switched off."""
    settings = get_settings()
    session_factory = SessionLocal if settings.LEADERBOARD_ENABLED else None
    return LeaderboardService(
        session_factory,
        size=settings.LEADERBOARD_SIZE,
        window=timedelta(hours=settings.LEADERBOARD_WINDOW_HOURS),
    )
