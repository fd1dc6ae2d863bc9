import logging
import math
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database.models import Score
from ..models.game import LeaderboardEntry

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 20


class LeaderboardService:
    """
    Optional per-room leaderboard.

    Without a session factory the leaderboard is disabled: submissions are
    dropped and lookups return no entries.
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        size: int = 10,
        window: timedelta = timedelta(hours=24),
    ):
        self.session_factory = session_factory
        self.size = size
        self.window = window

        if not self.enabled:
            logger.warning("Leaderboard disabled (no database configured)")

    @property
    def enabled(self) -> bool:
        return self.session_factory is not None

    async def submit_score(self, room: str, name: str, score: float) -> bool:
        """
        Post a score to a room.

        Args:
            room: Room name (case-insensitive)
            name: Player name, truncated to 20 characters
            score: Points, floored to an integer

        Returns:
            True when the score was stored
        """
        if not self.enabled:
            return False

        entry = Score(
            room=room.lower(),
            name=name[:MAX_NAME_LENGTH],
            score=int(math.floor(score)),
        )
        try:
            async with self.session_factory() as db:
                db.add(entry)
                await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to submit score: %s", e)
            return False

        logger.info("Score submitted: room=%s name=%s score=%d", entry.room, entry.name, entry.score)
        return True

    async def fetch_top(self, room: str) -> List[LeaderboardEntry]:
        """Highest scores posted to a room within the time window."""
        if not self.enabled:
            return []

        since = datetime.now(timezone.utc) - self.window
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(Score).where(
                        Score.room == room.lower(),
                        Score.created_at >= since
                    ).order_by(desc(Score.score)).limit(self.size)
                )
                scores = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to fetch leaderboard: %s", e)
            return []

        return [LeaderboardEntry.model_validate(score) for score in scores]
