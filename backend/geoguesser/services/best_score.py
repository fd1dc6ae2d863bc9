import logging
from typing import Dict, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database.models import KeyValue

logger = logging.getLogger(__name__)

BEST_SCORE_KEY = "queens_geoguesser_pb"


class BestScoreStore(Protocol):
    """Persists the personal best; failures never reach the caller."""

    async def get_best_score(self) -> int:
        """Stored best, or 0 when nothing usable is stored."""

    async def set_best_score(self, score: int) -> None:
        """Store a new best; write failures are ignored."""


class InMemoryBestScoreStore:
    """Best score kept for the life of the process."""

    def __init__(self, key: str = BEST_SCORE_KEY):
        self.key = key
        self._values: Dict[str, int] = {}

    async def get_best_score(self) -> int:
        return self._values.get(self.key, 0)

    async def set_best_score(self, score: int) -> None:
        self._values[self.key] = int(score)


class SqlBestScoreStore:
    """Best score kept in the kv_store table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], key: str = BEST_SCORE_KEY):
        self.session_factory = session_factory
        self.key = key

    async def get_best_score(self) -> int:
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(KeyValue.value).where(KeyValue.key == self.key))
                value = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.warning("Failed to read best score: %s", e)
            return 0

        if value is None:
            return 0
        try:
            return int(value)
        except ValueError:
            logger.warning("Ignoring unparsable best score %r", value)
            return 0

    async def set_best_score(self, score: int) -> None:
        try:
            async with self.session_factory() as db:
                entry = await db.get(KeyValue, self.key)
                if entry is None:
                    db.add(KeyValue(key=self.key, value=str(int(score))))
                else:
                    entry.value = str(int(score))
                await db.commit()
        except SQLAlchemyError as e:
            logger.warning("Failed to save best score: %s", e)
