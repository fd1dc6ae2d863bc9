import json
import logging
import random
import threading
from collections import deque
from functools import lru_cache
from pathlib import Path
from typing import Deque, Iterable, List, Optional, Sequence, Tuple, Union

from pydantic import TypeAdapter

from ..config import get_settings
from ..models.landmark import Difficulty, Landmark

logger = logging.getLogger(__name__)

DATA_FILE = Path(__file__).resolve().parent.parent / "data" / "kingston_landmarks.json"

_landmark_list = TypeAdapter(List[Landmark])


class RecentSelections:
    """
    Rolling memory of the most recently chosen landmark ids.

    Shared by every game served from the same catalog, so it is guarded
    by a lock for threaded hosts.
    """

    def __init__(self, capacity: int = 20):
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        self.capacity = capacity
        self._ids: Deque[str] = deque(maxlen=capacity or None)
        self._lock = threading.Lock()

    def __contains__(self, landmark_id: str) -> bool:
        with self._lock:
            return landmark_id in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def snapshot(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._ids)

    def clear(self) -> None:
        with self._lock:
            self._ids.clear()

    def pick(self, pool: Sequence[Landmark], rng: random.Random) -> Landmark:
        """
        Choose a landmark from the pool that is not in memory, and remember it.

        The whole selection runs under the lock, so concurrent callers never
        pick the same landmark while it is still remembered. When every
        candidate is remembered the memory is reset first.
        """
        with self._lock:
            available = [landmark for landmark in pool if landmark.id not in self._ids]
            if not available:
                logger.debug("Recent landmark memory exhausted, resetting")
                self._ids.clear()
                available = list(pool)

            landmark = rng.choice(available)
            if self.capacity:
                # deque(maxlen=...) drops the oldest entry
                self._ids.append(landmark.id)
            return landmark


class LandmarkCatalog:
    """Immutable gazetteer of landmarks with variety-aware random selection."""

    def __init__(
        self,
        landmarks: Iterable[Landmark],
        recent: Optional[RecentSelections] = None,
        rng: Optional[random.Random] = None,
    ):
        self._landmarks: Tuple[Landmark, ...] = tuple(landmarks)
        if not self._landmarks:
            raise ValueError("Landmark catalog is empty")
        self._by_id = {landmark.id: landmark for landmark in self._landmarks}
        self.recent = recent if recent is not None else RecentSelections()
        self._rng = rng or random.Random()

    @classmethod
    def from_file(cls, path: Union[str, Path] = DATA_FILE, **kwargs) -> "LandmarkCatalog":
        """Load and validate a catalog from a JSON list of landmarks."""
        with open(path, "r", encoding="utf-8") as fh:
            landmarks = _landmark_list.validate_python(json.load(fh))
        logger.info("Loaded %d landmarks from %s", len(landmarks), path)
        return cls(landmarks, **kwargs)

    def __len__(self) -> int:
        return len(self._landmarks)

    def __iter__(self):
        return iter(self._landmarks)

    @property
    def landmarks(self) -> Tuple[Landmark, ...]:
        return self._landmarks

    def get(self, landmark_id: str) -> Optional[Landmark]:
        return self._by_id.get(landmark_id)

    def by_difficulty(self, difficulty: Union[Difficulty, str]) -> List[Landmark]:
        """All landmarks of a difficulty tier; may be empty."""
        return [landmark for landmark in self._landmarks if landmark.difficulty == difficulty]

    def by_category(self, category: str) -> List[Landmark]:
        """All landmarks with a category tag; may be empty."""
        return [landmark for landmark in self._landmarks if landmark.category == category]

    def random_landmark(self, difficulty: Optional[Union[Difficulty, str]] = None) -> Landmark:
        """
        Pick a random landmark, avoiding recently used ones.

        Args:
            difficulty: Optional tier filter; ignored when no landmark matches

        Returns:
            The chosen landmark, which is recorded in the recent memory
        """
        pool: List[Landmark] = list(self._landmarks)
        if difficulty:
            matching = self.by_difficulty(difficulty)
            if matching:
                pool = matching
            else:
                logger.warning("No landmarks for difficulty %r, using full catalog", difficulty)

        return self.recent.pick(pool, self._rng)


@lru_cache()
def get_catalog() -> LandmarkCatalog:
    """Process-wide catalog; its recent memory lives until restart."""
    settings = get_settings()
    return LandmarkCatalog.from_file(
        DATA_FILE,
        recent=RecentSelections(settings.RECENT_LANDMARK_WINDOW),
    )
