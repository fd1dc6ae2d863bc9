"""Shared pytest fixtures for the game engine tests.

Landmarks are built by hand so tests do not depend on the bundled
gazetteer, and the catalog uses a seeded RNG so selections are repeatable.
"""

import random
from typing import List, Optional, Sequence, Tuple

import pytest

from geoguesser.models.landmark import Difficulty, Landmark
from geoguesser.services.best_score import InMemoryBestScoreStore
from geoguesser.services.landmarks import LandmarkCatalog, RecentSelections
from geoguesser.services.round_engine import RoundEngine
from geoguesser.services.session_engine import SessionEngine

GRANT_HALL = (44.2315, -76.4959)

# 0.001 degrees of latitude is about 111m
METERS_PER_DEGREE_LAT = 111_195


def make_landmark(
    landmark_id: str,
    lat: float = GRANT_HALL[0],
    lon: float = GRANT_HALL[1],
    difficulty: Difficulty = Difficulty.EASY,
    hints: Sequence[str] = ("First hint", "Second hint", "Third hint"),
    category: Optional[str] = "campus",
) -> Landmark:
    return Landmark(
        id=landmark_id,
        name=landmark_id.replace("-", " ").title(),
        description=f"Description of {landmark_id}",
        lat=lat,
        lon=lon,
        hints=tuple(hints),
        difficulty=difficulty,
        category=category,
    )


def make_landmarks(count: int, difficulty: Difficulty = Difficulty.EASY, prefix: str = "spot") -> List[Landmark]:
    return [make_landmark(f"{prefix}-{i}", difficulty=difficulty) for i in range(count)]


def offset_north(point: Tuple[float, float], meters: float) -> Tuple[float, float]:
    """A point roughly `meters` north of `point`."""
    return point[0] + meters / METERS_PER_DEGREE_LAT, point[1]


class RecordingListener:
    """Keeps every notification as (event, args) for assertions."""

    def __init__(self) -> None:
        self.events: List[tuple] = []

    def names(self) -> List[str]:
        return [event for event, _ in self.events]

    def round_started(self, round_number, total_rounds, score) -> None:
        self.events.append(("round_started", (round_number, total_rounds, score)))

    def photo_ready(self, url, landmark) -> None:
        self.events.append(("photo_ready", (url, landmark)))

    def hint_revealed(self, text, index, total) -> None:
        self.events.append(("hint_revealed", (text, index, total)))

    def guess_resolved(self, distance_m, score, landmark) -> None:
        self.events.append(("guess_resolved", (distance_m, score, landmark)))

    def round_skipped(self, landmark) -> None:
        self.events.append(("round_skipped", (landmark,)))

    def best_score_updated(self, best_score) -> None:
        self.events.append(("best_score_updated", (best_score,)))

    def session_finished(self, summary) -> None:
        self.events.append(("session_finished", (summary,)))


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def grant_hall() -> Landmark:
    return make_landmark("grant-hall-1", hints=("Clock tower", "Houses the archives"))


@pytest.fixture
def catalog() -> LandmarkCatalog:
    """30 landmarks per tier, deterministic selection."""
    landmarks = (
        make_landmarks(30, Difficulty.EASY, "easy")
        + make_landmarks(30, Difficulty.MEDIUM, "medium")
        + make_landmarks(30, Difficulty.HARD, "hard")
    )
    return LandmarkCatalog(landmarks, recent=RecentSelections(20), rng=random.Random(1234))


@pytest.fixture
def single_catalog(grant_hall: Landmark) -> LandmarkCatalog:
    """Catalog whose only landmark is Grant Hall."""
    return LandmarkCatalog([grant_hall], rng=random.Random(0))


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def best_scores() -> InMemoryBestScoreStore:
    return InMemoryBestScoreStore()


@pytest.fixture
def session(single_catalog: LandmarkCatalog, listener: RecordingListener,
            best_scores: InMemoryBestScoreStore) -> SessionEngine:
    return SessionEngine(RoundEngine(single_catalog), best_scores=best_scores, listener=listener)
