"""State machine for a single round: present a landmark, take hints, resolve."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from math import isfinite
from typing import Optional, Union

from ..models.game import Coordinate, GuessOutcome, HintReveal
from ..models.landmark import Difficulty, Landmark
from .landmarks import LandmarkCatalog
from .notifications import GameListener, NullListener, notify
from .scoring import haversine_distance, round_score
from .street_view import ImageProvider, placeholder_image

logger = logging.getLogger(__name__)

HINT_PENALTY = 100


class RoundPhase(str, Enum):
    AWAITING_LANDMARK = "awaiting_landmark"
    PRESENTED = "presented"
    RESOLVED = "resolved"


@dataclass
class RoundState:
    landmark: Landmark
    hints_used: int = 0
    hint_penalty: int = 0
    guessed: bool = False


class RoundEngine:
    """
    Runs one round at a time.

    Hints, guesses and skips are only accepted while a landmark is
    presented; anything else is ignored and returns None.
    """

    def __init__(
        self,
        catalog: LandmarkCatalog,
        listener: Optional[GameListener] = None,
        image_provider: Optional[ImageProvider] = None,
        hint_penalty: int = HINT_PENALTY,
    ):
        self.catalog = catalog
        self.listener = listener or NullListener()
        self.image_provider = image_provider
        self.hint_penalty = hint_penalty
        self.phase = RoundPhase.AWAITING_LANDMARK
        self.state: Optional[RoundState] = None
        self.photo_url: Optional[str] = None
        self._photo_task: Optional[asyncio.Task] = None

    @property
    def landmark(self) -> Optional[Landmark]:
        return self.state.landmark if self.state else None

    @property
    def hints_used(self) -> int:
        return self.state.hints_used if self.state else 0

    def start_round(self, difficulty: Optional[Union[Difficulty, str]] = None) -> Landmark:
        """Pick a target landmark and present it."""
        self._cancel_photo()
        landmark = self.catalog.random_landmark(difficulty)
        self.state = RoundState(landmark=landmark)
        self.photo_url = None
        self.phase = RoundPhase.PRESENTED

        if self.image_provider is not None:
            # Hints and guesses do not wait for the photo
            self._photo_task = asyncio.get_running_loop().create_task(self._load_photo(landmark))

        logger.info("Presenting landmark %s", landmark.id)
        return landmark

    async def _load_photo(self, landmark: Landmark) -> None:
        try:
            url = await self.image_provider.load_image(landmark)
        except Exception:
            logger.exception("Image provider failed for %s", landmark.id)
            url = placeholder_image(landmark)
        # The round may have moved on while the image loaded
        if self.landmark is not landmark:
            return
        self.photo_url = url
        notify(self.listener, "photo_ready", url, landmark)

    def _cancel_photo(self) -> None:
        if self._photo_task is not None and not self._photo_task.done():
            self._photo_task.cancel()
        self._photo_task = None

    def request_hint(self) -> Optional[HintReveal]:
        """Reveal the next hint, adding the hint penalty to this round."""
        if self.phase != RoundPhase.PRESENTED:
            logger.debug("Hint requested with no presented round")
            return None

        hints = self.state.landmark.hints
        if self.state.hints_used >= len(hints):
            return None

        text = hints[self.state.hints_used]
        self.state.hints_used += 1
        self.state.hint_penalty += self.hint_penalty
        hint = HintReveal(text=text, index=self.state.hints_used, total=len(hints))

        notify(self.listener, "hint_revealed", hint.text, hint.index, hint.total)
        logger.info("Hint %d: %s", hint.index, hint.text)
        return hint

    def submit_guess(self, lat: float, lon: float) -> Optional[GuessOutcome]:
        """Score a guess against the presented landmark."""
        if self.phase != RoundPhase.PRESENTED:
            logger.debug("Guess submitted with no presented round")
            return None
        if not (isfinite(lat) and isfinite(lon)):
            logger.warning("Ignoring guess with non-finite coordinates (%r, %r)", lat, lon)
            return None

        landmark = self.state.landmark
        distance = haversine_distance(lat, lon, landmark.lat, landmark.lon)
        score = round_score(distance, self.state.hint_penalty)

        outcome = GuessOutcome(
            landmark=landmark,
            guess=Coordinate(lat=lat, lon=lon),
            distance_m=distance,
            score=score,
            hints_used=self.state.hints_used,
        )
        self._resolve()

        notify(self.listener, "guess_resolved", distance, score, landmark)
        logger.info("Guess: %dm away, scored %d points", round(distance), score)
        return outcome

    def skip_round(self) -> Optional[GuessOutcome]:
        """Give up on the presented landmark for zero points."""
        if self.phase != RoundPhase.PRESENTED:
            logger.debug("Skip requested with no presented round")
            return None

        landmark = self.state.landmark
        outcome = GuessOutcome(
            landmark=landmark,
            score=0,
            hints_used=self.state.hints_used,
            skipped=True,
        )
        self._resolve()

        notify(self.listener, "round_skipped", landmark)
        logger.info("Skipped round: %s", landmark.name)
        return outcome

    def _resolve(self) -> None:
        self.state.guessed = True
        self.phase = RoundPhase.RESOLVED

    def discard(self) -> None:
        """Drop the live round without an outcome."""
        self._cancel_photo()
        self.state = None
        self.photo_url = None
        self.phase = RoundPhase.AWAITING_LANDMARK
