"""Notifications the game engines send to whoever presents the game."""

import logging
from typing import Protocol

from ..models.game import SessionSummary
from ..models.landmark import Landmark

logger = logging.getLogger(__name__)


class GameListener(Protocol):
    """Receives one-way game events; return values are ignored."""

    def round_started(self, round_number: int, total_rounds: int, score: int) -> None:
        """A new round is ready for guesses."""

    def photo_ready(self, url: str, landmark: Landmark) -> None:
        """The image for the current landmark finished loading."""

    def hint_revealed(self, text: str, index: int, total: int) -> None:
        """A hint was revealed; index is 1-based."""

    def guess_resolved(self, distance_m: float, score: int, landmark: Landmark) -> None:
        """A guess was scored."""

    def round_skipped(self, landmark: Landmark) -> None:
        """The round was skipped."""

    def best_score_updated(self, best_score: int) -> None:
        """The personal best to display after a game."""

    def session_finished(self, summary: SessionSummary) -> None:
        """The last round resolved."""


class NullListener:
    """Listener that ignores every event."""

    def round_started(self, round_number: int, total_rounds: int, score: int) -> None:
        pass

    def photo_ready(self, url: str, landmark: Landmark) -> None:
        pass

    def hint_revealed(self, text: str, index: int, total: int) -> None:
        pass

    def guess_resolved(self, distance_m: float, score: int, landmark: Landmark) -> None:
        pass

    def round_skipped(self, landmark: Landmark) -> None:
        pass

    def best_score_updated(self, best_score: int) -> None:
        pass

    def session_finished(self, summary: SessionSummary) -> None:
        pass


def notify(listener: GameListener, event: str, *args) -> None:
    """Deliver an event, keeping listener failures away from game state."""
    try:
        getattr(listener, event)(*args)
    except Exception:
        logger.exception("Listener failed handling %s", event)
