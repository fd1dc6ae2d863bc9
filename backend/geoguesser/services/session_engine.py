"""
Game session orchestration.

A session configures its round count from the difficulty, drives a
RoundEngine through every round, accumulates the outcomes and finishes
with a SessionSummary. Pacing between rounds is left to the presenter:
recording a result immediately starts the next round.
"""

import logging
from dataclasses import dataclass, field
from math import floor
from typing import Dict, List, Optional, Union

from ..models.game import GuessOutcome, HintReveal, SessionPhase, SessionSummary
from ..models.landmark import Difficulty
from .best_score import BestScoreStore, InMemoryBestScoreStore
from .notifications import GameListener, notify
from .round_engine import RoundEngine, RoundPhase

logger = logging.getLogger(__name__)

ROUNDS_BY_DIFFICULTY: Dict[Difficulty, int] = {
    Difficulty.EASY: 5,
    Difficulty.MEDIUM: 10,
    Difficulty.HARD: 15,
}

# A guess this close counts towards accuracy
GOOD_GUESS_DISTANCE_M = 100


@dataclass
class SessionState:
    phase: SessionPhase = SessionPhase.CONFIGURING
    difficulty: Difficulty = Difficulty.MEDIUM
    player_name: str = ""
    current_round: int = 0
    total_rounds: int = ROUNDS_BY_DIFFICULTY[Difficulty.MEDIUM]
    total_score: int = 0
    total_distance_m: float = 0.0
    results: List[GuessOutcome] = field(default_factory=list)
    best_score: int = 0
    summary: Optional[SessionSummary] = None


def rounds_for(difficulty: Difficulty) -> int:
    return ROUNDS_BY_DIFFICULTY[difficulty]


def parse_difficulty(value: Union[Difficulty, str, None]) -> Difficulty:
    """Coerce a difficulty, defaulting to medium for unknown values."""
    if value is None or value == "":
        return Difficulty.MEDIUM
    try:
        return Difficulty(value)
    except ValueError:
        logger.warning("Unknown difficulty %r, using medium", value)
        return Difficulty.MEDIUM


def calculate_accuracy(results: List[GuessOutcome], total_rounds: int) -> int:
    """Percentage of rounds guessed within 100m."""
    if total_rounds <= 0:
        return 0
    good_guesses = sum(
        1 for result in results
        if not result.skipped
        and result.distance_m is not None
        and result.distance_m <= GOOD_GUESS_DISTANCE_M
    )
    # Half rounds up
    return int(floor(100 * good_guesses / total_rounds + 0.5))


class SessionEngine:
    """Runs a complete game made of a fixed number of rounds."""

    def __init__(
        self,
        rounds: RoundEngine,
        best_scores: Optional[BestScoreStore] = None,
        listener: Optional[GameListener] = None,
    ):
        self.rounds = rounds
        self.best_scores = best_scores or InMemoryBestScoreStore()
        if listener is not None:
            rounds.listener = listener
        self.listener: GameListener = rounds.listener
        self.state = SessionState()

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def is_playing(self) -> bool:
        return self.state.phase == SessionPhase.IN_PROGRESS

    async def start_session(
        self,
        difficulty: Union[Difficulty, str, None] = Difficulty.MEDIUM,
        player_name: str = "",
    ) -> None:
        """Configure a new game and present its first round."""
        self.rounds.discard()
        difficulty = parse_difficulty(difficulty)

        self.state = SessionState(
            phase=SessionPhase.IN_PROGRESS,
            difficulty=difficulty,
            player_name=player_name,
            total_rounds=rounds_for(difficulty),
            best_score=await self.best_scores.get_best_score(),
        )
        logger.info("Started %s game with %d rounds", difficulty.value, self.state.total_rounds)

        self._next_round()

    def _next_round(self) -> None:
        self.state.current_round += 1
        self.rounds.start_round(self.state.difficulty)
        notify(
            self.listener, "round_started",
            self.state.current_round, self.state.total_rounds, self.state.total_score,
        )

    def request_hint(self) -> Optional[HintReveal]:
        if not self.is_playing:
            return None
        return self.rounds.request_hint()

    async def submit_guess(self, lat: float, lon: float) -> Optional[GuessOutcome]:
        """Score a guess for the current round and move the game on."""
        if not self.is_playing:
            logger.debug("Guess ignored, no game in progress")
            return None
        outcome = self.rounds.submit_guess(lat, lon)
        if outcome is not None:
            await self.record_round_result(outcome)
        return outcome

    async def skip_round(self) -> Optional[GuessOutcome]:
        """Skip the current round and move the game on."""
        if not self.is_playing:
            logger.debug("Skip ignored, no game in progress")
            return None
        outcome = self.rounds.skip_round()
        if outcome is not None:
            await self.record_round_result(outcome)
        return outcome

    async def record_round_result(self, outcome: GuessOutcome) -> None:
        """Add a resolved round to the totals, then continue or finish."""
        if not self.is_playing:
            return

        self.state.results.append(outcome)
        self.state.total_score += outcome.score
        if outcome.distance_m is not None:
            self.state.total_distance_m += outcome.distance_m

        if self.state.current_round >= self.state.total_rounds:
            await self.finish_session()
        else:
            self._next_round()

    async def finish_session(self) -> SessionSummary:
        """Compute final statistics and update the personal best."""
        if self.state.summary is not None:
            return self.state.summary

        self.rounds.discard()
        self.state.phase = SessionPhase.FINISHED

        total_rounds = self.state.total_rounds
        accuracy = calculate_accuracy(self.state.results, total_rounds)
        # Skipped rounds count in the denominator
        avg_distance = self.state.total_distance_m / total_rounds

        previous_best = await self.best_scores.get_best_score()
        is_new_best = self.state.total_score > previous_best
        self.state.best_score = previous_best
        if is_new_best:
            self.state.best_score = self.state.total_score
            await self.best_scores.set_best_score(self.state.total_score)

        summary = SessionSummary(
            player_name=self.state.player_name,
            score=self.state.total_score,
            accuracy=accuracy,
            avg_distance_m=avg_distance,
            total_rounds=total_rounds,
            is_new_best=is_new_best,
            best_score=self.state.best_score,
        )
        self.state.summary = summary

        notify(self.listener, "best_score_updated", self.state.best_score)
        notify(self.listener, "session_finished", summary)
        logger.info("Game over! Final score: %d, accuracy: %d%%", summary.score, accuracy)
        return summary

    def reset_to_menu(self) -> None:
        """Abandon the game and return to configuration."""
        self.rounds.discard()
        self.state.phase = SessionPhase.CONFIGURING
        logger.debug("Returned to menu")

    @property
    def round_phase(self) -> RoundPhase:
        return self.rounds.phase
