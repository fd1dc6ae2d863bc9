import logging
import time
import uuid
from collections import OrderedDict
from typing import Callable, Dict, Optional

from ..models.game import GameStateResponse
from ..models.landmark import LandmarkPublic
from .best_score import BestScoreStore
from .landmarks import LandmarkCatalog
from .round_engine import HINT_PENALTY, RoundEngine, RoundPhase
from .session_engine import SessionEngine
from .street_view import ImageProvider

logger = logging.getLogger(__name__)

MAX_GAMES = 1000
GAME_IDLE_TIMEOUT_S = 3600.0


class GameRegistry:
    """
    Live games served by this process, keyed by game id.

    Games are kept in memory only. The registry holds at most `max_games`
    games and drops the least recently used one to make room; games idle
    for longer than `idle_timeout` seconds are dropped as well.
    """

    def __init__(
        self,
        catalog: LandmarkCatalog,
        best_scores: BestScoreStore,
        image_provider: Optional[ImageProvider] = None,
        hint_penalty: int = HINT_PENALTY,
        max_games: int = MAX_GAMES,
        idle_timeout: float = GAME_IDLE_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_games < 1:
            raise ValueError("max_games must be at least 1")
        self.catalog = catalog
        self.best_scores = best_scores
        self.image_provider = image_provider
        self.hint_penalty = hint_penalty
        self.max_games = max_games
        self.idle_timeout = idle_timeout
        self._clock = clock
        # Least recently used first
        self._games: "OrderedDict[str, SessionEngine]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._games)

    def create(self) -> str:
        """Register a fresh game and return its id."""
        self.prune()
        while len(self._games) >= self.max_games:
            oldest = next(iter(self._games))
            logger.info("Registry full, dropping least recently used game %s", oldest)
            self._drop(oldest)

        game_id = uuid.uuid4().hex
        rounds = RoundEngine(
            self.catalog,
            image_provider=self.image_provider,
            hint_penalty=self.hint_penalty,
        )
        self._games[game_id] = SessionEngine(rounds, best_scores=self.best_scores)
        self._last_seen[game_id] = self._clock()
        return game_id

    def get(self, game_id: str) -> Optional[SessionEngine]:
        """Look up a live game, marking it as recently used."""
        self.prune()
        game = self._games.get(game_id)
        if game is None:
            return None
        self._games.move_to_end(game_id)
        self._last_seen[game_id] = self._clock()
        return game

    def remove(self, game_id: str) -> bool:
        if game_id not in self._games:
            return False
        self._drop(game_id)
        logger.debug("Removed game %s", game_id)
        return True

    def prune(self) -> int:
        """Drop games idle for longer than the timeout; returns how many."""
        now = self._clock()
        dropped = 0
        while self._games:
            oldest = next(iter(self._games))
            if now - self._last_seen[oldest] < self.idle_timeout:
                break
            self._drop(oldest)
            dropped += 1
        if dropped:
            logger.info("Dropped %d idle games", dropped)
        return dropped

    def _drop(self, game_id: str) -> None:
        game = self._games.pop(game_id)
        del self._last_seen[game_id]
        game.reset_to_menu()

    def snapshot(self, game_id: str, game: SessionEngine) -> GameStateResponse:
        """Current state of a game, hiding the target's location."""
        state = game.state
        rounds = game.rounds
        landmark = rounds.landmark if rounds.phase == RoundPhase.PRESENTED else None
        return GameStateResponse(
            game_id=game_id,
            phase=state.phase,
            difficulty=state.difficulty,
            player_name=state.player_name,
            current_round=state.current_round,
            total_rounds=state.total_rounds,
            score=state.total_score,
            hints_used=rounds.hints_used if landmark else 0,
            landmark=LandmarkPublic.from_landmark(landmark) if landmark else None,
            photo_url=rounds.photo_url if landmark else None,
            best_score=state.best_score,
        )
