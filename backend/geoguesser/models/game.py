from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from .landmark import Difficulty, Landmark, LandmarkPublic, LandmarkReveal


class Coordinate(BaseModel):
    """A point on the map in decimal degrees."""
    lat: float
    lon: float

    class Config:
        frozen = True


class HintReveal(BaseModel):
    """A hint as it is revealed to the player."""
    text: str
    index: int
    total: int


class GuessOutcome(BaseModel):
    """Result of one completed (guessed or skipped) round."""
    landmark: Landmark
    guess: Optional[Coordinate] = None
    distance_m: Optional[float] = None
    score: int = Field(default=0, ge=0)
    hints_used: int = 0
    skipped: bool = False

    class Config:
        frozen = True


class SessionSummary(BaseModel):
    """Final statistics of a finished game."""
    player_name: str
    score: int
    accuracy: int
    avg_distance_m: float
    total_rounds: int
    is_new_best: bool
    best_score: int

    def share_text(self) -> str:
        return (
            f"I scored {self.score:,} points on Kingston GeoGuesser! "
            "Can you beat my score?"
        )


class SessionPhase(str, Enum):
    CONFIGURING = "configuring"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


# --- API schemas ---

class StartGameRequest(BaseModel):
    """Request to start a new game."""
    difficulty: Difficulty = Difficulty.MEDIUM
    player_name: str = Field(default="", max_length=50)


class GuessRequest(BaseModel):
    """Request for submitting a guess."""
    latitude: float = Field(allow_inf_nan=False)
    longitude: float = Field(allow_inf_nan=False)


class GameStateResponse(BaseModel):
    """Current state of a game, without the target's location."""
    game_id: str
    phase: SessionPhase
    difficulty: Difficulty
    player_name: str
    current_round: int
    total_rounds: int
    score: int
    hints_used: int
    landmark: Optional[LandmarkPublic] = None
    photo_url: Optional[str] = None
    best_score: int


class HintResponse(BaseModel):
    """Response to a hint request; hint is null when none remain."""
    hint: Optional[HintReveal] = None


class RoundResultResponse(BaseModel):
    """Response after a guess or a skip."""
    landmark: LandmarkReveal
    guess_latitude: Optional[float] = None
    guess_longitude: Optional[float] = None
    distance_m: Optional[float] = None
    score: int
    hints_used: int
    skipped: bool
    next_round_in_ms: int
    game_completed: bool
    state: GameStateResponse

    @classmethod
    def build(
        cls,
        outcome: GuessOutcome,
        state: GameStateResponse,
        next_round_in_ms: int,
    ) -> "RoundResultResponse":
        return cls(
            landmark=LandmarkReveal.from_landmark(outcome.landmark),
            guess_latitude=outcome.guess.lat if outcome.guess else None,
            guess_longitude=outcome.guess.lon if outcome.guess else None,
            distance_m=outcome.distance_m,
            score=outcome.score,
            hints_used=outcome.hints_used,
            skipped=outcome.skipped,
            next_round_in_ms=next_round_in_ms,
            game_completed=state.phase == SessionPhase.FINISHED,
            state=state,
        )


class SummaryResponse(BaseModel):
    """Summary with the text the player can share."""
    summary: SessionSummary
    share_text: str

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> "SummaryResponse":
        return cls(summary=summary, share_text=summary.share_text())


class BestScoreResponse(BaseModel):
    best_score: int


class ScoreSubmission(BaseModel):
    """Request to post a score to a room's leaderboard."""
    name: str = Field(min_length=1)
    score: float = Field(ge=0, allow_inf_nan=False)


class LeaderboardEntry(BaseModel):
    """Leaderboard entry."""
    room: str
    name: str
    score: int
    created_at: datetime

    class Config:
        from_attributes = True


class LeaderboardResponse(BaseModel):
    """Response with leaderboard."""
    room: str
    enabled: bool
    entries: List[LeaderboardEntry]
