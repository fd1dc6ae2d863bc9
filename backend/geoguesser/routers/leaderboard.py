from fastapi import APIRouter, Depends, status

from ..models.game import LeaderboardResponse, ScoreSubmission
from ..dependencies import get_leaderboard
from ..services.leaderboard import LeaderboardService

router = APIRouter(prefix="/leaderboard", tags=["Leaderboard"])


@router.get("/{room}", response_model=LeaderboardResponse)
async def get_leaderboard_for_room(
    room: str,
    leaderboard: LeaderboardService = Depends(get_leaderboard)
):
    """Get the top scores of a room from the last 24 hours."""
    entries = await leaderboard.fetch_top(room)
    return LeaderboardResponse(room=room.lower(), enabled=leaderboard.enabled, entries=entries)


@router.post("/{room}", status_code=status.HTTP_201_CREATED)
async def submit_score(
    room: str,
    submission: ScoreSubmission,
    leaderboard: LeaderboardService = Depends(get_leaderboard)
):
    """Post a score to a room; reports submitted=false when the leaderboard is off."""
    stored = await leaderboard.submit_score(room, submission.name, submission.score)
    return {"submitted": stored}
