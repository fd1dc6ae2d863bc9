from fastapi import APIRouter, Depends, HTTPException, status

from ..models.game import (
    StartGameRequest, GameStateResponse, GuessRequest, HintResponse,
    RoundResultResponse, SummaryResponse, BestScoreResponse, SessionPhase
)
from ..dependencies import get_registry
from ..services.games import GameRegistry
from ..services.session_engine import SessionEngine
from ..config import get_settings

router = APIRouter(prefix="/game", tags=["Game"])
settings = get_settings()


def _get_game(registry: GameRegistry, game_id: str) -> SessionEngine:
    game = registry.get(game_id)
    if game is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Game not found. Start a new game."
        )
    return game


@router.post("/start", response_model=GameStateResponse, status_code=status.HTTP_201_CREATED)
async def start_game(
    game_data: StartGameRequest,
    registry: GameRegistry = Depends(get_registry)
):
    """Start a new game and present its first landmark."""
    game_id = registry.create()
    game = registry.get(game_id)
    await game.start_session(game_data.difficulty, game_data.player_name.strip())
    return registry.snapshot(game_id, game)


@router.get("/best", response_model=BestScoreResponse)
async def get_best_score(registry: GameRegistry = Depends(get_registry)):
    """Get the stored personal best."""
    return BestScoreResponse(best_score=await registry.best_scores.get_best_score())


@router.get("/{game_id}", response_model=GameStateResponse)
async def get_game(game_id: str, registry: GameRegistry = Depends(get_registry)):
    """Get the current state of a game (without the target's location)."""
    game = _get_game(registry, game_id)
    return registry.snapshot(game_id, game)


@router.post("/{game_id}/hint", response_model=HintResponse)
async def request_hint(game_id: str, registry: GameRegistry = Depends(get_registry)):
    """Reveal the next hint for the current round (-100 points each)."""
    game = _get_game(registry, game_id)
    return HintResponse(hint=game.request_hint())


@router.post("/{game_id}/guess", response_model=RoundResultResponse)
async def submit_guess(
    game_id: str,
    guess: GuessRequest,
    registry: GameRegistry = Depends(get_registry)
):
    """Submit a guess for the current round."""
    game = _get_game(registry, game_id)
    outcome = await game.submit_guess(guess.latitude, guess.longitude)

    if outcome is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No active round to guess."
        )

    return RoundResultResponse.build(
        outcome,
        registry.snapshot(game_id, game),
        settings.GUESS_RESULT_DELAY_MS,
    )


@router.post("/{game_id}/skip", response_model=RoundResultResponse)
async def skip_round(game_id: str, registry: GameRegistry = Depends(get_registry)):
    """Skip the current round for zero points."""
    game = _get_game(registry, game_id)
    outcome = await game.skip_round()

    if outcome is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No active round to skip."
        )

    return RoundResultResponse.build(
        outcome,
        registry.snapshot(game_id, game),
        settings.SKIP_RESULT_DELAY_MS,
    )


@router.get("/{game_id}/summary", response_model=SummaryResponse)
async def get_summary(game_id: str, registry: GameRegistry = Depends(get_registry)):
    """Get the final results of a finished game."""
    game = _get_game(registry, game_id)

    if game.phase != SessionPhase.FINISHED or game.state.summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Game is not finished yet."
        )

    return SummaryResponse.from_summary(game.state.summary)


@router.delete("/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game(game_id: str, registry: GameRegistry = Depends(get_registry)):
    """Abandon a game and return to the menu."""
    if not registry.remove(game_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Game not found."
        )
    return None
