from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_directory, get_store, require_actor
from ..repo import UserDirectory, UserNotFoundError
from ..schemas import AnalysisResponse, ScoreResponse
from ..services.analysis_store import AnalysisStore
from ..services.match_listing import find_pair_analysis, get_generation_status, list_matches
from ..services.matching import compute_compatibility

router = APIRouter()


@router.get("/matches/score/{other_user_id}", response_model=ScoreResponse)
def get_compatibility_score(
    other_user_id: str,
    actor_id: str = Depends(require_actor),
    directory: UserDirectory = Depends(get_directory),
) -> dict[str, Any]:
    mine = directory.get_profile(actor_id)
    theirs = directory.get_profile(other_user_id)
    if mine is None or theirs is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    result = compute_compatibility(mine, theirs)
    return {
        "overall": result.overall,
        "breakdown": result.breakdown,
        "shared_values": result.shared_values,
        "shared_interests": result.shared_interests,
        "version": result.version,
    }


@router.get("/matches")
def get_matches(
    limit: Optional[int] = Query(default=None),
    actor_id: str = Depends(require_actor),
    directory: UserDirectory = Depends(get_directory),
    store: AnalysisStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        matches = list_matches(directory, store, actor_id, limit=limit)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return {"matches": matches}


@router.get("/matches/status")
def get_match_status(
    actor_id: str = Depends(require_actor),
    directory: UserDirectory = Depends(get_directory),
    store: AnalysisStore = Depends(get_store),
) -> dict[str, bool]:
    try:
        return get_generation_status(directory, store, actor_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")


@router.get("/matches/pair/{other_user_id}", response_model=AnalysisResponse)
def get_pair_analysis(
    other_user_id: str,
    actor_id: str = Depends(require_actor),
    directory: UserDirectory = Depends(get_directory),
    store: AnalysisStore = Depends(get_store),
):
    try:
        analysis = find_pair_analysis(directory, store, actor_id, other_user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    if analysis is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis
