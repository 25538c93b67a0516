from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from ..deps import get_directory, get_orchestrator, get_profile_extractor, get_regeneration_gate, require_actor
from ..repo import UserDirectory, UserNotFoundError
from ..services.cooldown import RegenerationCooldownError, RegenerationGate
from ..services.fanout import FanOutOrchestrator
from ..services.triggers import ProfileExtractor, ProfileNotReadyError, begin_profile_audit, request_profile_regeneration

router = APIRouter()


@router.post("/profile/audit/complete")
def post_profile_audit_complete(
    background_tasks: BackgroundTasks,
    actor_id: str = Depends(require_actor),
    directory: UserDirectory = Depends(get_directory),
    orchestrator: FanOutOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    try:
        begin_profile_audit(directory, actor_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except ProfileNotReadyError:
        raise HTTPException(status_code=409, detail="Profile not ready")
    background_tasks.add_task(orchestrator.analyze_all_for_user, actor_id)
    return {"started": True}


@router.post("/profile/regenerate")
def post_profile_regenerate(
    actor_id: str = Depends(require_actor),
    gate: RegenerationGate = Depends(get_regeneration_gate),
    extractor: ProfileExtractor = Depends(get_profile_extractor),
) -> dict[str, Any]:
    try:
        return request_profile_regeneration(gate, actor_id, extractor)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except RegenerationCooldownError as exc:
        raise HTTPException(
            status_code=429,
            detail=str(exc),
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )
