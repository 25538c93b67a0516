import logging
import uuid

from fastapi import Header, HTTPException

from .repo import UserDirectory
from .services.analysis import CompatibilityAnalyzer
from .services.analysis_store import AnalysisStore
from .services.cooldown import RegenerationGate
from .services.fanout import FanOutOrchestrator
from .services.llm import OpenAIAnalysisClient
from .services.triggers import ProfileExtractor

logger = logging.getLogger(__name__)


def parse_actor_user_id(raw_actor_user_id: str | None) -> str | None:
    if not raw_actor_user_id:
        return None
    value = raw_actor_user_id.strip()
    if not value:
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        raise HTTPException(status_code=400, detail="X-Actor-User-Id must be a valid UUID")


def require_actor(x_actor_user_id: str | None = Header(default=None, alias="X-Actor-User-Id")) -> str:
    actor = parse_actor_user_id(x_actor_user_id)
    if actor is None:
        raise HTTPException(status_code=401, detail="X-Actor-User-Id header required")
    return actor


def get_directory() -> UserDirectory:
    return UserDirectory()


def get_store() -> AnalysisStore:
    return AnalysisStore()


def get_orchestrator() -> FanOutOrchestrator:
    directory = UserDirectory()
    analyzer = CompatibilityAnalyzer(AnalysisStore(), directory, OpenAIAnalysisClient())
    return FanOutOrchestrator(analyzer, directory)


def get_regeneration_gate() -> RegenerationGate:
    return RegenerationGate()


def _log_extraction_request(user_id: str) -> None:
    logger.info("[cooldown] profile regeneration requested user=%s", user_id)


def get_profile_extractor() -> ProfileExtractor:
    # Deployments wire the extraction pipeline in through app.dependency_overrides.
    return _log_extraction_request
