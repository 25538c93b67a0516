import logging
from datetime import date
from typing import Any, Optional

from ..config import MATCH_LIST_DEFAULT_LIMIT, MATCH_LIST_MAX_LIMIT
from ..models import CompatibilityAnalysis
from ..repo import UserDirectory
from ..schemas import AnalysisResponse
from .analysis_store import AnalysisStore
from .eligibility import SegmentPredicate, age_on, allow_all, is_eligible_candidate
from .fanout import eligible_candidates

logger = logging.getLogger(__name__)


def clamp_limit(limit: Optional[int]) -> int:
    requested = MATCH_LIST_DEFAULT_LIMIT if limit is None else int(limit)
    return max(1, min(requested, MATCH_LIST_MAX_LIMIT))


def _public_user(user: Any, today: Optional[date] = None) -> dict[str, Any]:
    return {
        "id": str(user.id),
        "name": user.name,
        "gender": user.gender,
        "age": age_on(user.birthdate, today),
    }


def list_matches(
    directory: UserDirectory,
    store: AnalysisStore,
    user_id: str,
    limit: Optional[int] = None,
    segment: SegmentPredicate = allow_all,
    today: Optional[date] = None,
) -> list[dict[str, Any]]:
    """Stored analyses for ``user_id``, best first.

    Counterparts who are no longer eligible (attraction, age dealbreaker,
    missing profile, segment) are suppressed here, not deleted.
    """
    me = directory.require_user(user_id)
    safe_limit = clamp_limit(limit)
    with_profiles = directory.user_ids_with_profiles()

    analyses = sorted(store.list_for_user(str(me.id)), key=lambda a: a.overall_score, reverse=True)
    out: list[dict[str, Any]] = []
    suppressed = 0
    for analysis in analyses:
        other = directory.get_user(analysis.other_user_id(str(me.id)))
        if other is None:
            suppressed += 1
            continue
        has_profile = str(other.id) in with_profiles
        if not is_eligible_candidate(me, other, has_profile=has_profile, segment=segment, today=today):
            suppressed += 1
            continue
        out.append(
            {
                "user": _public_user(other, today),
                "analysis": AnalysisResponse.model_validate(analysis).model_dump(mode="json"),
            }
        )
        if len(out) >= safe_limit:
            break
    if suppressed:
        logger.info("[analysis] match list user=%s suppressed=%s", user_id, suppressed)
    return out


def find_pair_analysis(
    directory: UserDirectory,
    store: AnalysisStore,
    user_id: str,
    other_user_id: str,
    segment: SegmentPredicate = allow_all,
    today: Optional[date] = None,
) -> Optional[CompatibilityAnalysis]:
    """The stored analysis for one pair, or None when the counterpart is no longer eligible."""
    me = directory.require_user(user_id)
    analysis = store.get_by_pair(str(me.id), other_user_id)
    if analysis is None:
        return None
    other = directory.get_user(analysis.other_user_id(str(me.id)))
    if other is None:
        return None
    has_profile = directory.has_profile(str(other.id))
    if not is_eligible_candidate(me, other, has_profile=has_profile, segment=segment, today=today):
        logger.info("[analysis] pair lookup suppressed user=%s other=%s", user_id, other_user_id)
        return None
    return analysis


def get_generation_status(
    directory: UserDirectory,
    store: AnalysisStore,
    user_id: str,
    segment: SegmentPredicate = allow_all,
    today: Optional[date] = None,
) -> dict[str, bool]:
    me = directory.require_user(user_id)
    audit_completed = me.profile_audit_completed_at is not None
    has_profile = directory.has_profile(str(me.id))
    has_any_analyses = store.count_for_user(str(me.id)) > 0

    has_eligible_candidates = False
    if audit_completed and has_profile and not has_any_analyses:
        has_eligible_candidates = bool(
            eligible_candidates(me, directory.list_users(), directory.user_ids_with_profiles(), segment=segment, today=today)
        )

    return {
        "is_analyzing": audit_completed and has_profile and not has_any_analyses and has_eligible_candidates,
        "audit_completed": audit_completed,
        "has_profile": has_profile,
        "has_any_analyses": has_any_analyses,
    }
