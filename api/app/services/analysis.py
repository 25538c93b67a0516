import asyncio
import logging
from datetime import date
from typing import Any, Optional, Protocol

from ..config import ANALYSIS_MODEL
from ..models import CompatibilityAnalysis
from ..schemas import NarrativeResult, UserProfileData
from .analysis_store import AnalysisStore
from .eligibility import age_on
from .matching import round_half_up

logger = logging.getLogger(__name__)

FIRST_RED_FLAG_MULTIPLIER = 0.6
EXTRA_RED_FLAG_MULTIPLIER = 0.75

TRAIT_LABELS = {
    "introversion": "Introversion (1=extrovert, 10=introvert)",
    "adventurousness": "Adventurousness",
    "ambition": "Ambition",
    "emotional_openness": "Emotional openness",
    "traditional_values": "Traditional values (1=progressive, 10=traditional)",
    "independence_need": "Independence need",
    "romantic_style": "Romantic style (1=practical, 10=romantic)",
    "social_energy": "Social energy (1=homebody, 10=social butterfly)",
    "communication_style": "Communication (1=reserved, 10=expressive)",
    "attachment_style": "Attachment (1=avoidant, 10=anxious)",
    "planning_style": "Planning (1=spontaneous, 10=structured)",
}

SYSTEM_PROMPT = """You are a relationship compatibility analyst for a dating app. You are given two user profiles. Analyze their compatibility honestly.

Return a JSON object with exactly these keys:
{
  "summary": "3-4 sentences on how good a match they are, specific to their profiles, using their first names.",
  "greenFlags": ["3-6 specific strong alignments"],
  "yellowFlags": ["2-4 differences that need compromise"],
  "redFlags": ["0-3 genuine dealbreakers; only when truly significant"],
  "categoryScores": {
    "coreValues": 0-10, "lifestyleAlignment": 0-10, "relationshipGoals": 0-10,
    "communicationStyle": 0-10, "emotionalCompatibility": 0-10, "familyPlanning": 0-10,
    "socialLifestyle": 0-10, "conflictResolution": 0-10, "intimacyAlignment": 0-10,
    "growthMindset": 0-10
  }
}

Be calibrated: 70/100 in total is a genuinely good match, 50 is mediocre, 85+ is rare."""


class MissingProfileDataError(Exception):
    pass


class NarrativeClient(Protocol):
    async def complete_json(self, system_prompt: str, user_content: str, schema: Any = None) -> Any: ...


def apply_red_flag_penalty(raw_score: int, red_flag_count: int) -> int:
    score = float(raw_score)
    if red_flag_count > 0:
        score *= FIRST_RED_FLAG_MULTIPLIER
        for _ in range(1, red_flag_count):
            score *= EXTRA_RED_FLAG_MULTIPLIER
    return round_half_up(score)


def _joined(items: list[str]) -> str:
    return ", ".join(items)


def format_profile(name: str, user: Any, profile: UserProfileData, today: Optional[date] = None) -> str:
    age = age_on(user.birthdate, today)
    lines = [f"## {name}"]
    lines.append(f"Demographics: {age if age is not None else 'unknown'} years old, {user.gender or 'unknown'}")
    if user.age_range_min and user.age_range_max:
        dealbreaker = "yes" if user.age_range_dealbreaker else "no"
        lines.append(f"Preferred partner age range: {user.age_range_min}-{user.age_range_max} (dealbreaker: {dealbreaker})")

    lines.append("\nPersonality traits (1-10):")
    for key, label in TRAIT_LABELS.items():
        lines.append(f"- {label}: {getattr(profile.traits, key):g}")

    if profile.values:
        lines.append(f"\nValues: {_joined(profile.values)}")
    if profile.interests:
        lines.append(f"Interests: {_joined(profile.interests)}")
    if profile.dealbreakers:
        lines.append(f"Dealbreakers: {_joined(profile.dealbreakers)}")

    rs = profile.relationship_style
    lines.append("\nRelationship style:")
    lines.append(f"- Love language: {rs.love_language}")
    lines.append(f"- Conflict style: {rs.conflict_style}")
    lines.append(f"- Communication frequency: {rs.communication_frequency}")
    lines.append(f"- Financial approach: {rs.financial_approach}")
    lines.append(f"- Alone time need: {rs.alone_time_need:g}/10")

    ls = profile.lifestyle
    lines.append("\nLifestyle:")
    lines.append(f"- Sleep: {ls.sleep_schedule}, Exercise: {ls.exercise_level}")
    lines.append(f"- Alcohol: {ls.alcohol_use}, Drugs: {ls.drug_use}")
    lines.append(f"- Location: {ls.location_preference}, Pets: {ls.pet_preference}")

    fp = profile.family_plans
    timeline = f", timeline: {fp.kids_timeline}" if fp.kids_timeline else ""
    lines.append("\nFamily plans:")
    lines.append(f"- Wants kids: {fp.wants_kids.value}{timeline}")
    lines.append(f"- Family closeness: {fp.family_closeness:g}/10")

    pp = profile.partner_preferences
    if pp is not None:
        lines.append("\nPartner preferences:")
        if pp.must_haves:
            lines.append(f"- Must haves: {_joined(pp.must_haves)}")
        if pp.dealbreakers_in_partner:
            lines.append(f"- Dealbreakers in partner: {_joined(pp.dealbreakers_in_partner)}")
        if pp.red_flags:
            lines.append(f"- Red flags: {_joined(pp.red_flags)}")
        if pp.nice_to_haves:
            lines.append(f"- Nice to haves: {_joined(pp.nice_to_haves)}")

    lp = profile.love_philosophy
    if lp is not None:
        lines.append("\nLove philosophy:")
        if lp.love_definition:
            lines.append(f"- Love definition: {lp.love_definition}")
        lines.append(f"- Believes in soulmates: {lp.believes_in_soulmates}")

    ip = profile.intimacy_profile
    if ip is not None:
        lines.append("\nIntimacy:")
        lines.append(f"- Physical intimacy importance: {ip.physical_intimacy_importance:g}/10")
        lines.append(f"- PDA comfort: {ip.pda_comfort.value}")
        if ip.connection_triggers:
            lines.append(f"- Connection triggers: {_joined(ip.connection_triggers)}")

    sp = profile.social_profile
    if sp is not None:
        lines.append("\nSocial:")
        lines.append(f"- Style: {sp.social_style.value}, Go out: {sp.go_out_frequency:g}/10")

    return "\n".join(lines)


def _first_name(user: Any, fallback: str) -> str:
    name = (user.name or "").strip()
    return name.split(" ")[0] if name else fallback


class CompatibilityAnalyzer:
    def __init__(self, store: AnalysisStore, directory, client: NarrativeClient, model: str = ANALYSIS_MODEL) -> None:
        self.store = store
        self.directory = directory
        self.client = client
        self.model = model

    def _load(self, user_id: str) -> tuple[Any, Optional[UserProfileData]]:
        return self.directory.get_user(user_id), self.directory.get_profile(user_id)

    async def analyze(self, user_a_id: str, user_b_id: str) -> CompatibilityAnalysis:
        existing = await asyncio.to_thread(self.store.get_by_pair, user_a_id, user_b_id)
        if existing is not None:
            logger.info("[analysis] pair already analyzed pair=%s", existing.pair_key)
            return existing

        user_a, profile_a = await asyncio.to_thread(self._load, user_a_id)
        user_b, profile_b = await asyncio.to_thread(self._load, user_b_id)
        if user_a is None or user_b is None or profile_a is None or profile_b is None:
            raise MissingProfileDataError(f"missing user or profile data for {user_a_id} / {user_b_id}")

        name_a = _first_name(user_a, "Person A")
        name_b = _first_name(user_b, "Person B")
        user_content = "\n".join(
            [format_profile(name_a, user_a, profile_a), "\n---\n", format_profile(name_b, user_b, profile_b)]
        )
        logger.info("[analysis] analyzing %s <-> %s", user_a_id, user_b_id)

        result: NarrativeResult = await self.client.complete_json(SYSTEM_PROMPT, user_content, schema=NarrativeResult)

        raw_score = result.category_scores.total()
        overall = apply_red_flag_penalty(raw_score, len(result.red_flags))
        record = await asyncio.to_thread(
            self.store.create,
            user_a_id,
            user_b_id,
            {
                "summary": result.summary,
                "green_flags": result.green_flags,
                "yellow_flags": result.yellow_flags,
                "red_flags": result.red_flags,
                "category_scores": result.category_scores.model_dump(),
                "raw_score": raw_score,
                "overall_score": overall,
                "model": self.model,
            },
        )
        logger.info(
            "[analysis] stored pair=%s raw=%s overall=%s green=%s yellow=%s red=%s",
            record.pair_key,
            raw_score,
            overall,
            len(result.green_flags),
            len(result.yellow_flags),
            len(result.red_flags),
        )
        return record
