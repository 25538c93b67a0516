from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from ..schemas import (
    TRAIT_DIMENSIONS,
    IntimacyProfile,
    Lifestyle,
    LovePhilosophy,
    PartnerPreferences,
    PdaComfort,
    SocialProfile,
    SocialStyle,
    UserProfileData,
    WantsKids,
)
from .similarity import NEUTRAL, mean, numeric_similarity, ordinal_similarity, set_overlap, shared_items, table_lookup

SCORER_VERSION = "2024.1"

COMPATIBILITY_WEIGHTS: dict[str, float] = {
    "values": 0.15,
    "lifestyle": 0.12,
    "relationship_style": 0.12,
    "family_plans": 0.15,
    "interests": 0.08,
    "personality": 0.12,
    "social_compatibility": 0.08,
    "intimacy_compatibility": 0.08,
    "love_philosophy": 0.05,
    "partner_preferences": 0.05,
}

# Rows are "my answer", columns "their answer". Unseen pairs fall back to NEUTRAL.
WANTS_KIDS_COMPATIBILITY: dict[str, dict[str, float]] = {
    WantsKids.YES: {WantsKids.YES: 1.0, WantsKids.MAYBE: 0.7, WantsKids.OPEN: 0.8, WantsKids.NO: 0.1, WantsKids.ALREADY_HAS: 0.8, WantsKids.UNKNOWN: 0.5},
    WantsKids.NO: {WantsKids.NO: 1.0, WantsKids.MAYBE: 0.4, WantsKids.OPEN: 0.5, WantsKids.YES: 0.1, WantsKids.ALREADY_HAS: 0.2, WantsKids.UNKNOWN: 0.5},
    WantsKids.MAYBE: {WantsKids.MAYBE: 0.8, WantsKids.YES: 0.7, WantsKids.NO: 0.4, WantsKids.OPEN: 0.8, WantsKids.ALREADY_HAS: 0.6, WantsKids.UNKNOWN: 0.6},
    WantsKids.OPEN: {WantsKids.OPEN: 0.9, WantsKids.YES: 0.8, WantsKids.NO: 0.5, WantsKids.MAYBE: 0.8, WantsKids.ALREADY_HAS: 0.7, WantsKids.UNKNOWN: 0.7},
    WantsKids.ALREADY_HAS: {WantsKids.ALREADY_HAS: 0.9, WantsKids.YES: 0.8, WantsKids.OPEN: 0.7, WantsKids.MAYBE: 0.6, WantsKids.NO: 0.2, WantsKids.UNKNOWN: 0.5},
    WantsKids.UNKNOWN: {WantsKids.UNKNOWN: 0.5, WantsKids.YES: 0.5, WantsKids.NO: 0.5, WantsKids.MAYBE: 0.6, WantsKids.OPEN: 0.7, WantsKids.ALREADY_HAS: 0.5},
}

SOCIAL_STYLE_SCALE: tuple[str, ...] = (
    SocialStyle.VERY_ACTIVE,
    SocialStyle.ACTIVE,
    SocialStyle.BALANCED,
    SocialStyle.RESERVED,
    SocialStyle.INTROVERTED,
)

PDA_COMFORT_SCALE: tuple[str, ...] = (
    PdaComfort.LOVES_IT,
    PdaComfort.COMFORTABLE,
    PdaComfort.MODERATE,
    PdaComfort.PRIVATE,
    PdaComfort.UNCOMFORTABLE,
)


@dataclass(frozen=True)
class CategoricalRule:
    """Scoring rule for one lifestyle field.

    exact match -> 1.0; both in one near group -> near; either side in
    ``soft_values`` -> soft; otherwise -> partial.
    """

    partial: float
    near_groups: tuple[frozenset[str], ...] = ()
    near: float = 0.8
    soft_values: frozenset[str] = frozenset()
    soft: float = 0.8


LIFESTYLE_RULES: dict[str, CategoricalRule] = {
    "sleep_schedule": CategoricalRule(
        partial=0.5,
        near_groups=(
            frozenset({"early_bird", "early", "morning", "morning_person"}),
            frozenset({"night_owl", "night", "late", "evening"}),
        ),
        near=0.8,
        soft_values=frozenset({"flexible", "normal", "varies", "neutral"}),
        soft=0.7,
    ),
    "exercise_level": CategoricalRule(
        partial=0.5,
        near_groups=(
            frozenset({"active", "very_active", "daily", "athletic", "regularly"}),
            frozenset({"sedentary", "light", "rarely", "never", "minimal"}),
        ),
        near=0.8,
        soft_values=frozenset({"moderate", "sometimes", "flexible"}),
        soft=0.7,
    ),
    "alcohol_use": CategoricalRule(
        partial=0.7,
        near_groups=(frozenset({"socially", "social", "occasionally", "sometimes", "rarely"}),),
        near=0.9,
        soft_values=frozenset({"never"}),
        soft=0.4,
    ),
    "drug_use": CategoricalRule(
        partial=0.6,
        soft_values=frozenset({"never"}),
        soft=0.3,
    ),
    "location_preference": CategoricalRule(
        partial=0.4,
        soft_values=frozenset({"flexible"}),
        soft=0.8,
    ),
    "pet_preference": CategoricalRule(
        partial=0.5,
        soft_values=frozenset({"neutral", "flexible"}),
        soft=0.8,
    ),
}

LOVE_LANGUAGE_MISMATCH = 0.6
COMMUNICATION_FREQUENCY_MISMATCH = 0.5
CONFLICT_STYLE_MISMATCH = 0.6
FINANCIAL_APPROACH_MISMATCH = 0.5
SOULMATE_BELIEF_MISMATCH = 0.6


@dataclass
class CompatibilityScore:
    overall: int
    breakdown: dict[str, int]
    shared_values: list[str] = field(default_factory=list)
    shared_interests: list[str] = field(default_factory=list)
    version: str = SCORER_VERSION


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    return tuple(sorted((str(user_a), str(user_b))))


def pair_key(user_a: str, user_b: str) -> str:
    return "_".join(canonical_pair(user_a, user_b))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _key(value: object) -> str:
    return str(value or "").strip().lower().replace(" ", "_").replace("-", "_")


def _same(a: object, b: object) -> bool:
    return _key(a) == _key(b)


def categorical_match(a: str, b: str, rule: CategoricalRule) -> float:
    ka, kb = _key(a), _key(b)
    if not ka or not kb or ka == "unknown" or kb == "unknown":
        return NEUTRAL
    if ka == kb:
        return 1.0
    for group in rule.near_groups:
        if ka in group and kb in group:
            return rule.near
    if ka in rule.soft_values or kb in rule.soft_values:
        return rule.soft
    return rule.partial


def score_values(a: UserProfileData, b: UserProfileData) -> float:
    return set_overlap(a.values, b.values)


def score_interests(a: UserProfileData, b: UserProfileData) -> float:
    return set_overlap(a.interests, b.interests)


def score_lifestyle(a: UserProfileData, b: UserProfileData) -> float:
    la: Lifestyle = a.lifestyle
    lb: Lifestyle = b.lifestyle
    return mean([categorical_match(getattr(la, name), getattr(lb, name), rule) for name, rule in LIFESTYLE_RULES.items()])


def score_relationship_style(a: UserProfileData, b: UserProfileData) -> float:
    ra, rb = a.relationship_style, b.relationship_style
    return mean(
        [
            1.0 if _same(ra.love_language, rb.love_language) else LOVE_LANGUAGE_MISMATCH,
            1.0 if _same(ra.communication_frequency, rb.communication_frequency) else COMMUNICATION_FREQUENCY_MISMATCH,
            1.0 if _same(ra.conflict_style, rb.conflict_style) else CONFLICT_STYLE_MISMATCH,
            1.0 if _same(ra.financial_approach, rb.financial_approach) else FINANCIAL_APPROACH_MISMATCH,
            numeric_similarity(ra.alone_time_need, rb.alone_time_need),
        ]
    )


def score_family_plans(a: UserProfileData, b: UserProfileData) -> float:
    fa, fb = a.family_plans, b.family_plans
    kids = table_lookup(WANTS_KIDS_COMPATIBILITY, fa.wants_kids, fb.wants_kids)
    return mean([kids, numeric_similarity(fa.family_closeness, fb.family_closeness)])


def score_personality(a: UserProfileData, b: UserProfileData) -> float:
    return mean([numeric_similarity(getattr(a.traits, t), getattr(b.traits, t)) for t in TRAIT_DIMENSIONS])


def score_social(a: Optional[SocialProfile], b: Optional[SocialProfile]) -> float:
    if a is None or b is None:
        return NEUTRAL
    return mean(
        [
            ordinal_similarity(a.social_style, b.social_style, SOCIAL_STYLE_SCALE, default=SocialStyle.BALANCED),
            numeric_similarity(a.go_out_frequency, b.go_out_frequency),
            numeric_similarity(a.friend_approval_importance, b.friend_approval_importance),
        ]
    )


def score_intimacy(a: Optional[IntimacyProfile], b: Optional[IntimacyProfile]) -> float:
    if a is None or b is None:
        return NEUTRAL
    parts = [
        numeric_similarity(a.physical_intimacy_importance, b.physical_intimacy_importance),
        numeric_similarity(a.physical_attraction_importance, b.physical_attraction_importance),
        ordinal_similarity(a.pda_comfort, b.pda_comfort, PDA_COMFORT_SCALE, default=PdaComfort.MODERATE),
    ]
    if a.connection_triggers and b.connection_triggers:
        parts.append(set_overlap(a.connection_triggers, b.connection_triggers))
    return mean(parts)


def score_love_philosophy(a: Optional[LovePhilosophy], b: Optional[LovePhilosophy]) -> float:
    if a is None or b is None:
        return NEUTRAL
    parts = [1.0 if a.believes_in_soulmates == b.believes_in_soulmates else SOULMATE_BELIEF_MISMATCH]
    if a.romantic_gestures and b.romantic_gestures:
        parts.append(set_overlap(a.romantic_gestures, b.romantic_gestures))
    if a.love_recognition and b.love_recognition:
        parts.append(set_overlap(a.love_recognition, b.love_recognition))
    return mean(parts)


def score_partner_preferences(a: UserProfileData, b: UserProfileData) -> float:
    pa: Optional[PartnerPreferences] = a.partner_preferences
    pb: Optional[PartnerPreferences] = b.partner_preferences
    if pa is None or pb is None:
        return NEUTRAL
    return mean(
        [
            set_overlap(pa.must_haves, [*b.values, *b.interests]),
            set_overlap(pb.must_haves, [*a.values, *a.interests]),
        ]
    )


def compute_subscores(a: UserProfileData, b: UserProfileData) -> dict[str, float]:
    return {
        "values": score_values(a, b),
        "lifestyle": score_lifestyle(a, b),
        "relationship_style": score_relationship_style(a, b),
        "family_plans": score_family_plans(a, b),
        "interests": score_interests(a, b),
        "personality": score_personality(a, b),
        "social_compatibility": score_social(a.social_profile, b.social_profile),
        "intimacy_compatibility": score_intimacy(a.intimacy_profile, b.intimacy_profile),
        "love_philosophy": score_love_philosophy(a.love_philosophy, b.love_philosophy),
        "partner_preferences": score_partner_preferences(a, b),
    }


def compute_compatibility(a: UserProfileData, b: UserProfileData) -> CompatibilityScore:
    subscores = compute_subscores(a, b)
    weighted = math.fsum(COMPATIBILITY_WEIGHTS[name] * value for name, value in subscores.items())
    return CompatibilityScore(
        overall=round_half_up(100 * weighted),
        breakdown={name: round_half_up(100 * value) for name, value in subscores.items()},
        shared_values=shared_items(a.values, b.values),
        shared_interests=shared_items(a.interests, b.interests),
    )
