import enum
from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Lenient(str, enum.Enum):
    """Closed categorical value; unrecognized input parses to the fallback member."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().replace(" ", "_")
            for member in cls:
                if member.value == key:
                    return member
        return cls._fallback()

    @classmethod
    def _fallback(cls):
        return cls("unknown")


class Gender(_Lenient):
    MAN = "man"
    WOMAN = "woman"
    NON_BINARY = "non-binary"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().replace("_", "-").replace(" ", "-")
            if key in {"nonbinary", "non-binary", "nb", "enby"}:
                return cls.NON_BINARY
            if key in {"man", "male", "men"}:
                return cls.MAN
            if key in {"woman", "female", "women"}:
                return cls.WOMAN
        return cls.OTHER


class Sexuality(_Lenient):
    STRAIGHT = "straight"
    HETEROSEXUAL = "heterosexual"
    GAY = "gay"
    LESBIAN = "lesbian"
    HOMOSEXUAL = "homosexual"
    BISEXUAL = "bisexual"
    PANSEXUAL = "pansexual"
    QUEER = "queer"
    EVERYONE = "everyone"
    WOMEN = "women"
    MEN = "men"
    OTHER = "other"

    @classmethod
    def _fallback(cls):
        return cls.OTHER


class WantsKids(_Lenient):
    YES = "yes"
    NO = "no"
    MAYBE = "maybe"
    OPEN = "open"
    ALREADY_HAS = "already_has"
    UNKNOWN = "unknown"


class SocialStyle(_Lenient):
    VERY_ACTIVE = "very_active"
    ACTIVE = "active"
    BALANCED = "balanced"
    RESERVED = "reserved"
    INTROVERTED = "introverted"
    UNKNOWN = "unknown"


class PdaComfort(_Lenient):
    LOVES_IT = "loves_it"
    COMFORTABLE = "comfortable"
    MODERATE = "moderate"
    PRIVATE = "private"
    UNCOMFORTABLE = "uncomfortable"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().replace(" ", "_")
            if key in {"love_it", "loves_it"}:
                return cls.LOVES_IT
            if key in {"fine", "comfortable"}:
                return cls.COMFORTABLE
        return super()._missing_(value)


class _ProfileSection(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


Scale = Annotated[float, Field(ge=1, le=10)]


class Traits(_ProfileSection):
    introversion: Scale
    adventurousness: Scale
    ambition: Scale
    emotional_openness: Scale
    traditional_values: Scale
    independence_need: Scale
    romantic_style: Scale
    social_energy: Scale
    communication_style: Scale
    attachment_style: Scale
    planning_style: Scale


TRAIT_DIMENSIONS = tuple(Traits.model_fields)


class RelationshipStyle(_ProfileSection):
    love_language: str = ""
    conflict_style: str = ""
    communication_frequency: str = ""
    financial_approach: str = ""
    alone_time_need: Scale


class FamilyPlans(_ProfileSection):
    wants_kids: WantsKids = WantsKids.UNKNOWN
    kids_timeline: Optional[str] = None
    family_closeness: Scale
    parenting_style: Optional[str] = None

    @field_validator("wants_kids", mode="before")
    @classmethod
    def _parse_wants_kids(cls, v):
        return WantsKids(v) if v is not None else WantsKids.UNKNOWN


class Lifestyle(_ProfileSection):
    sleep_schedule: str = ""
    exercise_level: str = ""
    diet_type: Optional[str] = None
    alcohol_use: str = ""
    drug_use: str = ""
    pet_preference: str = ""
    location_preference: str = ""


class SocialProfile(_ProfileSection):
    social_style: SocialStyle = SocialStyle.BALANCED
    weekend_style: Optional[str] = None
    go_out_frequency: Scale
    friend_approval_importance: Scale

    @field_validator("social_style", mode="before")
    @classmethod
    def _parse_social_style(cls, v):
        return SocialStyle(v) if v is not None else SocialStyle.UNKNOWN


class IntimacyProfile(_ProfileSection):
    physical_intimacy_importance: Scale
    physical_attraction_importance: Scale
    pda_comfort: PdaComfort = PdaComfort.MODERATE
    connection_triggers: list[str] = Field(default_factory=list)

    @field_validator("pda_comfort", mode="before")
    @classmethod
    def _parse_pda_comfort(cls, v):
        return PdaComfort(v) if v is not None else PdaComfort.UNKNOWN


class LovePhilosophy(_ProfileSection):
    believes_in_soulmates: Optional[bool] = None
    love_definition: Optional[str] = None
    love_recognition: list[str] = Field(default_factory=list)
    romantic_gestures: list[str] = Field(default_factory=list)


class PartnerPreferences(_ProfileSection):
    must_haves: list[str] = Field(default_factory=list)
    nice_to_haves: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    dealbreakers_in_partner: list[str] = Field(default_factory=list)


class UserProfileData(_ProfileSection):
    values: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    dealbreakers: list[str] = Field(default_factory=list)
    traits: Traits
    relationship_style: RelationshipStyle
    family_plans: FamilyPlans
    lifestyle: Lifestyle
    social_profile: Optional[SocialProfile] = None
    intimacy_profile: Optional[IntimacyProfile] = None
    love_philosophy: Optional[LovePhilosophy] = None
    partner_preferences: Optional[PartnerPreferences] = None


class CategoryScores(_ProfileSection):
    core_values: int
    lifestyle_alignment: int
    relationship_goals: int
    communication_style: int
    emotional_compatibility: int
    family_planning: int
    social_lifestyle: int
    conflict_resolution: int
    intimacy_alignment: int
    growth_mindset: int

    @field_validator("*", mode="before")
    @classmethod
    def _clamp(cls, v):
        try:
            return max(0, min(10, int(round(float(v)))))
        except (TypeError, ValueError):
            raise ValueError(f"category score must be numeric, got {v!r}")

    def total(self) -> int:
        return sum(self.model_dump().values())


class NarrativeResult(_ProfileSection):
    summary: str
    green_flags: list[str] = Field(default_factory=list)
    yellow_flags: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    category_scores: CategoryScores


class ScoreResponse(BaseModel):
    overall: int
    breakdown: dict[str, int]
    shared_values: list[str]
    shared_interests: list[str]
    version: str


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user1_id: str
    user2_id: str
    summary: str
    green_flags: list[str]
    yellow_flags: list[str]
    red_flags: list[str]
    category_scores: dict[str, int]
    overall_score: int
    model: str
    generated_at: datetime
