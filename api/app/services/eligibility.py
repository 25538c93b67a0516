from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from ..schemas import Gender, Sexuality

ALL_GENDERS = frozenset({Gender.MAN, Gender.WOMAN, Gender.NON_BINARY})
DEFAULT_AGE_MIN = 18
DEFAULT_AGE_MAX = 99
DAYS_PER_YEAR = 365.25

# Population-segment policy hook: (viewer, candidate) -> bool.
SegmentPredicate = Callable[[Any, Any], bool]


def allow_all(me: Any, them: Any) -> bool:
    return True


def _present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def attracted_to(sexuality: str, gender: str) -> frozenset[Gender]:
    s = Sexuality(sexuality)
    g = Gender(gender)
    if s is Sexuality.WOMEN:
        return frozenset({Gender.WOMAN})
    if s is Sexuality.MEN:
        return frozenset({Gender.MAN})
    if s in (Sexuality.STRAIGHT, Sexuality.HETEROSEXUAL):
        return frozenset({Gender.WOMAN}) if g is Gender.MAN else frozenset({Gender.MAN})
    if s in (Sexuality.GAY, Sexuality.LESBIAN, Sexuality.HOMOSEXUAL):
        return frozenset({g})
    return ALL_GENDERS


def is_gender_compatible(me: Any, them: Any) -> bool:
    """Mutual attraction check. Missing gender or sexuality on either side passes."""
    if not all(_present(v) for v in (me.gender, me.sexuality, them.gender, them.sexuality)):
        return True
    i_want = attracted_to(me.sexuality, me.gender)
    they_want = attracted_to(them.sexuality, them.gender)
    return Gender(them.gender) in i_want and Gender(me.gender) in they_want


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def age_on(birthdate: Any, today: Optional[date] = None) -> Optional[int]:
    born = _as_date(birthdate)
    if born is None:
        return None
    today = today or datetime.now(timezone.utc).date()
    return math.floor((today - born).days / DAYS_PER_YEAR)


def is_age_compatible(me: Any, them: Any, today: Optional[date] = None) -> bool:
    """Only the viewer's dealbreaker is applied; the candidate's own range is not checked."""
    if not me.age_range_dealbreaker:
        return True
    their_age = age_on(them.birthdate, today)
    if their_age is None:
        return True
    low = me.age_range_min if me.age_range_min is not None else DEFAULT_AGE_MIN
    high = me.age_range_max if me.age_range_max is not None else DEFAULT_AGE_MAX
    return low <= their_age <= high


def is_eligible_pair(me: Any, them: Any, today: Optional[date] = None) -> bool:
    return is_gender_compatible(me, them) and is_age_compatible(me, them, today)


def is_eligible_candidate(
    me: Any,
    them: Any,
    *,
    has_profile: bool,
    segment: SegmentPredicate = allow_all,
    today: Optional[date] = None,
) -> bool:
    if str(them.id) == str(me.id):
        return False
    if not has_profile:
        return False
    if not is_eligible_pair(me, them, today):
        return False
    return segment(me, them)
