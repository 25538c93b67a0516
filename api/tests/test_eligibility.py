from datetime import date
from types import SimpleNamespace

from app.schemas import Gender
from app.services.eligibility import (
    age_on,
    attracted_to,
    is_age_compatible,
    is_eligible_candidate,
    is_eligible_pair,
    is_gender_compatible,
)

TODAY = date(2026, 10, 18)


def _person(user_id="u1", gender="man", sexuality="straight", birthdate=date(1995, 6, 1), **kw):
    fields = {
        "id": user_id,
        "gender": gender,
        "sexuality": sexuality,
        "birthdate": birthdate,
        "age_range_min": None,
        "age_range_max": None,
        "age_range_dealbreaker": False,
    }
    fields.update(kw)
    return SimpleNamespace(**fields)


def test_attraction_mapping():
    assert attracted_to("straight", "man") == {Gender.WOMAN}
    assert attracted_to("Heterosexual", "woman") == {Gender.MAN}
    assert attracted_to("gay", "man") == {Gender.MAN}
    assert attracted_to("lesbian", "woman") == {Gender.WOMAN}
    assert attracted_to("women", "non-binary") == {Gender.WOMAN}
    assert attracted_to("bisexual", "man") == {Gender.MAN, Gender.WOMAN, Gender.NON_BINARY}
    assert attracted_to("something new", "woman") == {Gender.MAN, Gender.WOMAN, Gender.NON_BINARY}


def test_straight_man_and_straight_woman_are_compatible():
    assert is_gender_compatible(_person(gender="man"), _person("u2", gender="woman"))


def test_straight_man_and_gay_man_are_not():
    assert not is_gender_compatible(_person(gender="man"), _person("u2", gender="man", sexuality="gay"))


def test_attraction_must_be_mutual():
    me = _person(gender="woman", sexuality="bisexual")
    them = _person("u2", gender="woman", sexuality="straight")
    assert not is_gender_compatible(me, them)
    assert not is_gender_compatible(them, me)


def test_missing_gender_or_sexuality_fails_open():
    me = _person(gender="man", sexuality="straight")
    assert is_eligible_pair(me, _person("u2", gender=None, sexuality="gay"), TODAY)
    assert is_eligible_pair(me, _person("u2", gender="man", sexuality=""), TODAY)
    assert is_eligible_pair(_person(gender="man", sexuality=None), _person("u2", gender="man", sexuality="straight"), TODAY)


def test_age_uses_julian_years():
    # 9497 and 9495 days
    assert age_on(date(2000, 10, 17), TODAY) == 26
    assert age_on(date(2000, 10, 19), TODAY) == 25
    assert age_on(None, TODAY) is None


def test_age_not_checked_without_dealbreaker():
    me = _person(age_range_min=30, age_range_max=35, age_range_dealbreaker=False)
    assert is_age_compatible(me, _person("u2", birthdate=date(2006, 1, 1)), TODAY)


def test_age_dealbreaker_is_one_directional():
    me = _person(age_range_min=30, age_range_max=35, age_range_dealbreaker=True, birthdate=date(1990, 1, 1))
    young = _person("u2", gender="woman", birthdate=date(2003, 1, 1))
    assert not is_age_compatible(me, young, TODAY)
    assert is_age_compatible(young, me, TODAY)


def test_age_bounds_are_inclusive_and_default():
    me = _person(age_range_min=26, age_range_max=None, age_range_dealbreaker=True)
    assert is_age_compatible(me, _person("u2", birthdate=date(2000, 10, 17)), TODAY)
    assert not is_age_compatible(me, _person("u2", birthdate=date(2000, 10, 19)), TODAY)
    no_bounds = _person(age_range_dealbreaker=True)
    assert not is_age_compatible(no_bounds, _person("u2", birthdate=date(2010, 1, 1)), TODAY)
    assert is_age_compatible(no_bounds, _person("u2", birthdate=None), TODAY)


def test_candidate_requires_profile_and_excludes_self():
    me = _person()
    her = _person("u2", gender="woman")
    assert is_eligible_candidate(me, her, has_profile=True, today=TODAY)
    assert not is_eligible_candidate(me, her, has_profile=False, today=TODAY)
    assert not is_eligible_candidate(me, me, has_profile=True, today=TODAY)


def test_segment_predicate_can_exclude():
    me = _person()
    her = _person("u2", gender="woman")
    assert not is_eligible_candidate(me, her, has_profile=True, segment=lambda a, b: False, today=TODAY)
