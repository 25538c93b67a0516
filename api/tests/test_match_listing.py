from datetime import datetime, timezone

from app.models import User
from app.services.match_listing import clamp_limit, find_pair_analysis, get_generation_status, list_matches


def _analysis(score):
    return {
        "summary": "s",
        "green_flags": [],
        "yellow_flags": [],
        "red_flags": [],
        "category_scores": {"core_values": 5},
        "raw_score": score,
        "overall_score": score,
        "model": "test-model",
    }


def test_clamp_limit():
    assert clamp_limit(None) == 30
    assert clamp_limit(0) == 1
    assert clamp_limit(1000) == 100
    assert clamp_limit(12) == 12


def test_list_matches_sorted_and_refiltered(session_factory, directory, store, add_user, make_profile):
    me = add_user("Me", "man", profile=make_profile())
    high = add_user("High", "woman", profile=make_profile())
    mid = add_user("Mid", "woman", profile=make_profile())
    gone = add_user("Gone", "woman", profile=make_profile())
    store.create(me, mid, _analysis(60))
    store.create(high, me, _analysis(90))
    store.create(me, gone, _analysis(95))

    with session_factory() as db:
        db.get(User, gone).sexuality = "lesbian"
        db.commit()

    matches = list_matches(directory, store, me)

    assert [m["user"]["name"] for m in matches] == ["High", "Mid"]
    assert matches[0]["analysis"]["overall_score"] == 90
    assert list_matches(directory, store, me, limit=1)[0]["user"]["id"] == high


def test_list_matches_drops_counterparts_without_profile(session_factory, directory, store, add_user, make_profile):
    me = add_user("Me", "man", profile=make_profile())
    other = add_user("Other", "woman", profile=None)
    store.create(me, other, _analysis(70))
    assert list_matches(directory, store, me) == []


def test_generation_status_lifecycle(directory, store, add_user, make_profile):
    me = add_user("Me", "man", profile=make_profile())
    her = add_user("Her", "woman", profile=make_profile())

    status = get_generation_status(directory, store, me)
    assert status == {"is_analyzing": False, "audit_completed": False, "has_profile": True, "has_any_analyses": False}

    directory.stamp_audit_completed(me, datetime(2026, 10, 18, tzinfo=timezone.utc))
    assert get_generation_status(directory, store, me)["is_analyzing"] is True

    store.create(me, her, _analysis(70))
    status = get_generation_status(directory, store, me)
    assert status["is_analyzing"] is False
    assert status["has_any_analyses"] is True


def test_generation_status_without_candidates(directory, store, add_user, make_profile):
    me = add_user("Me", "man", profile=make_profile())
    add_user("Him", "man", profile=make_profile())
    directory.stamp_audit_completed(me)
    assert get_generation_status(directory, store, me)["is_analyzing"] is False


def test_pair_lookup_is_refiltered_at_read_time(session_factory, directory, store, add_user, make_profile):
    me = add_user("Me", "man", profile=make_profile())
    her = add_user("Her", "woman", profile=make_profile())
    store.create(her, me, _analysis(80))
    assert find_pair_analysis(directory, store, me, her).overall_score == 80

    with session_factory() as db:
        db.get(User, her).sexuality = "lesbian"
        db.commit()

    assert list_matches(directory, store, me) == []
    assert find_pair_analysis(directory, store, me, her) is None
