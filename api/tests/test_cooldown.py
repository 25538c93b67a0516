from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.repo import UserNotFoundError
from app.services.cooldown import RegenerationCooldownError, RegenerationGate, can_regenerate
from app.services.triggers import request_profile_regeneration

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def test_never_regenerated_is_allowed():
    decision = can_regenerate(SimpleNamespace(last_profile_regenerated_at=None), NOW, 3600)
    assert decision.allowed
    assert decision.retry_after_seconds == 0


def test_inside_window_reports_remaining_wait():
    user = SimpleNamespace(last_profile_regenerated_at=NOW - timedelta(minutes=10))
    decision = can_regenerate(user, NOW, 3600)
    assert not decision.allowed
    assert decision.retry_after_seconds == 3000


def test_decision_truthiness_follows_allowed():
    recent = SimpleNamespace(last_profile_regenerated_at=NOW - timedelta(seconds=5))
    assert not can_regenerate(recent, NOW, 3600)
    assert can_regenerate(SimpleNamespace(last_profile_regenerated_at=None), NOW, 3600)


def test_window_edge_is_allowed():
    user = SimpleNamespace(last_profile_regenerated_at=(NOW - timedelta(hours=1)).replace(tzinfo=None))
    assert can_regenerate(user, NOW, 3600).allowed


def test_gate_sets_timestamp_then_blocks(session_factory, directory, add_user):
    user_id = add_user()
    gate = RegenerationGate(session_factory, cooldown_seconds=3600)

    assert gate.try_begin(user_id, NOW).allowed
    with pytest.raises(RegenerationCooldownError) as exc:
        gate.try_begin(user_id, NOW + timedelta(minutes=15))
    assert exc.value.retry_after_seconds == 45 * 60
    assert "Try again in 45m." in str(exc.value)

    assert gate.try_begin(user_id, NOW + timedelta(hours=1, seconds=1)).allowed
    stored = directory.get_user(user_id).last_profile_regenerated_at
    assert stored.replace(tzinfo=timezone.utc) == NOW + timedelta(hours=1, seconds=1)


def test_gate_admits_one_of_two_requests_at_the_same_instant(session_factory, add_user):
    user_id = add_user()
    gate = RegenerationGate(session_factory, cooldown_seconds=3600)
    outcomes = []
    for _ in range(2):
        try:
            outcomes.append(bool(gate.try_begin(user_id, NOW)))
        except RegenerationCooldownError as exc:
            outcomes.append(exc.retry_after_seconds)
    assert outcomes == [True, 3600]


def test_gate_unknown_user(session_factory):
    with pytest.raises(UserNotFoundError):
        RegenerationGate(session_factory).try_begin("missing", NOW)


def test_regeneration_trigger_only_calls_extractor_when_allowed(session_factory, add_user):
    user_id = add_user()
    gate = RegenerationGate(session_factory, cooldown_seconds=3600)
    extracted = []

    assert request_profile_regeneration(gate, user_id, extracted.append, NOW) == {"scheduled": True}
    with pytest.raises(RegenerationCooldownError):
        request_profile_regeneration(gate, user_id, extracted.append, NOW + timedelta(seconds=5))
    assert extracted == [user_id]
