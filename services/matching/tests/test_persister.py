from __future__ import annotations

import asyncio

import pytest

from services.matching.errors import PersistenceError
from services.matching.persister import MatchPersister, match_message, score_percent
from services.matching.schemas import FactorScores, MatchCandidate, MatchReasons, Profile, canonical_pair, pair_key
from services.matching.tests.fakes import FakeNotifier, FakeStore


def _candidate(profile: Profile, score: float = 0.78) -> MatchCandidate:
    return MatchCandidate(
        user_id=profile.user_id,
        factors=FactorScores(0.9, 0.5, 0.95, 1.0, 0.5, 0.5),
        compatibility_score=score,
        reasons=MatchReasons(distance_match=True, mood_match=True, common_moods=["happy"]),
        profile=profile,
    )


def _setup(fail_notify: bool = False):
    store = FakeStore()
    requester = store.add_profile(Profile(user_id="u1", display_name="Ana"))
    other = store.add_profile(Profile(user_id="u2", display_name="Ben"))
    notifier = FakeNotifier(fail=fail_notify)
    return store, notifier, requester, other


def test_score_percent_rounds_half_up() -> None:
    assert score_percent(0.625) == 63
    assert score_percent(0.784) == 78
    assert score_percent(1.0) == 100
    assert score_percent(0.0) == 0


def test_match_message_falls_back_to_someone() -> None:
    assert match_message(Profile(user_id="x", display_name="Lea"), 0.71) == "You matched with Lea (71% compatibility)"
    assert match_message(Profile(user_id="x"), 0.5) == "You matched with someone (50% compatibility)"
    assert match_message(None, 0.5) == "You matched with someone (50% compatibility)"


def test_persist_stores_pair_and_notifies_both_users() -> None:
    store, notifier, requester, other = _setup()

    match, created = asyncio.run(MatchPersister(store, notifier).persist(requester, _candidate(other)))

    assert created is True
    assert (match.user_a, match.user_b) == ("u1", "u2")
    assert match.compatibility_score == 0.78
    assert match.matching_reasons["common_moods"] == ["happy"]
    assert match.rules_version == "v1"

    by_user = {sent["user_id"]: sent for sent in notifier.sent}
    assert set(by_user) == {"u1", "u2"}
    assert by_user["u1"]["type"] == "match"
    assert by_user["u1"]["title"] == "New Match! 🎉"
    assert by_user["u1"]["message"] == "You matched with Ben (78% compatibility)"
    assert by_user["u2"]["message"] == "You matched with Ana (78% compatibility)"
    assert by_user["u1"]["data"] == {"match_id": match.match_id, "other_user_id": "u2", "compatibility_score": 0.78}
    assert by_user["u2"]["data"]["other_user_id"] == "u1"


def test_persist_is_idempotent_for_either_direction() -> None:
    store, notifier, requester, other = _setup()
    persister = MatchPersister(store, notifier)

    first, created = asyncio.run(persister.persist(requester, _candidate(other, 0.78)))
    again, created_again = asyncio.run(persister.persist(other, _candidate(requester, 0.95)))

    assert created is True
    assert created_again is False
    assert again.match_id == first.match_id
    assert again.compatibility_score == 0.78
    assert len(store.matches) == 1
    assert len(notifier.sent) == 2


def test_notification_failure_does_not_undo_match() -> None:
    store, notifier, requester, other = _setup(fail_notify=True)

    match, created = asyncio.run(MatchPersister(store, notifier).persist(requester, _candidate(other)))

    assert created is True
    assert store.matches["u1:u2"] is match
    assert notifier.sent == []


def test_persistence_error_propagates_from_persist() -> None:
    store, notifier, requester, other = _setup()
    store.fail_upserts_for.add("u2")

    with pytest.raises(PersistenceError):
        asyncio.run(MatchPersister(store, notifier).persist(requester, _candidate(other)))
    assert notifier.sent == []


def test_persist_many_isolates_failures() -> None:
    store, notifier, requester, other = _setup()
    third = store.add_profile(Profile(user_id="u3"))
    fourth = store.add_profile(Profile(user_id="u4"))
    store.fail_upserts_for.add("u3")
    persister = MatchPersister(store, notifier, rules_version="v2")
    asyncio.run(persister.persist(requester, _candidate(fourth)))

    result = asyncio.run(
        persister.persist_many(requester, [_candidate(other), _candidate(third), _candidate(fourth)])
    )

    assert [m.user_b for m in result.created] == ["u2"]
    assert [m.user_b for m in result.existing] == ["u4"]
    assert [c.user_id for c in result.failed] == ["u3"]
    assert result.created[0].rules_version == "v2"


def test_failed_candidate_can_be_stored_later_without_rescoring() -> None:
    store, notifier, requester, other = _setup()
    store.fail_upserts_for.add("u2")
    persister = MatchPersister(store, notifier)
    scored = _candidate(other, 0.83)

    result = asyncio.run(persister.persist_many(requester, [scored]))
    assert result.failed == [scored]
    assert result.failed[0].reasons.common_moods == ["happy"]

    store.fail_upserts_for.clear()
    match, created = asyncio.run(persister.persist(requester, result.failed[0]))

    assert created is True
    assert match.compatibility_score == 0.83
    assert match.matching_reasons["distance_match"] is True
    assert len(notifier.sent) == 2


def test_numeric_ids_pair_in_numeric_order() -> None:
    assert canonical_pair("10", "9") == ("9", "10")
    assert pair_key("10", "9") == "9:10"
    assert pair_key("9", "10") == "9:10"
    assert pair_key("bea", "ana") == "ana:bea"
    with pytest.raises(ValueError):
        pair_key("7", "7")
