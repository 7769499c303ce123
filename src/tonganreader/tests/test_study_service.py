"""Tests for the study session engine."""
import random
from datetime import datetime, timedelta, UTC

import pytest
from faker import Faker

from tonganreader.errors import PersistenceError, ValidationError
from tonganreader.models.study_models import StudyAction, StudyCard, StudySessionData
from tonganreader.services.study_service import StudySession, shuffled_positions, toggle_status_filter

fake = Faker()

ALL_STATUSES = ["good", "ok", "bad", "none"]


def make_cards(statuses, start=None):
    start = start or datetime(2024, 1, 1, tzinfo=UTC)
    return [
        StudyCard(
            id=fake.uuid4(),
            tongan_phrase=fake.word(),
            english_phrase=fake.word(),
            status=status,
            created_at=start + timedelta(days=i),
        )
        for i, status in enumerate(statuses)
    ]


def make_session(cards, **data):
    session = StudySession(StudySessionData(**data), rng=random.Random(42))
    session.load(cards)
    return session


def ok_persist(card_id, status):
    return datetime.now(UTC)


def test_toggle_status_filter_never_empty():
    current = ["none"]
    current = toggle_status_filter(current, "none")

    assert current == ALL_STATUSES


def test_random_filter_toggles_stay_non_empty():
    rng = random.Random(7)
    current = list(ALL_STATUSES)
    for _ in range(500):
        current = toggle_status_filter(current, rng.choice(ALL_STATUSES))
        assert current


def test_toggle_unknown_status():
    with pytest.raises(ValidationError):
        toggle_status_filter(ALL_STATUSES, "great")


def test_filter_keeps_matching_statuses():
    cards = make_cards(["good", "bad", "none", "ok", "bad"])
    session = make_session(cards, status_filter=["bad"])

    assert len(session) == 2
    assert all(card.status == "bad" for card in session.ordered)


def test_newest_and_oldest_order():
    cards = make_cards(["none"] * 4)
    undated = StudyCard(id="undated", tongan_phrase="a", english_phrase="b", status="none")

    newest = make_session(cards + [undated], sort_by="newest")
    oldest = make_session(cards + [undated], sort_by="oldest")

    assert [c.id for c in newest.ordered] == ["undated"] + [c.id for c in reversed(cards)]
    assert [c.id for c in oldest.ordered] == [c.id for c in cards] + ["undated"]


def test_shuffled_positions_is_permutation():
    order = shuffled_positions(20, random.Random(1))

    assert sorted(order) == list(range(20))


def test_random_order_is_stable_while_length_unchanged():
    cards = make_cards(["none"] * 10)
    session = make_session(cards, sort_by="random")
    first = [c.id for c in session.ordered]

    # A fresh session restored from the saved state sees the same order
    restored = StudySession(StudySessionData.from_dict(session.data.to_dict()), rng=random.Random(99))
    restored.load(cards)
    restored.set_sort("random")

    assert [c.id for c in restored.ordered] == first


def test_random_order_reshuffles_when_length_changes():
    cards = make_cards(["none"] * 6 + ["good"] * 4)
    session = make_session(cards, sort_by="random")

    session.toggle_status("good")

    assert len(session.data.shuffled_order) == 6
    assert {c.id for c in session.ordered} == {c.id for c in cards if c.status == "none"}


@pytest.mark.parametrize("length", [0, 1, 3, 10])
@pytest.mark.parametrize("index", [0, 2, 9, 25])
def test_index_is_clamped(length, index):
    session = make_session(make_cards(["none"] * length), current_index=index)

    if length == 0:
        assert session.data.current_index == 0
        assert session.current_card is None
    else:
        assert 0 <= session.data.current_index < length


def test_shrinking_filter_clamps_to_last_card():
    cards = make_cards(["good"] * 5 + ["bad"] * 2)
    session = make_session(cards, current_index=6)

    session.toggle_status("bad")
    session.toggle_status("ok")
    session.toggle_status("none")

    assert session.data.status_filter == ["good"]
    assert session.data.current_index == 4


def test_next_and_previous_wrap_and_hide_answer():
    session = make_session(make_cards(["none"] * 3))
    session.toggle_answer()

    session.previous()
    assert session.data.current_index == 2
    assert session.data.answer_visible is False

    session.toggle_answer()
    session.next()
    assert session.data.current_index == 0
    assert session.data.answer_visible is False


def test_rate_persists_then_advances():
    cards = make_cards(["none"] * 3)
    session = make_session(cards, sort_by="oldest")
    calls = []

    def persist(card_id, status):
        calls.append((card_id, status))
        return datetime(2024, 6, 1, tzinfo=UTC)

    rated = session.rate("good", persist)

    assert calls == [(cards[0].id, "good")]
    assert rated.status == "good"
    assert rated.last_reviewed_at == datetime(2024, 6, 1, tzinfo=UTC)
    assert session.data.current_index == 1


def test_rating_out_of_filter_recomputes_view():
    cards = make_cards(["none"] * 3)
    session = make_session(cards, sort_by="oldest", status_filter=["none"])

    session.rate("good", ok_persist)

    assert len(session) == 2
    assert session.data.current_index == 1
    assert session.current_card.id == cards[2].id

    reloaded = StudySession(StudySessionData.from_dict(session.data.to_dict()))
    reloaded.load(cards)
    assert reloaded.current_card.id == session.current_card.id
    assert len(reloaded) == len(session)


def test_rating_out_of_filter_keeps_random_order_stable():
    cards = make_cards(["none"] * 4)
    session = make_session(cards, sort_by="random", status_filter=["none"])

    session.rate("bad", ok_persist)

    reloaded = StudySession(StudySessionData.from_dict(session.data.to_dict()), rng=random.Random(0))
    reloaded.load(cards)
    assert [c.id for c in reloaded.ordered] == [c.id for c in session.ordered]
    assert reloaded.current_card.id == session.current_card.id


def test_failed_rating_changes_nothing():
    cards = make_cards(["none"] * 3)
    session = make_session(cards, sort_by="oldest", current_index=1)

    def persist(card_id, status):
        raise PersistenceError("Failed to update flashcard status")

    with pytest.raises(PersistenceError):
        session.rate("bad", persist)

    assert session.data.current_index == 1
    assert session.current_card.status == "none"
    assert session.current_card.last_reviewed_at is None


def test_rate_rejects_unknown_status():
    session = make_session(make_cards(["none"]))

    with pytest.raises(ValidationError):
        session.rate("none", ok_persist)


@pytest.mark.parametrize(
    "key, action",
    [
        ("ArrowLeft", StudyAction.PREVIOUS),
        ("ArrowRight", StudyAction.NEXT),
        ("1", StudyAction.RATE_BAD),
        ("2", StudyAction.RATE_OK),
        ("3", StudyAction.RATE_GOOD),
        (" ", StudyAction.TOGGLE_ANSWER),
    ],
)
def test_keyboard_shortcuts(key, action):
    session = make_session(make_cards(["none"] * 3))

    result = session.handle_key(key, ok_persist)

    assert result.action is action
    assert result.prevent_default is (action is StudyAction.TOGGLE_ANSWER)


def test_rating_key_updates_card():
    cards = make_cards(["none"] * 2)
    session = make_session(cards, sort_by="oldest")

    session.handle_key("2", ok_persist)

    assert cards[0].status == "ok"
    assert session.data.current_index == 1


def test_keys_ignored_without_cards():
    session = make_session([])

    result = session.handle_key(" ", ok_persist)

    assert result.action is None
    assert result.prevent_default is False
    assert session.data.answer_visible is False


def test_unknown_key_ignored():
    session = make_session(make_cards(["none"]))

    assert session.handle_key("x", ok_persist).action is None


def test_swap_changes_prompt_only():
    cards = make_cards(["none"] * 3)
    session = make_session(cards, sort_by="oldest")
    order = [c.id for c in session.ordered]

    assert session.prompt == cards[0].tongan_phrase
    session.set_swap(True)

    assert session.prompt == cards[0].english_phrase
    assert session.answer == cards[0].tongan_phrase
    assert [c.id for c in session.ordered] == order


def test_progress_counts_whole_collection():
    session = make_session(make_cards(["good", "good", "bad", "none"]), status_filter=["bad"])

    assert session.progress() == {"good": 2, "ok": 0, "bad": 1, "none": 1}


def test_view_hides_answer_until_revealed():
    session = make_session(make_cards(["none"]))

    assert session.to_view()["card"]["answer"] is None
    session.toggle_answer()
    assert session.to_view()["card"]["answer"] == session.answer


def test_set_sort_rejects_unknown_mode():
    session = make_session(make_cards(["none"]))

    with pytest.raises(ValidationError):
        session.set_sort("alphabetical")


def test_session_data_round_trip_defaults():
    assert StudySessionData.from_dict(None, "oldest").sort_by == "oldest"
    assert StudySessionData.from_dict({"status_filter": []}).status_filter == ALL_STATUSES


if __name__ == "__main__":
    pytest.main([__file__])
