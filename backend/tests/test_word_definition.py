import random

from majlis.game import service
from majlis.game.models import Question
from majlis.game.questions import build_meaning_options


def _begin(room):
    assert service.start_game(room, "s1").ok
    for _ in range(room.rules.countdown_sec):
        service.tick(room)
    assert room.status == "round_active"


def test_rounds_follow_available_words(seat):
    room = seat("word_definition", "A", "B")
    assert room.state.round_count == 3
    assert room.question_count == room.rules.default_round_count


def test_answer_hidden_until_scoring(seat):
    room = seat("word_definition", "A", "B")
    _begin(room)
    snapshot = service.room_public_state(room)
    active = snapshot["activeQuestion"]
    assert "answer" not in active
    assert len(active["options"]) == 4
    assert room.state.correct_answer in active["options"]
    assert snapshot["roundResults"] == []


def test_scoring_and_reveal(seat):
    room = seat("word_definition", "A", "B")
    _begin(room)
    correct = room.state.correct_answer
    wrong = next(o for o in room.state.active_question.options if o != correct)

    assert service.submit_meaning(room, "s1", correct).ok
    assert service.submit_meaning(room, "s1", correct).error == "already_answered"
    assert service.submit_meaning(room, "s2", "not an option").error == "invalid_option"
    assert room.status == "round_active"

    assert service.submit_meaning(room, "s2", wrong).ok
    assert room.status == "round_scoring"
    assert room.timer == room.rules.meaning_reveal_sec
    assert room.feedback.kind == "reveal"
    assert room.feedback.answer == correct
    assert [p.score for p in room.players] == [room.rules.meaning_points, 0]


def test_timer_expiry_scores_missing_as_zero(seat):
    room = seat("word_definition", "A", "B")
    _begin(room)
    service.submit_meaning(room, "s1", room.state.correct_answer)
    for _ in range(room.rules.meaning_duration_sec):
        service.tick(room)
    assert room.status == "round_scoring"
    assert room.state.round_results[0].scores == {"s1": 50, "s2": 0}


def test_full_game(seat):
    room = seat("word_definition", "A")
    _begin(room)
    for _ in range(room.state.round_count):
        assert room.status == "round_active"
        service.submit_meaning(room, "s1", room.state.correct_answer)
        for _ in range(room.rules.meaning_reveal_sec):
            service.tick(room)
        if room.status == "countdown":
            for _ in range(room.rules.countdown_sec):
                service.tick(room)

    assert room.status == "game_over"
    assert room.players[0].score == 150


def test_no_meaning_words_blocks_start(store):
    store.pool.delete_entry("m1")
    store.pool.delete_entry("m2")
    store.pool.delete_entry("m3")
    room = store.create_room("word_definition", room_id="EMPTY")
    service.upsert_player(room, "s1", "A")
    assert service.start_game(room, "s1").error == "no_questions"
    assert room.status == "lobby"


def test_meaning_options_topped_up_from_other_answers():
    q = Question(id="x", category="معاني", value=50, question="الغيث", answer="المطر", options=["الثلج"])
    options = build_meaning_options(q, ["المطر", "الريح", "البرق", "الرعد"], random.Random(5))
    assert len(options) == 4
    assert "المطر" in options
    assert "الثلج" in options
