import random

from majlis.game import service
from majlis.game.modes import get_mode
from majlis.game.modes.letter_claim import build_options
from majlis.game.models import Question


def _claim(room, sid, cell_id):
    assert service.pick_letter(room, sid, cell_id=cell_id).ok
    answer = room.state.correct_answer
    assert service.buzz(room, sid).ok
    assert service.submit_answer(room, sid, answer).ok


def test_teams_alternate_by_join_order(seat):
    room = seat("letter_claim", "A", "B", "C", "D")
    assert [p.team for p in room.players] == ["red", "blue", "red", "blue"]


def test_claim_cell_and_alternate_turn(seat):
    room = seat("letter_claim", "A", "B", "C")
    assert service.start_game(room, "s1").ok
    assert room.status == "selecting_letter"

    _claim(room, "s1", 0)
    cell = room.state.grid[0]
    assert cell.owner_team == "red"
    assert cell.owner_id == "s1"
    assert room.players[0].score == 100
    assert room.status == "feedback"

    assert service.close_feedback(room, "s1").ok
    assert room.current_player.team == "blue"
    assert room.status == "selecting_letter"


def test_pick_letter_rejections(seat):
    room = seat("letter_claim", "A", "B")
    service.start_game(room, "s1")
    assert service.pick_letter(room, "s2", cell_id=0).error == "not_your_turn"
    assert service.pick_letter(room, "s1", cell_id=77).error == "cell_not_found"
    room.state.grid[5].owner_id = "s2"
    room.state.grid[5].owner_team = "blue"
    assert service.pick_letter(room, "s1", cell_id=5).error == "cell_claimed"


def test_pick_by_letter(seat):
    room = seat("letter_claim", "A", "B")
    service.start_game(room, "s1")
    letter = room.state.grid[7].letter
    assert service.pick_letter(room, "s1", letter=letter).ok
    assert room.state.active_cell_id == 7


def test_question_answer_is_hidden(seat):
    room = seat("letter_claim", "A", "B")
    service.start_game(room, "s1")
    service.pick_letter(room, "s1", cell_id=0)
    snapshot = service.room_public_state(room)
    assert "answer" not in snapshot["activeQuestion"]
    assert snapshot["activeCellId"] == 0


def test_connected_path_wins_immediately(seat):
    room = seat("letter_claim", "A", "B")
    service.start_game(room, "s1")
    for cid in (0, 1, 2, 3):
        room.state.grid[cid].owner_id = "s1"
        room.state.grid[cid].owner_team = "red"

    _claim(room, "s1", 4)
    assert room.status == "game_over"
    assert room.winner["team"] == "red"


def test_full_grid_without_path_goes_to_majority(seat):
    room = seat("letter_claim", "A", "B")
    service.start_game(room, "s1")
    # checkerboard: no team has a 4-neighbour path
    for cell in room.state.grid:
        if cell.id == 24:
            continue
        row, col = divmod(cell.id, 5)
        team = "red" if (row + col) % 2 == 0 else "blue"
        cell.owner_team = team
        cell.owner_id = "s1" if team == "red" else "s2"

    _claim(room, "s1", 24)
    assert room.status == "feedback"
    assert service.close_feedback(room, "s2").ok
    assert room.status == "game_over"
    assert room.winner == {"team": "red"}


def test_wrong_answer_costs_points(seat):
    room = seat("letter_claim", "A", "B")
    service.start_game(room, "s1")
    service.pick_letter(room, "s1", cell_id=0)
    service.buzz(room, "s2")
    service.submit_answer(room, "s2", "خطأ")
    assert room.players[1].score == -100
    assert room.state.grid[0].owner_id is None


def test_build_options_falls_back_to_item_options():
    q = Question(id="x", category="حروف", value=100, question="?", answer="جمل", options=["جمل", "حصان"])
    assert build_options(q, [q], "ج", random.Random(1)) == ["جمل", "حصان"]


def test_build_options_uses_same_letter_distractors():
    items = [
        Question(id=str(i), category="حروف", value=100, question="?", answer=a)
        for i, a in enumerate(["جمل", "جدي", "جرو", "جاموس", "حصان"])
    ]
    options = build_options(items[0], items, "ج", random.Random(1))
    assert len(options) == 4
    assert "جمل" in options
    assert "حصان" not in options


def test_definite_article_does_not_count_as_alif(seat):
    room = seat("letter_claim", "A", "B")
    mode = get_mode("letter_claim")
    assert mode.choose_question(room, "ق").id == "l1"
    for _ in range(10):
        assert mode.choose_question(room, "ا").id == "l3"


def test_build_options_reads_past_the_article():
    items = [
        Question(id=str(i), category="حروف", value=100, question="?", answer=a)
        for i, a in enumerate(["القاهرة", "القدس", "القصيم", "القطيف", "أسد"])
    ]
    options = build_options(items[0], items, "ق", random.Random(2))
    assert sorted(options) == sorted(["القاهرة", "القدس", "القصيم", "القطيف"])
    assert build_options(items[4], items, "ا", random.Random(2)) == []


def test_team_turn_skips_teammate(seat):
    room = seat("letter_claim", "A", "B", "C", "D")
    service.remove_player(room, "s2")
    assert [p.team for p in room.players] == ["red", "red", "blue"]

    assert service.start_game(room, "s1").ok
    _claim(room, "s1", 0)
    assert service.close_feedback(room, "s1").ok
    assert room.current_player_index == 2
    assert room.current_player.id == "s4"
