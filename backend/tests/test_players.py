from majlis.game import service


def test_first_joiner_is_creator_and_numbers_follow_join_order(seat):
    room = seat("quiz_board", "Alice", "Bob", "Cara")
    assert room.creator_id == "s1"
    assert [p.number for p in room.players] == [1, 2, 3]
    assert all(p.team is None for p in room.players)


def test_reconnection_rebinds_by_name(seat):
    room = seat("quiz_board", "Sara", "Omar")
    service.start_game(room, "s1")
    room.players[0].score = 400
    room.current_player_index = 1

    service.mark_disconnected(room, "s1")
    assert room.players[0].id == "s1"
    assert not room.players[0].connected

    outcome = service.upsert_player(room, "s9", "Sara")
    assert outcome.ok
    sara = room.players[0]
    assert sara.id == "s9"
    assert sara.connected
    assert sara.score == 400
    assert room.current_player_index == 1
    assert room.creator_id == "s9"
    assert len(room.players) == 2


def test_reconnection_by_player_key(seat):
    room = seat("quiz_board", "Sara")
    key = room.players[0].player_key
    assert key
    outcome = service.upsert_player(room, "s7", "Sara", player_key=key)
    assert outcome.player is room.players[0]
    assert room.players[0].id == "s7"


def test_name_owned_by_other_key_is_rejected(seat):
    room = seat("quiz_board", "Sara")
    outcome = service.upsert_player(room, "s7", "sara", player_key="someone-else")
    assert outcome.error == "name_taken"
    assert room.players[0].id == "s1"


def test_rebind_migrates_buzz(seat):
    room = seat("quiz_board", "Alice", "Bob")
    service.start_game(room, "s1")
    service.pick_category(room, "s1", "History")
    service.pick_value(room, "s1", 200)
    service.buzz(room, "s2")
    service.upsert_player(room, "s8", "Bob")
    assert room.state.buzzed_player_id == "s8"
    assert service.submit_answer(room, "s8", "1945").ok


def test_remove_before_current_keeps_same_player(seat):
    room = seat("quiz_board", "A", "B", "C")
    room.current_player_index = 2
    service.remove_player(room, "s1")
    assert room.current_player.id == "s3"
    assert [p.number for p in room.players] == [1, 2]


def test_remove_turn_holder_resets_turn_and_clears_question(seat):
    room = seat("quiz_board", "A", "B", "C")
    service.start_game(room, "s1")
    room.current_player_index = 1
    service.pick_category(room, "s2", "Science")
    service.pick_value(room, "s2", 200)
    assert room.status == "question"

    service.remove_player(room, "s2")
    assert room.current_player_index == 0
    assert room.status == "selecting_category"
    assert room.state.active_question is None


def test_creator_leaving_hands_over(seat):
    room = seat("quiz_board", "A", "B")
    service.remove_player(room, "s1")
    assert room.creator_id == "s2"
    assert service.start_game(room, "s2").ok


def test_last_player_leaving_deletes_room(store, seat):
    room = seat("quiz_board", "A")
    service.remove_player(room, "s1")
    assert store.discard_if_empty(room)
    assert store.get_room("R1") is None


def test_remove_unknown_player(seat):
    room = seat("quiz_board", "A")
    assert service.remove_player(room, "nope").error == "not_in_room"


def test_forfeit_picks_best_remaining(seat):
    room = seat("quiz_board", "A", "B", "C")
    service.start_game(room, "s1")
    room.players[0].score = 900
    room.players[1].score = 300
    room.players[2].score = 500

    assert service.forfeit(room, "s1").ok
    assert room.status == "game_over"
    assert room.winner["playerId"] == "s3"
    assert room.feedback.kind == "forfeit"


def test_forfeit_rejected_in_lobby(seat):
    room = seat("quiz_board", "A")
    assert service.forfeit(room, "s1").error == "wrong_phase"


def test_start_requires_owner_and_lobby(seat):
    room = seat("quiz_board", "A", "B")
    assert service.start_game(room, "s2").error == "only_owner"
    assert service.start_game(room, "s1").ok
    assert service.start_game(room, "s1").error == "wrong_phase"


def test_snapshot_hides_player_keys(seat):
    room = seat("letter_claim", "A", "B")
    snapshot = service.room_public_state(room)
    assert all("player_key" not in p for p in snapshot["players"])
    assert snapshot["gameType"] == "letter_claim"
    assert len(snapshot["grid"]) == 25


def test_create_room_reuses_id_and_defaults_type(store):
    first = store.create_room("nonsense", room_id="X")
    assert first.game_type == "quiz_board"
    assert store.create_room("letter_claim", room_id="X") is first
    generated = store.create_room("word_builder")
    assert len(generated.id) == 32
    assert {r.id for r in store.list_rooms()} == {"X", generated.id}
