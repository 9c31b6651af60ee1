"""Socket.IO event names."""

# client -> server
ROOM_CREATE = "room:create"
ROOM_JOIN = "room:join"
ROOM_REJOIN = "room:rejoin"
ROOM_LEAVE = "room:leave"
ROOM_SETTINGS = "room:settings"
ROOM_STATUS = "room:status"

GAME_START = "game:start"
GAME_PICK_CATEGORY = "game:pick_category"
GAME_PICK_LETTER = "game:pick_letter"
GAME_PICK_VALUE = "game:pick_value"
GAME_BUZZ = "game:buzz"
GAME_SUBMIT_ANSWER = "game:submit_answer"
GAME_ANSWER_QUESTION = "game:answer_question"
GAME_CLOSE_FEEDBACK = "game:close_feedback"
GAME_FORFEIT = "game:forfeit"

ROUND_SUBMIT = "round:submit"
MEANING_SUBMIT = "meaning:submit"

# server -> client
ROOM_STATE = "room:state"
ROOM_CREATED = "room:created"
ROOM_JOINED = "room:joined"
ROOM_ERROR = "room:error"
GAME_ERROR = "game:error"
