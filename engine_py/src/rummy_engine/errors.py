# engine_py/src/rummy_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Specific error codes
ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
ROOM_FULL = "ROOM_FULL"
ROOM_ALREADY_EXISTS = "ROOM_ALREADY_EXISTS"
NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
GAME_NOT_ACTIVE = "GAME_NOT_ACTIVE"
WRONG_TURN = "WRONG_TURN"
WRONG_PHASE = "WRONG_PHASE"
INVALID_SOURCE = "INVALID_SOURCE"
SOURCE_EMPTY = "SOURCE_EMPTY"
NO_CARDS_AVAILABLE = "NO_CARDS_AVAILABLE"
SHOE_EXHAUSTED = "SHOE_EXHAUSTED"
CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
INVALID_DECLARATION = "INVALID_DECLARATION"
ATTEMPTED_CARD_INJECTION = "ATTEMPTED_CARD_INJECTION"

# Helper function to raise common errors
def raise_error(code: str, message: str):
    raise GameError(code, message)
