# engine_py/src/ramsita_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    code = "internal_error"

    def __init__(self, message: str, code: str = None):
        self.code = code or self.code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


# Specific error codes
NOT_FOUND = "not_found"
ROOM_FULL = "room_full"
INVALID_STATE = "invalid_state"
GAME_IN_PROGRESS = "game_in_progress"
NOT_YOUR_TURN = "not_your_turn"
CARD_NOT_FOUND = "card_not_found"
INVALID_TARGET = "invalid_target"
UNAUTHORIZED = "unauthorized"
ADVISORY_UNAVAILABLE = "advisory_unavailable"
INVALID_EVENT = "invalid_event"
INTERNAL_ERROR = "internal_error"


class RoomNotFoundError(GameError):
    code = NOT_FOUND


class RoomFullError(GameError):
    code = ROOM_FULL


class InvalidStateError(GameError):
    """The room is in the wrong state for the requested action."""
    code = INVALID_STATE


class NotPlayersTurnError(GameError):
    code = NOT_YOUR_TURN


class CardNotFoundError(GameError):
    code = CARD_NOT_FOUND


class InvalidTargetError(GameError):
    code = INVALID_TARGET


class UnauthorizedActionError(GameError):
    """The connection is not allowed to act for the requested seat."""
    code = UNAUTHORIZED


class ExternalAdvisoryUnavailable(GameError):
    """Soft failure of the advisory service. Logged, never sent to players."""
    code = ADVISORY_UNAVAILABLE
