"""Errors raised by the play engine.

All of them are local, recoverable conditions; the HTTP layer turns them into
JSON error responses. Resubmitting a prediction is not an error (it upserts).
"""


class PlayEngineError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(PlayEngineError):
    """A referenced game, play or user does not exist."""
    status_code = 404


class InvalidOutcome(PlayEngineError, ValueError):
    """A value outside the closed outcome vocabulary."""


class InvalidState(PlayEngineError):
    """The play (or request) is not in a state that allows the operation."""
    status_code = 409


class GameBreakerUnavailable(InvalidState):
    """The user already spent the game-breaker in the current drive."""
