"""Play engine: outcome scoring, the play state machine and the prediction ledger.

HTTP routes and socket handlers import from here; nothing in this package
knows about requests or rooms.
"""

from playcall.errors import GameBreakerUnavailable, InvalidOutcome, InvalidState, NotFound, PlayEngineError
from .ledger import game_breaker_available, submit_prediction, user_predictions
from .leaderboard import leaderboard
from .scoring import score_prediction
from .state import correct_play, create_game, create_play, current_play, lock_play, score_play, set_game_status
