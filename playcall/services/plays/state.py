"""Play lifecycle: open -> locked -> scored, plus correction of scored plays.

Scoring runs the scoring algorithm once per prediction attached to the play
and writes each prediction's points and each predictor's streak in the same
transaction as the status change. The play row is selected FOR UPDATE so a
racing submission lands wholly before or after the scoring pass.
"""
from datetime import datetime, timezone
from typing import Dict, Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from playcall import db
from playcall.errors import InvalidState, NotFound, PlayEngineError
from playcall.models import Game, Play, User
from playcall.outcomes import Outcome
from .scoring import score_prediction

OPEN = 'open'
LOCKED = 'locked'
SCORED = 'scored'


def commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def get_game(game_id: int) -> Game:
    game = db.session.get(Game, game_id)
    if game is None:
        raise NotFound(f'Game {game_id} not found')
    return game


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound(f'User {user_id} not found')
    return user


def get_play(play_id: int, for_update: bool = False) -> Play:
    query = Play.query.filter_by(id=play_id)
    if for_update:
        query = query.with_for_update()
    play = query.first()
    if play is None:
        raise NotFound(f'Play {play_id} not found')
    return play


def create_game(name: str) -> Game:
    name = (name or '').strip()
    if not name:
        raise PlayEngineError('Game name is required')
    game = Game(name=name, status='pending')
    db.session.add(game)
    commit()
    current_app.logger.info(f"[game-create] game={game.id} name={game.name!r}")
    return game


def set_game_status(game_id: int, status: str) -> Game:
    if status not in Game.STATUSES:
        raise PlayEngineError(f'Invalid game status: {status!r}')
    game = get_game(game_id)
    previous = game.status
    game.status = status
    commit()
    current_app.logger.info(f"[game-status] game={game.id} {previous} -> {status}")
    return game


def next_score_order(game_id: int) -> int:
    highest = db.session.query(func.max(Play.score_order)).filter(Play.game_id == game_id).scalar()
    return (highest or 0) + 1


def next_sequence_number(game_id: int) -> int:
    highest = db.session.query(func.max(Play.sequence_number)).filter(Play.game_id == game_id).scalar()
    return (highest or 0) + 1


def create_play(game_id: int, quarter: int, down: int, distance: int = 0, yard_line: str = '') -> Play:
    if not 1 <= quarter <= 4:
        raise PlayEngineError(f'Quarter must be between 1 and 4, got {quarter}')
    if not 1 <= down <= 4:
        raise PlayEngineError(f'Down must be between 1 and 4, got {down}')
    game = get_game(game_id)
    if game.status == 'pending':
        game.status = 'live'
        current_app.logger.info(f"[game-status] game={game.id} pending -> live")

    play = Play(
        game_id=game.id,
        sequence_number=next_sequence_number(game.id),
        quarter=quarter,
        down=down,
        distance=distance,
        yard_line=yard_line,
        status=OPEN,
    )
    db.session.add(play)
    commit()
    current_app.logger.info(
        f"[play-create] game={game.id} play={play.id} seq={play.sequence_number} q={quarter} down={down}"
    )
    return play


def current_play(game_id: int) -> Optional[Play]:
    """Highest-sequence play of the game that is not scored yet, if any."""
    game = get_game(game_id)
    return (
        Play.query.filter(Play.game_id == game.id, Play.status != SCORED)
        .order_by(Play.sequence_number.desc())
        .first()
    )


def lock_play(play_id: int) -> Play:
    play = get_play(play_id, for_update=True)
    if play.status != OPEN:
        raise InvalidState(f'Play {play.id} is {play.status}; only open plays can be locked')
    play.status = LOCKED
    play.locked_at = datetime.now(timezone.utc)
    commit()
    current_app.logger.info(f"[play-lock] game={play.game_id} play={play.id}")
    return play


def _rescore(play: Play, outcome: Outcome, streaks: Dict[int, int]) -> None:
    """Score the predictions on ``play`` whose user appears in ``streaks``.

    ``streaks`` maps user id to the streak going into this play and is
    updated in place with each predictor's new streak.
    """
    for prediction in play.predictions:
        if prediction.user_id not in streaks:
            continue
        streak = streaks[prediction.user_id]
        result = score_prediction(prediction.outcome, outcome, streak, prediction.game_breaker)
        prediction.streak_before = streak
        prediction.points_awarded = result.score
        streaks[prediction.user_id] = result.new_streak


def score_play(play_id: int, actual_outcome) -> bool:
    outcome = Outcome.coerce(actual_outcome)
    play = get_play(play_id, for_update=True)
    if play.status == SCORED:
        raise InvalidState(f'Play {play.id} is already scored; submit a correction instead')

    play.actual_outcome = outcome.value
    play.status = SCORED
    play.score_order = next_score_order(play.game_id)
    streaks = {p.user_id: p.user.streak for p in play.predictions}
    _rescore(play, outcome, streaks)
    for prediction in play.predictions:
        prediction.user.streak = streaks[prediction.user_id]
    commit()
    current_app.logger.info(
        f"[play-score] game={play.game_id} play={play.id} outcome={outcome.value} predictions={len(play.predictions)}"
    )
    return True


def correct_play(play_id: int, actual_outcome) -> Play:
    """Replace a scored play's outcome and re-score it.

    Each predictor restarts from the streak they had when the play was first
    scored. Plays of the same game that were scored after this one are then
    re-run in the order they were scored, so their points and the final
    streaks follow from the corrected result.
    """
    outcome = Outcome.coerce(actual_outcome)
    play = get_play(play_id, for_update=True)
    if play.status != SCORED:
        raise InvalidState(f'Play {play.id} is {play.status}; only scored plays can be corrected')

    previous = play.actual_outcome
    play.actual_outcome = outcome.value
    streaks = {
        p.user_id: p.streak_before if p.streak_before is not None else p.user.streak
        for p in play.predictions
    }
    _rescore(play, outcome, streaks)

    later = (
        Play.query.filter(
            Play.game_id == play.game_id,
            Play.status == SCORED,
            Play.score_order > play.score_order,
        )
        .order_by(Play.score_order)
        .all()
    )
    for downstream in later:
        _rescore(downstream, downstream.outcome, streaks)

    for user_id, streak in streaks.items():
        db.session.get(User, user_id).streak = streak
    commit()
    current_app.logger.info(
        f"[play-correct] game={play.game_id} play={play.id} {previous} -> {outcome.value} "
        f"predictions={len(play.predictions)} downstream_plays={len(later)}"
    )
    return play
