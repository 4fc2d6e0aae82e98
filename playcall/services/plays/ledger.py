"""Prediction ledger: one prediction per (play, user), upserted while the play is open.

The game-breaker may be used once per drive per user. A submission asking for
it is refused when any other play of the same drive, before or after this
one, already carries a game-breaker prediction by that user.
"""
from typing import List

from flask import current_app

from playcall import db
from playcall.errors import GameBreakerUnavailable, InvalidState
from playcall.models import Play, Prediction
from playcall.outcomes import Outcome
from .drives import drive_of
from .state import OPEN, commit, get_game, get_play, get_user


def game_breaker_spent(play: Play, user_id: int) -> bool:
    others = [p.id for p in drive_of(play.game.plays, play) if p.id != play.id]
    if not others:
        return False
    used = Prediction.query.filter(
        Prediction.play_id.in_(others),
        Prediction.user_id == user_id,
        Prediction.game_breaker.is_(True),
    ).first()
    return used is not None


def game_breaker_available(play_id: int, user_id: int) -> bool:
    play = get_play(play_id)
    get_user(user_id)
    return not game_breaker_spent(play, user_id)


def find_prediction(play_id: int, user_id: int):
    return Prediction.query.filter_by(play_id=play_id, user_id=user_id).first()


def submit_prediction(play_id: int, user_id: int, outcome, game_breaker: bool = False) -> Prediction:
    outcome = Outcome.coerce(outcome)
    play = get_play(play_id, for_update=True)
    user = get_user(user_id)
    if play.status != OPEN:
        current_app.logger.info(f"[predict-reject] play={play.id} user={user.id} status={play.status}")
        raise InvalidState(f'Predictions are locked for play {play.id}')
    if game_breaker and game_breaker_spent(play, user.id):
        current_app.logger.info(f"[predict-reject] play={play.id} user={user.id} game_breaker spent")
        raise GameBreakerUnavailable('Game Breaker already used this drive')

    prediction = find_prediction(play.id, user.id)
    if prediction is None:
        prediction = Prediction(play=play, user=user, points_awarded=0)
        db.session.add(prediction)
    prediction.predicted_outcome = outcome.value
    prediction.game_breaker = bool(game_breaker)
    commit()
    current_app.logger.info(
        f"[predict] game={play.game_id} play={play.id} user={user.id} outcome={outcome.value} gb={prediction.game_breaker}"
    )
    return prediction


def user_predictions(game_id: int, user_id: int) -> List[Prediction]:
    """A user's predictions in one game, in play order."""
    game = get_game(game_id)
    return (
        Prediction.query.join(Play)
        .filter(Play.game_id == game.id, Prediction.user_id == user_id)
        .order_by(Play.sequence_number)
        .all()
    )
