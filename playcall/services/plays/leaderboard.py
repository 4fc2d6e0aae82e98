from typing import List, NamedTuple

from sqlalchemy import func

from playcall import db
from playcall.models import Play, Prediction, User
from .state import get_game


class LeaderboardRow(NamedTuple):
    user_id: int
    user_name: str
    total_points: int


def leaderboard(game_id: int) -> List[LeaderboardRow]:
    """Per-player point totals for a game, summed from the prediction rows.

    Only players with at least one prediction in the game are listed. Ordered
    by total descending, then name.
    """
    game = get_game(game_id)
    total = func.coalesce(func.sum(Prediction.points_awarded), 0)
    rows = (
        db.session.query(User.id, User.name, total.label('total_points'))
        .join(Prediction, Prediction.user_id == User.id)
        .join(Play, Play.id == Prediction.play_id)
        .filter(Play.game_id == game.id, User.role == 'player')
        .group_by(User.id, User.name)
        .order_by(total.desc(), User.name.asc())
        .all()
    )
    return [LeaderboardRow(user_id, name, int(points)) for user_id, name, points in rows]
