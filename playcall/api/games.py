from flask import Blueprint, jsonify, request, current_app
from playcall.errors import NotFound, PlayEngineError
from playcall.models import Game, Play
from playcall.outcomes import vocabulary
from playcall.services import plays as engine
from playcall.services.plays.ledger import find_prediction
from playcall.services.plays.state import get_game, get_play
from playcall.socketio_events import broadcast_state


games = Blueprint('games', __name__)


@games.errorhandler(PlayEngineError)
def handle_engine_error(exc):
    current_app.logger.info(f"[engine-error] {type(exc).__name__} path={request.path} message={exc.message}")
    return jsonify({'error': exc.message}), exc.status_code


def _int_field(data, key, default=None):
    value = data.get(key, default)
    if value is None or value == '':
        raise PlayEngineError(f'{key} is required')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise PlayEngineError(f'{key} must be an integer') from None


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('on', 'true', '1', 'yes')
    return bool(value)


def _play_in_game(game_id: int, play_id: int) -> Play:
    play = get_play(play_id)
    if play.game_id != game_id:
        raise NotFound(f'Play {play_id} not found in game {game_id}')
    return play


@games.route('/outcomes', methods=['GET'])
def list_outcomes():
    return jsonify(vocabulary())


@games.route('/games', methods=['GET'])
def list_games():
    query = Game.query
    if _flag(request.args.get('active')):
        query = query.filter(Game.status.in_(['pending', 'live']))
    return jsonify([g.to_dict() for g in query.order_by(Game.created_at.desc(), Game.id.desc()).all()])


@games.route('/games', methods=['POST'])
def create_game():
    data = request.get_json(silent=True) or {}
    game = engine.create_game(data.get('name'))
    return jsonify(game.to_dict()), 201


@games.route('/games/<int:game_id>', methods=['GET'])
def game_console(game_id):
    game = get_game(game_id)
    current = engine.current_play(game.id)
    return jsonify({
        'game': game.to_dict(),
        'current_play': current.to_dict() if current else None,
        'plays': [p.to_dict() for p in game.plays],
    })


@games.route('/games/<int:game_id>/status', methods=['POST'])
def update_game_status(game_id):
    data = request.get_json(silent=True) or {}
    game = engine.set_game_status(game_id, data.get('status'))
    broadcast_state(game.id)
    return jsonify(game.to_dict())


@games.route('/games/<int:game_id>/plays', methods=['POST'])
def create_play(game_id):
    data = request.get_json(silent=True) or {}
    play = engine.create_play(
        game_id,
        quarter=_int_field(data, 'quarter'),
        down=_int_field(data, 'down'),
        distance=_int_field(data, 'distance', 0),
        yard_line=str(data.get('yard_line') or ''),
    )
    broadcast_state(game_id)
    return jsonify(play.to_dict()), 201


@games.route('/games/<int:game_id>/plays/<int:play_id>/lock', methods=['POST'])
def lock_play(game_id, play_id):
    _play_in_game(game_id, play_id)
    play = engine.lock_play(play_id)
    broadcast_state(game_id)
    return jsonify(play.to_dict())


@games.route('/games/<int:game_id>/plays/<int:play_id>/score', methods=['POST'])
def score_play(game_id, play_id):
    data = request.get_json(silent=True) or {}
    _play_in_game(game_id, play_id)
    engine.score_play(play_id, data.get('actual_outcome'))
    broadcast_state(game_id)
    return jsonify(get_play(play_id).to_dict())


@games.route('/games/<int:game_id>/plays/<int:play_id>/correct', methods=['POST'])
def correct_play(game_id, play_id):
    data = request.get_json(silent=True) or {}
    _play_in_game(game_id, play_id)
    play = engine.correct_play(play_id, data.get('actual_outcome'))
    broadcast_state(game_id)
    return jsonify(play.to_dict())


@games.route('/games/<int:game_id>/plays/<int:play_id>/predict', methods=['POST'])
def submit_prediction(game_id, play_id):
    data = request.get_json(silent=True) or {}
    _play_in_game(game_id, play_id)
    prediction = engine.submit_prediction(
        play_id,
        _int_field(data, 'user_id'),
        data.get('predicted_outcome'),
        _flag(data.get('game_breaker')),
    )
    broadcast_state(game_id)
    return jsonify(prediction.to_dict()), 201


@games.route('/games/<int:game_id>/play-status', methods=['GET'])
def play_status(game_id):
    user_id = _int_field(request.args, 'user_id')
    current = engine.current_play(game_id)
    prediction = None
    available = False
    if current:
        prediction = find_prediction(current.id, user_id)
        available = engine.game_breaker_available(current.id, user_id)
    return jsonify({
        'current_play': current.to_dict() if current else None,
        'user_prediction': prediction.to_dict() if prediction else None,
        'game_breaker_available': available,
    })


@games.route('/games/<int:game_id>/leaderboard', methods=['GET'])
def leaderboard(game_id):
    game = get_game(game_id)
    rows = engine.leaderboard(game.id)
    return jsonify({
        'game': game.to_dict(),
        'leaderboard': [row._asdict() for row in rows],
        'plays': [p.to_dict() for p in game.plays],
    })


@games.route('/games/<int:game_id>/predictions', methods=['GET'])
def my_predictions(game_id):
    user_id = _int_field(request.args, 'user_id')
    predictions = engine.user_predictions(game_id, user_id)
    return jsonify([p.to_dict() for p in predictions])
