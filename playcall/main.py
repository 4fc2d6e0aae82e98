from flask import Blueprint, current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from playcall import db
from playcall.models import User

main = Blueprint('main', __name__)


def find_user(name):
    return User.query.filter_by(name=name).first()

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the playcall game server!'})

@main.route('/join', methods=['POST'])
def join():
    """
    Finds a user by name or creates one with the requested role.
    """
    data = request.get_json(silent=True) or {}
    name = (data.get('name') or '').strip()
    role = data.get('role')
    if not name or not role:
        return jsonify({'error': 'Please enter a name and select a role'}), 400
    if role not in User.ROLES:
        return jsonify({'error': 'Invalid role selected'}), 400

    user = find_user(name)
    if user:
        return jsonify(user.to_dict()), 200

    user = User(name=name, role=role)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request created the same name first
        db.session.rollback()
        user = find_user(name)
        if user is None:
            raise
        current_app.logger.info(f"[user-join-race] name={name!r} user={user.id}")
        return jsonify(user.to_dict()), 200
    current_app.logger.info(f"[user-create] user={user.id} name={user.name!r} role={role}")
    return jsonify(user.to_dict()), 201
