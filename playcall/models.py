from datetime import datetime, timezone

from playcall import db
from playcall.outcomes import Outcome


def _utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False, index=True)
    role = db.Column(db.String(16), nullable=False, default='player')  # admin, player
    # Consecutive exact predictions; only the scoring pass writes this
    streak = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    predictions = db.relationship('Prediction', back_populates='user', cascade='all, delete-orphan')

    ROLES = ('admin', 'player')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'role': self.role,
            'streak': self.streak,
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    status = db.Column(db.String(16), nullable=False, default='pending')  # pending, live, finished
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    plays = db.relationship(
        'Play', back_populates='game', cascade='all, delete-orphan', order_by='Play.sequence_number'
    )

    STATUSES = ('pending', 'live', 'finished')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status,
            'created_at': _isoformat(self.created_at),
        }


class Play(db.Model):
    __tablename__ = 'play'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'sequence_number', name='uq_play_game_sequence'),
        db.CheckConstraint('quarter >= 1 AND quarter <= 4', name='ck_play_quarter'),
        db.CheckConstraint('down >= 1 AND down <= 4', name='ck_play_down'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    sequence_number = db.Column(db.Integer, nullable=False)
    quarter = db.Column(db.Integer, nullable=False)
    down = db.Column(db.Integer, nullable=False)
    distance = db.Column(db.Integer, nullable=False, default=0)
    yard_line = db.Column(db.String(16), nullable=False, default='')
    status = db.Column(db.String(16), nullable=False, default='open')  # open, locked, scored
    actual_outcome = db.Column(db.String(32), nullable=True)
    # Position of this play in the game's scoring order; corrections replay plays scored after it
    score_order = db.Column(db.Integer, nullable=True)
    locked_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    game = db.relationship('Game', back_populates='plays')
    predictions = db.relationship('Prediction', back_populates='play', cascade='all, delete-orphan')

    @property
    def outcome(self):
        return Outcome(self.actual_outcome) if self.actual_outcome else None

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'sequence_number': self.sequence_number,
            'quarter': self.quarter,
            'down': self.down,
            'distance': self.distance,
            'yard_line': self.yard_line,
            'status': self.status,
            'actual_outcome': self.actual_outcome,
            'score_order': self.score_order,
            'locked_at': _isoformat(self.locked_at),
        }


class Prediction(db.Model):
    __tablename__ = 'prediction'
    __table_args__ = (
        db.UniqueConstraint('play_id', 'user_id', name='uq_prediction_play_user'),
    )
    id = db.Column(db.Integer, primary_key=True)
    play_id = db.Column(db.Integer, db.ForeignKey('play.id', ondelete='CASCADE'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    predicted_outcome = db.Column(db.String(32), nullable=False)
    game_breaker = db.Column(db.Boolean, nullable=False, default=False)
    points_awarded = db.Column(db.Integer, nullable=False, default=0)
    # User's streak going into the scoring pass; corrections re-score from here
    streak_before = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    play = db.relationship('Play', back_populates='predictions')
    user = db.relationship('User', back_populates='predictions')

    @property
    def outcome(self):
        return Outcome(self.predicted_outcome)

    def to_dict(self):
        return {
            'id': self.id,
            'play_id': self.play_id,
            'user_id': self.user_id,
            'predicted_outcome': self.predicted_outcome,
            'game_breaker': self.game_breaker,
            'points_awarded': self.points_awarded,
        }
