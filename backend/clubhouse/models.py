from clubhouse import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone
import json


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(16), nullable=False, default='user')  # admin, user

    @property
    def is_admin(self):
        return self.role == 'admin'

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
        }


class Player(db.Model):
    __tablename__ = 'player'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False)
    # Account of a self-registered player
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    # Account that added the player to the roster
    registered_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    stats = db.relationship('PlayerStats', back_populates='player', uselist=False,
                            cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'user_id': self.user_id,
            'registered_by': self.registered_by,
        }


class ScheduleConfig(db.Model):
    """Singleton row (id=1) holding the current weekly schedule."""
    __tablename__ = 'schedule_config'
    id = db.Column(db.Integer, primary_key=True)
    days = db.Column(db.Text, nullable=False, default='{}')  # JSON {day: "HH:MM"}
    locations = db.Column(db.Text, nullable=False, default='{}')  # JSON {day: location}
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    updated_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)

    def get_document(self):
        return {
            'days': json.loads(self.days or '{}'),
            'locations': json.loads(self.locations or '{}'),
        }

    def set_document(self, document):
        self.days = json.dumps({str(k): v for k, v in (document.get('days') or {}).items()})
        self.locations = json.dumps({str(k): v for k, v in (document.get('locations') or {}).items()})


class PlayerStats(db.Model):
    """Cached aggregate over a player's points ledger.

    ``version`` guards read-modify-write: a flush that started from a stale
    read raises StaleDataError instead of overwriting a concurrent update.
    """
    __tablename__ = 'player_stats'
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), primary_key=True)
    player_name = db.Column(db.String(64), nullable=False)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    goals = db.Column(db.Integer, nullable=False, default=0)
    assists = db.Column(db.Integer, nullable=False, default=0)
    motm_awards = db.Column(db.Integer, nullable=False, default=0)
    games_played = db.Column(db.Integer, nullable=False, default=0)
    # Number of ledger rows; every append rewrites this row, so every append is version-checked
    entry_count = db.Column(db.Integer, nullable=False, default=0)
    version = db.Column(db.Integer, nullable=False)
    player = db.relationship('Player', back_populates='stats')
    entries = db.relationship('PointsEntry', back_populates='stats', order_by='PointsEntry.seq',
                              cascade='all, delete-orphan')

    __mapper_args__ = {'version_id_col': version}


class PointsEntry(db.Model):
    """Append-only ledger row. Never updated or deleted on its own."""
    __tablename__ = 'points_entry'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player_stats.player_id'), nullable=False, index=True)
    seq = db.Column(db.Integer, nullable=False)
    delta = db.Column(db.Integer, nullable=False, default=0)
    goals_delta = db.Column(db.Integer, nullable=False, default=0)
    assists_delta = db.Column(db.Integer, nullable=False, default=0)
    motm_delta = db.Column(db.Integer, nullable=False, default=0)
    reason = db.Column(db.String(255), nullable=False)
    added_by = db.Column(db.String(64), nullable=False)
    added_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    match_date = db.Column(db.String(10), nullable=True)
    automatic = db.Column(db.Boolean, nullable=False, default=False)
    admin_edit = db.Column(db.Boolean, nullable=False, default=False)
    submission_id = db.Column(db.Integer, db.ForeignKey('submission.id'), nullable=True)
    stats = db.relationship('PlayerStats', back_populates='entries')

    __table_args__ = (db.UniqueConstraint('player_id', 'seq', name='uq_points_entry_seq'),)


class Submission(db.Model):
    __tablename__ = 'submission'
    id = db.Column(db.Integer, primary_key=True)
    player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False, index=True)
    player_name = db.Column(db.String(64), nullable=False)
    game_date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD
    goals = db.Column(db.Integer, nullable=False, default=0)
    assists = db.Column(db.Integer, nullable=False, default=0)
    submitted_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    status = db.Column(db.String(16), nullable=False, default='pending', index=True)  # pending, approved, rejected
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    reviewed_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    reviewed_at = db.Column(db.DateTime, nullable=True)

    __table_args__ = (
        db.Index(
            'uq_submission_pending', 'player_id', 'game_date', unique=True,
            sqlite_where=db.text("status = 'pending'"),
            postgresql_where=db.text("status = 'pending'"),
        ),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'player_id': self.player_id,
            'player_name': self.player_name,
            'game_date': self.game_date,
            'goals': self.goals,
            'assists': self.assists,
            'submitted_by': self.submitted_by,
            'status': self.status,
            'created_at': _iso(self.created_at),
            'reviewed_by': self.reviewed_by,
            'reviewed_at': _iso(self.reviewed_at),
        }


class Notification(db.Model):
    __tablename__ = 'notification'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    type = db.Column(db.String(16), nullable=False)  # motm, kudos
    message = db.Column(db.String(255), nullable=False)
    from_user = db.Column(db.String(64), nullable=True)
    related_player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=True)
    related_player_name = db.Column(db.String(64), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    read = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'message': self.message,
            'from_user': self.from_user,
            'related_player_id': self.related_player_id,
            'related_player_name': self.related_player_name,
            'created_at': _iso(self.created_at),
            'read': self.read,
        }


class MotmNomination(db.Model):
    __tablename__ = 'motm_nomination'
    id = db.Column(db.Integer, primary_key=True)
    game_date = db.Column(db.String(10), nullable=False, index=True)
    nominated_player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    nominated_player_name = db.Column(db.String(64), nullable=False)
    nominated_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    reason = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (db.UniqueConstraint('nominated_by', 'game_date', name='uq_motm_one_per_game'),)

    def to_dict(self):
        return {
            'id': self.id,
            'game_date': self.game_date,
            'nominated_player_id': self.nominated_player_id,
            'nominated_player_name': self.nominated_player_name,
            'nominated_by': self.nominated_by,
            'reason': self.reason,
            'created_at': _iso(self.created_at),
        }


class Kudos(db.Model):
    __tablename__ = 'kudos'
    id = db.Column(db.Integer, primary_key=True)
    from_user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    to_player_id = db.Column(db.Integer, db.ForeignKey('player.id'), nullable=False)
    to_player_name = db.Column(db.String(64), nullable=False)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'from_user_id': self.from_user_id,
            'to_player_id': self.to_player_id,
            'to_player_name': self.to_player_name,
            'message': self.message,
            'created_at': _iso(self.created_at),
        }


class GameResult(db.Model):
    __tablename__ = 'game_result'
    id = db.Column(db.Integer, primary_key=True)
    game_date = db.Column(db.String(10), nullable=False, unique=True)
    team1_name = db.Column(db.String(64), nullable=False)
    team1_score = db.Column(db.Integer, nullable=False)
    team2_name = db.Column(db.String(64), nullable=False)
    team2_score = db.Column(db.Integer, nullable=False)
    entered_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'game_date': self.game_date,
            'team1_name': self.team1_name,
            'team1_score': self.team1_score,
            'team2_name': self.team2_name,
            'team2_score': self.team2_score,
            'created_at': _iso(self.created_at),
        }
