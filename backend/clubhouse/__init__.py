from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from datetime import datetime
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from clubhouse.errors import register_error_handlers
    register_error_handlers(flask_app)

    from clubhouse.main import main
    flask_app.register_blueprint(main)

    from clubhouse.api.schedule import schedule_bp
    flask_app.register_blueprint(schedule_bp, url_prefix='/api/schedule')
    from clubhouse.api.game import game_bp
    flask_app.register_blueprint(game_bp, url_prefix='/api/game')
    from clubhouse.api.players import players_bp
    flask_app.register_blueprint(players_bp, url_prefix='/api/players')
    from clubhouse.api.stats import stats_bp
    flask_app.register_blueprint(stats_bp, url_prefix='/api/stats')
    from clubhouse.api.submissions import submissions_bp
    flask_app.register_blueprint(submissions_bp, url_prefix='/api/submissions')
    from clubhouse.api.social import social_bp
    flask_app.register_blueprint(social_bp, url_prefix='/api')
    from clubhouse.api.results import results_bp
    flask_app.register_blueprint(results_bp, url_prefix='/api/results')
    from clubhouse.api.notifications import notifications_bp
    flask_app.register_blueprint(notifications_bp, url_prefix='/api/notifications')

    from clubhouse.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from clubhouse.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from clubhouse.models import Player, ScheduleConfig
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            admin = User(username='admin', role='admin')
            admin.set_password('password')
            db.session.add(admin)
            for u in ['testuser1', 'testuser2']:
                user = User(username=u)
                user.set_password('password')
                db.session.add(user)
            db.session.flush()

            for user in User.query.filter(User.role == 'user').all():
                db.session.add(Player(name=user.username.title(), user_id=user.id, registered_by=user.id))

            config = ScheduleConfig(id=1, updated_by=admin.id)
            config.set_document({'days': {6: '18:00'}, 'locations': {6: 'Main pitch'}})
            db.session.add(config)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('lifecycle')
    @click.option('--at', 'at', default=None, help='ISO timestamp to evaluate instead of now.')
    def lifecycle_command(at):
        """Prints the lifecycle state for the stored schedule."""
        from clubhouse.services import clock
        from clubhouse.services.lifecycle import evaluate_lifecycle, grace_period
        from clubhouse.services.schedule import load_schedule
        with flask_app.app_context():
            now = datetime.fromisoformat(at) if at else clock.club_now(flask_app.config.get('CLUB_TIMEZONE'))
            state = evaluate_lifecycle(load_schedule(), now, grace=grace_period(flask_app.config))
            game = state.game.formatted if state.game else '-'
            print(f'{state.phase.value}: {game}')

    @click.command('verify-ledger')
    def verify_ledger_command():
        """Checks every cached player aggregate against its ledger history."""
        from clubhouse.models import PlayerStats
        from clubhouse.services.ledger import StatsLedger
        with flask_app.app_context():
            ledger = StatsLedger()
            bad = [s.player_id for s in PlayerStats.query.all() if not ledger.is_consistent(s.player_id)]
            if bad:
                print(f'Inconsistent aggregates for players: {bad}')
                raise SystemExit(1)
            print('All player aggregates match their history.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(lifecycle_command)
    flask_app.cli.add_command(verify_ledger_command)

    return flask_app
