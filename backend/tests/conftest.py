import os
import sys
from datetime import datetime

import pytest

# Ensure the backend root (containing the `clubhouse` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from clubhouse import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    CLUB_TIMEZONE = 'UTC'
    GAME_GRACE_PERIOD_MIN = 120
    LIFECYCLE_POLL_SEC = 60
    ATTENDANCE_POINTS = 2
    CORS_ORIGINS = ['http://localhost:5173']


# Saturday 1 June 2024; the weekly game is Saturdays at 18:00
SATURDAY = datetime(2024, 6, 1)
SATURDAY_SCHEDULE = {'days': {6: '18:00'}, 'locations': {6: 'Riverside Park'}}


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import clubhouse.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_user(flask_app):
    from clubhouse.models import User

    def _make(username, role='user', password='password'):
        user = User(username=username, role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture()
def make_player(flask_app):
    from clubhouse.models import Player

    def _make(name, user=None, registered_by=None):
        player = Player(
            name=name,
            user_id=user.id if user else None,
            registered_by=registered_by.id if registered_by else (user.id if user else None),
        )
        db.session.add(player)
        db.session.commit()
        return player
    return _make


@pytest.fixture()
def admin(make_user):
    return make_user('admin', role='admin')


@pytest.fixture()
def saved_schedule(flask_app):
    from clubhouse.services.schedule import Schedule, save_schedule
    return save_schedule(Schedule.from_document(SATURDAY_SCHEDULE))


@pytest.fixture()
def frozen_now(monkeypatch):
    """Pin the club wall clock used by routes: ``frozen_now(datetime(...))``."""
    from clubhouse.services import clock

    def _freeze(moment):
        monkeypatch.setattr(clock, 'club_now', lambda tz_name=None: moment)
        return moment
    return _freeze


def login(client, username, password='password'):
    res = client.post('/login', json={'username': username, 'password': password})
    assert res.status_code == 200, res.get_json()
    return res.get_json()
