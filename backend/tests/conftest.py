import os
import sys
from datetime import timedelta
from types import SimpleNamespace

import pytest
from flask import g

# Ensure the backend root (containing the `kabaddi` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from kabaddi import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = ['http://localhost:5173']
    DEFAULT_MATCH_DURATION_MIN = 40
    MATCHES_PAGE_SIZE = 10
    MATCH_CONTROL_POLICY = 'creator'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    @application.before_request
    def _forget_cached_user():
        # Requests reuse the fixture's app context; drop the user Flask-Login cached on g
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import kabaddi.models  # noqa: F401
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
    from kabaddi.models import User

    def _make(name, password='password'):
        user = User(name=name, email=name.lower().replace(' ', '.') + '@example.com')
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture()
def login(flask_app):
    def _login(user, password='password'):
        http = flask_app.test_client()
        res = http.post('/api/auth/login', json={'email': user.email, 'password': password})
        assert res.status_code == 200
        return http

    return _login


@pytest.fixture()
def seeded(make_user):
    """Falcons (raider, reserve) vs Panthers (defender), 40 minute clock."""
    from kabaddi.models import Match, MatchStats, PlayerStat
    from kabaddi.services.matches import clock

    creator = make_user('Coach Creator')
    outsider = make_user('Someone Else')
    raider = make_user('Pawan Sehrawat')
    reserve = make_user('Naveen Kumar')
    defender = make_user('Fazel Atrachali')

    match = Match(
        team1_name='Falcons',
        team2_name='Panthers',
        match_date=clock.utcnow() + timedelta(days=1),
        venue='Kanteerava Stadium',
        total_duration=40,
        created_by_id=creator.id,
    )
    db.session.add(match)
    db.session.flush()
    stats = MatchStats(match_id=match.id, team1_name='Falcons', team2_name='Panthers')
    stats.players.append(PlayerStat(team=1, position=0, player_id=raider.id))
    stats.players.append(PlayerStat(team=1, position=1, player_id=reserve.id))
    stats.players.append(PlayerStat(team=2, position=0, player_id=defender.id))
    db.session.add(stats)
    db.session.commit()

    return SimpleNamespace(
        creator=creator,
        outsider=outsider,
        raider=raider,
        reserve=reserve,
        defender=defender,
        match=match,
        stats=stats,
    )
