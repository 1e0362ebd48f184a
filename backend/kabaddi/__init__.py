from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
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

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from kabaddi.main import main
    flask_app.register_blueprint(main)

    from kabaddi.api.matches import matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')

    from kabaddi.api.match_stats import match_stats, scorecard
    flask_app.register_blueprint(match_stats, url_prefix='/api/matchstats')
    flask_app.register_blueprint(scorecard, url_prefix='/api/scorecard')

    from kabaddi.api.users import users
    flask_app.register_blueprint(users, url_prefix='/api/users')

    from kabaddi.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from kabaddi.errors import MatchError

    @flask_app.errorhandler(MatchError)
    def handle_match_error(exc):
        return jsonify(exc.to_dict()), exc.status_code

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Authentication required', 'kind': 'Unauthorized'}), 401

    # Flask-Login user loader
    from kabaddi.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users
            for name in ['Raider One', 'Raider Two', 'Defender One', 'Defender Two']:
                email = name.lower().replace(' ', '.') + '@example.com'
                user = User(name=name, email=email)
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            click.echo('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
