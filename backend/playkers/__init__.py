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

    from playkers.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api/auth')

    from playkers.api.matches import matches
    flask_app.register_blueprint(matches, url_prefix='/api/matches')

    from playkers.api.players import players
    flask_app.register_blueprint(players, url_prefix='/api/players')

    from playkers.api.notifications import notifications
    flask_app.register_blueprint(notifications, url_prefix='/api/notifications')

    from playkers.api.invitations import invitations
    flask_app.register_blueprint(invitations, url_prefix='/api/invitations')

    from playkers.api.bookings import bookings
    flask_app.register_blueprint(bookings, url_prefix='/api/bookings')

    from playkers.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @flask_app.errorhandler(404)
    def not_found(_error):
        return jsonify({'error': 'Not found'}), 404

    @flask_app.errorhandler(405)
    def method_not_allowed(_error):
        return jsonify({'error': 'Method not allowed'}), 405

    # Flask-Login user loader
    from playkers.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Not authenticated'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from playkers.models import User, Venue
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed users, the first one owns a venue
            owner = None
            for email in ['owner@playkers.dev', 'scorer@playkers.dev', 'fan@playkers.dev']:
                user = User(email=email, first_name=email.split('@')[0].title())
                user.set_password('password')
                db.session.add(user)
                owner = owner or user
            db.session.flush()
            db.session.add(Venue(name='Central Turf', city='Chennai', owner_id=owner.id))

            db.session.commit()
            click.echo('Database has been reset and seeded!')

    @click.command('expire-invitations')
    def expire_invitations_command():
        """Marks every past-due pending invitation as expired."""
        from playkers.services.invitations import expire_overdue_invitations
        with flask_app.app_context():
            count = expire_overdue_invitations()
            click.echo(f'Expired {count} invitation(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(expire_invitations_command)

    return flask_app
