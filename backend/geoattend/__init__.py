"""GeoAttend - Application Factory."""
import logging
import os

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

__version__ = '1.0.0'


def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health checks
    @app.route('/api/health')
    def health_check():
        return jsonify({
            'status': 'ok',
            'service': 'GeoAttend',
            'version': __version__
        })

    @app.route('/api/health/db')
    def database_health_check():
        from geoattend.utils.helpers import isoformat_utc, utcnow

        try:
            db.session.execute(text('SELECT 1'))
        except Exception:
            app.logger.exception('Database health check failed')
            return jsonify({
                'status': 'error',
                'database': 'disconnected',
                'serverTime': isoformat_utc(utcnow())
            }), 500

        return jsonify({
            'status': 'ok',
            'database': 'connected',
            'serverTime': isoformat_utc(utcnow())
        })

    return app


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from geoattend.api.admin import admin_bp
    from geoattend.api.attendance import attendance_bp
    from geoattend.api.auth import auth_bp
    from geoattend.api.codes import codes_bp
    from geoattend.api.courses import courses_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(courses_bp, url_prefix='/api/courses')
    app.register_blueprint(codes_bp, url_prefix='/api')
    app.register_blueprint(attendance_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from werkzeug.exceptions import HTTPException

    from geoattend.utils.errors import APIError
    from geoattend.utils.helpers import handle_error

    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            app.logger.error('%s: %s', error.__class__.__name__, error.message)
        return handle_error(error, error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return handle_error(e.description, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        app.logger.exception('Unhandled exception on %s %s', request.method, request.path)
        detail = f'{e.__class__.__name__}: {e}' if app.debug else None
        return handle_error('An internal server error occurred', 500, detail=detail)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO)
    app.logger.setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

        app.logger.info('GeoAttend startup')

    @app.before_request
    def log_request():
        app.logger.debug('%s %s', request.method, request.path)


def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models so their tables are registered
        from geoattend.models import (  # noqa: F401
            Admin, AttendanceCode, AttendanceRecord, Course, Lecturer, Student
        )


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command()
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command()
    def seed_db():
        """Seed database with demo data."""
        from geoattend.services.seed_service import SeedService

        try:
            summary = SeedService(db.session).seed_all()
        except Exception as e:
            db.session.rollback()
            raise click.ClickException(f'Error seeding database: {e}')

        click.echo('Database seeded successfully!')
        for line in summary:
            click.echo(f'  {line}')

    @app.cli.command()
    def create_admin():
        """Create admin user."""
        from geoattend.services.auth_service import AuthService

        email = click.prompt('Admin email')
        name = click.prompt('Admin name')
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)

        try:
            admin = AuthService(db.session).create_admin(email=email, name=name, password=password)
        except Exception as e:
            db.session.rollback()
            raise click.ClickException(f'Error creating admin: {e}')

        click.echo(f'Admin user created: {admin.email}')
