# File: backend/attendpro/__init__.py
"""AttendPro - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from jwt.exceptions import PyJWTError


def rate_limit_key() -> str:
    """Key rate limits on the JWT subject, or the client address when anonymous."""
    try:
        verify_jwt_in_request(optional=True)
        identity = get_jwt_identity()
    except (JWTExtendedException, PyJWTError):
        identity = None
    if identity:
        return f"user:{identity}"
    return get_remote_address()


# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=["200 per day", "50 per hour"]
)


def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from attendpro.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    setup_logging(app)
    register_blueprints(app)
    register_error_handlers(app)
    setup_database(app)
    register_commands(app)

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': app.config.get('SITE_NAME', 'AttendancePro'),
            'version': '1.0.0'
        })

    return app


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from attendpro.api.attendance import attendance_bp
    from attendpro.api.qr import qr_bp
    from attendpro.utils.swagger import API_URL, SWAGGER_URL, generate_swagger_spec, get_swagger_blueprint

    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(qr_bp, url_prefix='/api/qr')

    @app.route(API_URL)
    def swagger_spec():
        """Serve Swagger/OpenAPI specification."""
        return jsonify(generate_swagger_spec())

    app.register_blueprint(get_swagger_blueprint(), url_prefix=SWAGGER_URL)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from attendpro.utils.helpers import handle_error
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(400)
    def bad_request(error):
        return handle_error(error, 400)

    @app.errorhandler(401)
    def unauthorized(error):
        return handle_error(error, 401)

    @app.errorhandler(403)
    def forbidden(error):
        return handle_error(error, 403)

    @app.errorhandler(404)
    def not_found(error):
        return handle_error(error, 404)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return handle_error("Internal server error", 500)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e, e.code)

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
    if not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/app.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('AttendPro startup')


def setup_database(app: Flask) -> None:
    """Register models with the metadata."""
    with app.app_context():
        from attendpro.models import User, UserRole, AttendanceRecord, AttendanceStatus  # noqa: F401


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('create-user')
    @click.option('--admin', is_flag=True, help='Grant the admin role')
    def create_user(admin):
        """Create a user account."""
        from attendpro.models.user import User, UserRole

        username = click.prompt('Username')
        email = click.prompt('Email')
        full_name = click.prompt('Full name')
        department = click.prompt('Department', default='', show_default=False)
        password = click.prompt('Password', hide_input=True, confirmation_prompt=True)

        user = User(
            username=username,
            email=email.lower().strip(),
            full_name=full_name,
            department=department or None,
            role=UserRole.ADMIN if admin else UserRole.EMPLOYEE
        )
        user.set_password(password)

        try:
            user.save()
            click.echo(f'User created: {username} ({user.role.value})')
        except Exception as e:
            db.session.rollback()
            click.echo(f'Error creating user: {str(e)}')

    @app.cli.command('issue-token')
    @click.argument('username')
    def issue_token(username):
        """Print an access token for an existing user."""
        from flask_jwt_extended import create_access_token
        from attendpro.models.user import User

        user = User.query.filter_by(username=username).first()
        if not user or not user.is_active:
            raise click.ClickException(f'No active user named {username}')

        click.echo(create_access_token(identity=str(user.id)))
