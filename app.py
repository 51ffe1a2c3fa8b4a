import logging
import os

from flask import Flask, jsonify, send_from_directory

from app_models import ROLE_SUPER_ADMIN, School, SchoolWallet, User
from config import get_config
from errors import register_error_handlers
from extensions import csrf, db
from health import health_bp
from routes import register_blueprints
from security import hash_password, init_security


def create_default_school_and_admin(app):
    """Creates a default school and a super admin if no users exist."""
    # For deployments these must be set as environment variables.
    # For local dev, they can be in the .env file.
    admin_email = app.config.get('DEFAULT_ADMIN_EMAIL')
    admin_password = app.config.get('DEFAULT_ADMIN_PASSWORD')

    if not admin_email or not admin_password:
        print("WARNING: DEFAULT_ADMIN_EMAIL and/or DEFAULT_ADMIN_PASSWORD are not set. "
              "Skipping default admin creation.")
        return None

    if User.query.first() is not None:
        print("INFO: Users already exist. Skipping default admin creation.")
        return None

    print("INFO: No users found in the database. Creating default school and super admin...")

    # 1. Create a default school with an empty wallet
    default_school = School.query.filter_by(name='Default School').first()
    if not default_school:
        default_school = School(name='Default School', is_active=True)
        db.session.add(default_school)
        db.session.flush()  # Flush to get the school's ID before committing
        db.session.add(SchoolWallet(school_id=default_school.id, balance=0.0))

    # 2. Create the super admin using credentials from the environment
    admin_user = User(
        name='Super Admin',
        email=admin_email.strip().lower(),
        password=hash_password(admin_password),
        role=ROLE_SUPER_ADMIN,
        school_id=None,
        is_active=True,
    )
    db.session.add(admin_user)
    db.session.commit()
    print(f"SUCCESS: Default super admin '{admin_user.email}' created alongside 'Default School'.")
    return admin_user


def create_app(config_class=None):
    config_class = config_class or get_config()

    app = Flask(__name__, instance_path=os.path.join(os.path.dirname(os.path.abspath(__file__)), 'instance'))
    app.config.from_object(config_class)
    config_class.init_app(app)

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    db.init_app(app)
    csrf.init_app(app)

    # Initialize security features
    init_security(app)
    register_error_handlers(app)

    register_blueprints(app, csrf=csrf)
    app.register_blueprint(health_bp)

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    @app.route('/')
    def index():
        return jsonify({'name': 'SchoolDesk API', 'status': 'ok'})

    @app.cli.command('init-db')
    def init_db():
        """Create database tables and seed the default super admin."""
        db.create_all()
        print("Database tables created.")
        create_default_school_and_admin(app)

    return app

