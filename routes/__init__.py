from routes.auth import auth_bp
from routes.bills import bills_bp
from routes.classes import classes_bp
from routes.parents import parents_bp
from routes.sessions import sessions_bp
from routes.students import students_bp
from routes.subjects import subjects_bp
from routes.templates import templates_bp
from routes.users import users_bp
from routes.wallets import wallets_bp

API_BLUEPRINTS = (
    auth_bp,
    sessions_bp,
    bills_bp,
    wallets_bp,
    parents_bp,
    students_bp,
    classes_bp,
    subjects_bp,
    users_bp,
    templates_bp,
)


def register_blueprints(app, csrf=None):
    """Mount the JSON API; bearer-token endpoints are exempt from form CSRF"""
    for blueprint in API_BLUEPRINTS:
        if csrf is not None:
            csrf.exempt(blueprint)
        app.register_blueprint(blueprint)
