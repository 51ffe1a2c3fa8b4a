from flask import Blueprint, current_app, jsonify

from app_models import User
from errors import api_error, validation_error
from forms import LoginForm, load_form
from security import api_login_required, create_token, get_session, verify_password

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')


def _set_auth_cookie(response, token):
    config = current_app.config
    response.set_cookie(
        config['AUTH_COOKIE_NAME'],
        token,
        max_age=config['JWT_EXPIRES_HOURS'] * 3600,
        httponly=True,
        secure=config['AUTH_COOKIE_SECURE'],
        samesite='Lax',
    )
    return response


@auth_bp.route('/login', methods=['POST'])
def login():
    form = load_form(LoginForm)
    if not form.validate():
        return validation_error(form)

    email = form.email.data.strip().lower()
    user = User.query.filter(User.email == email).first()
    if not user or not verify_password(form.password.data, user.password):
        current_app.logger.warning(f"Failed login attempt for {email}")
        return api_error('Invalid email or password', 401)
    if not user.is_active:
        return api_error('Account is deactivated. Please contact support.', 403)
    if user.school and not user.school.is_active:
        return api_error('School account is inactive. Please contact support.', 403)

    token = create_token(user)
    current_app.logger.info(f"User {user.email} logged in")
    response = jsonify({'token': token, 'user': user.to_dict()})
    return _set_auth_cookie(response, token)


@auth_bp.route('/logout', methods=['POST'])
def logout():
    response = jsonify({'message': 'You have been logged out successfully'})
    response.delete_cookie(current_app.config['AUTH_COOKIE_NAME'])
    return response


@auth_bp.route('/session', methods=['GET'])
@api_login_required
def current_session():
    return jsonify(get_session())
