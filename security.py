from datetime import datetime, timedelta
from functools import wraps

import bcrypt
from flask import current_app, request
from jose import JWTError, jwt

from app_models import ADMIN_ROLES
from errors import api_error


def add_security_headers(response):
    """Add security headers to response"""
    response.headers['X-Frame-Options'] = 'SAMEORIGIN'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'same-origin'
    response.headers['Permissions-Policy'] = 'geolocation=(), microphone=(), camera=()'

    # API payloads are per-user; never cache them
    if request.path.startswith('/api/'):
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, max-age=0'
    return response


def init_security(app):
    """Initialize security features for the Flask app"""
    if app.config.get('PREFERRED_URL_SCHEME') == 'https':
        app.config['SESSION_COOKIE_SECURE'] = True

    # Add security headers to all responses
    app.after_request(add_security_headers)


# Passwords

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


# Session tokens

def create_token(user) -> str:
    """Sign a session token for the given user"""
    now = datetime.utcnow()
    payload = {
        'sub': str(user.id),
        'id': user.id,
        'email': user.email,
        'name': user.name,
        'role': user.role,
        'schoolId': user.school_id,
        'iat': now,
        'exp': now + timedelta(hours=current_app.config['JWT_EXPIRES_HOURS']),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET'],
                      algorithm=current_app.config['JWT_ALGORITHM'])


def decode_token(token):
    """Return the session payload, or None when the token is invalid or expired"""
    try:
        payload = jwt.decode(token, current_app.config['JWT_SECRET'],
                             algorithms=[current_app.config['JWT_ALGORITHM']])
    except JWTError:
        return None
    return {
        'id': payload.get('id'),
        'email': payload.get('email'),
        'name': payload.get('name'),
        'role': payload.get('role'),
        'schoolId': payload.get('schoolId'),
    }


def _request_token():
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header[len('Bearer '):].strip()
    return request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])


def get_session():
    """Current authenticated session, decoded once per request"""
    if not hasattr(request, 'auth_session'):
        token = _request_token()
        request.auth_session = decode_token(token) if token else None
    return request.auth_session


def is_super_admin(session) -> bool:
    return bool(session) and session.get('role') == 'super_admin'


def can_access_school(session, school_id) -> bool:
    """Super admins see every school; everybody else only their own"""
    if is_super_admin(session):
        return True
    return session.get('schoolId') is not None and session.get('schoolId') == school_id


def api_login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_session():
            return api_error('Unauthorized', 401)
        return f(*args, **kwargs)
    return decorated_function


def roles_required(*roles):
    """Require an authenticated session whose role is one of `roles`"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            session = get_session()
            if not session:
                return api_error('Unauthorized', 401)
            if session.get('role') not in roles:
                return api_error('Forbidden', 403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = roles_required(*ADMIN_ROLES)


def requested_school_id():
    """schoolId from the JSON body or form data, for super admins acting on a school"""
    payload = request.get_json(silent=True) if request.is_json else request.form
    value = (payload or {}).get('schoolId')
    try:
        return int(value) if value not in (None, '') else None
    except (TypeError, ValueError):
        return None
