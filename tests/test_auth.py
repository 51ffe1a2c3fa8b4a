from datetime import datetime, timedelta

from jose import jwt

from app_models import ROLE_SCHOOL_ADMIN
from conftest import PASSWORD


def test_login_returns_token_and_sets_cookie(client, school_admin):
    response = client.post('/api/auth/login', json={'email': school_admin.email, 'password': PASSWORD})

    assert response.status_code == 200
    body = response.get_json()
    assert body['user']['email'] == school_admin.email
    assert body['token']
    assert 'auth_token=' in response.headers.get('Set-Cookie', '')
    assert 'HttpOnly' in response.headers.get('Set-Cookie', '')


def test_login_rejects_bad_password(client, school_admin):
    response = client.post('/api/auth/login', json={'email': school_admin.email, 'password': 'wrong-one'})

    assert response.status_code == 401
    assert response.get_json()['error'] == 'Invalid email or password'


def test_login_validates_body(client):
    response = client.post('/api/auth/login', json={'email': 'not-an-email'})

    assert response.status_code == 400
    details = response.get_json()['details']
    assert 'email' in details
    assert 'password' in details


def test_deactivated_user_cannot_login(client, make_user, school):
    user = make_user(ROLE_SCHOOL_ADMIN, school, is_active=False)

    response = client.post('/api/auth/login', json={'email': user.email, 'password': PASSWORD})

    assert response.status_code == 403


def test_session_reads_bearer_token(client, school_admin, admin_headers):
    response = client.get('/api/auth/session', headers=admin_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body['id'] == school_admin.id
    assert body['role'] == ROLE_SCHOOL_ADMIN
    assert body['schoolId'] == school_admin.school_id


def test_session_requires_token(client):
    assert client.get('/api/auth/session').status_code == 401


def test_expired_token_is_unauthenticated(app, client, school_admin):
    past = datetime.utcnow() - timedelta(hours=10)
    token = jwt.encode(
        {'id': school_admin.id, 'role': ROLE_SCHOOL_ADMIN, 'iat': past, 'exp': past + timedelta(hours=1)},
        app.config['JWT_SECRET'],
        algorithm='HS256',
    )

    response = client.get('/api/auth/session', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 401


def test_token_signed_with_other_key_is_rejected(client, school_admin):
    token = jwt.encode({'id': school_admin.id, 'role': ROLE_SCHOOL_ADMIN}, 'someone-else', algorithm='HS256')

    response = client.get('/api/auth/session', headers={'Authorization': f'Bearer {token}'})

    assert response.status_code == 401


def test_logout_clears_cookie(client):
    response = client.post('/api/auth/logout')

    assert response.status_code == 200
    assert 'auth_token=;' in response.headers.get('Set-Cookie', '')
