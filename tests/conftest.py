"""
Pytest configuration and fixtures
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure project root is on sys.path for imports in tests
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from app import create_app
from app_models import (ROLE_PARENT, ROLE_SCHOOL_ADMIN, ROLE_STUDENT, ROLE_SUPER_ADMIN, ROLE_TEACHER,
                        AcademicSession, Parent, School, SchoolClass, SchoolWallet, Student, User)
from config import TestingConfig
from extensions import db as _db
from security import create_token, hash_password

PASSWORD = 'secret123'


@pytest.fixture(scope="function")
def app(tmp_path):
    """Application bound to a fresh in-memory database"""

    class Config(TestingConfig):
        UPLOAD_FOLDER = str(tmp_path / 'uploads')

    app = create_app(Config)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


@pytest.fixture(scope="function")
def db(app):
    return _db


@pytest.fixture
def make_school(db):
    def _make(name='Greenfield Academy', balance=0.0, **fields):
        school = School(name=name, **fields)
        db.session.add(school)
        db.session.flush()
        db.session.add(SchoolWallet(school_id=school.id, balance=balance))
        db.session.commit()
        return school
    return _make


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def _make(role, school=None, name=None, email=None, password=PASSWORD, **fields):
        counter['n'] += 1
        user = User(
            name=name or f"{role.title()} {counter['n']}",
            email=email or f"{role}{counter['n']}@example.com",
            password=hash_password(password),
            role=role,
            school_id=school.id if school else None,
            **fields,
        )
        db.session.add(user)
        if role == ROLE_STUDENT:
            db.session.add(Student(user=user))
        elif role == ROLE_PARENT:
            db.session.add(Parent(user=user))
        db.session.commit()
        return user
    return _make


@pytest.fixture
def make_class(db):
    def _make(school, name='JSS 1', section='A', level='junior_secondary'):
        school_class = SchoolClass(school_id=school.id, name=name, section=section, level=level)
        db.session.add(school_class)
        db.session.commit()
        return school_class
    return _make


@pytest.fixture
def make_session(db):
    def _make(school, name='2024/2025', is_current=True, start=None, end=None):
        academic_session = AcademicSession(
            school_id=school.id,
            name=name,
            start_date=start or datetime(2024, 9, 1),
            end_date=end or datetime(2025, 7, 31),
            is_current=is_current,
        )
        db.session.add(academic_session)
        db.session.commit()
        return academic_session
    return _make


@pytest.fixture
def auth_headers(app):
    """Bearer header for a user, as the API clients send it"""
    def _headers(user):
        return {'Authorization': f"Bearer {create_token(user)}"}
    return _headers


@pytest.fixture
def school(make_school):
    return make_school()


@pytest.fixture
def super_admin(make_user):
    return make_user(ROLE_SUPER_ADMIN)


@pytest.fixture
def school_admin(make_user, school):
    return make_user(ROLE_SCHOOL_ADMIN, school)


@pytest.fixture
def teacher(make_user, school):
    return make_user(ROLE_TEACHER, school)


@pytest.fixture
def admin_headers(auth_headers, school_admin):
    return auth_headers(school_admin)
