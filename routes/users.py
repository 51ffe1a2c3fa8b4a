import json

from flask import Blueprint, current_app, jsonify, request

from app_models import (ADMIN_ROLES, ROLE_PARENT, ROLE_STUDENT, ROLE_SUPER_ADMIN, ROLE_TEACHER, AdminProfile,
                        Attendance, Parent, Result, ResultTemplate, School, Student, StudentClass, StudentParent,
                        SubjectTeacher, User, UserActivityLog, WithdrawalRequest)
from errors import api_error, server_error, validation_error
from extensions import db
from forms import UserForm, UserUpdateForm, load_form
from security import api_login_required, get_session, hash_password, is_super_admin, roles_required

users_bp = Blueprint('users', __name__, url_prefix='/api/users')

# Role -> (nested payload key, profile model, allowed columns)
ROLE_PROFILES = {
    ROLE_STUDENT: ('studentData', Student, Student.PROFILE_FIELDS),
    ROLE_PARENT: ('parentData', Parent, Parent.PROFILE_FIELDS),
}


def _camel(name):
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _nested(payload, key):
    """A nested profile object; form posts carry it as a JSON string"""
    value = payload.get(key)
    if isinstance(value, str) and value:
        try:
            value = json.loads(value)
        except ValueError:
            return None
    return value if isinstance(value, dict) else None


def _build_profile(user, payload):
    """Profile row for the user's role, filled from nested or flat fields"""
    if user.role in ADMIN_ROLES:
        data = _nested(payload, 'adminData') or payload
        return AdminProfile(user=user, admin_type=data.get('adminType') or user.role,
                            permissions=data.get('permissions') or None)
    if user.role not in ROLE_PROFILES:
        return None
    key, model, columns = ROLE_PROFILES[user.role]
    data = _nested(payload, key) or payload
    profile = model(user=user)
    for column in columns:
        value = data.get(_camel(column))
        if isinstance(value, str) and value:
            setattr(profile, column, value)
    return profile


def _user_detail(user):
    data = user.to_dict()
    if user.role == ROLE_TEACHER:
        data['teacherSubjects'] = [
            {'id': link.id, 'subject': {'id': link.subject.id, 'name': link.subject.name}}
            for link in SubjectTeacher.query.filter_by(teacher_id=user.id).all()
        ]
    if user.student_profile:
        data['student'] = user.student_profile.to_dict()
    if user.parent_profile:
        data['parent'] = user.parent_profile.to_dict()
    return data


@users_bp.route('', methods=['GET'])
@roles_required(*ADMIN_ROLES)
def list_users():
    session = get_session()
    school_id = request.args.get('schoolId', type=int) if is_super_admin(session) else session.get('schoolId')
    try:
        query = User.query
        if request.args.get('role'):
            query = query.filter(User.role == request.args['role'].lower())
        if school_id:
            query = query.filter(User.school_id == school_id)
        users = query.order_by(User.created_at.desc()).all()
        return jsonify([u.to_dict() for u in users])
    except Exception as e:
        return server_error('Failed to fetch users', e)


@users_bp.route('', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_user():
    session = get_session()
    payload = request.get_json(silent=True) if request.is_json else request.form.to_dict()
    payload = payload or {}
    form = load_form(UserForm, payload)
    if not form.validate():
        return validation_error(form)

    role = form.role.data
    if role == ROLE_SUPER_ADMIN and not is_super_admin(session):
        return api_error('Only super admins can create super admin accounts', 403)

    if role == ROLE_SUPER_ADMIN:
        school_id = None
    elif is_super_admin(session):
        school_id = form.schoolId.data
        if not school_id:
            return api_error('School ID is required for this user role', 400)
    else:
        school_id = session.get('schoolId')
    if school_id and not db.session.get(School, school_id):
        return api_error('School not found', 404)

    if User.email_taken(form.email.data):
        return api_error('Email already in use', 400)

    try:
        user = User(
            name=form.name.data.strip(),
            email=form.email.data.strip().lower(),
            password=hash_password(form.password.data),
            role=role,
            school_id=school_id,
            profile_image=payload.get('profileImage') if isinstance(payload.get('profileImage'), str) else None,
        )
        db.session.add(user)
        profile = _build_profile(user, payload)
        if profile is not None:
            db.session.add(profile)
        db.session.commit()
        current_app.logger.info(f"User {user.email} ({role}) created by {session['email']}")
        return jsonify(_user_detail(user)), 201
    except Exception as e:
        return server_error('Failed to create user', e)


@users_bp.route('/<int:user_id>', methods=['GET'])
@api_login_required
def get_user(user_id):
    session = get_session()
    if session.get('role') not in ADMIN_ROLES and session.get('id') != user_id:
        return api_error('Forbidden', 403)

    user = db.session.get(User, user_id)
    if not user:
        return api_error('User not found', 404)
    if (session.get('role') != ROLE_SUPER_ADMIN and session.get('id') != user_id
            and user.school_id != session.get('schoolId')):
        return api_error('Forbidden', 403)
    return jsonify(_user_detail(user))


@users_bp.route('/<int:user_id>', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
def update_user(user_id):
    session = get_session()
    super_admin = is_super_admin(session)
    if not super_admin and session.get('id') == user_id:
        return api_error('Forbidden', 403)

    user = db.session.get(User, user_id)
    if not user:
        return api_error('User not found', 404)
    if not super_admin and user.school_id != session.get('schoolId'):
        return api_error('Forbidden', 403)

    payload = request.get_json(silent=True) or {}
    form = load_form(UserUpdateForm, payload)
    if not form.validate():
        return validation_error(form)
    if form.email.data and User.email_taken(form.email.data, exclude_id=user.id):
        return api_error('Email already in use', 400)
    if super_admin and form.schoolId.data and not db.session.get(School, form.schoolId.data):
        return api_error('School not found', 404)

    try:
        if form.name.data:
            user.name = form.name.data.strip()
        if form.email.data:
            user.email = form.email.data.strip().lower()
        if form.password.data:
            user.password = hash_password(form.password.data)
        if 'isActive' in payload:
            user.is_active = bool(form.isActive.data)
        # Role and school moves are reserved for super admins
        if super_admin:
            if form.role.data:
                user.role = form.role.data
            if form.schoolId.data:
                user.school_id = form.schoolId.data

        admin_data = _nested(payload, 'adminData')
        if admin_data:
            profile = user.admin_profile or AdminProfile(user=user, admin_type=user.role)
            if admin_data.get('adminType'):
                profile.admin_type = admin_data['adminType']
            if 'permissions' in admin_data:
                profile.permissions = admin_data.get('permissions')
            db.session.add(profile)
        db.session.commit()
        return jsonify(user.to_dict())
    except Exception as e:
        return server_error('Failed to update user', e)


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_user(user_id):
    session = get_session()
    if session.get('id') == user_id:
        return api_error('You cannot delete your own account', 400)

    user = db.session.get(User, user_id)
    if not user:
        return api_error('User not found', 404)
    if not is_super_admin(session) and user.school_id != session.get('schoolId'):
        return api_error('Forbidden', 403)

    student = user.student_profile
    if student:
        counts = {
            'attendance': Attendance.query.filter_by(student_id=student.id).count(),
            'results': Result.query.filter_by(student_id=student.id).count(),
        }
        if any(counts.values()):
            return api_error('Cannot delete student with attendance or result records', 400, details=counts)

    try:
        if student:
            StudentParent.query.filter_by(student_id=student.id).delete(synchronize_session=False)
            StudentClass.query.filter_by(student_id=student.id).delete(synchronize_session=False)
            db.session.delete(student)
        if user.parent_profile:
            StudentParent.query.filter_by(parent_id=user.parent_profile.id).delete(synchronize_session=False)
            db.session.delete(user.parent_profile)
        SubjectTeacher.query.filter_by(teacher_id=user.id).delete(synchronize_session=False)
        UserActivityLog.query.filter_by(user_id=user.id).delete(synchronize_session=False)
        # Withdrawals and saved templates belong to the school and outlive their author
        WithdrawalRequest.query.filter_by(requested_by_id=user.id).update(
            {'requested_by_id': None}, synchronize_session=False)
        ResultTemplate.query.filter_by(created_by_id=user.id).update(
            {'created_by_id': None}, synchronize_session=False)
        db.session.delete(user)
        db.session.commit()
        current_app.logger.info(f"User {user_id} deleted by {session['email']}")
        return jsonify({'success': True})
    except Exception as e:
        return server_error('Failed to delete user', e)
