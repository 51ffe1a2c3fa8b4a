import os
import uuid

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import select
from werkzeug.utils import secure_filename

from app_models import (ADMIN_ROLES, ROLE_PARENT, ROLE_TEACHER, Parent, Student, StudentParent, User)
from errors import api_error, server_error, validation_error
from extensions import db
from forms import ParentForm, ParentUpdateForm, load_form
from security import get_session, hash_password, is_super_admin, requested_school_id, roles_required

parents_bp = Blueprint('parents', __name__, url_prefix='/api/parents')

STAFF_ROLES = ADMIN_ROLES + (ROLE_TEACHER,)

# Form field -> Parent column
PROFILE_FIELD_MAP = {
    'phone': 'phone',
    'alternatePhone': 'alternate_phone',
    'occupation': 'occupation',
    'address': 'address',
    'city': 'city',
    'state': 'state',
    'country': 'country',
}


def save_profile_image(file_storage, folder='parents'):
    """Store an uploaded image under UPLOAD_FOLDER and return its public path"""
    filename = secure_filename(file_storage.filename or '')
    if not filename:
        return None
    filename = f"{uuid.uuid4().hex[:12]}_{filename}"
    target_dir = os.path.join(current_app.config['UPLOAD_FOLDER'], folder)
    os.makedirs(target_dir, exist_ok=True)
    file_storage.save(os.path.join(target_dir, filename))
    return f"/uploads/{folder}/{filename}"


def _apply_profile(parent, form):
    for form_field, column in PROFILE_FIELD_MAP.items():
        field = getattr(form, form_field)
        # Only fields present in the request
        if field.raw_data:
            setattr(parent, column, field.data or None)


def _child_dict(link):
    student = link.student
    enrolment = student.current_enrolment()
    return {
        'linkId': link.id,
        'relation': link.relation,
        'isPrimary': link.is_primary,
        'student': {
            **student.to_summary(),
            'class': enrolment.school_class.to_dict() if enrolment else None,
        },
    }


def _parent_dict(parent):
    data = parent.to_dict()
    data['children'] = [_child_dict(link) for link in parent.student_links]
    return data


def _get_parent(user_id):
    """Return (parent, None) or (None, error response) honouring school scope"""
    user = User.query.filter_by(id=user_id, role=ROLE_PARENT).first()
    if not user or not user.parent_profile:
        return None, api_error('Parent not found', 404)
    session = get_session()
    if not is_super_admin(session) and user.school_id != session.get('schoolId'):
        return None, api_error('Forbidden', 403)
    return user.parent_profile, None


@parents_bp.route('', methods=['GET'])
@roles_required(*STAFF_ROLES)
def list_parents():
    session = get_session()
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = request.args.get('schoolId', type=int) or school_id
    if not school_id:
        return api_error('School not found', 404)
    try:
        parents = (Parent.query.join(User).filter(User.school_id == school_id)
                   .order_by(User.name).all())
        return jsonify([_parent_dict(p) for p in parents])
    except Exception as e:
        return server_error('Failed to fetch parents', e)


@parents_bp.route('', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_parent():
    session = get_session()
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = requested_school_id() or school_id
    if not school_id:
        return api_error('School not found', 404)

    form = load_form(ParentForm)
    if not form.validate():
        return validation_error(form)
    if User.email_taken(form.email.data):
        return api_error('Email already in use', 400)

    try:
        user = User(
            name=form.name.data.strip(),
            email=form.email.data.strip().lower(),
            password=hash_password(form.password.data),
            role=ROLE_PARENT,
            school_id=school_id,
        )
        if form.profileImage.data and hasattr(form.profileImage.data, 'filename'):
            user.profile_image = save_profile_image(form.profileImage.data)
        parent = Parent(user=user)
        _apply_profile(parent, form)
        db.session.add_all([user, parent])
        db.session.commit()
        current_app.logger.info(f"Parent account {user.email} created for school {school_id}")
        return jsonify(_parent_dict(parent)), 201
    except Exception as e:
        return server_error('Failed to create parent', e)


@parents_bp.route('/<int:parent_id>', methods=['GET'])
@roles_required(*STAFF_ROLES)
def get_parent(parent_id):
    parent, error = _get_parent(parent_id)
    if error:
        return error

    # Students of the same school that no parent has claimed yet
    linked = select(StudentParent.student_id)
    available = (Student.query.join(User)
                 .filter(User.school_id == parent.user.school_id, ~Student.id.in_(linked))
                 .order_by(User.name).limit(100).all())
    data = _parent_dict(parent)
    data['availableStudents'] = [s.to_summary() for s in available]
    return jsonify(data)


@parents_bp.route('/<int:parent_id>', methods=['PATCH'])
@roles_required(*ADMIN_ROLES)
def update_parent(parent_id):
    parent, error = _get_parent(parent_id)
    if error:
        return error

    form = load_form(ParentUpdateForm)
    if not form.validate():
        return validation_error(form)
    if User.email_taken(form.email.data, exclude_id=parent.user_id):
        return api_error('Email already in use', 400)

    try:
        parent.user.name = form.name.data.strip()
        parent.user.email = form.email.data.strip().lower()
        if form.password.data:
            parent.user.password = hash_password(form.password.data)
        _apply_profile(parent, form)
        db.session.commit()
        return jsonify(_parent_dict(parent))
    except Exception as e:
        return server_error('Failed to update parent', e)


@parents_bp.route('/<int:parent_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_parent(parent_id):
    parent, error = _get_parent(parent_id)
    if error:
        return error
    try:
        user = parent.user
        StudentParent.query.filter_by(parent_id=parent.id).delete(synchronize_session=False)
        db.session.delete(parent)
        db.session.delete(user)
        db.session.commit()
        current_app.logger.info(f"Parent {parent_id} deleted")
        return '', 204
    except Exception as e:
        return server_error('Failed to delete parent', e)


@parents_bp.route('/<int:parent_id>/link-student', methods=['POST'])
@roles_required(*STAFF_ROLES)
def link_student(parent_id):
    parent, error = _get_parent(parent_id)
    if error:
        return error

    payload = request.get_json(silent=True) or {}
    student_id = payload.get('studentId')
    if not student_id:
        return api_error('Student ID is required', 400)
    student = db.session.get(Student, student_id)
    if not student:
        return api_error('Student not found', 404)
    if student.user.school_id != parent.user.school_id:
        return api_error('Student and parent must belong to the same school', 400)
    if StudentParent.query.filter_by(student_id=student.id).first():
        return api_error('Student is already linked to another parent', 400)

    try:
        link = StudentParent(
            parent_id=parent.id,
            student_id=student.id,
            relation=payload.get('relation') or 'Parent',
            is_primary=bool(payload.get('isPrimary', True)),
        )
        db.session.add(link)
        db.session.commit()
        return jsonify({
            'message': 'Student linked successfully',
            'student': {'id': student.id, 'name': student.user.name},
        })
    except Exception as e:
        return server_error('Failed to link student', e)


@parents_bp.route('/<int:parent_id>/students/<int:student_id>', methods=['DELETE'])
@roles_required(*STAFF_ROLES)
def unlink_student(parent_id, student_id):
    parent, error = _get_parent(parent_id)
    if error:
        return error
    link = StudentParent.query.filter_by(parent_id=parent.id, student_id=student_id).first()
    if not link:
        return api_error('Relationship not found', 404)
    try:
        db.session.delete(link)
        db.session.commit()
        return '', 204
    except Exception as e:
        return server_error('Failed to unlink student', e)
