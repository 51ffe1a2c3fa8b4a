from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import select

from app_models import (ADMIN_ROLES, ROLE_STUDENT, ROLE_TEACHER, AcademicSession, Attendance, Result, SchoolClass,
                        Student, StudentClass, StudentParent, User)
from errors import api_error, server_error, validation_error
from extensions import db
from forms import StudentForm, StudentUpdateForm, load_form
from security import get_session, hash_password, is_super_admin, requested_school_id, roles_required

students_bp = Blueprint('students', __name__, url_prefix='/api/students')

STAFF_ROLES = ADMIN_ROLES + (ROLE_TEACHER,)

# Form field -> Student column
PROFILE_FIELD_MAP = {
    'admissionNumber': 'admission_number',
    'gender': 'gender',
    'religion': 'religion',
    'bloodGroup': 'blood_group',
    'phone': 'phone',
    'address': 'address',
    'city': 'city',
    'state': 'state',
    'country': 'country',
}


def _current_session_id(school_id):
    current = AcademicSession.query.filter_by(school_id=school_id, is_current=True).first()
    return current.id if current else None


def _apply_profile(student, form):
    for form_field, column in PROFILE_FIELD_MAP.items():
        field = getattr(form, form_field)
        # Only fields present in the request
        if field.raw_data:
            setattr(student, column, field.data or None)
    if form.admissionDate.data:
        student.admission_date = form.admissionDate.data.date()
    if form.dateOfBirth.data:
        student.date_of_birth = form.dateOfBirth.data.date()


def _check_enrolment_target(school_id, class_id, session_id):
    """None when the class and session belong to the school, else an error response"""
    if not SchoolClass.query.filter_by(id=class_id, school_id=school_id).first():
        return api_error('Class not found', 404)
    if not session_id:
        return api_error('No current academic session; sessionId is required', 400)
    if not AcademicSession.query.filter_by(id=session_id, school_id=school_id).first():
        return api_error('Academic session not found', 404)
    return None


def _get_student(student_id):
    """Return (student, None) or (None, error response) honouring school scope"""
    student = db.session.get(Student, student_id)
    if not student:
        return None, api_error('Student not found', 404)
    session = get_session()
    if not is_super_admin(session) and student.school_id != session.get('schoolId'):
        return None, api_error('Forbidden', 403)
    return student, None


@students_bp.route('', methods=['GET'])
@roles_required(*STAFF_ROLES)
def list_students():
    session = get_session()
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = request.args.get('schoolId', type=int) or school_id
    if not school_id:
        return api_error('School not found', 404)

    class_id = request.args.get('classId', type=int)
    not_in_class = request.args.get('notInClass', type=int)
    try:
        query = Student.query.join(User).filter(User.school_id == school_id)
        current_session_id = _current_session_id(school_id)

        if not_in_class:
            # Candidates for enrolment: anyone not already in that class this session
            enrolled = select(StudentClass.student_id).where(StudentClass.class_id == not_in_class)
            if current_session_id:
                enrolled = enrolled.where(StudentClass.session_id == current_session_id)
            students = query.filter(~Student.id.in_(enrolled)).order_by(User.name).all()
            return jsonify([s.to_summary() for s in students])

        if class_id:
            query = query.join(StudentClass, StudentClass.student_id == Student.id).filter(
                StudentClass.class_id == class_id)
            if current_session_id:
                query = query.filter(StudentClass.session_id == current_session_id)
        students = query.order_by(User.name).all()
        return jsonify([s.to_dict() for s in students])
    except Exception as e:
        return server_error('Failed to fetch students', e)


@students_bp.route('', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_student():
    session = get_session()
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = requested_school_id() or school_id
    if not school_id:
        return api_error('School not found', 404)

    form = load_form(StudentForm)
    if not form.validate():
        return validation_error(form)
    if User.email_taken(form.email.data):
        return api_error('Email already in use', 400)

    class_id = form.classId.data
    session_id = form.sessionId.data or (_current_session_id(school_id) if class_id else None)
    if class_id:
        error = _check_enrolment_target(school_id, class_id, session_id)
        if error:
            return error

    try:
        password = form.password.data or current_app.config['DEFAULT_STUDENT_PASSWORD']
        user = User(
            name=form.name.data.strip(),
            email=form.email.data.strip().lower(),
            password=hash_password(password),
            role=ROLE_STUDENT,
            school_id=school_id,
        )
        student = Student(user=user)
        _apply_profile(student, form)
        db.session.add_all([user, student])
        if class_id:
            db.session.add(StudentClass(
                student=student,
                class_id=class_id,
                session_id=session_id,
                roll_number=form.rollNumber.data or None,
            ))
        db.session.commit()
        current_app.logger.info(f"Student {user.email} created for school {school_id}")
        return jsonify(student.to_dict()), 201
    except Exception as e:
        return server_error('Failed to create student', e)


@students_bp.route('/<int:student_id>', methods=['GET'])
@roles_required(*STAFF_ROLES)
def get_student(student_id):
    student, error = _get_student(student_id)
    if error:
        return error

    data = student.to_dict()
    data['parents'] = [
        {**link.parent.to_dict(), 'relation': link.relation, 'isPrimary': link.is_primary}
        for link in student.parent_links
    ]
    current = AcademicSession.query.filter_by(school_id=student.school_id, is_current=True).first()
    data['currentSession'] = current.to_dict() if current else None
    return jsonify(data)


@students_bp.route('/<int:student_id>', methods=['PATCH'])
@roles_required(*STAFF_ROLES)
def update_student(student_id):
    student, error = _get_student(student_id)
    if error:
        return error

    form = load_form(StudentUpdateForm)
    if not form.validate():
        return validation_error(form)
    if form.email.data and User.email_taken(form.email.data, exclude_id=student.user_id):
        return api_error('Email already in use', 400)

    class_id = form.classId.data
    session_id = form.sessionId.data or (_current_session_id(student.school_id) if class_id else None)
    if class_id:
        error = _check_enrolment_target(student.school_id, class_id, session_id)
        if error:
            return error

    try:
        if form.name.data:
            student.user.name = form.name.data.strip()
        if form.email.data:
            student.user.email = form.email.data.strip().lower()
        if form.password.data:
            student.user.password = hash_password(form.password.data)
        _apply_profile(student, form)

        if class_id:
            enrolment = StudentClass.query.filter_by(student_id=student.id, session_id=session_id).first()
            if enrolment:
                enrolment.class_id = class_id
            else:
                enrolment = StudentClass(student_id=student.id, class_id=class_id, session_id=session_id)
                db.session.add(enrolment)
            if form.rollNumber.data:
                enrolment.roll_number = form.rollNumber.data
        db.session.commit()
        return jsonify(student.to_dict())
    except Exception as e:
        return server_error('Failed to update student', e)


@students_bp.route('/<int:student_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_student(student_id):
    student, error = _get_student(student_id)
    if error:
        return error

    counts = {
        'attendance': Attendance.query.filter_by(student_id=student.id).count(),
        'results': Result.query.filter_by(student_id=student.id).count(),
    }
    if any(counts.values()):
        return api_error('Cannot delete student with attendance or result records', 400, details=counts)

    try:
        user = student.user
        StudentParent.query.filter_by(student_id=student.id).delete(synchronize_session=False)
        StudentClass.query.filter_by(student_id=student.id).delete(synchronize_session=False)
        db.session.delete(student)
        db.session.delete(user)
        db.session.commit()
        current_app.logger.info(f"Student {student_id} deleted")
        return jsonify({'success': True})
    except Exception as e:
        return server_error('Failed to delete student', e)
