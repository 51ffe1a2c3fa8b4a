from flask import Blueprint, current_app, jsonify, request

from app_models import (ADMIN_ROLES, ROLE_TEACHER, ClassSubject, Result, School, SchoolClass, Subject, SubjectTeacher,
                        User)
from errors import api_error, server_error, validation_error
from extensions import db
from forms import SubjectForm, SubjectTeacherForm, SubjectUpdateForm, load_form
from security import (api_login_required, can_access_school, get_session, is_super_admin, requested_school_id,
                      roles_required)

subjects_bp = Blueprint('subjects', __name__, url_prefix='/api')


def _resolve_class_ids(school_id, class_ids, level=None):
    """Requested classes of the school, plus every class of `level` when given"""
    wanted = set()
    for raw in class_ids or []:
        try:
            wanted.add(int(raw))
        except (TypeError, ValueError):
            continue
    query = SchoolClass.query.filter_by(school_id=school_id)
    found = {c.id for c in query.filter(SchoolClass.id.in_(wanted)).all()} if wanted else set()
    if level:
        found.update(c.id for c in query.filter_by(level=level).all())
    return sorted(found), sorted(wanted - found)


def _get_subject(subject_id):
    """Return (subject, None) or (None, error response)"""
    subject = db.session.get(Subject, subject_id)
    if not subject:
        return None, api_error('Subject not found', 404)
    if not can_access_school(get_session(), subject.school_id):
        return None, api_error('Forbidden', 403)
    return subject, None


# Subjects

@subjects_bp.route('/subjects', methods=['GET'])
@api_login_required
def list_subjects():
    session = get_session()
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = request.args.get('schoolId', type=int) or school_id
    if not school_id:
        return api_error('School not found', 404)

    try:
        query = Subject.query.filter_by(school_id=school_id)
        class_id = request.args.get('classId', type=int)
        if class_id:
            query = query.filter(Subject.class_links.any(ClassSubject.class_id == class_id))
        subjects = query.order_by(Subject.name).all()
        return jsonify([s.to_dict() for s in subjects])
    except Exception as e:
        return server_error('Failed to fetch subjects', e)


@subjects_bp.route('/subjects', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_subject():
    session = get_session()
    payload = request.get_json(silent=True) or {}
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = requested_school_id() or school_id
    if not school_id:
        return api_error('School not found', 404)

    form = load_form(SubjectForm, payload)
    if not form.validate():
        return validation_error(form)

    class_ids, missing = _resolve_class_ids(school_id, payload.get('classIds'), form.level.data)
    if missing:
        return api_error('Class not found', 404, details={'classIds': missing})

    try:
        subject = Subject(
            school_id=school_id,
            name=form.name.data.strip(),
            code=form.code.data or None,
            description=form.description.data or None,
        )
        for class_id in class_ids:
            subject.class_links.append(ClassSubject(class_id=class_id))
        db.session.add(subject)
        db.session.commit()
        current_app.logger.info(f"Subject '{subject.name}' created in {len(class_ids)} class(es)")
        return jsonify(subject.to_dict()), 201
    except Exception as e:
        return server_error('Failed to create subject', e)


@subjects_bp.route('/subjects/<int:subject_id>', methods=['GET'])
@api_login_required
def get_subject(subject_id):
    subject, error = _get_subject(subject_id)
    if error:
        return error
    data = subject.to_dict()
    school = db.session.get(School, subject.school_id)
    data['school'] = school.to_summary() if school else None
    return jsonify(data)


@subjects_bp.route('/subjects/<int:subject_id>', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
def update_subject(subject_id):
    subject, error = _get_subject(subject_id)
    if error:
        return error

    payload = request.get_json(silent=True) or {}
    form = load_form(SubjectUpdateForm, payload)
    if not form.validate():
        return validation_error(form)

    class_ids = None
    if 'classIds' in payload:
        class_ids, missing = _resolve_class_ids(subject.school_id, payload.get('classIds'))
        if missing:
            return api_error('Class not found', 404, details={'classIds': missing})

    try:
        if form.name.data:
            subject.name = form.name.data.strip()
        if 'code' in payload:
            subject.code = form.code.data or None
        if 'description' in payload:
            subject.description = form.description.data or None
        if class_ids is not None:
            # Links to retained classes stay as they are
            kept = [link for link in subject.class_links if link.class_id in class_ids]
            existing = {link.class_id for link in kept}
            subject.class_links = kept + [ClassSubject(class_id=c) for c in class_ids if c not in existing]
        db.session.commit()
        return jsonify(subject.to_dict())
    except Exception as e:
        return server_error('Failed to update subject', e)


@subjects_bp.route('/subjects/<int:subject_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_subject(subject_id):
    subject, error = _get_subject(subject_id)
    if error:
        return error

    results = Result.query.filter_by(subject_id=subject.id).count()
    if results:
        return api_error('Cannot delete subject with recorded results', 400, details={'results': results})

    try:
        db.session.delete(subject)
        db.session.commit()
        return jsonify({'success': True})
    except Exception as e:
        return server_error('Failed to delete subject', e)


# Subject teachers

@subjects_bp.route('/subject-teachers', methods=['GET'])
@api_login_required
def list_subject_teachers():
    session = get_session()
    try:
        query = SubjectTeacher.query.join(User, SubjectTeacher.teacher_id == User.id)
        if request.args.get('subjectId', type=int):
            query = query.filter(SubjectTeacher.subject_id == request.args.get('subjectId', type=int))
        if request.args.get('teacherId', type=int):
            query = query.filter(SubjectTeacher.teacher_id == request.args.get('teacherId', type=int))
        if not is_super_admin(session) and session.get('schoolId'):
            query = query.filter(User.school_id == session['schoolId'])
        return jsonify([st.to_dict() for st in query.order_by(SubjectTeacher.id).all()])
    except Exception as e:
        return server_error('Failed to fetch subject teachers', e)


@subjects_bp.route('/subject-teachers', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def assign_subject_teacher():
    form = load_form(SubjectTeacherForm)
    if not form.validate():
        return api_error('Subject ID and Teacher ID are required', 400, details=form.errors)

    subject = db.session.get(Subject, form.subjectId.data)
    if not subject:
        return api_error('Subject not found', 404)
    teacher = User.query.filter_by(id=form.teacherId.data, role=ROLE_TEACHER).first()
    if not teacher:
        return api_error('Teacher not found', 404)
    if teacher.school_id != subject.school_id:
        return api_error('Teacher and subject must belong to the same school', 400)
    if not can_access_school(get_session(), subject.school_id):
        return api_error('Forbidden', 403)
    if SubjectTeacher.query.filter_by(subject_id=subject.id, teacher_id=teacher.id).first():
        return api_error('Teacher is already assigned to this subject', 400)

    try:
        assignment = SubjectTeacher(subject_id=subject.id, teacher_id=teacher.id)
        db.session.add(assignment)
        db.session.commit()
        return jsonify(assignment.to_dict()), 201
    except Exception as e:
        return server_error('Failed to assign teacher to subject', e)


@subjects_bp.route('/subject-teachers/<int:assignment_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def remove_subject_teacher(assignment_id):
    assignment = db.session.get(SubjectTeacher, assignment_id)
    if not assignment:
        return api_error('Assignment not found', 404)
    if not can_access_school(get_session(), assignment.subject.school_id):
        return api_error('Forbidden', 403)
    try:
        db.session.delete(assignment)
        db.session.commit()
        return jsonify({'success': True})
    except Exception as e:
        return server_error('Failed to remove teacher from subject', e)
