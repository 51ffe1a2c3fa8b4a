from datetime import datetime

from flask import Blueprint, current_app, jsonify, request

from app_models import (ADMIN_ROLES, ROLE_PARENT, AcademicSession, AssessmentComponent, GradeScale, Parent,
                        ResultConfiguration, ResultPeriod, School, Student, StudentParent, User)
from errors import api_error, server_error, validation_error
from extensions import db
from forms import SessionForm, SessionUpdateForm, load_form
from security import api_login_required, can_access_school, get_session, is_super_admin, roles_required

sessions_bp = Blueprint('sessions', __name__, url_prefix='/api')


def _apply_filters(query):
    if request.args.get('isCurrent') == 'true':
        query = query.filter(AcademicSession.is_current.is_(True))
    active = request.args.get('active')
    if active == 'true':
        query = query.filter(AcademicSession.end_date >= datetime.utcnow())
    elif active == 'false':
        query = query.filter(AcademicSession.end_date < datetime.utcnow())
    return query.order_by(AcademicSession.start_date.desc())


def _unset_current(school_id, exclude_id=None):
    """Clear isCurrent on every other session of the school"""
    query = AcademicSession.query.filter_by(school_id=school_id, is_current=True)
    if exclude_id is not None:
        query = query.filter(AcademicSession.id != exclude_id)
    query.update({'is_current': False}, synchronize_session=False)


def _get_owned_session(session_id):
    """Return (academic_session, None) or (None, error response)"""
    academic_session = db.session.get(AcademicSession, session_id)
    if not academic_session:
        return None, api_error('Academic session not found', 404)
    if not can_access_school(get_session(), academic_session.school_id):
        return None, api_error('You do not have access to this academic session', 403)
    return academic_session, None


@sessions_bp.route('/sessions', methods=['GET'])
@api_login_required
def list_sessions():
    session = get_session()
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = request.args.get('schoolId', type=int) or school_id
    elif not school_id:
        return api_error('No school associated with this account', 403)

    try:
        query = AcademicSession.query
        if school_id:
            query = query.filter_by(school_id=school_id)
        sessions = _apply_filters(query).all()
        return jsonify([s.to_dict() for s in sessions])
    except Exception as e:
        return server_error('Failed to fetch academic sessions', e)


@sessions_bp.route('/sessions', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_session():
    session = get_session()
    form = load_form(SessionForm)
    if not form.validate():
        return validation_error(form)

    school_id = session.get('schoolId')
    if is_super_admin(session) and form.schoolId.data:
        school_id = form.schoolId.data
    if not school_id:
        return api_error('School ID is required', 400)
    if not db.session.get(School, school_id):
        return api_error('School not found', 404)

    try:
        if form.isCurrent.data:
            _unset_current(school_id)

        academic_session = AcademicSession(
            school_id=school_id,
            name=form.name.data.strip(),
            start_date=form.startDate.data,
            end_date=form.endDate.data,
            is_current=bool(form.isCurrent.data),
        )
        db.session.add(academic_session)
        db.session.commit()
        current_app.logger.info(f"Academic session '{academic_session.name}' created for school {school_id}")
        return jsonify(academic_session.to_dict()), 201
    except Exception as e:
        return server_error('Failed to create academic session', e)


@sessions_bp.route('/sessions/<int:session_id>', methods=['GET'])
@api_login_required
def get_session_detail(session_id):
    academic_session, error = _get_owned_session(session_id)
    if error:
        return error
    return jsonify(academic_session.to_dict(with_counts=True))


@sessions_bp.route('/sessions/<int:session_id>', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
def update_session(session_id):
    academic_session, error = _get_owned_session(session_id)
    if error:
        return error

    payload = request.get_json(silent=True) or {}
    form = load_form(SessionUpdateForm, payload)
    if not form.validate():
        return validation_error(form)

    start_date = form.startDate.data or academic_session.start_date
    end_date = form.endDate.data or academic_session.end_date
    if end_date < start_date:
        return api_error('Validation error', 400, details={'endDate': ['End date cannot be before start date']})

    try:
        if form.name.data:
            academic_session.name = form.name.data.strip()
        academic_session.start_date = start_date
        academic_session.end_date = end_date
        if 'isCurrent' in payload:
            if form.isCurrent.data:
                _unset_current(academic_session.school_id, exclude_id=academic_session.id)
            academic_session.is_current = bool(form.isCurrent.data)
        db.session.commit()
        return jsonify(academic_session.to_dict())
    except Exception as e:
        return server_error('Failed to update academic session', e)


@sessions_bp.route('/sessions/<int:session_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_session(session_id):
    academic_session, error = _get_owned_session(session_id)
    if error:
        return error

    counts = academic_session.usage_counts()
    if any(counts.values()):
        return api_error('Cannot delete session with associated records', 400, details=counts)

    try:
        config_ids = [row.id for row in
                      db.session.query(ResultConfiguration.id).filter_by(session_id=academic_session.id)]
        if config_ids:
            # Children first; all of it commits together with the session delete
            for child in (GradeScale, ResultPeriod, AssessmentComponent):
                child.query.filter(child.configuration_id.in_(config_ids)).delete(synchronize_session=False)
            ResultConfiguration.query.filter(ResultConfiguration.id.in_(config_ids)).delete(
                synchronize_session=False)
        db.session.delete(academic_session)
        db.session.commit()
        current_app.logger.info(f"Academic session {session_id} deleted with {len(config_ids)} result configuration(s)")
        return jsonify({'success': True})
    except Exception as e:
        return server_error('Failed to delete academic session', e)


@sessions_bp.route('/schools/<int:school_id>/sessions', methods=['GET'])
@api_login_required
def list_school_sessions(school_id):
    """Sessions of one school, readable by its staff, students and parents"""
    session = get_session()
    try:
        if session['role'] == ROLE_PARENT:
            parent = Parent.query.filter_by(user_id=session['id']).first()
            if not parent:
                return api_error('Parent profile not found', 404)
            has_child_here = (StudentParent.query.filter_by(parent_id=parent.id)
                              .join(Student).join(User).filter(User.school_id == school_id).count())
            if not has_child_here:
                return api_error('Unauthorized access to school data', 403)
        elif not can_access_school(session, school_id):
            return api_error('Unauthorized access to school data', 403)

        query = AcademicSession.query.filter_by(school_id=school_id)
        if request.args.get('isCurrent') == 'true':
            query = query.filter(AcademicSession.is_current.is_(True))
        sessions = query.order_by(AcademicSession.start_date.desc()).all()

        data = []
        for academic_session in sessions:
            item = academic_session.to_dict(with_counts=True)
            item['resultConfigurations'] = [c.to_dict() for c in academic_session.result_configurations]
            data.append(item)
        return jsonify(data)
    except Exception as e:
        return server_error('Failed to fetch academic sessions', e)
