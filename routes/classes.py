from flask import Blueprint, jsonify, request

from app_models import ADMIN_ROLES, SchoolClass, StudentClass
from errors import api_error, server_error, validation_error
from extensions import db
from forms import ClassForm, load_form
from security import api_login_required, get_session, is_super_admin, requested_school_id, roles_required

classes_bp = Blueprint('classes', __name__, url_prefix='/api/classes')


@classes_bp.route('', methods=['GET'])
@api_login_required
def list_classes():
    session = get_session()
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = request.args.get('schoolId', type=int) or school_id
    if not school_id:
        return api_error('School not found', 404)

    try:
        query = SchoolClass.query.filter_by(school_id=school_id)
        if request.args.get('level'):
            query = query.filter_by(level=request.args['level'])
        classes = query.order_by(SchoolClass.name, SchoolClass.section).all()
        data = []
        for school_class in classes:
            item = school_class.to_dict()
            item['_count'] = {'students': StudentClass.query.filter_by(class_id=school_class.id).count()}
            data.append(item)
        return jsonify(data)
    except Exception as e:
        return server_error('Failed to fetch classes', e)


@classes_bp.route('', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_class():
    session = get_session()
    school_id = session.get('schoolId')
    if is_super_admin(session):
        school_id = requested_school_id() or school_id
    if not school_id:
        return api_error('School not found', 404)

    form = load_form(ClassForm)
    if not form.validate():
        return validation_error(form)

    try:
        school_class = SchoolClass(
            school_id=school_id,
            name=form.name.data.strip(),
            section=form.section.data or None,
            level=form.level.data or None,
        )
        db.session.add(school_class)
        db.session.commit()
        return jsonify(school_class.to_dict()), 201
    except Exception as e:
        return server_error('Failed to create class', e)
