from flask import Blueprint, current_app, jsonify, request

from app_models import ADMIN_ROLES, ResultTemplate, School
from errors import api_error, server_error, validation_error
from extensions import db
from forms import ResultTemplateForm, load_form
from result_templates import (DEFAULT_TEMPLATES, bind_template, check_content, get_template_for_level,
                              grouped_fields, sample_report)
from security import api_login_required, can_access_school, get_session, roles_required

templates_bp = Blueprint('result_templates', __name__, url_prefix='/api')


def _school_branding(school):
    return {
        'name': school.name,
        'address': school.address or 'No address provided',
        'motto': school.motto,
        'logo': school.logo,
        'phone': school.phone,
        'email': school.email,
        'website': school.website,
    }


def _unset_default(school_id, exclude_id=None):
    query = ResultTemplate.query.filter_by(school_id=school_id, is_default=True)
    if exclude_id is not None:
        query = query.filter(ResultTemplate.id != exclude_id)
    query.update({'is_default': False}, synchronize_session=False)


def _check_school(school_id):
    """None when the caller may use `school_id`, else an error response"""
    if not can_access_school(get_session(), school_id):
        return api_error('Forbidden', 403)
    if not db.session.get(School, school_id):
        return api_error('School not found', 404)
    return None


def _validated_content(payload):
    """Return (editor state, None) or (None, error response)"""
    template, problems = check_content(payload.get('content'))
    if problems:
        return None, api_error('Invalid template content', 400, details=problems)
    return {'elements': [el.to_dict() for el in template.elements],
            'canvasSize': template.canvas_size.to_dict()}, None


# Built-in templates

@templates_bp.route('/results/templates/defaults', methods=['GET'])
@api_login_required
def list_default_templates():
    return jsonify([template.to_dict() for template in DEFAULT_TEMPLATES])


@templates_bp.route('/results/templates/defaults/<level>', methods=['GET'])
@api_login_required
def default_template_for_level(level):
    template = get_template_for_level(level)
    return jsonify({
        'name': template.name,
        'description': template.description,
        'level': template.level,
        **template.editor_state(),
    })


@templates_bp.route('/results/templates/fields', methods=['GET'])
@api_login_required
def list_template_fields():
    return jsonify(grouped_fields())


@templates_bp.route('/results/templates/preview', methods=['POST'])
@api_login_required
def preview_template():
    school_id = get_session().get('schoolId')
    if not school_id:
        return api_error('Unauthorized', 401)
    school = db.session.get(School, school_id)
    if not school:
        return api_error('School not found', 404)

    payload = request.get_json(silent=True) or {}
    raw = payload.get('template')
    if not isinstance(raw, dict):
        return api_error('Invalid template structure', 400)
    # Raw editor state or a saved template row
    content = raw if 'elements' in raw else raw.get('content')
    template, problems = check_content(content)
    if problems:
        return api_error('Invalid template structure', 400, details=problems)

    bound = bind_template(template, sample_report(_school_branding(school)))
    return jsonify({
        'name': raw.get('name') or template.name,
        'canvasSize': template.canvas_size.to_dict(),
        'elements': bound,
    })


# Saved per-school templates

@templates_bp.route('/schools/<int:school_id>/results/templates', methods=['GET'])
@api_login_required
def list_school_templates(school_id):
    error = _check_school(school_id)
    if error:
        return error
    try:
        templates = (ResultTemplate.query.filter_by(school_id=school_id)
                     .order_by(ResultTemplate.updated_at.desc()).all())
        return jsonify([t.to_dict() for t in templates])
    except Exception as e:
        return server_error('Failed to fetch templates', e)


@templates_bp.route('/schools/<int:school_id>/results/templates', methods=['POST'])
@roles_required(*ADMIN_ROLES)
def create_school_template(school_id):
    error = _check_school(school_id)
    if error:
        return error

    payload = request.get_json(silent=True) or {}
    form = load_form(ResultTemplateForm, payload)
    if not form.validate():
        return validation_error(form)
    content, error = _validated_content(payload)
    if error:
        return error

    try:
        if form.isDefault.data:
            _unset_default(school_id)
        template = ResultTemplate(
            school_id=school_id,
            name=form.name.data.strip(),
            description=form.description.data or None,
            content=content,
            is_default=bool(form.isDefault.data),
            created_by_id=get_session().get('id'),
        )
        db.session.add(template)
        db.session.commit()
        current_app.logger.info(f"Result template '{template.name}' saved for school {school_id}")
        return jsonify(template.to_dict()), 201
    except Exception as e:
        return server_error('Failed to create template', e)


@templates_bp.route('/schools/<int:school_id>/results/templates/<int:template_id>', methods=['GET'])
@api_login_required
def get_school_template(school_id, template_id):
    error = _check_school(school_id)
    if error:
        return error
    template = ResultTemplate.query.filter_by(id=template_id, school_id=school_id).first()
    if not template:
        return api_error('Template not found', 404)
    return jsonify(template.to_dict())


@templates_bp.route('/schools/<int:school_id>/results/templates/<int:template_id>', methods=['PUT'])
@roles_required(*ADMIN_ROLES)
def update_school_template(school_id, template_id):
    error = _check_school(school_id)
    if error:
        return error
    template = ResultTemplate.query.filter_by(id=template_id, school_id=school_id).first()
    if not template:
        return api_error('Template not found', 404)

    payload = request.get_json(silent=True) or {}
    form = load_form(ResultTemplateForm, payload)
    if not form.validate():
        return validation_error(form)
    content, error = _validated_content(payload)
    if error:
        return error

    try:
        if form.isDefault.data:
            _unset_default(school_id, exclude_id=template.id)
        template.name = form.name.data.strip()
        template.description = form.description.data or None
        template.content = content
        template.is_default = bool(form.isDefault.data)
        db.session.commit()
        return jsonify(template.to_dict())
    except Exception as e:
        return server_error('Failed to update template', e)


@templates_bp.route('/schools/<int:school_id>/results/templates/<int:template_id>', methods=['DELETE'])
@roles_required(*ADMIN_ROLES)
def delete_school_template(school_id, template_id):
    error = _check_school(school_id)
    if error:
        return error
    template = ResultTemplate.query.filter_by(id=template_id, school_id=school_id).first()
    if not template:
        return api_error('Template not found', 404)
    try:
        db.session.delete(template)
        db.session.commit()
        return jsonify({'success': True})
    except Exception as e:
        return server_error('Failed to delete template', e)
