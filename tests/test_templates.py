import re

import pytest

from app_models import ROLE_SCHOOL_ADMIN, ResultTemplate
from result_templates import (CANVAS_HEIGHT, CANVAS_WIDTH, DEFAULT_TEMPLATES, ReportData, TemplateDefinition,
                              TemplateElement, bind_template, build_field_values, check_content,
                              generate_element_id, get_template_for_level, grouped_fields, sample_report)
from result_templates.defaults import primary_school_template, secondary_school_template
from result_templates.fields import CATEGORIES, DYNAMIC_FIELDS

ELEMENT_ID = re.compile(r'^el_\d+_[0-9a-z]{9}$')


def _content(*elements):
    return {'elements': list(elements), 'canvasSize': {'width': CANVAS_WIDTH, 'height': CANVAS_HEIGHT}}


def _dynamic(field, **overrides):
    element = {'type': 'dynamic', 'x': 10, 'y': 10, 'width': 200, 'height': 20, 'metadata': {'field': field}}
    element.update(overrides)
    return element


# Layout model

@pytest.mark.parametrize('template', DEFAULT_TEMPLATES, ids=lambda t: t.name)
def test_default_templates_are_valid(template):
    assert template.validate() == []


def test_template_for_level():
    assert get_template_for_level('primary') is primary_school_template
    assert get_template_for_level('Nursery') is primary_school_template
    assert get_template_for_level('kindergarten') is primary_school_template
    assert get_template_for_level('senior_secondary') is secondary_school_template
    assert get_template_for_level(None) is secondary_school_template


def test_element_ids():
    assert ELEMENT_ID.match(generate_element_id())
    assert generate_element_id() != generate_element_id()


def test_editor_state_has_fresh_ids():
    state = secondary_school_template.editor_state()
    original_ids = {el.id for el in secondary_school_template.elements}

    assert state['canvasSize'] == {'width': 794, 'height': 1123}
    assert len(state['elements']) == len(secondary_school_template.elements)
    assert all(ELEMENT_ID.match(el['id']) for el in state['elements'])
    assert not original_ids & {el['id'] for el in state['elements']}


def test_derived_templates_only_change_subjects_table():
    annual = DEFAULT_TEMPLATES[-1]
    subjects = annual.find_table('subjects')

    assert subjects.metadata['headers'][-1] == 'RESULT'
    assert len(subjects.metadata['columnWidths']) == subjects.metadata['cols'] == 7
    assert secondary_school_template.find_table('subjects').metadata['cols'] == 10
    assert annual.find_table('affective').metadata == secondary_school_template.find_table('affective').metadata


def test_check_content_reports_every_problem():
    template, problems = check_content(_content(
        _dynamic('student_name', x=700),
        _dynamic('favourite_colour'),
        {'type': 'table', 'x': 0, 'y': 0, 'width': 100, 'height': 100,
         'metadata': {'headers': ['A', 'B'], 'columnWidths': [50]}},
        {'type': 'sparkle', 'x': 0, 'y': 0, 'width': 10, 'height': 10},
    ))

    assert template is not None
    assert len(problems) == 4
    assert 'extends beyond the 794x1123 canvas' in problems[0]
    assert "unknown dynamic field 'favourite_colour'" in problems[1]
    assert '2 headers but 1 column widths' in problems[2]
    assert 'unknown element type' in problems[3]


def test_check_content_rejects_unparseable():
    assert check_content(None) == (None, ['Template content must be an object'])
    template, problems = check_content({'elements': [{'type': 'text', 'x': 0}]})
    assert template is None
    assert problems == ['Element is missing y, width, height']
    assert check_content({'elements': [], 'canvasSize': 'A4'}) == (None, ['canvasSize must be an object'])
    assert check_content({'elements': [], 'canvasSize': {'width': 'wide'}}) == (
        None, ['canvasSize width and height must be numbers'])


@pytest.mark.parametrize('coordinate', [float('nan'), float('inf'), 'nan'])
def test_check_content_rejects_non_finite_coordinates(coordinate):
    template, problems = check_content(_content(_dynamic('student_name', x=coordinate)))

    assert template is None
    assert problems == ['Element ?: coordinates must be finite numbers']


def test_check_content_rejects_malformed_style_and_metadata():
    assert check_content(_content(_dynamic('student_name', style='bold')))[1] == [
        'Element ?: style must be an object']
    assert check_content(_content(_dynamic('student_name', metadata=['field'])))[1] == [
        'Element ?: metadata must be an object']

    template, problems = check_content(_content(_dynamic(['student_name'])))
    assert template is not None
    assert problems[0].endswith('metadata.field must be a string')


def test_check_content_reports_malformed_table_metadata():
    template, problems = check_content(_content(
        {'type': 'table', 'x': 0, 'y': 0, 'width': 100, 'height': 100,
         'metadata': {'tableType': 'subjects', 'rows': '5', 'cols': True, 'headers': 'SUBJECT', 'columnWidths': 50}},
    ))

    assert template is not None
    assert [p.split(': ', 1)[1] for p in problems] == [
        'metadata.rows must be a whole number',
        'metadata.cols must be a whole number',
        'metadata.headers must be a list',
        'metadata.columnWidths must be a list',
    ]


def test_grouped_fields():
    groups = grouped_fields()

    assert list(groups) == list(CATEGORIES)
    assert sum(len(fields) for fields in groups.values()) == len(DYNAMIC_FIELDS)
    assert groups['school'][0] == {
        'key': 'school_name', 'label': 'School Name', 'category': 'school',
        'description': 'Official name of the school', 'example': 'Step to Success Demo School',
    }


# Binding

def test_missing_report_values_fall_back():
    values = build_field_values(ReportData(student_name='Tolu'))

    assert values['student_name'] == 'Tolu'
    assert values['admission_number'] == 'N/A'
    assert values['gender'] == 'N/A'
    assert values['class_name'] == 'N/A'
    assert values['position'] == 'N/A'
    assert values['average_score'] == '0%'
    assert values['cumulative_average'] == '0%'
    assert values['date_of_birth'] == ''
    assert values['attendance_percentage'] == ''


def test_sample_report_values():
    values = build_field_values(sample_report({'name': 'Greenfield Academy', 'motto': None}))

    assert values['school_name'] == 'Greenfield Academy'
    assert values['school_motto'] == 'Excellence Personified'
    assert values['total_score'] == '338'
    assert values['total_obtainable'] == '500'
    assert values['average_score'] == '67.6%'
    assert values['attendance_percentage'] == '83%'
    assert values['grading_scale'].startswith('A: 70-100, B: 60-69')


def test_bind_primary_template():
    bound = bind_template(primary_school_template, sample_report())
    by_field = {el['metadata'].get('field'): el for el in bound if el['type'] == 'dynamic'}
    tables = {el['metadata']['tableType']: el for el in bound if el['type'] == 'table'}

    assert len(bound) == len(primary_school_template.elements)
    assert by_field['student_name']['value'] == 'Ifunanya Kelemade'
    assert by_field['grading_scale']['value'].split('\n')[0] == 'A: 70-100% (Excellent)'
    assert tables['subjects']['cells'][0] == ['Mathematics', '18', '17', '45', '80', 'A', '-', '-', '-']
    assert len(tables['subjects']['cells']) == 5
    assert tables['affective']['cells'][0] == ['Punctuality', '5']


def test_bind_rating_scale_ticks_matching_column():
    bound = bind_template(secondary_school_template, sample_report())
    affective = next(el for el in bound if el['metadata'].get('tableType') == 'affective')
    subjects = next(el for el in bound if el['metadata'].get('tableType') == 'subjects')

    assert affective['headers'] == ['TRAITS', '1', '2', '3', '4', '5']
    assert affective['cells'][0] == ['Punctuality', '', '', '', '', '✓']
    assert affective['cells'][5] == ['Attentiveness', '', '', '✓', '', '']
    assert subjects['cells'][0][-1] == 'Excellent'
    assert subjects['cells'][0][3] == '-'


def test_bind_unknown_field_is_blank():
    template = TemplateDefinition(name='Loose', elements=[
        TemplateElement('dynamic', 0, 0, 10, 10, metadata={'field': 'no_such_field'}),
        TemplateElement('image', 0, 0, 10, 10, metadata={'field': 'school_logo'}),
        TemplateElement('text', 0, 0, 10, 10, content='Hello'),
    ])

    bound = bind_template(template, ReportData(student_name='A', school={'logo': '/uploads/logo.png'}))

    assert bound[0]['value'] == ''
    assert bound[1]['value'] == '/uploads/logo.png'
    assert 'value' not in bound[2]
    assert bound[2]['content'] == 'Hello'


def test_bind_table_with_text_row_count():
    template = TemplateDefinition(name='Loose', elements=[
        TemplateElement('table', 0, 0, 100, 100, metadata={'tableType': 'subjects', 'rows': '2',
                                                           'headers': ['SUBJECT', 'TOTAL']}),
        TemplateElement('table', 0, 0, 100, 100, metadata={'tableType': 'affective', 'rows': 'many',
                                                           'headers': ['TRAITS', 'RATING'], 'traits': ['Honesty']}),
    ])

    bound = bind_template(template, sample_report())

    assert bound[0]['cells'] == [['Mathematics', '80'], ['English Language', '71']]
    assert bound[1]['cells'] == []


# Endpoints

def test_default_template_endpoints(client, admin_headers):
    defaults = client.get('/api/results/templates/defaults', headers=admin_headers).get_json()
    primary = client.get('/api/results/templates/defaults/primary', headers=admin_headers).get_json()
    fields = client.get('/api/results/templates/fields', headers=admin_headers).get_json()

    assert [t['name'] for t in defaults] == [t.name for t in DEFAULT_TEMPLATES]
    assert primary['name'] == 'Primary School Report Card'
    assert all(ELEMENT_ID.match(el['id']) for el in primary['elements'])
    assert set(fields) == set(CATEGORIES)


def test_template_endpoints_need_login(client):
    assert client.get('/api/results/templates/defaults').status_code == 401


def test_preview_uses_school_branding(client, admin_headers, db, school):
    school.motto = 'Knowledge is Light'
    db.session.commit()

    response = client.post('/api/results/templates/preview', headers=admin_headers, json={
        'template': {'name': 'Draft', **_content(_dynamic('school_name'), _dynamic('school_motto', y=40))},
    })

    assert response.status_code == 200
    body = response.get_json()
    assert body['name'] == 'Draft'
    assert [el['value'] for el in body['elements']] == ['Greenfield Academy', 'Knowledge is Light']


def test_preview_of_saved_template_row(client, admin_headers):
    response = client.post('/api/results/templates/preview', headers=admin_headers, json={
        'template': {'name': 'Saved', 'content': secondary_school_template.editor_state()},
    })

    assert response.status_code == 200
    assert len(response.get_json()['elements']) == len(secondary_school_template.elements)


def test_preview_rejects_bad_template(client, admin_headers, auth_headers, super_admin):
    assert client.post('/api/results/templates/preview', headers=admin_headers,
                       json={'template': 'nope'}).status_code == 400
    assert client.post('/api/results/templates/preview', headers=admin_headers,
                       json={'template': _content(_dynamic('shoe_size'))}).status_code == 400
    assert client.post('/api/results/templates/preview', headers=auth_headers(super_admin),
                       json={'template': _content()}).status_code == 401


def test_school_template_crud(client, admin_headers, db, school):
    url = f'/api/schools/{school.id}/results/templates'
    first = client.post(url, headers=admin_headers, json={
        'name': 'House style', 'isDefault': True, 'content': primary_school_template.editor_state()})
    second = client.post(url, headers=admin_headers, json={
        'name': 'Exam term', 'isDefault': True, 'content': _content(_dynamic('student_name'))})

    assert first.status_code == 201
    assert second.status_code == 201
    first_id, second_id = first.get_json()['id'], second.get_json()['id']
    db.session.expire_all()
    assert db.session.get(ResultTemplate, first_id).is_default is False
    assert db.session.get(ResultTemplate, second_id).is_default is True

    updated = client.put(f'{url}/{first_id}', headers=admin_headers, json={
        'name': 'House style v2', 'isDefault': True, 'content': _content(_dynamic('class_name'))})
    assert updated.status_code == 200
    assert updated.get_json()['content']['elements'][0]['metadata'] == {'field': 'class_name'}
    db.session.expire_all()
    assert db.session.get(ResultTemplate, second_id).is_default is False

    listed = client.get(url, headers=admin_headers).get_json()
    assert {t['id'] for t in listed} == {first_id, second_id}

    assert client.delete(f'{url}/{second_id}', headers=admin_headers).status_code == 200
    assert client.get(f'{url}/{second_id}', headers=admin_headers).status_code == 404


def test_school_template_rejects_invalid_content(client, admin_headers, school):
    response = client.post(f'/api/schools/{school.id}/results/templates', headers=admin_headers, json={
        'name': 'Broken', 'content': _content(_dynamic('student_name', width=0))})

    assert response.status_code == 400
    body = response.get_json()
    assert body['error'] == 'Invalid template content'
    assert 'width and height must be positive' in body['details'][0]
    assert ResultTemplate.query.count() == 0


def test_school_templates_are_scoped(client, auth_headers, admin_headers, make_school, make_user, super_admin,
                                     teacher):
    other = make_school('Other School')
    url = f'/api/schools/{other.id}/results/templates'
    payload = {'name': 'Theirs', 'content': _content()}

    assert client.get(url, headers=admin_headers).status_code == 403
    assert client.post(url, headers=auth_headers(teacher), json=payload).status_code == 403
    assert client.post(url, headers=auth_headers(make_user(ROLE_SCHOOL_ADMIN, other)), json=payload).status_code == 201
    assert client.get('/api/schools/9999/results/templates', headers=auth_headers(super_admin)).status_code == 404


@pytest.mark.parametrize('element', [
    _dynamic('student_name', x=float('nan')),
    _dynamic('student_name', style='bold'),
    _dynamic(['student_name']),
], ids=['nan-coordinate', 'text-style', 'list-field'])
def test_school_template_rejects_malformed_elements(client, admin_headers, school, element):
    response = client.post(f'/api/schools/{school.id}/results/templates', headers=admin_headers, json={
        'name': 'Broken', 'content': _content(element)})

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid template content'
    assert ResultTemplate.query.count() == 0


def test_preview_rejects_text_row_count(client, admin_headers):
    table = {'type': 'table', 'x': 0, 'y': 0, 'width': 300, 'height': 100,
             'metadata': {'tableType': 'subjects', 'rows': '5', 'headers': ['SUBJECT'], 'columnWidths': [300]}}

    response = client.post('/api/results/templates/preview', headers=admin_headers,
                           json={'template': _content(table)})

    assert response.status_code == 400
    assert response.get_json()['details'][0].endswith('metadata.rows must be a whole number')
