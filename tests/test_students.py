from datetime import date

import pytest

from app_models import ROLE_PARENT, ROLE_STUDENT, Attendance, Student, StudentClass, StudentParent, User
from security import verify_password


@pytest.fixture
def school_class(make_class, school):
    return make_class(school)


@pytest.fixture
def current_session(make_session, school):
    return make_session(school, is_current=True)


def test_create_student_with_default_password(app, client, admin_headers, school):
    response = client.post('/api/students', headers=admin_headers, json={
        'name': 'Chidi Eze', 'email': 'chidi@example.com', 'gender': 'Male', 'dateOfBirth': '2012-03-15',
    })

    assert response.status_code == 201
    body = response.get_json()
    assert body['schoolId'] == school.id
    assert body['dateOfBirth'] == '2012-03-15'
    assert body['currentClass'] is None
    user = User.query.filter_by(email='chidi@example.com').one()
    assert user.role == ROLE_STUDENT
    assert verify_password(app.config['DEFAULT_STUDENT_PASSWORD'], user.password)


def test_create_student_enrols_in_current_session(client, admin_headers, school_class, current_session):
    response = client.post('/api/students', headers=admin_headers, json={
        'name': 'Ada Obi', 'email': 'ada@example.com', 'classId': school_class.id, 'rollNumber': '7',
    })

    assert response.status_code == 201
    enrolment = StudentClass.query.one()
    assert enrolment.session_id == current_session.id
    assert enrolment.class_id == school_class.id
    assert enrolment.roll_number == '7'
    assert response.get_json()['currentClass']['classId'] == school_class.id


def test_create_student_with_unknown_class_creates_nothing(client, admin_headers, current_session):
    response = client.post('/api/students', headers=admin_headers, json={
        'name': 'Nobody', 'email': 'nobody@example.com', 'classId': 9999,
    })

    assert response.status_code == 404
    assert Student.query.count() == 0
    assert User.query.filter_by(email='nobody@example.com').count() == 0


def test_create_student_rejects_duplicate_email(client, admin_headers, school_admin):
    response = client.post('/api/students', headers=admin_headers, json={
        'name': 'Copy', 'email': school_admin.email.upper(),
    })

    assert response.status_code == 400


def test_list_by_class_and_not_in_class(client, admin_headers, db, make_user, school, school_class,
                                        current_session):
    enrolled = make_user(ROLE_STUDENT, school, name='Bola').student_profile
    other = make_user(ROLE_STUDENT, school, name='Tunde').student_profile
    db.session.add(StudentClass(student_id=enrolled.id, class_id=school_class.id, session_id=current_session.id))
    db.session.commit()

    in_class = client.get(f'/api/students?classId={school_class.id}', headers=admin_headers).get_json()
    not_in_class = client.get(f'/api/students?notInClass={school_class.id}', headers=admin_headers).get_json()

    assert [s['id'] for s in in_class] == [enrolled.id]
    assert [s['id'] for s in not_in_class] == [other.id]
    assert set(not_in_class[0]) == {'id', 'name', 'email', 'admissionNumber'}


def test_get_student_detail(client, admin_headers, db, make_user, school, school_class, current_session):
    student = make_user(ROLE_STUDENT, school).student_profile
    parent = make_user(ROLE_PARENT, school)
    db.session.add(StudentClass(student_id=student.id, class_id=school_class.id, session_id=current_session.id))
    db.session.add(StudentParent(student_id=student.id, parent_id=parent.parent_profile.id, relation='Guardian'))
    db.session.commit()

    body = client.get(f'/api/students/{student.id}', headers=admin_headers).get_json()

    assert body['currentClass']['class']['name'] == school_class.name
    assert body['parents'][0]['id'] == parent.id
    assert body['parents'][0]['relation'] == 'Guardian'
    assert body['currentSession']['id'] == current_session.id


def test_student_of_other_school_is_forbidden(client, admin_headers, make_school, make_user):
    outsider = make_user(ROLE_STUDENT, make_school('Other School')).student_profile

    assert client.get(f'/api/students/{outsider.id}', headers=admin_headers).status_code == 403
    assert client.get('/api/students/9999', headers=admin_headers).status_code == 404


def test_update_moves_class_within_session(client, auth_headers, teacher, db, make_user, make_class, school,
                                           school_class, current_session):
    student = make_user(ROLE_STUDENT, school).student_profile
    db.session.add(StudentClass(student_id=student.id, class_id=school_class.id, session_id=current_session.id))
    db.session.commit()
    new_class = make_class(school, name='JSS 2')

    response = client.patch(f'/api/students/{student.id}', headers=auth_headers(teacher), json={
        'classId': new_class.id, 'phone': '0800',
    })

    assert response.status_code == 200
    assert StudentClass.query.count() == 1
    assert StudentClass.query.one().class_id == new_class.id
    assert response.get_json()['phone'] == '0800'


def test_delete_refuses_with_attendance(client, admin_headers, db, make_user, school, current_session):
    student = make_user(ROLE_STUDENT, school).student_profile
    db.session.add(Attendance(student_id=student.id, session_id=current_session.id, date=date(2024, 10, 1)))
    db.session.commit()

    response = client.delete(f'/api/students/{student.id}', headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['details'] == {'attendance': 1, 'results': 0}


def test_delete_student_removes_user_links_and_enrolments(client, admin_headers, db, make_user, school,
                                                          school_class, current_session):
    user = make_user(ROLE_STUDENT, school)
    student = user.student_profile
    parent = make_user(ROLE_PARENT, school)
    db.session.add(StudentClass(student_id=student.id, class_id=school_class.id, session_id=current_session.id))
    db.session.add(StudentParent(student_id=student.id, parent_id=parent.parent_profile.id))
    db.session.commit()
    user_id, student_id = user.id, student.id

    response = client.delete(f'/api/students/{student_id}', headers=admin_headers)

    assert response.status_code == 200
    db.session.expire_all()
    assert db.session.get(Student, student_id) is None
    assert db.session.get(User, user_id) is None
    assert StudentClass.query.count() == 0
    assert StudentParent.query.count() == 0


def test_classes_endpoint(client, admin_headers, school):
    created = client.post('/api/classes', headers=admin_headers, json={'name': 'SS 1', 'section': 'B',
                                                                       'level': 'senior_secondary'})
    listed = client.get('/api/classes', headers=admin_headers).get_json()

    assert created.status_code == 201
    assert created.get_json()['schoolId'] == school.id
    assert [(c['name'], c['section']) for c in listed] == [('SS 1', 'B')]
    assert listed[0]['_count'] == {'students': 0}
