import json
from datetime import date

from app_models import (ROLE_PARENT, ROLE_SCHOOL_ADMIN, ROLE_STUDENT, ROLE_SUPER_ADMIN, ROLE_TEACHER, AdminProfile,
                        Attendance, Parent, ResultTemplate, Student, Subject, SubjectTeacher, User, UserActivityLog,
                        WithdrawalRequest)


def _new_user(role, **fields):
    return {'name': 'New Person', 'email': f'new.{role}@example.com', 'password': 'secret123', 'role': role,
            **fields}


def test_school_admin_creates_teacher_in_own_school(client, admin_headers, school):
    response = client.post('/api/users', headers=admin_headers, json=_new_user(ROLE_TEACHER))

    assert response.status_code == 201
    body = response.get_json()
    assert body['schoolId'] == school.id
    assert body['teacherSubjects'] == []


def test_school_admin_cannot_create_super_admin(client, admin_headers):
    response = client.post('/api/users', headers=admin_headers, json=_new_user(ROLE_SUPER_ADMIN))

    assert response.status_code == 403
    assert User.query.filter_by(role=ROLE_SUPER_ADMIN).count() == 0


def test_super_admin_must_name_a_school(client, auth_headers, super_admin):
    headers = auth_headers(super_admin)

    missing = client.post('/api/users', headers=headers, json=_new_user(ROLE_TEACHER))
    unknown = client.post('/api/users', headers=headers, json=_new_user(ROLE_TEACHER, schoolId=9999))

    assert missing.status_code == 400
    assert unknown.status_code == 404


def test_super_admin_creates_school_admin_with_profile(client, auth_headers, super_admin, school):
    response = client.post('/api/users', headers=auth_headers(super_admin), json=_new_user(
        ROLE_SCHOOL_ADMIN, schoolId=school.id, adminData={'adminType': 'principal', 'permissions': ['fees']}))

    assert response.status_code == 201
    assert response.get_json()['adminProfile'] == {
        'id': AdminProfile.query.one().id, 'adminType': 'principal', 'permissions': ['fees']}


def test_create_student_user_from_form_post(client, admin_headers):
    data = _new_user(ROLE_STUDENT, studentData=json.dumps({'admissionNumber': 'ADM/001', 'gender': 'Female'}))

    response = client.post('/api/users', headers=admin_headers, data=data)

    assert response.status_code == 201
    student = Student.query.one()
    assert student.admission_number == 'ADM/001'
    assert student.gender == 'Female'
    assert response.get_json()['student']['id'] == student.id


def test_create_parent_user(client, admin_headers):
    response = client.post('/api/users', headers=admin_headers,
                           json=_new_user(ROLE_PARENT, parentData={'occupation': 'Trader'}))

    assert response.status_code == 201
    assert Parent.query.one().occupation == 'Trader'


def test_create_user_validation(client, admin_headers, teacher):
    invalid_role = client.post('/api/users', headers=admin_headers, json=_new_user('janitor'))
    taken = client.post('/api/users', headers=admin_headers, json=_new_user(ROLE_TEACHER, email=teacher.email))

    assert invalid_role.status_code == 400
    assert invalid_role.get_json()['details']['role'] == ['Invalid role']
    assert taken.status_code == 400


def test_teacher_cannot_list_users(client, auth_headers, teacher):
    assert client.get('/api/users', headers=auth_headers(teacher)).status_code == 403


def test_list_users_is_school_scoped(client, admin_headers, make_school, make_user, school_admin, teacher):
    make_user(ROLE_TEACHER, make_school('Other School'))

    everyone = client.get('/api/users', headers=admin_headers).get_json()
    teachers = client.get('/api/users?role=TEACHER', headers=admin_headers).get_json()

    assert {u['id'] for u in everyone} == {school_admin.id, teacher.id}
    assert [u['id'] for u in teachers] == [teacher.id]


def test_get_user_self_or_admin(client, auth_headers, db, teacher, school_admin):
    subject = Subject(school_id=teacher.school_id, name='Chemistry')
    db.session.add(subject)
    db.session.flush()
    db.session.add(SubjectTeacher(subject_id=subject.id, teacher_id=teacher.id))
    db.session.commit()

    own = client.get(f'/api/users/{teacher.id}', headers=auth_headers(teacher))
    other = client.get(f'/api/users/{school_admin.id}', headers=auth_headers(teacher))

    assert own.status_code == 200
    assert own.get_json()['teacherSubjects'][0]['subject']['name'] == 'Chemistry'
    assert other.status_code == 403


def test_school_admin_cannot_edit_self(client, admin_headers, school_admin):
    response = client.put(f'/api/users/{school_admin.id}', headers=admin_headers, json={'name': 'Me'})

    assert response.status_code == 403


def test_only_super_admin_changes_role(client, admin_headers, auth_headers, db, super_admin, teacher):
    client.put(f'/api/users/{teacher.id}', headers=admin_headers, json={'role': ROLE_SCHOOL_ADMIN, 'name': 'T'})
    db.session.expire_all()
    assert db.session.get(User, teacher.id).role == ROLE_TEACHER
    assert db.session.get(User, teacher.id).name == 'T'

    response = client.put(f'/api/users/{teacher.id}', headers=auth_headers(super_admin),
                          json={'role': ROLE_SCHOOL_ADMIN, 'adminData': {'adminType': 'bursar'}})

    assert response.status_code == 200
    assert response.get_json()['role'] == ROLE_SCHOOL_ADMIN
    assert response.get_json()['adminProfile']['adminType'] == 'bursar'


def test_deactivate_user(client, admin_headers, db, teacher):
    response = client.put(f'/api/users/{teacher.id}', headers=admin_headers, json={'isActive': False})

    assert response.status_code == 200
    assert response.get_json()['isActive'] is False


def test_cannot_delete_self(client, admin_headers, school_admin):
    response = client.delete(f'/api/users/{school_admin.id}', headers=admin_headers)

    assert response.status_code == 400


def test_delete_user_of_other_school_is_forbidden(client, admin_headers, make_school, make_user):
    outsider = make_user(ROLE_TEACHER, make_school('Other School'))

    assert client.delete(f'/api/users/{outsider.id}', headers=admin_headers).status_code == 403


def test_delete_teacher_removes_subject_links(client, admin_headers, db, teacher):
    subject = Subject(school_id=teacher.school_id, name='Physics')
    db.session.add(subject)
    db.session.flush()
    db.session.add(SubjectTeacher(subject_id=subject.id, teacher_id=teacher.id))
    db.session.commit()
    teacher_id = teacher.id

    response = client.delete(f'/api/users/{teacher_id}', headers=admin_headers)

    assert response.status_code == 200
    db.session.expire_all()
    assert db.session.get(User, teacher_id) is None
    assert SubjectTeacher.query.count() == 0


def test_delete_student_user_with_attendance_is_refused(client, admin_headers, db, make_user, make_session,
                                                        school):
    user = make_user(ROLE_STUDENT, school)
    db.session.add(Attendance(student_id=user.student_profile.id, session_id=make_session(school).id,
                              date=date(2024, 10, 2)))
    db.session.commit()

    response = client.delete(f'/api/users/{user.id}', headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['details']['attendance'] == 1


def test_delete_admin_keeps_school_records(client, auth_headers, db, make_user, school):
    bursar = make_user(ROLE_SCHOOL_ADMIN, school, email='bursar@example.com')
    db.session.add_all([
        WithdrawalRequest(school_id=school.id, requested_by_id=bursar.id, amount=5000, bank_code='058',
                          account_number='0123456789', account_name='Greenfield Academy', reference='WD-1'),
        ResultTemplate(school_id=school.id, name='House style', content={'elements': []}, created_by_id=bursar.id),
        UserActivityLog(user_id=bursar.id, page='wallet', action='Requested withdrawal'),
    ])
    db.session.commit()
    bursar_id = bursar.id

    response = client.delete(f'/api/users/{bursar_id}', headers=auth_headers(make_user(ROLE_SUPER_ADMIN)))

    assert response.status_code == 200
    db.session.expire_all()
    assert db.session.get(User, bursar_id) is None
    assert WithdrawalRequest.query.one().requested_by_id is None
    assert ResultTemplate.query.one().created_by_id is None
    assert UserActivityLog.query.count() == 0
