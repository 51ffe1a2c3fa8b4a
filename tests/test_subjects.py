import pytest

from app_models import ROLE_SCHOOL_ADMIN, ROLE_STUDENT, ROLE_TEACHER, ClassSubject, Result, Subject, SubjectTeacher


@pytest.fixture
def subject(db, school):
    subject = Subject(school_id=school.id, name='Mathematics', code='MTH')
    db.session.add(subject)
    db.session.commit()
    return subject


def test_create_subject_with_classes_and_level(client, admin_headers, make_class, school):
    jss1 = make_class(school, name='JSS 1', level='junior_secondary')
    jss2 = make_class(school, name='JSS 2', level='junior_secondary')
    ss1 = make_class(school, name='SS 1', level='senior_secondary')

    response = client.post('/api/subjects', headers=admin_headers, json={
        'name': 'Basic Science', 'code': 'BSC', 'classIds': [ss1.id], 'level': 'junior_secondary',
    })

    assert response.status_code == 201
    body = response.get_json()
    assert sorted(c['id'] for c in body['classes']) == sorted([jss1.id, jss2.id, ss1.id])
    assert body['_count']['classes'] == 3


def test_subject_name_needs_two_characters(client, admin_headers):
    response = client.post('/api/subjects', headers=admin_headers, json={'name': 'M'})

    assert response.status_code == 400
    assert response.get_json()['details']['name'] == ['Subject name must be at least 2 characters']


def test_create_subject_rejects_foreign_class(client, admin_headers, make_school, make_class):
    foreign = make_class(make_school('Other School'))

    response = client.post('/api/subjects', headers=admin_headers, json={'name': 'Music', 'classIds': [foreign.id]})

    assert response.status_code == 404
    assert Subject.query.count() == 0


def test_list_subjects_by_class(client, admin_headers, db, make_class, school, subject):
    school_class = make_class(school)
    db.session.add(Subject(school_id=school.id, name='English'))
    db.session.add(ClassSubject(class_id=school_class.id, subject_id=subject.id))
    db.session.commit()

    everything = client.get('/api/subjects', headers=admin_headers).get_json()
    in_class = client.get(f'/api/subjects?classId={school_class.id}', headers=admin_headers).get_json()

    assert [s['name'] for s in everything] == ['English', 'Mathematics']
    assert [s['name'] for s in in_class] == ['Mathematics']


def test_update_subject(client, admin_headers, make_class, school, subject):
    first = make_class(school, name='JSS 1')
    second = make_class(school, name='JSS 2')

    client.put(f'/api/subjects/{subject.id}', headers=admin_headers, json={'classIds': [first.id]})
    response = client.put(f'/api/subjects/{subject.id}', headers=admin_headers, json={
        'name': 'Further Mathematics', 'classIds': [first.id, second.id],
    })

    assert response.status_code == 200
    body = response.get_json()
    assert body['name'] == 'Further Mathematics'
    assert body['code'] == 'MTH'
    assert sorted(c['id'] for c in body['classes']) == sorted([first.id, second.id])
    assert ClassSubject.query.count() == 2


def test_subject_of_other_school(client, admin_headers, db, make_school):
    foreign = Subject(school_id=make_school('Other School').id, name='French')
    db.session.add(foreign)
    db.session.commit()

    assert client.get(f'/api/subjects/{foreign.id}', headers=admin_headers).status_code == 403
    assert client.delete(f'/api/subjects/{foreign.id}', headers=admin_headers).status_code == 403
    assert client.get('/api/subjects/9999', headers=admin_headers).status_code == 404


def test_delete_subject(client, admin_headers, db, teacher, subject):
    db.session.add(SubjectTeacher(subject_id=subject.id, teacher_id=teacher.id))
    db.session.commit()

    response = client.delete(f'/api/subjects/{subject.id}', headers=admin_headers)

    assert response.status_code == 200
    assert Subject.query.count() == 0
    assert SubjectTeacher.query.count() == 0


def test_delete_subject_with_results_is_refused(client, admin_headers, db, make_user, make_session, school,
                                                subject):
    student = make_user(ROLE_STUDENT, school).student_profile
    academic_session = make_session(school)
    db.session.add(Result(student_id=student.id, subject_id=subject.id, session_id=academic_session.id, total=80))
    db.session.commit()

    response = client.delete(f'/api/subjects/{subject.id}', headers=admin_headers)

    assert response.status_code == 400
    assert response.get_json()['details'] == {'results': 1}


# Subject teachers

def test_assign_teacher(client, admin_headers, teacher, subject):
    response = client.post('/api/subject-teachers', headers=admin_headers,
                           json={'subjectId': subject.id, 'teacherId': teacher.id})

    assert response.status_code == 201
    body = response.get_json()
    assert body['subject']['name'] == 'Mathematics'
    assert body['teacher']['id'] == teacher.id


def test_assign_teacher_twice_is_rejected(client, admin_headers, teacher, subject):
    payload = {'subjectId': subject.id, 'teacherId': teacher.id}
    client.post('/api/subject-teachers', headers=admin_headers, json=payload)

    response = client.post('/api/subject-teachers', headers=admin_headers, json=payload)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Teacher is already assigned to this subject'


def test_assign_requires_teacher_role(client, admin_headers, school_admin, subject):
    response = client.post('/api/subject-teachers', headers=admin_headers,
                           json={'subjectId': subject.id, 'teacherId': school_admin.id})

    assert response.status_code == 404
    assert response.get_json()['error'] == 'Teacher not found'


def test_assign_requires_same_school(client, admin_headers, make_school, make_user, subject):
    outsider = make_user(ROLE_TEACHER, make_school('Other School'))

    response = client.post('/api/subject-teachers', headers=admin_headers,
                           json={'subjectId': subject.id, 'teacherId': outsider.id})

    assert response.status_code == 400


def test_assign_outside_own_school_is_forbidden(client, auth_headers, db, make_school, make_user):
    other = make_school('Other School')
    foreign_subject = Subject(school_id=other.id, name='Art')
    db.session.add(foreign_subject)
    db.session.commit()
    foreign_teacher = make_user(ROLE_TEACHER, other)
    stranger = make_user(ROLE_SCHOOL_ADMIN, make_school('Third School'))

    response = client.post('/api/subject-teachers', headers=auth_headers(stranger),
                           json={'subjectId': foreign_subject.id, 'teacherId': foreign_teacher.id})

    assert response.status_code == 403


def test_assign_missing_subject(client, admin_headers, teacher):
    response = client.post('/api/subject-teachers', headers=admin_headers,
                           json={'subjectId': 9999, 'teacherId': teacher.id})

    assert response.status_code == 404


def test_list_and_remove_subject_teachers(client, admin_headers, db, make_school, make_user, teacher, subject):
    other = make_school('Other School')
    foreign_subject = Subject(school_id=other.id, name='Art')
    db.session.add(foreign_subject)
    db.session.flush()
    db.session.add(SubjectTeacher(subject_id=foreign_subject.id, teacher_id=make_user(ROLE_TEACHER, other).id))
    mine = SubjectTeacher(subject_id=subject.id, teacher_id=teacher.id)
    db.session.add(mine)
    db.session.commit()

    listed = client.get('/api/subject-teachers', headers=admin_headers).get_json()
    filtered = client.get(f'/api/subject-teachers?teacherId={teacher.id}', headers=admin_headers).get_json()
    assert [st['id'] for st in listed] == [mine.id]
    assert [st['id'] for st in filtered] == [mine.id]

    assert client.delete(f'/api/subject-teachers/{mine.id}', headers=admin_headers).status_code == 200
    assert client.delete(f'/api/subject-teachers/{mine.id}', headers=admin_headers).status_code == 404
