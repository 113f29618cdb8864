import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from backend.models.course import Course
from backend.routes.course_routes import CreateCourseRequest, UpdateCourseRequest, update_course


def test_create_course_request_requires_name_and_code() -> None:
    with pytest.raises(ValidationError):
        CreateCourseRequest(course_name='Databases')

    with pytest.raises(ValidationError):
        CreateCourseRequest(course_name='  ', course_code='PROG1400')


def test_update_course_request_blank_semester_clears_value() -> None:
    request = UpdateCourseRequest(semester='   ')

    assert request.semester is None
    assert request.model_fields_set == {'semester'}


def test_update_course_rejects_empty_patch_before_lookup(db_session) -> None:
    with pytest.raises(HTTPException) as exception_info:
        update_course(course_id=999, data=UpdateCourseRequest(), user_id=1, db=db_session)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'No fields to update'


def test_create_course_returns_created_row(client, auth_headers) -> None:
    headers = auth_headers()

    response = client.post(
        '/api/courses',
        json={'course_name': 'Full Stack Development', 'course_code': 'PROG2500', 'semester': 'Winter 2026'},
        headers=headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body['message'] == 'Course created successfully'
    assert body['data']['course_name'] == 'Full Stack Development'
    assert body['data']['course_code'] == 'PROG2500'
    assert body['data']['semester'] == 'Winter 2026'
    assert body['data']['course_id'] > 0
    assert body['data']['created_at']


def test_create_course_semester_defaults_to_null(client, auth_headers, create_course) -> None:
    course = create_course(auth_headers())

    assert course['semester'] is None


def test_create_course_missing_code_returns_validation_error(client, auth_headers) -> None:
    response = client.post('/api/courses', json={'course_name': 'Databases'}, headers=auth_headers())

    assert response.status_code == 400
    assert response.json() == {'success': False, 'message': 'Please provide course_code'}


def test_created_course_is_visible_only_to_owner(client, auth_headers, create_course) -> None:
    owner = auth_headers(email='owner@example.com')
    other = auth_headers(email='other@example.com')
    course = create_course(owner)

    own_response = client.get(f"/api/courses/{course['course_id']}", headers=owner)
    other_response = client.get(f"/api/courses/{course['course_id']}", headers=other)

    assert own_response.status_code == 200
    assert own_response.json()['data'] == course
    assert other_response.status_code == 404
    assert other_response.json() == {'success': False, 'message': 'Course not found'}


def test_get_missing_course_returns_not_found(client, auth_headers) -> None:
    response = client.get('/api/courses/12345', headers=auth_headers())

    assert response.status_code == 404


def test_list_courses_returns_own_courses_newest_first(client, auth_headers, create_course) -> None:
    owner = auth_headers(email='owner@example.com')
    other = auth_headers(email='other@example.com')
    first = create_course(owner, course_name='Databases', course_code='PROG1400')
    second = create_course(owner, course_name='Web Programming', course_code='PROG1700')
    create_course(other, course_name='Mobile Development', course_code='PROG3000')

    response = client.get('/api/courses', headers=owner)

    assert response.status_code == 200
    body = response.json()
    assert body['count'] == 2
    assert [course['course_id'] for course in body['data']] == [second['course_id'], first['course_id']]


def test_list_courses_is_empty_for_new_user(client, auth_headers) -> None:
    response = client.get('/api/courses', headers=auth_headers())

    assert response.json() == {'success': True, 'count': 0, 'data': []}


def test_update_course_with_empty_body_returns_validation_error(client, auth_headers, create_course) -> None:
    headers = auth_headers()
    course = create_course(headers)

    response = client.put(f"/api/courses/{course['course_id']}", json={}, headers=headers)

    assert response.status_code == 400
    assert response.json() == {'success': False, 'message': 'No fields to update'}


def test_update_course_null_semester_clears_only_semester(client, auth_headers, create_course) -> None:
    headers = auth_headers()
    course = create_course(headers, semester='Winter 2026')

    response = client.put(f"/api/courses/{course['course_id']}", json={'semester': None}, headers=headers)

    assert response.status_code == 200
    updated = response.json()['data']
    assert updated['semester'] is None
    assert updated['course_name'] == course['course_name']
    assert updated['course_code'] == course['course_code']


def test_update_course_changes_only_supplied_fields(client, auth_headers, create_course) -> None:
    headers = auth_headers()
    course = create_course(headers, semester='Winter 2026')

    response = client.put(
        f"/api/courses/{course['course_id']}",
        json={'course_name': 'Advanced Full Stack'},
        headers=headers,
    )

    assert response.status_code == 200
    updated = response.json()['data']
    assert updated['course_name'] == 'Advanced Full Stack'
    assert updated['course_code'] == course['course_code']
    assert updated['semester'] == 'Winter 2026'


def test_update_course_rejects_null_name(client, auth_headers, create_course) -> None:
    headers = auth_headers()
    course = create_course(headers)

    response = client.put(f"/api/courses/{course['course_id']}", json={'course_name': None}, headers=headers)

    assert response.status_code == 400
    assert response.json()['message'] == 'course_name cannot be empty'


def test_update_course_of_other_user_returns_not_found(client, auth_headers, create_course) -> None:
    owner = auth_headers(email='owner@example.com')
    other = auth_headers(email='other@example.com')
    course = create_course(owner)

    response = client.put(f"/api/courses/{course['course_id']}", json={'course_name': 'Hijacked'}, headers=other)

    assert response.status_code == 404
    assert client.get(f"/api/courses/{course['course_id']}", headers=owner).json()['data']['course_name'] == (
        course['course_name']
    )


def test_delete_course_returns_former_row(client, auth_headers, create_course, db_session) -> None:
    headers = auth_headers()
    course = create_course(headers)

    response = client.delete(f"/api/courses/{course['course_id']}", headers=headers)

    assert response.status_code == 200
    assert response.json()['message'] == 'Course deleted successfully'
    assert response.json()['data'] == course
    assert db_session.query(Course).filter(Course.course_id == course['course_id']).first() is None
    assert client.get(f"/api/courses/{course['course_id']}", headers=headers).status_code == 404


def test_delete_course_of_other_user_returns_not_found(client, auth_headers, create_course) -> None:
    owner = auth_headers(email='owner@example.com')
    other = auth_headers(email='other@example.com')
    course = create_course(owner)

    response = client.delete(f"/api/courses/{course['course_id']}", headers=other)

    assert response.status_code == 404
    assert client.get(f"/api/courses/{course['course_id']}", headers=owner).status_code == 200


def test_delete_course_cascades_to_assignments(client, auth_headers, create_course, create_assignment) -> None:
    headers = auth_headers()
    course = create_course(headers)
    first = create_assignment(headers, course['course_id'])
    second = create_assignment(headers, course['course_id'], title='Sprint 2 - Frontend', due_date='2026-03-01')

    client.delete(f"/api/courses/{course['course_id']}", headers=headers)

    for assignment in (first, second):
        response = client.get(f"/api/assignments/{assignment['assignment_id']}", headers=headers)
        assert response.status_code == 404
    assert client.get('/api/assignments', headers=headers).json()['count'] == 0


@pytest.mark.parametrize(
    ('field', 'length'),
    [
        ('course_name', 201),
        ('course_code', 51),
        ('semester', 51),
    ],
)
def test_create_course_rejects_overlong_fields(client, auth_headers, field: str, length: int) -> None:
    payload = {'course_name': 'Databases', 'course_code': 'PROG1400', field: 'x' * length}

    response = client.post('/api/courses', json=payload, headers=auth_headers())

    assert response.status_code == 400
    assert response.json()['message'].startswith(f'{field}: ')


def test_update_course_rejects_overlong_code(client, auth_headers, create_course) -> None:
    headers = auth_headers()
    course = create_course(headers)

    response = client.put(f"/api/courses/{course['course_id']}", json={'course_code': 'x' * 51}, headers=headers)

    assert response.status_code == 400
    assert response.json()['message'].startswith('course_code: ')
