import os

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key-with-enough-length-for-hs256')
os.environ.setdefault('APP_ENV', 'test')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from backend.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
from backend.main import app  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    def _register(name: str = 'Test Student', email: str = 'student@example.com', password: str = 'password123'):
        response = client.post(
            '/api/auth/register',
            json={'name': name, 'email': email, 'password': password},
        )
        assert response.status_code == 201, response.text
        return response.json()['data']

    return _register


@pytest.fixture
def auth_headers(register_user):
    def _headers(email: str = 'student@example.com', name: str = 'Test Student') -> dict:
        token = register_user(name=name, email=email)['token']
        return {'Authorization': f'Bearer {token}'}

    return _headers


@pytest.fixture
def create_course(client):
    def _create(headers: dict, course_name: str = 'Full Stack Development', course_code: str = 'PROG2500', **extra):
        response = client.post(
            '/api/courses',
            json={'course_name': course_name, 'course_code': course_code, **extra},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()['data']

    return _create


@pytest.fixture
def create_assignment(client):
    def _create(headers: dict, course_id: int, title: str = 'Sprint 1 - Backend API', due_date: str = '2026-02-15', **extra):
        response = client.post(
            '/api/assignments',
            json={'course_id': course_id, 'title': title, 'due_date': due_date, **extra},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()['data']

    return _create
