"""
Pytest configuration and shared fixtures
"""
import os
import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

ADMIN_EMAIL = 'admin@kalkan.bartonapps.com'
ADMIN_PASSWORD = 'admin1234'
USER_PASSWORD = 'password123'


@pytest.fixture
def app_config():
    """Fixture providing test configuration"""
    from config import TestingConfig
    return TestingConfig


@pytest.fixture
def test_env_vars():
    """Fixture providing test environment variables"""
    original_env = os.environ.copy()

    # Set test environment variables
    os.environ['FLASK_ENV'] = 'testing'
    os.environ['SECRET_KEY'] = 'f3c1b7a9e2d84c6b9a0e5f7d1c3b2a4e6d8f0a1b3c5d7e9f'

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def app():
    """
    Application on a fresh in-memory SQLite database, seeded with the
    sections, default stages and the demo admin.
    """
    from app_init import create_app
    flask_app = create_app('testing')
    yield flask_app


@pytest.fixture
def client(app):
    """Anonymous test client"""
    return app.test_client()


def login(client, email, password):
    response = client.post('/api/auth/login', json={'email': email, 'password': password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()['user']


@pytest.fixture
def admin_client(app):
    """Test client logged in as the seeded admin"""
    test_client = app.test_client()
    test_client.user = login(test_client, ADMIN_EMAIL, ADMIN_PASSWORD)
    return test_client


@pytest.fixture
def make_user(app):
    """Factory creating a user with a known password"""
    from database.connection import get_db_session
    from services.users_repository import UsersRepository

    def _make_user(role='staff', name=None, email=None, **extra):
        name = name or f"{role.capitalize()} User"
        email = email or f"{role}.{name.split()[0].lower()}@example.com"
        with get_db_session() as session:
            return UsersRepository(session).create_user(
                dict(extra, name=name, email=email, role=role, password=USER_PASSWORD)
            )

    return _make_user


@pytest.fixture
def client_for(app):
    """Factory returning a test client logged in as the given user dict"""
    def _client_for(user):
        test_client = app.test_client()
        test_client.user = login(test_client, user['email'], USER_PASSWORD)
        return test_client

    return _client_for


@pytest.fixture
def make_item(admin_client):
    """Factory creating an item through the API as admin"""
    def _make_item(section_id='legal', title='Smith v. Jones', **fields):
        response = admin_client.post('/api/items', json=dict(fields, section_id=section_id, title=title))
        assert response.status_code == 201, response.get_json()
        return response.get_json()['item']

    return _make_item


@pytest.fixture
def make_task(admin_client):
    """Factory creating a task through the API as admin"""
    def _make_task(item_id, title='Draft motion', **fields):
        response = admin_client.post('/api/tasks', json=dict(fields, item_id=item_id, title=title))
        assert response.status_code == 201, response.get_json()
        return response.get_json()['task']

    return _make_task


@pytest.fixture
def make_stage(app):
    """Factory adding a stage; section stages sort after the defaults"""
    from database.connection import get_db_session
    from database.models import Stage

    def _make_stage(name, section_id=None, order=10):
        with get_db_session() as session:
            stage = Stage(name=name, section_id=section_id, order=order,
                          is_global=section_id is None)
            session.add(stage)
            session.flush()
            return stage.to_dict()

    return _make_stage
