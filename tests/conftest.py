"""
Pytest configuration for all tests.
Sets up Python path to find the backend followup package.
"""

import os
import sys

import pytest

backend_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'backend'))
if backend_path not in sys.path:
    sys.path.insert(0, backend_path)

from followup import create_app, db  # noqa: E402
from followup.config import TestConfig  # noqa: E402


@pytest.fixture
def app():
    """Flask app on an in-memory SQLite database; create_app seeds the default admin."""
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def token(client):
    response = client.post('/api/auth/login', json={"username": "admin", "password": "doctor12/"})
    assert response.status_code == 200
    return response.get_json()["token"]


@pytest.fixture
def auth_header(token):
    return {"x-access-token": token}


@pytest.fixture
def create_patient(client, auth_header):
    """Factory: creates a patient through the API and returns its id."""
    def _create(**overrides):
        payload = {"first_name": "Jane", "last_name": "Doe", "code_number": "P100"}
        payload.update(overrides)
        response = client.post('/api/patients/', json=payload, headers=auth_header)
        assert response.status_code == 201, response.get_json()
        return response.get_json()["id"]
    return _create
