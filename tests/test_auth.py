"""
Tests for the admin auth gate:
- POST /api/auth/login
- POST /api/auth/logout
- GET /api/auth/session
- startup seeding and the init-db command
"""

import datetime

import jwt
import pytest

from followup import create_app, db
from followup.config import TestConfig
from followup.models import AdminUser


class RateLimitedConfig(TestConfig):
    RATELIMIT_ENABLED = True
    LOGIN_RATE_LIMIT = "2 per minute"


@pytest.fixture
def limited_client():
    app = create_app(RateLimitedConfig)
    yield app.test_client()
    with app.app_context():
        db.session.remove()
        db.drop_all()


class TestLogin:

    def test_correct_credentials_log_in(self, client):
        response = client.post('/api/auth/login', json={"username": "admin", "password": "doctor12/"})
        assert response.status_code == 200
        data = response.get_json()
        assert data["logged_in"] is True
        assert data["token"]

        session = client.get('/api/auth/session', headers={"x-access-token": data["token"]}).get_json()
        assert session == {"logged_in": True, "username": "admin"}

    def test_wrong_password_rejected(self, client):
        response = client.post('/api/auth/login', json={"username": "admin", "password": "doctor12"})
        assert response.status_code == 401
        data = response.get_json()
        assert data["logged_in"] is False
        assert "token" not in data

    def test_unknown_user_gets_same_message(self, client):
        wrong_user = client.post('/api/auth/login', json={"username": "root", "password": "doctor12/"})
        wrong_pass = client.post('/api/auth/login', json={"username": "admin", "password": "x"})
        assert wrong_user.status_code == 401
        assert wrong_user.get_json()["message"] == wrong_pass.get_json()["message"]

    def test_missing_fields_rejected(self, client):
        response = client.post('/api/auth/login', json={"username": "admin"})
        assert response.status_code == 400

    def test_repeated_attempts_rate_limited(self, limited_client):
        wrong = {"username": "admin", "password": "wrong"}
        statuses = [limited_client.post('/api/auth/login', json=wrong).status_code for _ in range(3)]
        assert statuses[0] == 401
        assert statuses[-1] == 429

    def test_admin_route_reachable_after_login(self, client, auth_header):
        assert client.get('/api/dashboard/', headers=auth_header).status_code == 200


class TestSession:

    def test_no_token_means_logged_out(self, client):
        data = client.get('/api/auth/session').get_json()
        assert data == {"logged_in": False, "username": None}

    def test_garbage_token_means_logged_out(self, client):
        data = client.get('/api/auth/session', headers={"x-access-token": "garbage"}).get_json()
        assert data["logged_in"] is False

    def test_expired_token_rejected(self, app, client):
        token = jwt.encode({
            "id": 1,
            "jti": "expired",
            "exp": datetime.datetime.utcnow() - datetime.timedelta(minutes=1)
        }, app.config["SECRET_KEY"], algorithm="HS256")
        response = client.get('/api/patients/', headers={"x-access-token": token})
        assert response.status_code == 401


class TestLogout:

    def test_logout_revokes_token(self, client, auth_header):
        response = client.post('/api/auth/logout', headers=auth_header)
        assert response.status_code == 200
        assert response.get_json()["logged_in"] is False

        assert client.get('/api/patients/', headers=auth_header).status_code == 401
        assert client.get('/api/auth/session', headers=auth_header).get_json()["logged_in"] is False

    def test_logout_without_token(self, client):
        assert client.post('/api/auth/logout').status_code == 401

    def test_new_login_after_logout(self, client, auth_header):
        client.post('/api/auth/logout', headers=auth_header)
        response = client.post('/api/auth/login', json={"username": "admin", "password": "doctor12/"})
        new_header = {"x-access-token": response.get_json()["token"]}
        assert client.get('/api/patients/', headers=new_header).status_code == 200


class TestStartup:

    def test_create_app_seeds_default_admin(self, app):
        with app.app_context():
            assert AdminUser.query.filter_by(username="admin").count() == 1

    def test_init_db_command_is_repeatable(self, app):
        result = app.test_cli_runner().invoke(args=["init-db"])
        assert result.exit_code == 0, result.output
        with app.app_context():
            assert AdminUser.query.filter_by(username="admin").count() == 1

    def test_restx_config_keys_current(self, recwarn):
        app = create_app(TestConfig)
        assert app.config["RESTX_ERROR_404_HELP"] is False
        assert "ERROR_404_HELP" not in app.config
        assert not [w for w in recwarn if "ERROR_404_HELP" in str(w.message)]
