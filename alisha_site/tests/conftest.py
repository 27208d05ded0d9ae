import uuid

import pytest

try:
    from alisha_site import create_app
    from alisha_site.models import AuthRateLimitBucket, db
except ModuleNotFoundError:  # pragma: no cover - fallback for direct alisha_site/ cwd test runs
    from __init__ import create_app
    from models import AuthRateLimitBucket, db

ADMIN_PASSWORD = "admin123"


def build_test_app(tmp_path, monkeypatch, overrides=None):
    db_path = tmp_path / f"site_test_{uuid.uuid4().hex[:8]}.db"
    upload_path = tmp_path / f"uploads_{uuid.uuid4().hex[:8]}"

    monkeypatch.setenv("ADMIN_PASSWORD", ADMIN_PASSWORD)

    config = {
        "TESTING": True,
        "SECRET_KEY": "test-secret-key",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "UPLOAD_FOLDER": str(upload_path),
        "ASSET_ORIGINS": ("http://localhost:3001",),
        "LOG_JSON": False,
    }
    if overrides:
        config.update(overrides)

    app = create_app(config)
    with app.app_context():
        AuthRateLimitBucket.query.delete()
        db.session.commit()
    return app


@pytest.fixture()
def app(tmp_path, monkeypatch):
    app = build_test_app(tmp_path, monkeypatch)
    yield app
    app.extensions["site_content_cache"].detach()


@pytest.fixture()
def client(app):
    return app.test_client()


def csrf_token(client):
    response = client.get("/admin/session")
    assert response.status_code == 200
    return response.get_json()["data"]["csrfToken"]


def admin_login(client, username="admin", password=ADMIN_PASSWORD):
    """Log in and return the fresh CSRF token issued for the new session."""
    token = csrf_token(client)
    response = client.post(
        "/admin/login",
        json={"username": username, "password": password},
        headers={"X-CSRF-Token": token},
    )
    assert response.status_code == 200, response.get_json()
    return response.get_json()["data"]["csrfToken"]
