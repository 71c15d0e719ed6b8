"""Shared builders for tests: isolated settings, in-memory app, and a logged-in client."""

import os

from fastapi import FastAPI
from fastapi.testclient import TestClient

from tracky.application import create_app
from tracky.core.config import Settings

TEST_SECRET = "unit-test-cookie-secret"


def make_settings(tmpdir: str, **overrides: object) -> Settings:
    """Settings isolated from the developer's .env: in-memory DB, files under tmpdir."""
    values: dict[str, object] = {
        "DATABASE_URL": "sqlite://",
        "COOKIE_SECRET": TEST_SECRET,
        "UPLOAD_DIR": os.path.join(tmpdir, "uploads"),
        "STATIC_DIR": os.path.join(tmpdir, "static"),
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_app(tmpdir: str, **overrides: object) -> FastAPI:
    return create_app(make_settings(tmpdir, **overrides))


def signup_and_login(app: FastAPI, username: str, password: str = "secret1") -> TestClient:
    """Return a client holding the auth cookie for a freshly created user."""
    client = TestClient(app)
    resp = client.post("/api/v1/signup", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    resp = client.post("/api/v1/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return client


def default_notebook_id(client: TestClient) -> int:
    resp = client.get("/api/v1/notebooks")
    assert resp.status_code == 200, resp.text
    return resp.json()[0]["id"]
