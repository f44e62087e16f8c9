from __future__ import annotations

from fastapi.testclient import TestClient

from app.api import deps
from app.main import app


def _override_current_user():
    user = type("User", (), {"id": 1, "name": "tester", "is_active": True})()
    return deps.AuthenticatedUser(user=user, token_jti="dummy")


def run_smoke() -> None:
    app.dependency_overrides[deps.get_current_user] = _override_current_user
    with TestClient(app) as client:
        client.get("/health/ping").raise_for_status()
        resp = client.get("/")
        resp.raise_for_status()
        print("Smoke test completed.", resp.json().get("message"))


if __name__ == "__main__":
    run_smoke()
