from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.main import _validate_env, create_app


def test_validate_env_requires_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(RuntimeError, match="No database URL configured"):
        _validate_env()


def test_validate_env_rejects_non_numeric_limits(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("CSV_IMPORT_MAX_ROWS", "lots")

    with pytest.raises(RuntimeError, match="CSV_IMPORT_MAX_ROWS"):
        _validate_env()


def test_app_exposes_health_and_import_routes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.delenv("CSV_IMPORT_MAX_ROWS", raising=False)

    application = create_app()
    paths = {route.path for route in application.routes}

    assert {"/health", "/schemas", "/imports/{schema_key}", "/exports/{schema_key}"} <= paths
    assert TestClient(application).get("/health").json() == {"status": "ok"}
