from __future__ import annotations

import pytest

from db.config import PROJECT_ROOT, normalize_database_url, resolve_database_url

_URL_VARS = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL", "ENVIRONMENT")


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _URL_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgres://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgresql://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgresql+psycopg://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("sqlite://", "sqlite://"),
        ("sqlite:///:memory:", "sqlite:///:memory:"),
        ("sqlite:////var/data/app.db", "sqlite:////var/data/app.db"),
    ],
)
def test_normalize_database_url(url: str, expected: str) -> None:
    assert normalize_database_url(url) == expected


def test_relative_sqlite_path_is_anchored_at_project_root() -> None:
    normalized = normalize_database_url("sqlite:///data/app.db")

    assert normalized == f"sqlite:///{PROJECT_ROOT / 'data' / 'app.db'}"
    assert normalize_database_url(normalized) == normalized


def test_unsupported_scheme_is_rejected() -> None:
    with pytest.raises(RuntimeError, match="Allowed schemes: postgresql, sqlite"):
        normalize_database_url("mysql://u:p@db/app")


def test_database_url_wins(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DATABASE_URL", "postgres://u:p@primary/app")
    clean_env.setenv("LOCAL_DATABASE_URL", "sqlite://")

    assert resolve_database_url() == "postgresql+psycopg://u:p@primary/app"


def test_cloud_url_only_in_cloud_environments(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("CLOUD_DATABASE_URL", "postgresql://u:p@cloud/app")
    clean_env.setenv("LOCAL_DATABASE_URL", "sqlite://")

    assert resolve_database_url() == "sqlite://"

    clean_env.setenv("ENVIRONMENT", "production")
    assert resolve_database_url() == "postgresql+psycopg://u:p@cloud/app"
