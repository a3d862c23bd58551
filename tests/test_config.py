from __future__ import annotations

from collections.abc import Iterator

import pytest

from app.config import CSVImportSettings, get_csv_import_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_csv_import_settings.cache_clear()
    yield
    get_csv_import_settings.cache_clear()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CSV_IMPORT_MAX_COLUMNS",
        "CSV_IMPORT_MAX_CELL_LENGTH",
        "CSV_IMPORT_MAX_ROWS",
        "CSV_IMPORT_PREVIEW_ROWS",
        "CSV_IMPORT_MAX_FILE_BYTES",
        "CSV_IMPORT_MAX_REPORTED_ERRORS",
        "CSV_IMPORT_LOG_VALIDATION_ERRORS",
    ):
        monkeypatch.delenv(name, raising=False)

    assert get_csv_import_settings() == CSVImportSettings()


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CSV_IMPORT_MAX_ROWS", "20")
    monkeypatch.setenv("CSV_IMPORT_LOG_VALIDATION_ERRORS", "off")

    settings = get_csv_import_settings()

    assert settings.max_rows == 20
    assert settings.log_validation_errors is False


def test_invalid_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CSV_IMPORT_MAX_COLUMNS", "many")
    monkeypatch.setenv("CSV_IMPORT_PREVIEW_ROWS", "0")

    settings = get_csv_import_settings()

    assert settings.max_columns == 50
    assert settings.preview_rows == 1
