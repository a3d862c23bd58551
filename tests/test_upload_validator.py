from __future__ import annotations

import pytest

from app.domain.errors import FileTooLargeError, UnsupportedFileTypeError
from app.validators.upload_validator import check_upload, is_csv_like


@pytest.mark.parametrize(
    ("filename", "content_type"),
    [
        ("tasks.csv", None),
        ("TASKS.CSV", "application/octet-stream"),
        ("export", "text/csv; charset=utf-8"),
        ("export", "application/vnd.ms-excel"),
        (None, "text/plain"),
    ],
)
def test_csv_like_uploads(filename: str | None, content_type: str | None) -> None:
    assert is_csv_like(filename, content_type)


@pytest.mark.parametrize(
    ("filename", "content_type"),
    [
        ("report.pdf", "application/pdf"),
        ("tasks.xlsx", None),
        (None, None),
    ],
)
def test_non_csv_uploads(filename: str | None, content_type: str | None) -> None:
    assert not is_csv_like(filename, content_type)


def test_check_upload_rejects_other_types() -> None:
    with pytest.raises(UnsupportedFileTypeError) as ctx:
        check_upload(filename="report.pdf", content_type="application/pdf", size=10, max_bytes=100)

    assert ctx.value.to_dict() == {
        "code": "unsupported_file_type",
        "message": "Only CSV files are allowed.",
    }


def test_check_upload_rejects_oversized_files() -> None:
    with pytest.raises(FileTooLargeError) as ctx:
        check_upload(filename="tasks.csv", content_type="text/csv", size=101, max_bytes=100)

    assert ctx.value.size == 101


def test_check_upload_accepts_file_at_limit() -> None:
    check_upload(filename="tasks.csv", content_type="text/csv", size=100, max_bytes=100)
