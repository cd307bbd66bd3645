"""
Pytest configuration and fixtures for spreadsheet import/export tests.
"""

import pytest

from sheetport.config import Settings
from sheetport.excel.schema import parse_schema


USER_FIELDS = {
    "id": {"index": 0, "title": "ID", "width": 8},
    "name": {"index": 1, "title": "Name", "align": "center"},
    "status": {
        "index": 2,
        "title": "Status",
        "dictData": {0: "inactive", 1: "active"},
    },
    "created_at": {"index": 3, "title": "Created", "only_export": True},
}


@pytest.fixture
def user_fields():
    return {name: dict(meta) for name, meta in USER_FIELDS.items()}


@pytest.fixture
def user_schema(user_fields):
    return parse_schema(user_fields)


@pytest.fixture
def scratch_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def config(scratch_dir):
    """Settings pointing the scratch directory at a per-test folder."""
    settings = Settings()
    settings.SCRATCH_DIR = scratch_dir
    return settings


@pytest.fixture
def users():
    return [
        {"id": 1, "name": "Alice", "status": 1, "created_at": "2024-01-02"},
        {"id": 2, "name": "Bob", "status": 0, "created_at": "2024-02-03"},
    ]
