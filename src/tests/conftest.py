"""Shared test fixtures and configuration."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

import fednotes.api.middleware as middleware
from fednotes.api.app import create_app
from fednotes.core.fed_config import SCHEMA


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep host environment variables out of `.fed` resolution."""
    for spec in SCHEMA.values():
        if spec.env:
            monkeypatch.delenv(spec.env, raising=False)
    monkeypatch.setattr(middleware, "FEDNOTES_API_KEY", None)


@pytest.fixture
def notes_dir(tmp_path):
    """Notes root with a few notes and folders."""
    root = tmp_path / "notes"
    root.mkdir()
    (root / "welcome.md").write_text("# Welcome\n\nFirst note.\n")
    (root / "projects").mkdir()
    (root / "projects" / "plan.md").write_text("# Plan\n\n- ship it\n- TODO docs\n")
    (root / "projects" / "archive").mkdir()
    (root / "projects" / "archive" / "old.md").write_text("old stuff\n")
    return root


@pytest.fixture
def fed_file(notes_dir):
    """Write a `.fed` file into the notes root."""

    def write(content: str):
        path = notes_dir / ".fed"
        path.write_text(content)
        return path

    return write


@pytest.fixture
def app(notes_dir):
    return create_app(notes_path=notes_dir)


@pytest.fixture
def client(app):
    """API test client bound to the sample notes root."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_response():
    """Build a requests.Response stand-in."""

    def build(status_code=200, json_data=None, text="", content=b"", headers=None):
        response = MagicMock()
        response.status_code = status_code
        response.ok = status_code < 400
        response.reason = "OK" if status_code < 400 else "Error"
        response.text = text
        response.content = content
        response.headers = headers or {}
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response

    return build
