"""Tests for the fednotes CLI."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from fednotes.interfaces.cli.app import app


@pytest.fixture
def runner():
    return CliRunner()


class TestTreeCommand:
    def test_prints_tree(self, runner, notes_dir):
        result = runner.invoke(app, ["tree", "--notes", str(notes_dir)])

        assert result.exit_code == 0
        assert "projects/" in result.output
        assert "welcome" in result.output
        assert "old" in result.output

    def test_empty(self, runner, tmp_path):
        result = runner.invoke(app, ["tree", "-n", str(tmp_path / "empty")])

        assert result.exit_code == 0
        assert "No notes yet." in result.output


class TestSearchCommand:
    def test_matches(self, runner, notes_dir):
        result = runner.invoke(app, ["search", "todo", "--notes", str(notes_dir)])

        assert result.exit_code == 0
        assert "projects/plan.md" in result.output
        assert "TODO docs" in result.output

    def test_no_matches(self, runner, notes_dir):
        result = runner.invoke(app, ["search", "zebra", "--notes", str(notes_dir)])

        assert result.exit_code == 1
        assert "No matches" in result.output


class TestConfigCommand:
    def test_masks_secrets(self, runner, notes_dir, fed_file):
        fed_file("youtube_api_key = yt-abcdefgh1234\n")

        result = runner.invoke(app, ["config", "--notes", str(notes_dir)])

        assert result.exit_code == 0
        assert "youtube_api_key" in result.output
        assert "abcdefgh" not in result.output
        assert "youtube_search" in result.output


class TestTailCommand:
    def test_missing_log(self, runner, tmp_path):
        with patch(
            "fednotes.core.config.get_log_file", return_value=tmp_path / "none.log"
        ):
            result = runner.invoke(app, ["tail"])

        assert result.exit_code == 1
        assert "Log file not found" in result.output

    def test_shows_last_lines(self, runner, tmp_path):
        log_file = tmp_path / "development.log"
        log_file.write_text("first\nsecond\nthird\n")

        with patch("fednotes.core.config.get_log_file", return_value=log_file):
            result = runner.invoke(app, ["tail", "--lines", "2"])

        assert result.exit_code == 0
        assert "third" in result.output
        assert "first" not in result.output
