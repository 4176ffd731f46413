"""Tests for local backups and word diffs."""

import json

import pytest

from fednotes.editor.backup import (
    STORAGE_PREFIX,
    Backup,
    BackupStore,
    DiffSegment,
    compute_word_diff,
    render_corrected,
    render_original,
)


@pytest.fixture
def store(tmp_path):
    return BackupStore(tmp_path / "client" / "storage.json")


class TestBackupStore:
    """Tests for backup persistence and recovery checks."""

    def test_save_and_check_differing(self, store):
        store.save("note.md", "local edits")

        backup = store.check("note.md", "server copy")

        assert isinstance(backup, Backup)
        assert backup.content == "local edits"
        assert backup.timestamp > 0

    def test_identical_backup_is_cleared(self, store):
        store.save("note.md", "same")

        assert store.check("note.md", "same") is None
        assert store.check("note.md", "other") is None

    def test_missing_backup(self, store):
        assert store.check("nothing.md", "x") is None

    def test_corrupt_entry_cleared(self, store):
        store.storage_file.parent.mkdir(parents=True)
        store.storage_file.write_text(
            json.dumps({STORAGE_PREFIX + "note.md": {"content": 5}})
        )

        assert store.check("note.md", "x") is None
        assert json.loads(store.storage_file.read_text()) == {}

    def test_unreadable_file_treated_as_empty(self, store):
        store.storage_file.parent.mkdir(parents=True)
        store.storage_file.write_text("{not json")

        assert store.check("note.md", "x") is None

        store.save("note.md", "fresh")
        assert store.check("note.md", "x").content == "fresh"

    def test_clear_all_keeps_foreign_keys(self, store):
        store.storage_file.parent.mkdir(parents=True)
        store.storage_file.write_text(json.dumps({"theme": "dark"}))
        store.save("a.md", "a")
        store.save("b.md", "b")

        store.clear_all()

        assert json.loads(store.storage_file.read_text()) == {"theme": "dark"}


class TestWordDiff:
    """Tests for word-level diffs."""

    def test_replacement(self):
        diff = compute_word_diff("the quick fox", "the slow fox")

        assert diff == [
            DiffSegment("equal", "the "),
            DiffSegment("delete", "quick"),
            DiffSegment("insert", "slow"),
            DiffSegment("equal", " fox"),
        ]

    def test_sides_reconstruct_inputs(self):
        original = "Their going too the store, its late."
        changed = "They're going to the store; it's late."

        diff = compute_word_diff(original, changed)

        assert "".join(s.value for s in diff if s.type != "insert") == original
        assert "".join(s.value for s in diff if s.type != "delete") == changed

    def test_identical(self):
        assert compute_word_diff("same text", "same text") == [
            DiffSegment("equal", "same text")
        ]

    def test_empty(self):
        assert compute_word_diff("", "") == []
        assert compute_word_diff("", "new") == [DiffSegment("insert", "new")]

    def test_render_escapes_html(self):
        diff = compute_word_diff("a <b>", "a <i>")

        assert render_original(diff) == (
            '<span class="ai-diff-equal">a </span>'
            '<span class="ai-diff-del">&lt;b&gt;</span>'
        )
        assert render_corrected(diff) == (
            '<span class="ai-diff-equal">a </span>'
            '<span class="ai-diff-add">&lt;i&gt;</span>'
        )
