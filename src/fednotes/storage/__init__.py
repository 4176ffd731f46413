"""Filesystem storage for notes."""

from fednotes.storage.notes_repo import (
    AlreadyExistsError,
    FolderNotEmptyError,
    InvalidPathError,
    NotesError,
    NotesRepo,
    NotFoundError,
    normalize_note_path,
)

__all__ = [
    "AlreadyExistsError",
    "FolderNotEmptyError",
    "InvalidPathError",
    "NotesError",
    "NotesRepo",
    "NotFoundError",
    "normalize_note_path",
]
