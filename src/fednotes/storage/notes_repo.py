"""Notes repository - filesystem access for markdown notes and folders."""

import logging
import os
import re
import shutil
from pathlib import Path, PurePosixPath
from typing import Any, Iterator

logger = logging.getLogger(__name__)

# Dotfiles shown in the tree (root level only)
VISIBLE_DOTFILES = frozenset({".fed"})

NOTE_EXTENSION = ".md"


class NotesError(Exception):
    """Base error for notes storage."""


class NotFoundError(NotesError):
    """Note or folder does not exist."""


class InvalidPathError(NotesError):
    """Path escapes the notes root or is otherwise unusable."""


class AlreadyExistsError(NotesError):
    """Target of a create or rename already exists."""


class FolderNotEmptyError(NotesError):
    """Folder still has entries and cannot be deleted."""


def normalize_note_path(path: str | None) -> str:
    """Normalize a note path from a URL, adding `.md` when no extension is given."""
    cleaned = str(path or "").strip().strip("/")
    if not cleaned:
        return cleaned
    pure = PurePosixPath(cleaned)
    if pure.name in VISIBLE_DOTFILES:
        return cleaned
    if not pure.suffix:
        cleaned += NOTE_EXTENSION
    return cleaned


class NotesRepo:
    """Repository over a notes root directory."""

    def __init__(self, base_path: Path | str):
        """
        Initialize notes repository.

        Args:
            base_path: Notes root; created when missing
        """
        self.base_path = Path(base_path).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    # --- Notes ---

    def list_tree(self) -> list[dict[str, Any]]:
        return self._build_tree(self.base_path)

    def read(self, path: str) -> str:
        full_path = self.safe_path(path)
        if not full_path.is_file():
            raise NotFoundError(f"Note not found: {path}")
        return full_path.read_text(encoding="utf-8")

    def write(self, path: str, content: str) -> None:
        full_path = self.safe_path(path, must_exist=False)
        if full_path == self.base_path or full_path.is_dir():
            raise InvalidPathError(f"Not a file path: {path}")
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s (%d chars)", path, len(content))

    def delete(self, path: str) -> None:
        full_path = self.safe_path(path)
        if not full_path.is_file():
            raise NotFoundError(f"Note not found: {path}")
        full_path.unlink()
        logger.info("Deleted note %s", path)

    def rename(self, old_path: str, new_path: str) -> None:
        """Move a note or folder, creating the target's parent folders."""
        old_full = self.safe_path(old_path, must_exist=False)
        new_full = self.safe_path(new_path, must_exist=False)

        if not old_full.exists() or old_full == self.base_path:
            raise NotFoundError(f"Not found: {old_path}")
        if new_full == self.base_path:
            raise InvalidPathError(f"Invalid path: {new_path}")
        if new_full.exists():
            raise AlreadyExistsError(f"Already exists: {new_path}")
        if old_full.is_dir() and new_full.is_relative_to(old_full):
            raise InvalidPathError(f"Cannot move {old_path} into itself")

        new_full.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(old_full), str(new_full))
        logger.info("Renamed %s -> %s", old_path, new_path)

    # --- Folders ---

    def create_folder(self, path: str) -> None:
        full_path = self.safe_path(path, must_exist=False)
        if full_path == self.base_path:
            raise InvalidPathError(f"Invalid path: {path}")
        full_path.mkdir(parents=True, exist_ok=True)

    def delete_folder(self, path: str) -> None:
        full_path = self.safe_path(path, must_exist=False)
        if full_path == self.base_path or not full_path.is_dir():
            raise NotFoundError(f"Folder not found: {path}")
        if any(full_path.iterdir()):
            raise FolderNotEmptyError(f"Folder not empty: {path}")
        full_path.rmdir()
        logger.info("Deleted folder %s", path)

    def exists(self, path: str) -> bool:
        return self.safe_path(path, must_exist=False).exists()

    def is_file(self, path: str) -> bool:
        return self.safe_path(path, must_exist=False).is_file()

    def is_dir(self, path: str) -> bool:
        return self.safe_path(path, must_exist=False).is_dir()

    # --- Search ---

    def search_content(
        self, query: str, context_lines: int = 3, max_results: int = 50
    ) -> list[dict[str, Any]]:
        """
        Search note contents for a regex (or literal, if the regex is invalid).

        Args:
            query: Search pattern, matched case-insensitively
            context_lines: Lines of context around each match
            max_results: Maximum matches across all files

        Returns:
            List of matches with path, name, line number and context
        """
        if not query or not query.strip():
            return []

        try:
            regex = re.compile(query, re.IGNORECASE)
        except re.error:
            regex = re.compile(re.escape(query), re.IGNORECASE)

        results: list[dict[str, Any]] = []
        for file_path in self._iter_markdown_files(self.base_path):
            if len(results) >= max_results:
                break

            relative = file_path.relative_to(self.base_path).as_posix()
            for match in self._search_file(
                file_path, regex, context_lines, max_results - len(results)
            ):
                match["path"] = relative
                match["name"] = file_path.stem
                results.append(match)

        return results

    # --- Internals ---

    def safe_path(self, path: str, must_exist: bool = True) -> Path:
        """
        Resolve a user-supplied path inside the notes root.

        Raises:
            InvalidPathError: If the path escapes the root
            NotFoundError: If must_exist and nothing is there
        """
        raw = str(path or "").replace("\\", "/")
        if "\x00" in raw:
            raise InvalidPathError(f"Invalid path: {path}")

        parts = [p for p in raw.split("/") if p not in ("", ".", "..")]
        full_path = self.base_path.joinpath(*parts) if parts else self.base_path

        resolved = full_path.resolve()
        if resolved != self.base_path and not resolved.is_relative_to(self.base_path):
            raise InvalidPathError(f"Invalid path: {path}")

        if must_exist and not full_path.exists():
            raise NotFoundError(f"Path not found: {path}")

        return full_path

    def _iter_markdown_files(self, directory: Path) -> Iterator[Path]:
        # Unsorted walk; search does not need mtime ordering
        try:
            entries = list(os.scandir(directory))
        except OSError:
            return
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_dir(follow_symlinks=False):
                yield from self._iter_markdown_files(Path(entry.path))
            elif entry.name.endswith(NOTE_EXTENSION):
                yield Path(entry.path)

    def _search_file(
        self, file_path: Path, regex: re.Pattern, context_lines: int, max_matches: int
    ) -> list[dict[str, Any]]:
        try:
            lines = file_path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as e:
            logger.warning("Skipping unreadable file %s: %s", file_path, e)
            return []

        matches = []
        for index, line in enumerate(lines):
            if len(matches) >= max_matches:
                break
            if not regex.search(line):
                continue

            start = max(0, index - context_lines)
            end = min(len(lines) - 1, index + context_lines)
            matches.append(
                {
                    "line_number": index + 1,
                    "match_text": line,
                    "context": [
                        {
                            "line_number": i + 1,
                            "content": lines[i],
                            "is_match": i == index,
                        }
                        for i in range(start, end + 1)
                    ],
                }
            )
        return matches

    def _build_tree(self, directory: Path) -> list[dict[str, Any]]:
        try:
            children = list(directory.iterdir())
        except OSError as e:
            logger.warning("Cannot list %s: %s", directory, e)
            return []

        # Folders first, then most recently modified first
        children.sort(key=lambda p: (0 if p.is_dir() else 1, -_mtime(p), p.name))

        nodes = []
        for entry in children:
            name = entry.name
            relative = entry.relative_to(self.base_path).as_posix()

            if name.startswith("."):
                if directory == self.base_path and name in VISIBLE_DOTFILES:
                    nodes.append(
                        {
                            "name": name,
                            "path": relative,
                            "type": "file",
                            "file_type": "config",
                        }
                    )
            elif entry.is_dir():
                nodes.append(
                    {
                        "name": name,
                        "path": relative,
                        "type": "folder",
                        "children": self._build_tree(entry),
                    }
                )
            elif entry.suffix == NOTE_EXTENSION:
                nodes.append(
                    {
                        "name": entry.stem,
                        "path": relative,
                        "type": "file",
                        "file_type": "markdown",
                    }
                )
        return nodes


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError:
        return 0.0
