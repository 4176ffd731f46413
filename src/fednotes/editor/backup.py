"""Local shadow copies of unsaved notes and diff-based recovery."""

import difflib
import html
import json
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "fednotes:backup:"

_WORD_TOKENS = re.compile(r"\s+|\S+")


@dataclass(frozen=True)
class Backup:
    content: str
    timestamp: float


@dataclass(frozen=True)
class DiffSegment:
    type: str  # "equal", "delete" or "insert"
    value: str


class BackupStore:
    """
    Key-value client storage kept in a single JSON file.

    Backups are keyed by note path under ``STORAGE_PREFIX`` so the file can
    be shared with other client state.
    """

    def __init__(self, storage_file: Path | str):
        self.storage_file = Path(storage_file).expanduser()

    def save(self, path: str, content: str) -> None:
        data = self._read()
        data[STORAGE_PREFIX + path] = {"content": content, "timestamp": time.time()}
        self._write(data)

    def check(self, path: str, server_content: str) -> Backup | None:
        """
        Return the backup for ``path`` if it differs from the server copy.

        Backups identical to the server content, and unreadable entries, are
        removed.
        """
        entry = self._read().get(STORAGE_PREFIX + path)
        if entry is None:
            return None

        if (
            not isinstance(entry, dict)
            or not isinstance(entry.get("content"), str)
            or not isinstance(entry.get("timestamp"), (int, float))
        ):
            logger.warning("Discarding corrupt backup for %s", path)
            self.clear(path)
            return None

        if entry["content"] == server_content:
            self.clear(path)
            return None

        return Backup(entry["content"], float(entry["timestamp"]))

    def clear(self, path: str) -> None:
        data = self._read()
        if data.pop(STORAGE_PREFIX + path, None) is not None:
            self._write(data)

    def clear_all(self) -> None:
        data = self._read()
        kept = {k: v for k, v in data.items() if not k.startswith(STORAGE_PREFIX)}
        if len(kept) != len(data):
            self._write(kept)

    def _read(self) -> dict[str, Any]:
        if not self.storage_file.exists():
            return {}
        try:
            data = json.loads(self.storage_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Backup storage unreadable, starting fresh: %s", e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        try:
            self.storage_file.parent.mkdir(parents=True, exist_ok=True)
            self.storage_file.write_text(json.dumps(data), encoding="utf-8")
        except OSError as e:
            logger.warning("Backup storage write failed: %s", e)


def compute_word_diff(original: str, changed: str) -> list[DiffSegment]:
    """
    Word-level diff of two texts.

    Whitespace runs are kept as their own tokens so joining the ``equal`` and
    ``delete`` values gives back ``original``, and ``equal`` plus ``insert``
    gives back ``changed``.
    """
    a = _WORD_TOKENS.findall(original or "")
    b = _WORD_TOKENS.findall(changed or "")
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)

    segments: list[DiffSegment] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            _append(segments, "equal", "".join(a[i1:i2]))
            continue
        if tag in ("delete", "replace"):
            _append(segments, "delete", "".join(a[i1:i2]))
        if tag in ("insert", "replace"):
            _append(segments, "insert", "".join(b[j1:j2]))
    return segments


def render_original(diff: list[DiffSegment]) -> str:
    return _render(diff, {"equal": "ai-diff-equal", "delete": "ai-diff-del"})


def render_corrected(diff: list[DiffSegment]) -> str:
    return _render(diff, {"equal": "ai-diff-equal", "insert": "ai-diff-add"})


def _render(diff: list[DiffSegment], classes: dict[str, str]) -> str:
    return "".join(
        f'<span class="{classes[item.type]}">{html.escape(item.value)}</span>'
        for item in diff
        if item.type in classes
    )


def _append(segments: list[DiffSegment], kind: str, value: str) -> None:
    if not value:
        return
    if segments and segments[-1].type == kind:
        segments[-1] = DiffSegment(kind, segments[-1].value + value)
    else:
        segments.append(DiffSegment(kind, value))
