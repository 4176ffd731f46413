"""Headless editor state: buffer, preview scroll sync, autosave and recovery."""

from fednotes.editor.autosave import AutosaveCoordinator
from fednotes.editor.backup import BackupStore, compute_word_diff
from fednotes.editor.buffer import EditorBuffer
from fednotes.editor.connection import ConnectionMonitor
from fednotes.editor.find import (
    find_all_matches,
    find_closest_match_index,
    replace_matches,
    validate_regex,
)
from fednotes.editor.scroll_sync import PreviewViewport, ScrollSynchronizer
from fednotes.editor.session import EditorSession
from fednotes.editor.table import (
    add_column,
    add_row,
    delete_column,
    delete_row,
    find_table_at_position,
    generate_markdown_table,
    parse_markdown_table,
    replace_table,
    swap_columns,
    swap_rows,
)
from fednotes.editor.tree_state import TreeState

__all__ = [
    "AutosaveCoordinator",
    "BackupStore",
    "ConnectionMonitor",
    "EditorBuffer",
    "EditorSession",
    "PreviewViewport",
    "ScrollSynchronizer",
    "TreeState",
    "add_column",
    "add_row",
    "compute_word_diff",
    "delete_column",
    "delete_row",
    "find_all_matches",
    "find_closest_match_index",
    "find_table_at_position",
    "generate_markdown_table",
    "parse_markdown_table",
    "replace_matches",
    "replace_table",
    "swap_columns",
    "swap_rows",
    "validate_regex",
]
