"""Editor session wiring the buffer, autosave, backups and connectivity."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fednotes.client import NotesClient, NotesClientError
from fednotes.editor.autosave import AutosaveCoordinator
from fednotes.editor.backup import Backup, BackupStore
from fednotes.editor.buffer import EditorBuffer
from fednotes.editor.connection import ConnectionMonitor
from fednotes.editor.scroll_sync import ScrollSynchronizer
from fednotes.editor.tree_state import TreeState

logger = logging.getLogger(__name__)


class EditorSession:
    """
    One open editor backed by a notes server.

    Edits to ``buffer`` flow into autosave and the preview; the connection
    monitor switches autosave between online and offline.
    """

    def __init__(
        self,
        client: NotesClient,
        backup_store: BackupStore | None = None,
        on_status: Callable[[str, bool], None] | None = None,
        on_recovery: Callable[[str, str, Backup], None] | None = None,
    ):
        self.client = client
        self.buffer = EditorBuffer()
        self.tree = TreeState()
        self.scroll = ScrollSynchronizer()
        self.on_recovery = on_recovery
        self.autosave = AutosaveCoordinator(
            self.buffer,
            self._save,
            backup_store=backup_store,
            on_status=on_status,
        )
        self.monitor = ConnectionMonitor(
            self._ping,
            on_offline=self._on_offline,
            on_online=self._on_online,
        )
        self.buffer.on_change(self._on_buffer_change)

    async def start(self) -> None:
        self.monitor.start()

    async def close(self) -> None:
        await self.monitor.close()
        if self.autosave.has_unsaved_changes and not self.autosave.is_offline:
            await self.autosave.save_now()
        await self.autosave.close()
        self.scroll.close()

    async def open(self, path: str) -> Backup | None:
        """
        Load a note into the buffer.

        Returns:
            A local backup that differs from the server copy, if any
        """
        if self.autosave.has_unsaved_changes:
            await self.autosave.save_now()

        content = await asyncio.to_thread(self.client.read_note, path)
        self.tree.open_file(path)
        self.buffer.set_value(content)
        self.buffer.move_cursor(0)
        self.autosave.set_file(path, content)
        self.scroll.render(content)

        backup = self.autosave.check_offline_backup(content)
        if backup and self.on_recovery:
            self.on_recovery(path, content, backup)
        return backup

    def restore_backup(self, backup: Backup) -> None:
        """Accept a recovered backup as the current content."""
        self.buffer.replace(backup.content)

    async def rename_current(self, new_path: str) -> dict[str, Any]:
        old_path = self.tree.current_file
        if not old_path:
            raise NotesClientError("No file open")
        if self.autosave.has_unsaved_changes:
            await self.autosave.save_now()
        result = await asyncio.to_thread(self.client.rename_note, old_path, new_path)
        self.tree.renamed(old_path, new_path)
        self.autosave.current_path = self.tree.current_file
        return result

    async def rename_folder(self, old_path: str, new_path: str) -> dict[str, Any]:
        result = await asyncio.to_thread(
            self.client.rename_folder, old_path, new_path, sorted(self.tree.expanded)
        )
        self.tree.renamed(old_path, new_path, kind="folder")
        self.autosave.current_path = self.tree.current_file
        return result

    def _on_buffer_change(self, content: str) -> None:
        self.autosave.on_change(content)
        info = self.buffer.cursor_info()
        self.scroll.update(content, info.line, self.buffer.total_lines)

    async def _save(self, path: str, content: str) -> None:
        await asyncio.to_thread(self.client.save_note, path, content)

    async def _ping(self) -> bool:
        return await asyncio.to_thread(self.client.ping)

    def _on_offline(self) -> None:
        self.buffer.enabled = False
        self.autosave.connection_lost()

    def _on_online(self) -> None:
        self.buffer.enabled = True
        self.autosave.connection_restored()
