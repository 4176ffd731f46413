"""Debounced, conflict-aware autosave for the open note."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from fednotes.editor.backup import Backup, BackupStore
from fednotes.editor.buffer import EditorBuffer

logger = logging.getLogger(__name__)

SAVE_DELAY = 2.0
MAX_SAVE_INTERVAL = 30.0
BACKUP_DELAY = 1.0

# A save is held back when it would drop more than this share of the last
# saved content and more than this many characters
CONTENT_LOSS_RATIO = 0.2
CONTENT_LOSS_MIN_CHARS = 50

SaveFunc = Callable[[str, str], Awaitable[None]]
StatusCallback = Callable[[str, bool], None]


def is_suspicious_loss(previous: str | None, current: str) -> bool:
    """True if going from ``previous`` to ``current`` looks like lost content."""
    if not previous:
        return False
    lost = len(previous) - len(current)
    return lost > CONTENT_LOSS_MIN_CHARS and lost / len(previous) > CONTENT_LOSS_RATIO


class AutosaveCoordinator:
    """
    Persists the editor buffer after edits settle.

    Edits restart a debounce timer; a second timer caps how long a stream of
    edits can postpone saving. Only one save runs at a time, and a save that
    finishes after newer edits schedules another one.
    """

    def __init__(
        self,
        buffer: EditorBuffer,
        save: SaveFunc,
        backup_store: BackupStore | None = None,
        on_status: StatusCallback | None = None,
        on_warning: Callable[[bool], None] | None = None,
        save_delay: float = SAVE_DELAY,
        max_interval: float = MAX_SAVE_INTERVAL,
        backup_delay: float = BACKUP_DELAY,
    ):
        """
        Initialize the coordinator.

        Args:
            buffer: Editor content to persist
            save: Coroutine ``save(path, content)``; raises on failure
            backup_store: Optional local store for offline shadow copies
            on_status: Called with (message, is_error) for the status line
            on_warning: Called with True/False as the content-loss warning
                is shown or dismissed
            save_delay: Debounce delay in seconds
            max_interval: Longest a pending change may wait, in seconds
            backup_delay: Debounce delay for local backups, in seconds
        """
        self.buffer = buffer
        self._save = save
        self.backup_store = backup_store
        self.on_status = on_status
        self.on_warning = on_warning
        self.save_delay = save_delay
        self.max_interval = max_interval
        self.backup_delay = backup_delay

        self.current_path: str | None = None
        self.last_saved_content: str | None = None
        self.has_unsaved_changes = False
        self.is_saving = False
        self.is_offline = False
        self.content_loss_warning_active = False
        self.content_loss_override = False

        self.save_timer: asyncio.TimerHandle | None = None
        self.max_interval_timer: asyncio.TimerHandle | None = None
        self.backup_timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()

    def set_file(self, path: str | None, content: str | None) -> None:
        """Start tracking a freshly loaded note."""
        self.cancel_timers()
        self.current_path = path
        self.last_saved_content = content
        self.has_unsaved_changes = False
        self.content_loss_override = False
        if self.content_loss_warning_active:
            self.dismiss_warning()

    def check_offline_backup(self, server_content: str) -> Backup | None:
        if not self.backup_store or not self.current_path:
            return None
        return self.backup_store.check(self.current_path, server_content)

    # --- Scheduling ---

    def schedule(self) -> None:
        self.has_unsaved_changes = True
        if self.is_offline or self.content_loss_warning_active:
            return

        self._status("Unsaved changes")
        if self.save_timer:
            self.save_timer.cancel()
        loop = asyncio.get_running_loop()
        self.save_timer = loop.call_later(self.save_delay, self._on_save_timer)
        if self.max_interval_timer is None:
            self.max_interval_timer = loop.call_later(
                self.max_interval, self._on_save_timer
            )

    def schedule_backup(self) -> None:
        if not self.backup_store or not self.current_path:
            return
        if self.backup_timer:
            self.backup_timer.cancel()
        self.backup_timer = asyncio.get_running_loop().call_later(
            self.backup_delay, self._write_backup
        )

    def on_change(self, content: str | None = None) -> None:
        """Handle an edit: clear a stale warning, back up, then schedule."""
        if content is None:
            content = self.buffer.content
        if self.content_loss_warning_active and not is_suspicious_loss(
            self.last_saved_content, content
        ):
            self.dismiss_warning()
        self.schedule_backup()
        self.schedule()

    def cancel_timers(self) -> None:
        for timer in (self.save_timer, self.max_interval_timer, self.backup_timer):
            if timer:
                timer.cancel()
        self.save_timer = self.max_interval_timer = self.backup_timer = None

    # --- Saving ---

    async def save_now(self) -> bool:
        """
        Save the buffer immediately.

        Returns:
            True if the content was written
        """
        if not self.current_path:
            return False

        content = self.buffer.content
        if self.is_offline:
            if content != self.last_saved_content:
                self.has_unsaved_changes = True
            return False
        if self.is_saving:
            return False

        if not self.content_loss_override and is_suspicious_loss(
            self.last_saved_content, content
        ):
            logger.warning(
                "Holding back save of %s: %d of %d characters removed",
                self.current_path,
                len(self.last_saved_content or "") - len(content),
                len(self.last_saved_content or ""),
            )
            self.show_warning()
            return False

        self._clear_save_timers()
        self.is_saving = True
        path = self.current_path
        try:
            await self._save(path, content)
        except Exception as e:
            logger.error("Save of %s failed: %s", path, e)
            self.has_unsaved_changes = True
            self._status("Error saving", True)
            return False
        finally:
            self.is_saving = False

        if path != self.current_path:
            # Another note was loaded while the request ran
            if self.backup_store:
                self.backup_store.clear(path)
            return True

        self.last_saved_content = content
        self.content_loss_override = False
        # Edits made while the request was in flight keep their backup
        changed = self.buffer.content != content
        self.has_unsaved_changes = changed
        if self.backup_store and not changed:
            self.backup_store.clear(path)
        self._status("Saved")

        if changed:
            self.schedule()
        return True

    # --- Content loss warning ---

    def show_warning(self) -> None:
        self.content_loss_warning_active = True
        self._clear_save_timers()
        if self.on_warning:
            self.on_warning(True)

    def dismiss_warning(self) -> None:
        self.content_loss_warning_active = False
        self.content_loss_override = False
        if self.on_warning:
            self.on_warning(False)

    async def save_anyway(self) -> bool:
        self.dismiss_warning()
        self.content_loss_override = True
        return await self.save_now()

    # --- Connectivity ---

    def connection_lost(self) -> None:
        self.is_offline = True
        self.cancel_timers()
        self._status("Offline - changes kept locally", True)

    def connection_restored(self) -> asyncio.Task | None:
        """Leave offline mode; returns the save task when changes are pending."""
        self.is_offline = False
        if not self.has_unsaved_changes:
            return None
        return self._spawn(self.save_now())

    async def close(self) -> None:
        self.cancel_timers()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # --- Internals ---

    def _on_save_timer(self) -> None:
        self._clear_save_timers()
        self._spawn(self.save_now())

    def _clear_save_timers(self) -> None:
        for timer in (self.save_timer, self.max_interval_timer):
            if timer:
                timer.cancel()
        self.save_timer = self.max_interval_timer = None

    def _write_backup(self) -> None:
        self.backup_timer = None
        if self.backup_store and self.current_path and self.has_unsaved_changes:
            self.backup_store.save(self.current_path, self.buffer.content)

    def _spawn(self, coro: Awaitable[bool]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _status(self, message: str, is_error: bool = False) -> None:
        if self.on_status:
            self.on_status(message, is_error)
