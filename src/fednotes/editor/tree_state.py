"""File tree UI state: expanded folders and the open file across renames."""

from collections.abc import Iterable


def _inside(path: str, folder: str) -> bool:
    return path == folder or path.startswith(folder + "/")


def remap_expanded_folders(
    expanded: Iterable[str], old_path: str, new_path: str
) -> set[str]:
    """
    Move expanded-folder entries along with a renamed folder.

    Only the folder itself and its descendants are remapped; siblings that
    merely share a name prefix (``project`` vs ``project-old``) are kept.
    """
    return {
        new_path + path[len(old_path) :] if _inside(path, old_path) else path
        for path in expanded
    }


def remap_current_file(
    current_file: str | None, old_path: str, new_path: str, kind: str = "folder"
) -> str | None:
    """Path of the open file after ``old_path`` was renamed to ``new_path``."""
    if current_file is None:
        return None
    if current_file == old_path:
        return new_path
    if kind == "folder" and current_file.startswith(old_path + "/"):
        return new_path + current_file[len(old_path) :]
    return current_file


def parent_folders(path: str) -> list[str]:
    """Every ancestor folder of ``path``, outermost first."""
    parts = path.split("/")[:-1]
    return ["/".join(parts[: i + 1]) for i in range(len(parts))]


class TreeState:
    """Expanded folders and current file of the file tree."""

    def __init__(self, expanded: Iterable[str] = (), current_file: str | None = None):
        self.expanded: set[str] = set(expanded)
        self.current_file = current_file

    def toggle(self, folder: str) -> bool:
        if folder in self.expanded:
            self.expanded.discard(folder)
            return False
        self.expanded.add(folder)
        return True

    def expand_parents(self, path: str) -> None:
        self.expanded.update(parent_folders(path))

    def open_file(self, path: str) -> None:
        self.current_file = path
        self.expand_parents(path)

    def renamed(self, old_path: str, new_path: str, kind: str = "file") -> None:
        if kind == "folder":
            self.expanded = remap_expanded_folders(self.expanded, old_path, new_path)
        self.current_file = remap_current_file(
            self.current_file, old_path, new_path, kind
        )

    def deleted(self, path: str) -> None:
        self.expanded = {p for p in self.expanded if not _inside(p, path)}
        if self.current_file and _inside(self.current_file, path):
            self.current_file = None
