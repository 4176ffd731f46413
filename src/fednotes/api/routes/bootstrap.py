"""Initial page data in a single request."""

import logging
from typing import Any

from fastapi import APIRouter, Query

from fednotes.api.deps import FedConfigDep, NotesRepoDep
from fednotes.storage import NotesError, normalize_note_path

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/bootstrap")
def bootstrap(
    repo: NotesRepoDep,
    config: FedConfigDep,
    file: str | None = Query(default=None, description="Note to open on load"),
) -> dict[str, Any]:
    """
    Tree, settings and optionally the note named in ``file``.

    A missing or unreadable initial note is reported in ``initial_note``
    instead of failing the whole request.
    """
    return {
        "tree": repo.list_tree(),
        "initial_note": _initial_note(repo, file),
        "config": {"settings": config.ui_settings(), "features": config.features()},
    }


def _initial_note(repo, file: str | None) -> dict[str, Any] | None:
    if not file or not file.strip():
        return None

    path = normalize_note_path(file)
    try:
        content = repo.read(path)
    except NotesError as e:
        logger.debug("Initial note %s not loaded: %s", path, e)
        return {"path": path, "content": None, "exists": False, "error": str(e)}
    return {"path": path, "content": content, "exists": True}
