"""Folder endpoints."""

from fastapi import APIRouter, status

from fednotes.api.deps import NotesRepoDep
from fednotes.api.routes.notes import RenameRequest, RenameResponse
from fednotes.editor.tree_state import remap_expanded_folders
from fednotes.storage import AlreadyExistsError, InvalidPathError, NotFoundError

router = APIRouter()


def _clean(path: str) -> str:
    cleaned = path.strip().strip("/")
    if not cleaned:
        raise InvalidPathError("Path is required")
    return cleaned


@router.post("/folders/{path:path}/rename", response_model=RenameResponse)
def rename_folder(
    path: str, request: RenameRequest, repo: NotesRepoDep
) -> RenameResponse:
    """
    Rename a folder.

    The response carries the client's expanded-folder list remapped to the
    new location.
    """
    old_path = _clean(path)
    new_path = _clean(request.new_path)
    if not repo.is_dir(old_path):
        raise NotFoundError("Folder not found")

    repo.rename(old_path, new_path)
    expanded = sorted(remap_expanded_folders(request.expanded, old_path, new_path))
    return RenameResponse(
        old_path=old_path,
        new_path=new_path,
        message="Folder renamed",
        expanded=expanded,
    )


@router.post("/folders/{path:path}", status_code=status.HTTP_201_CREATED)
def create_folder(path: str, repo: NotesRepoDep) -> dict[str, str]:
    path = _clean(path)
    if repo.exists(path):
        raise AlreadyExistsError("Folder already exists")
    repo.create_folder(path)
    return {"path": path, "message": "Folder created"}


@router.delete("/folders/{path:path}")
def delete_folder(path: str, repo: NotesRepoDep) -> dict[str, str]:
    repo.delete_folder(_clean(path))
    return {"message": "Folder deleted"}
