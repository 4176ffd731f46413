"""Note endpoints: tree, search and CRUD."""

import logging
from typing import Any

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field, field_validator

from fednotes.api.deps import NotesRepoDep
from fednotes.storage import AlreadyExistsError, NotFoundError, normalize_note_path

logger = logging.getLogger(__name__)

router = APIRouter()

SEARCH_CONTEXT_LINES = 3
SEARCH_MAX_RESULTS = 20


class CreateNoteRequest(BaseModel):
    """Request to create a note."""

    path: str = Field(..., description="Note path relative to the notes root")
    content: str = Field(default="", description="Initial content")

    @field_validator("path")
    @classmethod
    def validate_path(cls, value: str) -> str:
        if not value.strip().strip("/"):
            raise ValueError("Path is required")
        return value


class NoteContentRequest(BaseModel):
    """Request carrying note content."""

    content: str | None = Field(default=None, description="Full note content")


class RenameRequest(BaseModel):
    """Request to move a note or folder."""

    new_path: str = Field(..., description="Target path relative to the notes root")
    expanded: list[str] = Field(
        default_factory=list, description="Expanded folders in the file tree"
    )

    @field_validator("new_path")
    @classmethod
    def validate_new_path(cls, value: str) -> str:
        if not value.strip().strip("/"):
            raise ValueError("New path is required")
        return value


class NoteResponse(BaseModel):
    path: str
    content: str
    file_type: str


class NoteMessageResponse(BaseModel):
    path: str
    message: str


class RenameResponse(BaseModel):
    old_path: str
    new_path: str
    message: str
    expanded: list[str] | None = None


def file_type_for(path: str) -> str:
    if path == ".fed":
        return "config"
    if path.endswith(".md"):
        return "markdown"
    return "text"


@router.get("/notes/tree")
def get_tree(repo: NotesRepoDep) -> list[dict[str, Any]]:
    return repo.list_tree()


@router.get("/notes/search")
def search_notes(
    repo: NotesRepoDep, q: str = Query(default="", description="Search pattern")
) -> list[dict[str, Any]]:
    """
    Search note contents.

    The query is a case-insensitive regular expression; invalid patterns are
    searched literally.
    """
    return repo.search_content(
        q, context_lines=SEARCH_CONTEXT_LINES, max_results=SEARCH_MAX_RESULTS
    )


@router.post(
    "/notes", status_code=status.HTTP_201_CREATED, response_model=NoteMessageResponse
)
def create_note(request: CreateNoteRequest, repo: NotesRepoDep) -> NoteMessageResponse:
    return _create(repo, request.path, request.content)


@router.post("/notes/{path:path}/rename", response_model=RenameResponse)
def rename_note(path: str, request: RenameRequest, repo: NotesRepoDep) -> RenameResponse:
    old_path = normalize_note_path(path)
    if not repo.is_file(old_path):
        raise NotFoundError("Note not found")

    new_path = normalize_note_path(request.new_path)
    repo.rename(old_path, new_path)
    return RenameResponse(old_path=old_path, new_path=new_path, message="Note renamed")


@router.get("/notes/{path:path}", response_model=NoteResponse)
def show_note(path: str, repo: NotesRepoDep) -> NoteResponse:
    path = normalize_note_path(path)
    try:
        content = repo.read(path)
    except NotFoundError:
        raise NotFoundError("Note not found") from None
    return NoteResponse(path=path, content=content, file_type=file_type_for(path))


@router.post(
    "/notes/{path:path}",
    status_code=status.HTTP_201_CREATED,
    response_model=NoteMessageResponse,
)
def create_note_at(
    path: str, repo: NotesRepoDep, request: NoteContentRequest | None = None
) -> NoteMessageResponse:
    content = request.content if request and request.content is not None else ""
    return _create(repo, path, content)


@router.patch("/notes/{path:path}", response_model=NoteMessageResponse)
def update_note(
    path: str, request: NoteContentRequest, repo: NotesRepoDep
) -> NoteMessageResponse:
    """Write note content, creating the note when it does not exist yet."""
    path = normalize_note_path(path)
    repo.write(path, request.content or "")
    return NoteMessageResponse(path=path, message="Note saved")


@router.delete("/notes/{path:path}")
def delete_note(path: str, repo: NotesRepoDep) -> dict[str, str]:
    path = normalize_note_path(path)
    try:
        repo.delete(path)
    except NotFoundError:
        raise NotFoundError("Note not found") from None
    return {"message": "Note deleted"}


def _create(repo, path: str, content: str) -> NoteMessageResponse:
    path = normalize_note_path(path)
    if repo.exists(path):
        raise AlreadyExistsError("Note already exists")
    repo.write(path, content)
    logger.info("Created note %s", path)
    return NoteMessageResponse(path=path, message="Note created")
