"""FastAPI dependencies for the fednotes API.

Every request resolves its services from the notes root stored on
``app.state`` so edits to the `.fed` file are picked up without a restart.
"""

from pathlib import Path
from typing import Annotated

from fastapi import Depends, Request

from fednotes.core.ai import AIService
from fednotes.core.fed_config import FedConfig
from fednotes.core.images import ImagesService
from fednotes.core.preview import PreviewRenderer
from fednotes.storage import NotesRepo

_renderer = PreviewRenderer()


def get_notes_path(request: Request) -> Path:
    return request.app.state.notes_path


NotesPath = Annotated[Path, Depends(get_notes_path)]


def get_notes_repo(notes_path: NotesPath) -> NotesRepo:
    return NotesRepo(notes_path)


def get_fed_config(notes_path: NotesPath) -> FedConfig:
    """
    Load the `.fed` config of the notes root.

    Creates the template file on first use.
    """
    return FedConfig(notes_path)


NotesRepoDep = Annotated[NotesRepo, Depends(get_notes_repo)]
FedConfigDep = Annotated[FedConfig, Depends(get_fed_config)]


def get_images_service(config: FedConfigDep, notes_path: NotesPath) -> ImagesService:
    return ImagesService(config, notes_path)


def get_ai_service(config: FedConfigDep, notes_path: NotesPath) -> AIService:
    return AIService(config, notes_path)


def get_renderer() -> PreviewRenderer:
    return _renderer


ImagesServiceDep = Annotated[ImagesService, Depends(get_images_service)]
AIServiceDep = Annotated[AIService, Depends(get_ai_service)]
RendererDep = Annotated[PreviewRenderer, Depends(get_renderer)]
