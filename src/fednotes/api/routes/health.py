"""Health check endpoints."""

import os
from typing import Any

from fastapi import APIRouter, Response

from fednotes.api.deps import NotesPath
from fednotes.core.fed_config import CONFIG_FILE

router = APIRouter()


@router.api_route("/up", methods=["GET", "HEAD"])
async def liveness_check() -> Response:
    """
    Liveness probe polled by the editor's connection monitor.

    Returns:
        Empty 200 response if the service is running
    """
    return Response(status_code=200, headers={"Cache-Control": "no-store"})


@router.get("/health")
async def health_check(notes_path: NotesPath) -> dict[str, Any]:
    """
    Check the notes root and its config file.

    Returns:
        dict with status and component health details
    """
    components = {
        "notes": _check_notes(notes_path),
        "config": (
            (True, "present")
            if (notes_path / CONFIG_FILE).is_file()
            else (False, f"{CONFIG_FILE} not created yet")
        ),
    }
    all_healthy = components["notes"][0]

    return {
        "status": "healthy" if all_healthy else "degraded",
        "components": {
            name: {"healthy": status[0], "message": status[1]}
            for name, status in components.items()
        },
    }


def _check_notes(notes_path) -> tuple[bool, str]:
    if not notes_path.is_dir():
        return False, f"{notes_path} does not exist"
    if not os.access(notes_path, os.W_OK):
        return False, f"{notes_path} is not writable"
    return True, str(notes_path)
