"""API route modules."""

from fednotes.api.routes import (
    ai,
    bootstrap,
    config,
    folders,
    health,
    images,
    logs,
    notes,
    preview,
    youtube,
)

__all__ = [
    "ai",
    "bootstrap",
    "config",
    "folders",
    "health",
    "images",
    "logs",
    "notes",
    "preview",
    "youtube",
]
