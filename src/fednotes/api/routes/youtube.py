"""YouTube search proxy."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from fednotes.api.deps import FedConfigDep
from fednotes.core.web_search import search_youtube

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/youtube/config")
def youtube_config(config: FedConfigDep) -> dict[str, bool]:
    return {"enabled": config.feature_available("youtube_search")}


@router.get("/youtube/search")
def youtube_search(config: FedConfigDep, q: str = Query(default="")) -> dict[str, Any]:
    """
    Search videos for embedding into a note.

    Returns:
        {"videos": [...]}; upstream failures give an empty list with "error"
    """
    query = q.strip()
    if not query:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Query is required"
        )

    api_key = config.get("youtube_api_key")
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="YouTube API key not configured",
        )

    try:
        return search_youtube(query, api_key)
    except Exception as e:
        logger.error("YouTube search error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Search failed"
        ) from e
