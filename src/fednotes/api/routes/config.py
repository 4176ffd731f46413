"""Editor settings endpoints backed by the `.fed` file."""

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from fednotes.api.deps import FedConfigDep
from fednotes.core.fed_config import UI_KEYS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/config")
def get_config(config: FedConfigDep) -> dict[str, Any]:
    """
    Get UI settings and which optional features are configured.
    """
    return {"settings": config.ui_settings(), "features": config.features()}


@router.patch("/config")
def update_config(
    config: FedConfigDep,
    values: dict[str, Any] = Body(..., description="UI settings to change"),
) -> dict[str, Any]:
    """
    Update UI settings.

    Only UI keys can be changed here; credentials are edited in the `.fed`
    file itself. Values are cast to the key's schema type.
    """
    changes = {key: value for key, value in values.items() if key in UI_KEYS}
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No valid settings provided",
        )

    config.update(changes)
    logger.info("Updated settings: %s", ", ".join(sorted(changes)))
    return {"settings": config.ui_settings(), "message": "Settings saved"}
