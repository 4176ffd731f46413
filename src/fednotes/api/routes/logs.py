"""Diagnostics: server log tail and config overview."""

from typing import Any

from fastapi import APIRouter, Query

from fednotes.api.deps import FedConfigDep
from fednotes.core import config as app_config
from fednotes.core.fed_config import cast_value
from fednotes.core.logs import DEFAULT_TAIL_LINES, clamp_tail_lines, tail_file

router = APIRouter()


@router.get("/logs/tail")
def tail_logs(lines: str = Query(default=str(DEFAULT_TAIL_LINES))) -> dict[str, Any]:
    """
    Last lines of the server log for the current environment.

    ``lines`` outside 1..500 falls back to the default of 100.
    """
    count = clamp_tail_lines(cast_value(lines, "integer") or 0)
    log_file = app_config.get_log_file()
    if not log_file.is_file():
        return {"error": "Log file not found", "lines": []}

    return {
        "environment": app_config.FEDNOTES_ENV,
        "file": log_file.name,
        "lines": tail_file(log_file, count),
    }


@router.get("/logs/config")
def config_overview(config: FedConfigDep) -> dict[str, Any]:
    """Every `.fed` key with its effective value and source; secrets masked."""
    return {
        "config_file": str(config.config_file_path),
        "config_file_exists": config.config_file_path.is_file(),
        "ai_configured_in_file": config.ai_configured_in_file(),
        "environment": app_config.FEDNOTES_ENV,
        "entries": config.entries(),
    }
