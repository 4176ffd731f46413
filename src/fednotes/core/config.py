"""Process configuration for fednotes.

Per-notes-directory settings live in the `.fed` file (see
``fednotes.core.fed_config``); this module only covers what the server
process needs before a notes root is known.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


# Notes root (the directory holding markdown files and the .fed file)
NOTES_PATH = Path(
    get_env("NOTES_PATH", os.path.join(os.getcwd(), "notes"))
    or os.path.join(os.getcwd(), "notes")
).expanduser()

# Environment name, used for the log file name
FEDNOTES_ENV = get_env("FEDNOTES_ENV", "development") or "development"

# Logging
LOG_LEVEL = get_env("LOG_LEVEL", "INFO") or "INFO"
LOG_DIR = Path(
    get_env("FEDNOTES_LOG_DIR", os.path.join(os.getcwd(), "log"))
    or os.path.join(os.getcwd(), "log")
).expanduser()

# API Server settings
FEDNOTES_API_KEY = get_env("FEDNOTES_API_KEY")
FEDNOTES_HOST = get_env("FEDNOTES_HOST", "127.0.0.1")
FEDNOTES_PORT = get_env_int("FEDNOTES_PORT", 7591)
FEDNOTES_CORS_ORIGINS = [
    origin.strip()
    for origin in (
        get_env("FEDNOTES_CORS_ORIGINS", "http://localhost:7591")
        or "http://localhost:7591"
    ).split(",")
    if origin.strip()
]

# Outbound HTTP timeouts (seconds) for search and AI proxies
HTTP_CONNECT_TIMEOUT = 5
HTTP_READ_TIMEOUT = get_env_int("FEDNOTES_HTTP_TIMEOUT", 30)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_log_file() -> Path:
    """Path of the log file for the current environment."""
    return LOG_DIR / f"{FEDNOTES_ENV}.log"


def setup_logging() -> logging.Logger:
    """Configure and return logger.

    Logs go to stderr and to ``<LOG_DIR>/<env>.log`` so the log viewer
    endpoint has something to tail.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(get_log_file(), encoding="utf-8"))
    except OSError as e:
        # Read-only deployments still get stderr logging
        logging.getLogger(__name__).warning("Cannot open log file: %s", e)

    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        handlers=handlers,
    )
    return logging.getLogger(__name__)


def validate_notes_environment() -> tuple[bool, str]:
    """
    Validate that the notes root is usable.

    Returns:
        (is_valid, message) - If not valid, message explains what's wrong.
    """
    try:
        NOTES_PATH.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return False, f"Cannot create notes directory {NOTES_PATH}: {e}"

    if not os.access(NOTES_PATH, os.W_OK):
        return False, f"Notes directory {NOTES_PATH} is not writable"

    return True, ""
