"""FastAPI application for the fednotes API."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fednotes import __version__
from fednotes.api.middleware import api_key_middleware, request_logging_middleware
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
from fednotes.core.config import (
    FEDNOTES_CORS_ORIGINS,
    FEDNOTES_HOST,
    FEDNOTES_PORT,
    NOTES_PATH,
)
from fednotes.storage import (
    AlreadyExistsError,
    FolderNotEmptyError,
    InvalidPathError,
    NotesError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: 404,
    InvalidPathError: 400,
    AlreadyExistsError: 422,
    FolderNotEmptyError: 422,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    notes_path: Path = app.state.notes_path
    logger.info("fednotes API starting up, serving %s", notes_path)
    if not notes_path.is_dir():
        logger.warning("Notes directory %s does not exist yet", notes_path)
    yield
    logger.info("fednotes API shutting down...")


async def notes_error_handler(request: Request, exc: NotesError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)), 400
    )
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    # pydantic prefixes validator messages
    message = message.removeprefix("Value error, ")
    return JSONResponse(status_code=422, content={"error": message})


def create_app(notes_path: Path | str | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        notes_path: Notes root to serve; defaults to NOTES_PATH
    """
    app = FastAPI(
        title="fednotes API",
        description="JSON API for a file-backed markdown notes editor",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.notes_path = Path(notes_path or NOTES_PATH).expanduser().resolve()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=FEDNOTES_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(api_key_middleware)
    app.middleware("http")(request_logging_middleware)

    app.add_exception_handler(NotesError, notes_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(health.router, tags=["Health"])
    app.include_router(bootstrap.router, tags=["Bootstrap"])
    app.include_router(notes.router, tags=["Notes"])
    app.include_router(folders.router, tags=["Folders"])
    app.include_router(config.router, tags=["Config"])
    app.include_router(preview.router, tags=["Preview"])
    app.include_router(images.router, tags=["Images"])
    app.include_router(youtube.router, tags=["YouTube"])
    app.include_router(ai.router, tags=["AI"])
    app.include_router(logs.router, tags=["Logs"])

    return app


# Create the default app instance
app = create_app()


def run_server():
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "fednotes.api.app:app",
        host=FEDNOTES_HOST,
        port=FEDNOTES_PORT,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
