"""Image library, upload and image search endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from fednotes.api.deps import FedConfigDep, ImagesServiceDep
from fednotes.core import web_search
from fednotes.core.fed_config import cast_value
from fednotes.core.images import ImageUploadError, content_type_for

logger = logging.getLogger(__name__)

router = APIRouter()


class UploadBase64Request(BaseModel):
    """Base64 image data, typically from AI image generation."""

    data: str = Field(..., description="Base64-encoded image bytes")
    mime_type: str = Field(default="image/png")
    filename: str | None = Field(default=None)


class S3UploadRequest(BaseModel):
    path: str = Field(default="", description="Image path inside the library")
    resize: bool = Field(default=False, description="Halve and recompress as JPEG")


class ExternalS3UploadRequest(BaseModel):
    url: str = Field(default="", description="Image URL to copy to S3")
    resize: bool = Field(default=False)


def _require_enabled(images) -> None:
    if not images.enabled:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Images not configured"
        )


def _require_s3(images) -> None:
    if not images.s3_enabled:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="S3 not configured"
        )


def _require_query(q: str) -> str:
    query = q.strip()
    if not query:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Query is required"
        )
    return query


@router.get("/images/config")
def images_config(images: ImagesServiceDep, config: FedConfigDep) -> dict[str, bool]:
    return {
        "enabled": images.enabled,
        "s3_enabled": images.s3_enabled,
        "web_search_enabled": True,
        "google_enabled": config.feature_available("google_search"),
        "pinterest_enabled": True,
    }


@router.get("/images")
def list_images(
    images: ImagesServiceDep, search: str | None = Query(default=None)
) -> list[dict[str, Any]]:
    _require_enabled(images)
    return images.list(search=search)


@router.get("/images/preview/{path:path}")
def preview_image(path: str, images: ImagesServiceDep) -> FileResponse:
    _require_enabled(images)
    full_path = images.find_image(path)
    if full_path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return FileResponse(
        full_path,
        media_type=content_type_for(full_path),
        content_disposition_type="inline",
    )


@router.post("/images/upload", status_code=status.HTTP_201_CREATED)
def upload_image(
    images: ImagesServiceDep, file: UploadFile = File(...)
) -> dict[str, str]:
    """Save an uploaded image into the notes root's images folder."""
    try:
        return images.upload_file(file.filename or "", file.file.read())
    except ImageUploadError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e


@router.post("/images/upload_base64", status_code=status.HTTP_201_CREATED)
def upload_base64(
    request: UploadBase64Request, images: ImagesServiceDep
) -> dict[str, str]:
    result = images.upload_base64_data(
        request.data, mime_type=request.mime_type, filename=request.filename
    )
    if "error" in result:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=result["error"]
        )
    return result


@router.post("/images/upload_to_s3")
def upload_to_s3(request: S3UploadRequest, images: ImagesServiceDep) -> dict[str, str]:
    _require_enabled(images)
    _require_s3(images)
    try:
        url = images.upload_to_s3(request.path, resize=request.resize)
    except Exception as e:
        logger.exception("S3 upload error")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{type(e).__name__}: {e}",
        ) from e

    if not url:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Failed to upload"
        )
    return {"url": url}


@router.post("/images/upload_external_to_s3")
def upload_external_to_s3(
    request: ExternalS3UploadRequest, images: ImagesServiceDep
) -> dict[str, str]:
    _require_s3(images)
    url = request.url.strip()
    if not url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required"
        )

    try:
        s3_url = images.download_and_upload_to_s3(url, resize=request.resize)
    except Exception as e:
        logger.exception("External S3 upload error")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{type(e).__name__}: {e}",
        ) from e

    if not s3_url:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Failed to upload"
        )
    return {"url": s3_url}


@router.get("/images/search_web")
def search_web(q: str = Query(default="")) -> dict[str, Any]:
    return web_search.search_duckduckgo_images(_require_query(q))


@router.get("/images/search_google")
def search_google(
    config: FedConfigDep,
    q: str = Query(default=""),
    start: str = Query(default="0"),
) -> dict[str, Any]:
    query = _require_query(q)
    if not config.feature_available("google_search"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google Custom Search not configured",
        )

    try:
        return web_search.search_google_images(
            query,
            config.get("google_api_key"),
            config.get("google_cse_id"),
            start=cast_value(start, "integer") or 0,
        )
    except Exception as e:
        logger.error("Google search error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Search failed"
        ) from e


@router.get("/images/search_pinterest")
def search_pinterest(q: str = Query(default="")) -> dict[str, Any]:
    # No public Pinterest API; DuckDuckGo restricted to the site instead
    return web_search.search_duckduckgo_images(
        _require_query(q), site=web_search.PINTEREST_SITE
    )
