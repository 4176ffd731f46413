"""Local image library, uploads and S3 publishing."""

import base64
import binascii
import io
import logging
import re
import secrets
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Callable
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

from fednotes.core.config import HTTP_READ_TIMEOUT
from fednotes.core.fed_config import FedConfig

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp"})
MAX_RESULTS = 10

# Uploads land here, relative to the notes root
UPLOADS_DIR = "images"
S3_KEY_PREFIX = "webnotes"

DOWNLOAD_USER_AGENT = "Mozilla/5.0 (compatible; fednotes/1.0)"

_CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".bmp": "image/bmp",
}
_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/bmp": ".bmp",
}
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


class ImageUploadError(Exception):
    """Upload could not be completed."""


def content_type_for(path: Path | str) -> str:
    return _CONTENT_TYPES.get(Path(path).suffix.lower(), "application/octet-stream")


def extension_for_content_type(content_type: str | None) -> str:
    mime = str(content_type or "").split(";")[0].strip().lower()
    return _EXTENSIONS.get(mime, ".jpg")


def sanitize_filename(name: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("_", PurePosixPath(name or "").name)


def get_image_dimensions(path: Path) -> dict[str, int | None]:
    """Width and height of an image; both None when it cannot be read."""
    try:
        with Image.open(path) as img:
            width, height = img.size
    except (OSError, UnidentifiedImageError) as e:
        logger.debug("Could not get dimensions for %s: %s", path, e)
        return {"width": None, "height": None}
    return {"width": width, "height": height}


def resize_and_compress(data: bytes, original_name: str) -> tuple[bytes, str, str]:
    """
    Halve the image dimensions and re-encode as JPEG at quality 70.

    Returns:
        (content, content_type, filename); the input unchanged when Pillow
        cannot process it
    """
    output_name = f"{Path(original_name).stem}.jpg"
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            resized = img.convert("RGB").resize(
                (max(1, width // 2), max(1, height // 2))
            )
            buffer = io.BytesIO()
            resized.save(buffer, format="JPEG", quality=70, optimize=True)
    except (OSError, UnidentifiedImageError) as e:
        logger.error("Image resize failed for %s: %s", original_name, e)
        return data, content_type_for(original_name), original_name
    return buffer.getvalue(), "image/jpeg", output_name


class ImagesService:
    """Image operations for one notes root."""

    def __init__(
        self,
        config: FedConfig,
        notes_path: Path | str,
        s3_client_factory: Callable[[], Any] | None = None,
    ):
        self.config = config
        self.notes_path = Path(notes_path)
        self._s3_client_factory = s3_client_factory or self._default_s3_client

    @property
    def enabled(self) -> bool:
        return self.config.feature_available("local_images")

    @property
    def s3_enabled(self) -> bool:
        return self.config.feature_available("s3_upload")

    @property
    def images_path(self) -> Path | None:
        if not self.enabled:
            return None
        path = Path(self.config.get("images_path")).expanduser()
        if not path.is_absolute():
            path = self.notes_path / path
        return path.resolve()

    # --- Local library ---

    def list(self, search: str | None = None) -> list[dict[str, Any]]:
        """
        Most recently modified images, newest first.

        Args:
            search: Case-insensitive substring of the file name

        Returns:
            Up to MAX_RESULTS image descriptions
        """
        root = self.images_path
        if root is None or not root.is_dir():
            return []

        needle = (search or "").strip().lower()
        files = [
            f
            for f in root.rglob("*")
            if f.is_file()
            and f.suffix.lower() in SUPPORTED_EXTENSIONS
            and (not needle or needle in f.name.lower())
        ]
        files.sort(key=lambda f: f.stat().st_mtime, reverse=True)

        results = []
        for file in files[:MAX_RESULTS]:
            stat = file.stat()
            results.append(
                {
                    "name": file.name,
                    "path": file.relative_to(root).as_posix(),
                    "full_path": str(file),
                    "mtime": datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat(),
                    "size": stat.st_size,
                    **get_image_dimensions(file),
                }
            )
        return results

    def find_image(self, path: str | None) -> Path | None:
        """Resolve an image path inside the library, rejecting traversal."""
        root = self.images_path
        if root is None or not path:
            return None

        full_path = (root / path).resolve()
        if not full_path.is_relative_to(root):
            return None
        if not full_path.is_file():
            return None
        return full_path

    # --- Uploads into the notes root ---

    def upload_file(self, filename: str, data: bytes) -> dict[str, str]:
        """Store an uploaded file under ``images/`` in the notes root."""
        name = sanitize_filename(filename)
        if not name or name.strip("._") == "":
            raise ImageUploadError("Invalid file name")
        if Path(name).suffix.lower() not in SUPPORTED_EXTENSIONS:
            raise ImageUploadError(f"Unsupported image type: {Path(name).suffix}")
        return self._store(name, data)

    def upload_base64_data(
        self, data: str, mime_type: str = "image/png", filename: str | None = None
    ) -> dict[str, str]:
        """
        Store base64 image data (e.g. a generated image) under ``images/``.

        Returns:
            {"url": ...} relative to the notes root, or {"error": ...}
        """
        try:
            raw = base64.b64decode(data or "", validate=True)
        except (binascii.Error, ValueError) as e:
            return {"error": f"Invalid base64 data: {e}"}
        if not raw:
            return {"error": "Invalid base64 data: empty"}

        extension = extension_for_content_type(mime_type)
        if filename:
            name = sanitize_filename(filename)
            if not Path(name).suffix:
                name += extension
        else:
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            name = f"ai_generated_{stamp}{extension}"

        try:
            return self._store(name, raw)
        except OSError as e:
            logger.error("Failed to save image %s: %s", name, e)
            return {"error": f"Failed to save image: {e}"}

    # --- S3 ---

    def upload_to_s3(self, path: str, resize: bool = False) -> str | None:
        if not self.s3_enabled:
            return None
        full_path = self.find_image(path)
        if full_path is None:
            return None

        data = full_path.read_bytes()
        if resize:
            data, content_type, filename = resize_and_compress(data, full_path.name)
        else:
            content_type, filename = content_type_for(full_path), full_path.name
        return self._put_s3_object(filename, data, content_type)

    def download_and_upload_to_s3(self, url: str, resize: bool = False) -> str | None:
        if not self.s3_enabled:
            return None

        response = requests.get(
            url,
            headers={"User-Agent": DOWNLOAD_USER_AGENT},
            timeout=(10, HTTP_READ_TIMEOUT),
        )
        if not response.ok:
            logger.error("Failed to download image %s: %s", url, response.status_code)
            return None

        content_type = response.headers.get("Content-Type") or "image/jpeg"
        extension = extension_for_content_type(content_type)
        name = sanitize_filename(PurePosixPath(urlparse(url).path).name)
        if not name or name == "_" or not re.search(r"\.\w+$", name):
            name = f"{secrets.token_hex(8)}{extension}"

        data = response.content
        if resize:
            data, content_type, name = resize_and_compress(data, name)
        return self._put_s3_object(name, data, content_type)

    def s3_key(self, filename: str, now: datetime | None = None) -> str:
        now = now or datetime.now()
        return f"{S3_KEY_PREFIX}/{now.strftime('%Y/%m')}/{filename}"

    def s3_url(self, key: str) -> str:
        bucket = self.config.get("aws_s3_bucket")
        region = self.config.get("aws_region")
        return f"https://{bucket}.s3.{region}.amazonaws.com/{key}"

    def _put_s3_object(self, filename: str, data: bytes, content_type: str) -> str:
        from botocore.exceptions import ClientError

        key = self.s3_key(filename)
        client = self._s3_client_factory()
        try:
            client.put_object(
                Bucket=self.config.get("aws_s3_bucket"),
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except ClientError as e:
            # Buckets with ACLs disabled still store the object
            if e.response.get("Error", {}).get("Code") != "AccessControlListNotSupported":
                raise
        logger.info("Uploaded %s to S3", key)
        return self.s3_url(key)

    def _default_s3_client(self) -> Any:
        import boto3

        return boto3.client(
            "s3",
            aws_access_key_id=self.config.get("aws_access_key_id"),
            aws_secret_access_key=self.config.get("aws_secret_access_key"),
            region_name=self.config.get("aws_region"),
        )

    def _store(self, name: str, data: bytes) -> dict[str, str]:
        target_dir = self.notes_path / UPLOADS_DIR
        target_dir.mkdir(parents=True, exist_ok=True)

        target = target_dir / name
        if target.exists():
            stamp = datetime.now().strftime("%Y%m%d%H%M%S")
            target = target_dir / f"{target.stem}_{stamp}{target.suffix}"

        target.write_bytes(data)
        logger.info("Saved image %s", target.name)
        return {"url": f"{UPLOADS_DIR}/{target.name}", "filename": target.name}
