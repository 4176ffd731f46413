"""HTTP client for the fednotes JSON API."""

import logging
from typing import Any
from urllib.parse import quote

import requests

from fednotes.core.config import HTTP_CONNECT_TIMEOUT, HTTP_READ_TIMEOUT

logger = logging.getLogger(__name__)

PING_TIMEOUT = 3


class NotesClientError(Exception):
    """Request to the notes server failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotesClient:
    """Thin synchronous wrapper around the notes API."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["X-API-Key"] = api_key

    def ping(self) -> bool:
        """True if the server answers the liveness check."""
        try:
            response = self.session.head(
                f"{self.base_url}/up",
                timeout=PING_TIMEOUT,
                headers={"Cache-Control": "no-store"},
            )
        except requests.RequestException as e:
            logger.debug("Ping failed: %s", e)
            return False
        return response.ok

    def tree(self) -> list[dict[str, Any]]:
        return self._request("GET", "/notes/tree")

    def read_note(self, path: str) -> str:
        return self._request("GET", f"/notes/{_quote(path)}")["content"]

    def save_note(self, path: str, content: str) -> dict[str, Any]:
        return self._request("PATCH", f"/notes/{_quote(path)}", json={"content": content})

    def create_note(self, path: str, content: str = "") -> dict[str, Any]:
        return self._request("POST", "/notes", json={"path": path, "content": content})

    def delete_note(self, path: str) -> dict[str, Any]:
        return self._request("DELETE", f"/notes/{_quote(path)}")

    def rename_note(self, path: str, new_path: str) -> dict[str, Any]:
        return self._request(
            "POST", f"/notes/{_quote(path)}/rename", json={"new_path": new_path}
        )

    def rename_folder(
        self, path: str, new_path: str, expanded: list[str] | None = None
    ) -> dict[str, Any]:
        return self._request(
            "POST",
            f"/folders/{_quote(path)}/rename",
            json={"new_path": new_path, "expanded": expanded or []},
        )

    def search(self, query: str) -> list[dict[str, Any]]:
        return self._request("GET", "/notes/search", params={"q": query})

    def config(self) -> dict[str, Any]:
        return self._request("GET", "/config")

    def update_config(self, **values: Any) -> dict[str, Any]:
        return self._request("PATCH", "/config", json=values)

    def preview(self, content: str) -> dict[str, Any]:
        return self._request("POST", "/preview", json={"content": content})

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                timeout=(HTTP_CONNECT_TIMEOUT, HTTP_READ_TIMEOUT),
                **kwargs,
            )
        except requests.RequestException as e:
            raise NotesClientError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = body.get("error") if isinstance(body, dict) else None
            raise NotesClientError(str(message or response.reason), response.status_code)

        if not response.content:
            return {}
        return response.json()


def _quote(path: str) -> str:
    return quote(path.strip("/"), safe="/")
