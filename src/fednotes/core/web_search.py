"""Search proxies: YouTube, Google Custom Search images and DuckDuckGo images."""

import logging
import re
from typing import Any

import requests

from fednotes.core.config import HTTP_CONNECT_TIMEOUT

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
DUCKDUCKGO_URL = "https://duckduckgo.com/"
DUCKDUCKGO_IMAGES_URL = "https://duckduckgo.com/i.js"

YOUTUBE_MAX_RESULTS = 6
GOOGLE_PAGE_SIZE = 10
DUCKDUCKGO_MAX_RESULTS = 20
PINTEREST_SITE = "pinterest.com"

SEARCH_TIMEOUT = (HTTP_CONNECT_TIMEOUT, 10)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_VQD_PATTERNS = (
    re.compile(r"""vqd=["']?([\d-]+)["']?"""),
    re.compile(r"vqd=([\d-]+)"),
    re.compile(r'"vqd":"([\d-]+)"'),
)


def search_youtube(
    query: str, api_key: str, session: requests.Session | None = None
) -> dict[str, Any]:
    """
    Search YouTube videos.

    Returns:
        {"videos": [{id, title, channel, thumbnail}]}, plus "error" when the
        API call fails
    """
    http = session or requests
    response = http.get(
        YOUTUBE_SEARCH_URL,
        params={
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": YOUTUBE_MAX_RESULTS,
            "key": api_key,
        },
        timeout=SEARCH_TIMEOUT,
    )
    if not response.ok:
        logger.error("YouTube API error: %s - %s", response.status_code, response.text)
        return {"error": "YouTube API error", "videos": []}

    videos = []
    for item in response.json().get("items") or []:
        snippet = item.get("snippet") or {}
        thumbnails = snippet.get("thumbnails") or {}
        thumbnail = (thumbnails.get("medium") or {}).get("url") or (
            thumbnails.get("default") or {}
        ).get("url")
        videos.append(
            {
                "id": (item.get("id") or {}).get("videoId"),
                "title": snippet.get("title"),
                "channel": snippet.get("channelTitle"),
                "thumbnail": thumbnail,
            }
        )
    return {"videos": videos}


def search_google_images(
    query: str,
    api_key: str,
    cse_id: str,
    start: int = 0,
    session: requests.Session | None = None,
) -> dict[str, Any]:
    """
    Search images through Google Custom Search.

    Args:
        start: 1-based result offset; values below 1 start at the first page

    Returns:
        {"images": [...], "total": int, "next_start": int}
    """
    http = session or requests
    response = http.get(
        GOOGLE_SEARCH_URL,
        params={
            "key": api_key,
            "cx": cse_id,
            "q": query,
            "searchType": "image",
            "num": GOOGLE_PAGE_SIZE,
            "start": max(start, 1),
            "safe": "active",
        },
        timeout=SEARCH_TIMEOUT,
    )
    if not response.ok:
        logger.error("Google API error: %s - %s", response.status_code, response.text)
        return {"error": "Google API error", "images": []}

    data = response.json()
    images = []
    for item in data.get("items") or []:
        image = item.get("image") or {}
        images.append(
            {
                "url": item.get("link"),
                "thumbnail": image.get("thumbnailLink") or item.get("link"),
                "title": item.get("title"),
                "source": item.get("displayLink"),
                "width": image.get("width"),
                "height": image.get("height"),
            }
        )

    total = (data.get("searchInformation") or {}).get("totalResults")
    return {
        "images": images,
        "total": _to_int(total),
        "next_start": start + GOOGLE_PAGE_SIZE,
    }


def search_duckduckgo_images(
    query: str, site: str | None = None, session: requests.Session | None = None
) -> dict[str, Any]:
    """
    Image search through DuckDuckGo's unofficial JSON endpoint.

    Never raises: failures return an empty image list with an ``error`` or
    ``note`` explaining why.
    """
    if session is None:
        with requests.Session() as http:
            return search_duckduckgo_images(query, site, http)

    search_query = f"{query} site:{site}" if site else query

    try:
        page = session.get(
            DUCKDUCKGO_URL,
            params={"q": search_query, "iax": "images", "ia": "images"},
            headers={
                "User-Agent": BROWSER_USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
            timeout=SEARCH_TIMEOUT,
        )
        vqd = extract_vqd(page.text)
        if not vqd:
            logger.error(
                "Could not get DuckDuckGo vqd token (response length %d)",
                len(page.text),
            )
            return {"images": [], "note": "DuckDuckGo search temporarily unavailable"}

        response = session.get(
            DUCKDUCKGO_IMAGES_URL,
            params={
                "l": "us-en",
                "o": "json",
                "q": search_query,
                "vqd": vqd,
                "f": ",,,,,",
                "p": "1",
            },
            headers={
                "User-Agent": BROWSER_USER_AGENT,
                "Accept": "application/json, text/javascript, */*; q=0.01",
                "Referer": DUCKDUCKGO_URL,
            },
            timeout=SEARCH_TIMEOUT,
        )
        if not response.ok:
            logger.error("DuckDuckGo image fetch failed: %s", response.status_code)
            return {"images": [], "error": "Failed to fetch images"}

        data = response.json()
    except ValueError as e:
        logger.error("DuckDuckGo parse error: %s", e)
        return {"images": [], "error": "Failed to parse results"}
    except requests.RequestException as e:
        logger.error("DuckDuckGo search error: %s", e)
        return {"images": [], "error": "Search failed"}

    results = (data.get("results") or [])[:DUCKDUCKGO_MAX_RESULTS]
    return {
        "images": [
            {
                "url": item.get("image"),
                "thumbnail": item.get("thumbnail"),
                "title": item.get("title"),
                "source": item.get("source"),
                "width": item.get("width"),
                "height": item.get("height"),
            }
            for item in results
        ]
    }


def extract_vqd(html: str) -> str | None:
    for pattern in _VQD_PATTERNS:
        match = pattern.search(html or "")
        if match:
            return match.group(1)
    return None


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
