"""Remote lockfile retrieval helpers.

Kept apart from :mod:`lockgraph.core` so that parsing stays free of network
access; callers fetch first and hand the text over.
"""

from __future__ import annotations

import requests
from requests import Response
from tenacity import retry, stop_after_attempt, wait_fixed

USER_AGENT = "lockgraph (+https://pypi.org/project/lockgraph/)"


class FetchError(RuntimeError):
    """Raised when a remote lockfile cannot be fetched."""


def is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_fixed(2))
def _http_get(url: str) -> Response:
    return requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=30)


def fetch_lockfile(url: str) -> str:
    """Return the text of the lockfile served at ``url``."""

    try:
        response = _http_get(url)
    except requests.RequestException as exc:  # pragma: no cover - network failure path
        raise FetchError(f"Failed to fetch lockfile: {exc}") from exc

    if response.status_code != 200:
        raise FetchError(f"Unexpected status code {response.status_code} fetching {url}")

    return response.content.decode("utf-8-sig", errors="replace")


def filename_from_url(url: str) -> str:
    """Return the last path segment of ``url`` for use as a format hint."""
    path = url.split("?", 1)[0].split("#", 1)[0]
    return path.rstrip("/").rsplit("/", 1)[-1]
