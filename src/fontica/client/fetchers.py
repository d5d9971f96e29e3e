"""
Font Resource Fetching
======================

Fetches the binary data behind a FontRecord.resource_url.
"""

import logging
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

import requests

logger = logging.getLogger(__name__)


class FontFetcher(Protocol):
    def fetch(self, url: str) -> bytes: ...


class FontResourceFetcher:
    """
    Fetches font resources over HTTP(S) or from the local filesystem.

    ``http``/``https`` URLs go through a shared requests session. ``file://``
    URLs and plain paths are read from disk; paths that are not absolute on
    disk (such as ``/fonts/Roboto-Regular.ttf`` from a local catalog) are
    looked up by file name in ``root_dir``.
    """

    def __init__(
        self,
        root_dir: Path | None = None,
        timeout_seconds: float = 30.0,
        user_agent: str = "fontica/1.0.0",
    ):
        self.root_dir = Path(root_dir) if root_dir is not None else None
        self.timeout_seconds = timeout_seconds
        self.session = self._create_session(user_agent)

    def _create_session(self, user_agent: str) -> requests.Session:
        session = requests.Session()
        session.headers.update({"User-Agent": user_agent})
        return session

    def fetch(self, url: str) -> bytes:
        """
        Fetch the font data at ``url``.

        Raises:
            requests.RequestException: HTTP transport or status errors
            FileNotFoundError: A local resource does not exist
        """
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            return self._fetch_http(url)
        if parsed.scheme in ("", "file"):
            return self._fetch_local(unquote(parsed.path))
        raise ValueError(f"Unsupported resource URL scheme: {parsed.scheme}")

    def _fetch_http(self, url: str) -> bytes:
        logger.debug(f"Fetching {url}")
        response = self.session.get(url, timeout=self.timeout_seconds)
        response.raise_for_status()
        return response.content

    def _fetch_local(self, path: str) -> bytes:
        candidate = Path(path)
        if not candidate.is_file() and self.root_dir is not None:
            candidate = self.root_dir / candidate.name
        logger.debug(f"Reading {candidate}")
        return candidate.read_bytes()
