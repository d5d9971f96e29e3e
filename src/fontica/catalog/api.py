"""
Catalog HTTP API
================

Serves the catalog listing endpoint and the font files it points at, and
provides the client that consumes the endpoint.

    GET /api/fonts?page=<int>&limit=<int>[&category=<str>][&search=<str>]
        200 {fonts, currentPage, totalPages, totalFonts}
        400 invalid parameters
        404 empty catalog
        500 catalog source failure
    GET /fonts/<file>
        the font file itself
"""

import json
import logging
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import parse_qs, unquote, urljoin, urlparse

import requests

from ..core.config import CatalogConfig, ServerConfig
from ..core.exceptions import (
    EmptyCatalog,
    InvalidPageError,
    InvalidPageSizeError,
    SourceUnavailable,
    UnknownCategoryError,
    ValidationError,
)
from ..core.models import CatalogFilters, CatalogPage, FontCategory
from .indexer import CatalogIndexer

logger = logging.getLogger(__name__)

LISTING_PATH = "/api/fonts"

FONT_CONTENT_TYPES = {
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttc": "font/collection",
    ".otc": "font/collection",
}


def parse_listing_query(query: str, catalog_config: CatalogConfig) -> tuple[int, int, CatalogFilters]:
    """
    Parse listing query parameters.

    Raises:
        ValidationError: A parameter is not a positive integer, the limit is
            above the configured maximum, or the category is unknown
    """
    params = parse_qs(query or "")

    def _int_param(name: str, default: int, error: type[ValidationError]) -> int:
        raw = params.get(name, [None])[0]
        if raw is None or raw == "":
            return default
        try:
            value = int(raw)
        except ValueError:
            raise error(raw) from None
        if value < 1:
            raise error(value)
        return value

    page = _int_param("page", 1, InvalidPageError)
    limit = _int_param("limit", catalog_config.default_page_size, InvalidPageSizeError)
    if limit > catalog_config.max_page_size:
        raise InvalidPageSizeError(limit, catalog_config.max_page_size)

    category = params.get("category", [None])[0]
    if category and category.lower() != CatalogFilters.ALL_CATEGORIES:
        try:
            category = FontCategory(category.lower())
        except ValueError:
            raise UnknownCategoryError(category) from None
    else:
        category = None

    filters = CatalogFilters(category=category, name_contains=params.get("search", [None])[0])
    return page, limit, filters


class CatalogHTTPServer(ThreadingHTTPServer):
    """Threaded HTTP server holding the catalog indexer shared by all handlers."""

    daemon_threads = True

    def __init__(
        self,
        indexer: CatalogIndexer,
        catalog_config: CatalogConfig,
        server_config: ServerConfig,
    ):
        self.indexer = indexer
        self.catalog_config = catalog_config
        self.server_config = server_config
        self.fonts_dir = Path(catalog_config.fonts_dir)
        self.fonts_prefix = urlparse(catalog_config.resource_base_url).path.rstrip("/") + "/"
        super().__init__((server_config.host, server_config.port), CatalogRequestHandler)

    @property
    def url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"


class CatalogRequestHandler(BaseHTTPRequestHandler):
    server: CatalogHTTPServer
    server_version = "Fontica/1.0"

    def log_message(self, fmt: str, *args) -> None:  # noqa: A003
        logger.debug(f"{self.address_string()} - {fmt % args}")

    def _set_cors_headers(self) -> None:
        self.send_header("Access-Control-Allow-Origin", self.server.server_config.cors_origin)
        self.send_header("Access-Control-Allow-Methods", "GET, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")

    def _send_json(self, payload: dict, status: HTTPStatus = HTTPStatus.OK) -> None:
        data = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self._set_cors_headers()
        self.end_headers()
        self.wfile.write(data)

    def do_OPTIONS(self) -> None:  # noqa: N802
        self.send_response(HTTPStatus.NO_CONTENT)
        self._set_cors_headers()
        self.end_headers()

    def do_GET(self) -> None:  # noqa: N802
        parsed = urlparse(self.path)
        if parsed.path == LISTING_PATH:
            self._handle_listing(parsed.query)
            return
        if parsed.path.startswith(self.server.fonts_prefix):
            self._handle_font_file(parsed.path[len(self.server.fonts_prefix) :])
            return

        self._send_json({"error": "Not found"}, HTTPStatus.NOT_FOUND)

    def _handle_listing(self, query: str) -> None:
        try:
            page, limit, filters = parse_listing_query(query, self.server.catalog_config)
            catalog_page = self.server.indexer.list_fonts(page, limit, filters)
        except ValidationError as e:
            self._send_json({"error": str(e)}, HTTPStatus.BAD_REQUEST)
        except EmptyCatalog as e:
            self._send_json({"error": str(e)}, HTTPStatus.NOT_FOUND)
        except SourceUnavailable as e:
            logger.exception(f"Catalog listing failed: {e}")
            self._send_json({"error": str(e)}, HTTPStatus.INTERNAL_SERVER_ERROR)
        except Exception as e:
            logger.exception(f"Unexpected error while listing fonts: {e}")
            self._send_json({"error": "Internal server error"}, HTTPStatus.INTERNAL_SERVER_ERROR)
        else:
            self._send_json(catalog_page.to_payload())

    def _handle_font_file(self, raw_name: str) -> None:
        name = unquote(raw_name)
        if not name or "/" in name or "\x00" in name:
            self._send_json({"error": "Font not found"}, HTTPStatus.NOT_FOUND)
            return

        try:
            fonts_dir = self.server.fonts_dir.resolve()
            path = (fonts_dir / name).resolve()
            found = path.parent == fonts_dir and path.is_file()
            data = path.read_bytes() if found else None
        except Exception as e:
            logger.exception(f"Failed to serve font file {name}: {e}")
            self._send_json({"error": "Internal server error"}, HTTPStatus.INTERNAL_SERVER_ERROR)
            return

        if data is None:
            self._send_json({"error": "Font not found"}, HTTPStatus.NOT_FOUND)
            return

        self.send_response(HTTPStatus.OK)
        self.send_header(
            "Content-Type", FONT_CONTENT_TYPES.get(path.suffix.lower(), "application/octet-stream")
        )
        self.send_header("Content-Length", str(len(data)))
        self._set_cors_headers()
        self.end_headers()
        self.wfile.write(data)


class HttpCatalogClient:
    """
    Client for the catalog listing endpoint.

    Maps endpoint failures back onto the catalog error taxonomy so callers
    can treat it exactly like a local CatalogIndexer.
    """

    def __init__(self, base_url: str, timeout_seconds: float = 30.0, user_agent: str = "fontica/1.0.0"):
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout_seconds = timeout_seconds
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def list_fonts(
        self,
        page: int,
        page_size: int,
        filters: CatalogFilters | None = None,
    ) -> CatalogPage:
        url = urljoin(self.base_url, LISTING_PATH.lstrip("/"))
        params = {"page": page, "limit": page_size}
        if filters is not None:
            if filters.category is not None:
                params["category"] = filters.category.value
            if filters.name_contains:
                params["search"] = filters.name_contains

        try:
            response = self.session.get(url, params=params, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            raise SourceUnavailable(url, e) from e

        if response.status_code == HTTPStatus.NOT_FOUND:
            raise EmptyCatalog(url)
        if response.status_code == HTTPStatus.BAD_REQUEST:
            raise ValidationError(self._error_message(response))
        if response.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
            raise SourceUnavailable(url, self._error_message(response))

        try:
            response.raise_for_status()
            catalog_page = CatalogPage.from_payload(response.json(), page_size)
        except (requests.RequestException, ValueError) as e:
            raise SourceUnavailable(url, e) from e

        # Relative resource URLs are relative to the catalog host
        items = [
            record.model_copy(update={"resource_url": urljoin(self.base_url, record.resource_url)})
            for record in catalog_page.items
        ]
        return catalog_page.model_copy(update={"items": items})

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return response.json().get("error", response.reason)
        except (ValueError, AttributeError):
            return response.reason or f"HTTP {response.status_code}"


def create_server(
    indexer: CatalogIndexer,
    catalog_config: CatalogConfig,
    server_config: ServerConfig,
) -> CatalogHTTPServer:
    """Create (but do not start) the catalog HTTP server."""
    server = CatalogHTTPServer(indexer, catalog_config, server_config)
    logger.info(f"Catalog server bound to {server.url}")
    return server

