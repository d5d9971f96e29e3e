"""Font Catalog
============

Server-side catalog indexing: enumerating font sources, deriving names and
categories, paginating, and serving the listing over HTTP.
"""

from .api import CatalogHTTPServer, HttpCatalogClient, create_server
from .indexer import CatalogIndexer
from .naming import CATEGORY_RULES, classify_font, parse_font_file_name
from .sources import CatalogEntry, DirectoryCatalogSource, SQLiteCatalogSource

__all__ = [
    "CATEGORY_RULES",
    "CatalogEntry",
    "CatalogHTTPServer",
    "CatalogIndexer",
    "DirectoryCatalogSource",
    "HttpCatalogClient",
    "SQLiteCatalogSource",
    "classify_font",
    "create_server",
    "parse_font_file_name",
]
