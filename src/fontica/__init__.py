"""Fontica
=======

Font catalog and glyph-coverage preview engine: indexes a collection of font
files into a paginated, categorized catalog, loads fonts on the client side,
and decides per font whether it can render a given preview text.
"""

__version__ = "1.0.0"
__author__ = "Fontica Team"

from .catalog import CatalogIndexer, DirectoryCatalogSource, HttpCatalogClient, SQLiteCatalogSource
from .client import (
    FontRegistryClient,
    FontResourceFetcher,
    GlyphCoverageProber,
    PillowRenderingRuntime,
    PreviewSession,
)
from .core.config import AppConfig
from .core.exceptions import (
    EmptyCatalog,
    FontLoadError,
    FonticaError,
    ProberPrecondition,
    SourceUnavailable,
)
from .core.models import (
    CatalogFilters,
    CatalogPage,
    CoverageVerdict,
    FontCategory,
    FontRecord,
    LoadState,
    PreviewRequest,
)

__all__ = [
    "AppConfig",
    "CatalogFilters",
    "CatalogIndexer",
    "CatalogPage",
    "CoverageVerdict",
    "DirectoryCatalogSource",
    "EmptyCatalog",
    "FontCategory",
    "FontLoadError",
    "FontRecord",
    "FontRegistryClient",
    "FontResourceFetcher",
    "FonticaError",
    "GlyphCoverageProber",
    "HttpCatalogClient",
    "LoadState",
    "PillowRenderingRuntime",
    "PreviewRequest",
    "PreviewSession",
    "ProberPrecondition",
    "SQLiteCatalogSource",
    "SourceUnavailable",
]
