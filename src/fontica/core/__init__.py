"""Core components for the font catalog and preview engine."""

from .config import AppConfig, CatalogConfig, ClientConfig, ServerConfig
from .exceptions import (
    CatalogError,
    ConfigurationError,
    EmptyCatalog,
    FontLoadError,
    FonticaError,
    ProberPrecondition,
    SourceUnavailable,
    ValidationError,
)
from .models import (
    CatalogFilters,
    CatalogPage,
    CoverageVerdict,
    FontCategory,
    FontRecord,
    LoadState,
    PreviewRequest,
    TextDirection,
)

__all__ = [
    "AppConfig",
    "CatalogConfig",
    "CatalogError",
    "CatalogFilters",
    "CatalogPage",
    "ClientConfig",
    "ConfigurationError",
    "CoverageVerdict",
    "EmptyCatalog",
    "FontCategory",
    "FontLoadError",
    "FontRecord",
    "FonticaError",
    "LoadState",
    "PreviewRequest",
    "ProberPrecondition",
    "ServerConfig",
    "SourceUnavailable",
    "TextDirection",
    "ValidationError",
]
