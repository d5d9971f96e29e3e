"""Custom exceptions for the font catalog and preview engine."""

from typing import Any


class FonticaError(Exception):
    """Base exception for all fontica errors."""

    def __init__(self, message: str, details: Any | None = None):
        super().__init__(message)
        self.details = details


class ValidationError(FonticaError):
    """Exception raised for input validation errors."""


class ConfigurationError(FonticaError):
    """Exception raised for configuration errors."""


class CatalogError(FonticaError):
    """Exception raised when a catalog listing cannot be produced."""


class SourceUnavailable(CatalogError):
    """The catalog source could not be enumerated."""

    def __init__(self, source: str, cause: Exception | str | None = None):
        message = f"Catalog source unavailable: {source}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message, details=cause)
        self.source = source
        self.cause = cause


class EmptyCatalog(CatalogError):
    """The catalog source was enumerated but holds no eligible fonts."""

    def __init__(self, source: str):
        super().__init__(f"No fonts found in {source}")
        self.source = source


class FontLoadError(FonticaError):
    """A single font resource failed to fetch or register."""

    def __init__(self, font_id: str, cause: Exception | str | None = None):
        super().__init__(f"Failed to load font {font_id}: {cause}", details=cause)
        self.font_id = font_id
        self.cause = cause


class FontParseError(FontLoadError):
    """Font data was fetched but could not be parsed by the rendering runtime."""


class ProberPrecondition(FonticaError):
    """The coverage prober was called for a font that is not loaded."""

    def __init__(self, font_id: str, state: Any):
        super().__init__(f"Font {font_id} is not loaded (state: {state})")
        self.font_id = font_id
        self.state = state


class InvalidStateTransition(FonticaError):
    """A load-state transition outside the state machine was requested."""

    def __init__(self, font_id: str, current: Any, action: str):
        super().__init__(f"Cannot {action} font {font_id} from state {current}")
        self.font_id = font_id
        self.current = current
        self.action = action


class ClientClosedError(FonticaError):
    """Exception raised when a torn-down registry client is asked to load fonts."""

    def __init__(self):
        super().__init__("Font registry client is closed")


class InvalidPageError(ValidationError):
    """Exception raised for page numbers below one."""

    def __init__(self, page: Any):
        super().__init__(f"page must be an integer >= 1, got {page!r}")


class InvalidPageSizeError(ValidationError):
    """Exception raised for page sizes outside the allowed range."""

    def __init__(self, page_size: Any, maximum: int | None = None):
        bound = f" and <= {maximum}" if maximum is not None else ""
        super().__init__(f"page size must be an integer >= 1{bound}, got {page_size!r}")


class UnknownCategoryError(ValidationError):
    """Exception raised when a category filter names no known category."""

    def __init__(self, category: str):
        super().__init__(f"Unknown font category: {category}")


class ConfigFileNotFoundError(ConfigurationError):
    """Exception raised when configuration file is not found."""

    def __init__(self, config_path: str):
        super().__init__(f"Configuration file not found: {config_path}")


class EmptyConfigFileError(ConfigurationError):
    """Exception raised when configuration file is empty."""

    def __init__(self, config_path: str):
        super().__init__(f"Empty configuration file: {config_path}")


class InvalidYamlError(ConfigurationError):
    """Exception raised for invalid YAML content."""

    def __init__(self, config_path: str, error: str):
        super().__init__(f"Invalid YAML in {config_path}: {error}")


class ConfigLoadError(ConfigurationError):
    """Exception raised when configuration loading fails."""

    def __init__(self, error: str):
        super().__init__(f"Failed to load configuration: {error}")
