"""Pydantic models for type-safe data structures."""

import math
from enum import Enum
from typing import Any, ClassVar

from PIL import ImageColor
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class FontCategory(str, Enum):
    """Catalog categories a font can be assigned to."""

    SERIF = "serif"
    SANS_SERIF = "sans-serif"
    DISPLAY = "display"
    HANDWRITING = "handwriting"
    MONOSPACE = "monospace"


class LoadState(str, Enum):
    """Client-side load status of a single font."""

    UNLOADED = "Unloaded"
    LOADING = "Loading"
    LOADED = "Loaded"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (LoadState.LOADED, LoadState.FAILED)


class CoverageVerdict(str, Enum):
    """Whether a font can render a given preview text."""

    UNKNOWN = "Unknown"
    SUPPORTED = "Supported"
    UNSUPPORTED = "Unsupported"


class TextDirection(str, Enum):
    LTR = "ltr"
    RTL = "rtl"


class FontRecord(BaseModel):
    """Canonical catalog entry.

    Serialized with the keys the preview front-end expects:
    ``id``, ``name``, ``url``, ``category`` and ``variants``.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1, description="Stable unique identifier")
    display_name: str = Field(..., min_length=1, alias="name", description="Human readable name")
    resource_url: str = Field(..., min_length=1, alias="url", description="Font resource URL")
    category: FontCategory = Field(FontCategory.SANS_SERIF, description="Font category")
    variants: list[str] = Field(default_factory=lambda: ["regular"], description="Style ids")

    @field_validator("variants")
    @classmethod
    def validate_variants(cls, v: list[str]) -> list[str]:
        return v or ["regular"]

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class CatalogFilters(BaseModel):
    """Filters applied by the catalog indexer before pagination."""

    ALL_CATEGORIES: ClassVar[str] = "all"

    category: FontCategory | None = Field(None, description="Exact category match")
    name_contains: str | None = Field(None, description="Case-insensitive name substring")
    sort_by_name: bool = Field(False, description="Sort by display name instead of source order")

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v):
        if v is None or (isinstance(v, str) and v.strip().lower() in ("", cls.ALL_CATEGORIES)):
            return None
        return v

    @field_validator("name_contains")
    @classmethod
    def validate_name_contains(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()

    def matches(self, record: FontRecord) -> bool:
        if self.category is not None and record.category != self.category:
            return False
        if self.name_contains is not None:
            return self.name_contains.lower() in record.display_name.lower()
        return True


class CatalogPage(BaseModel):
    """One page of a catalog listing."""

    items: list[FontRecord] = Field(default_factory=list)
    page: int = Field(1, ge=1, description="Current page number")
    page_size: int = Field(..., ge=1, description="Maximum items per page")
    total_items: int = Field(0, ge=0, description="Filtered item count before slicing")

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size)

    def to_payload(self) -> dict[str, Any]:
        """Wire format of the listing endpoint."""
        return {
            "fonts": [item.to_payload() for item in self.items],
            "currentPage": self.page,
            "totalPages": self.total_pages,
            "totalFonts": self.total_items,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any], page_size: int) -> "CatalogPage":
        return cls(
            items=[FontRecord.model_validate(font) for font in payload.get("fonts", [])],
            page=payload.get("currentPage", 1),
            page_size=page_size,
            total_items=payload.get("totalFonts", 0),
        )


class PreviewRequest(BaseModel):
    """Preview parameters. Recomputed whenever any input changes, never persisted."""

    model_config = ConfigDict(frozen=True)

    DEFAULT_TEXT: ClassVar[str] = "The quick brown fox jumps over the lazy dog."

    text: str = Field(DEFAULT_TEXT, max_length=1000, description="Preview text")
    size_px: int = Field(32, ge=12, le=80, description="Font size in pixels")
    color: str = Field("#000000", description="Text color")
    text_direction: TextDirection = Field(TextDirection.LTR, description="Text direction")

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        # Raises ValueError for anything Pillow cannot draw with
        ImageColor.getrgb(v)
        return v
