"""
Preview Session State
=====================

Holds the parameters of one preview session (page, search text, selected
category, preview request) and recomputes what the user sees from them.

``compute_view`` is the pure part: given a catalog page and the current
parameters it filters the fonts and collects load states and coverage
verdicts. ``PreviewSession`` is the context object that owns the
parameters and wires the catalog, registry and prober together.
"""

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Protocol

from ..core.exceptions import CatalogError, UnknownCategoryError, ValidationError
from ..core.models import (
    CatalogFilters,
    CatalogPage,
    CoverageVerdict,
    FontCategory,
    FontRecord,
    LoadState,
    PreviewRequest,
)
from .prober import GlyphCoverageProber
from .registry import FontRegistryClient

logger = logging.getLogger(__name__)

ALL_CATEGORIES = CatalogFilters.ALL_CATEGORIES


class CatalogLister(Protocol):
    def list_fonts(
        self, page: int, page_size: int, filters: CatalogFilters | None = None
    ) -> CatalogPage: ...


@dataclass
class PreviewView:
    """What a session shows for one set of parameters."""

    visible_fonts: list[FontRecord] = field(default_factory=list)
    verdicts: dict[str, CoverageVerdict] = field(default_factory=dict)
    load_states: dict[str, LoadState] = field(default_factory=dict)
    page: int = 1
    total_pages: int = 0
    total_fonts: int = 0
    catalog_error: str | None = None

    def status_of(self, font_id: str) -> str:
        """Card status: failed, loading, supported or unsupported."""
        if self.load_states.get(font_id) is LoadState.FAILED:
            return "failed"
        verdict = self.verdicts.get(font_id, CoverageVerdict.UNKNOWN)
        if verdict is CoverageVerdict.UNKNOWN:
            return "loading"
        return "supported" if verdict is CoverageVerdict.SUPPORTED else "unsupported"


def normalize_category(selected_category: str | FontCategory | None) -> str:
    if selected_category is None:
        return ALL_CATEGORIES
    if isinstance(selected_category, FontCategory):
        return selected_category.value
    value = selected_category.strip().lower()
    if value == ALL_CATEGORIES:
        return value
    try:
        return FontCategory(value).value
    except ValueError:
        raise UnknownCategoryError(selected_category) from None


def filter_fonts(
    fonts: list[FontRecord],
    search_query: str,
    selected_category: str | FontCategory,
) -> list[FontRecord]:
    query = (search_query or "").strip().lower()
    category = normalize_category(selected_category)
    return [
        font
        for font in fonts
        if query in font.display_name.lower()
        and (category == ALL_CATEGORIES or font.category.value == category)
    ]


def compute_view(
    catalog_page: CatalogPage | None,
    request: PreviewRequest,
    search_query: str,
    selected_category: str | FontCategory,
    registry: FontRegistryClient,
    prober: GlyphCoverageProber,
) -> PreviewView:
    """
    Recompute visible fonts and their verdicts.

    Verdicts are computed fresh for ``request.text`` on every call; nothing
    is cached between calls.
    """
    if catalog_page is None:
        return PreviewView()

    visible = filter_fonts(catalog_page.items, search_query, selected_category)
    load_states = {font.id: registry.get_state(font.id) for font in visible}
    verdicts = {}
    for font in visible:
        if load_states[font.id] is not LoadState.LOADED:
            verdicts[font.id] = CoverageVerdict.UNKNOWN
        elif prober.supports(font.id, request.text):
            verdicts[font.id] = CoverageVerdict.SUPPORTED
        else:
            verdicts[font.id] = CoverageVerdict.UNSUPPORTED

    return PreviewView(
        visible_fonts=visible,
        verdicts=verdicts,
        load_states=load_states,
        page=catalog_page.page,
        total_pages=catalog_page.total_pages,
        total_fonts=catalog_page.total_items,
    )


class PreviewSession:
    """
    Explicit context object for one preview session.

    Args:
        catalog: CatalogIndexer or HttpCatalogClient
        registry: Font registry client owned by this session
        prober: Coverage prober bound to the same registry
        page_size: Fonts per catalog page
        request: Initial preview parameters
    """

    def __init__(
        self,
        catalog: CatalogLister,
        registry: FontRegistryClient,
        prober: GlyphCoverageProber,
        page_size: int = 20,
        request: PreviewRequest | None = None,
    ):
        self.catalog = catalog
        self.registry = registry
        self.prober = prober
        self.page_size = page_size
        self.request = request or PreviewRequest()
        self.page = 1
        self.search_query = ""
        self.selected_category = ALL_CATEGORIES
        self.catalog_page: CatalogPage | None = None
        self.catalog_error: CatalogError | ValidationError | None = None

    def refresh(self) -> CatalogPage | None:
        """
        Fetch the current catalog page and track its fonts.

        Listing failures and rejected parameters are kept in ``catalog_error``
        and None is returned.
        """
        try:
            catalog_page = self.catalog.list_fonts(self.page, self.page_size)
        except (CatalogError, ValidationError) as e:
            logger.warning(f"Catalog listing failed: {e}")
            self.catalog_page = None
            self.catalog_error = e
            return None

        self.catalog_page = catalog_page
        self.catalog_error = None
        self.page = catalog_page.page
        for record in catalog_page.items:
            self.registry.track(record)
        return catalog_page

    def visible_fonts(self) -> list[FontRecord]:
        if self.catalog_page is None:
            return []
        return filter_fonts(self.catalog_page.items, self.search_query, self.selected_category)

    def load_visible(self) -> dict[str, Future]:
        """Start (or join) loads for every visible font."""
        return {record.id: self.registry.ensure_loaded(record) for record in self.visible_fonts()}

    def update(
        self,
        *,
        text: str | None = None,
        size_px: int | None = None,
        color: str | None = None,
        text_direction: str | None = None,
        search_query: str | None = None,
        selected_category: str | None = None,
        page: int | None = None,
    ) -> PreviewView:
        """Change session parameters and return the recomputed view."""
        changes = {
            key: value
            for key, value in {
                "text": text,
                "size_px": size_px,
                "color": color,
                "text_direction": text_direction,
            }.items()
            if value is not None
        }
        if changes:
            self.request = PreviewRequest.model_validate(self.request.model_dump() | changes)
        if search_query is not None:
            self.search_query = search_query
        if selected_category is not None:
            self.selected_category = normalize_category(selected_category)
        if page is not None and page != self.page:
            self.page = page
            self.refresh()
        return self.view()

    def view(self) -> PreviewView:
        view = compute_view(
            self.catalog_page,
            self.request,
            self.search_query,
            self.selected_category,
            self.registry,
            self.prober,
        )
        if self.catalog_error is not None:
            view.catalog_error = str(self.catalog_error)
        return view

    def close(self) -> None:
        self.registry.close()

    def __enter__(self) -> "PreviewSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
