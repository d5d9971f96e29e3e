"""
Catalog Indexer
===============

Turns a catalog source into categorized, paginated catalog pages.
The indexer keeps no state between calls; every listing re-enumerates
the source.
"""

import logging
import math
from collections.abc import Iterable

from ..core.config import DEFAULT_FONT_EXTENSIONS
from ..core.exceptions import EmptyCatalog, InvalidPageError, InvalidPageSizeError
from ..core.models import CatalogFilters, CatalogPage, FontRecord
from .naming import DEFAULT_VARIANT, classify_font, parse_font_file_name
from .sources import CatalogEntry, CatalogSource

logger = logging.getLogger(__name__)


class CatalogIndexer:
    """Builds catalog pages from a catalog source."""

    def __init__(self, source: CatalogSource, font_extensions: Iterable[str] | None = None):
        self.source = source
        self.font_extensions = frozenset(
            ext.lower() for ext in (font_extensions or DEFAULT_FONT_EXTENSIONS)
        )

    def build_records(self) -> list[FontRecord]:
        """
        Enumerate the source and derive one record per font id.

        Files sharing an id are merged into a single record whose variants
        keep first-seen order. The record points at the regular file when
        there is one.

        Raises:
            SourceUnavailable: The source cannot be enumerated
            EmptyCatalog: No entry is a named file with a recognized font extension
        """
        entries = []
        for entry in self.source.entries():
            if not self._is_font(entry):
                continue
            parsed = parse_font_file_name(entry.file_name)
            if not (entry.name or parsed.display_name):
                logger.debug(f"Skipping {entry.file_name}: no usable font name")
                continue
            entries.append((entry, parsed))
        if not entries:
            raise EmptyCatalog(self.source.description)

        # dicts keep insertion order, so the source order survives merging
        grouped: dict[str, dict] = {}
        for entry, parsed in entries:
            group = grouped.get(parsed.font_id)
            if group is None:
                grouped[parsed.font_id] = {
                    "display_name": entry.name or parsed.display_name,
                    "resource_url": entry.resource_url,
                    "variants": [parsed.variant],
                }
                continue

            if parsed.variant not in group["variants"]:
                group["variants"].append(parsed.variant)
            if parsed.variant == DEFAULT_VARIANT and group["variants"][0] != DEFAULT_VARIANT:
                group["resource_url"] = entry.resource_url

        records = [
            FontRecord(
                id=font_id,
                display_name=group["display_name"],
                resource_url=group["resource_url"],
                category=classify_font(group["display_name"]),
                variants=group["variants"],
            )
            for font_id, group in grouped.items()
        ]
        logger.debug(f"Indexed {len(records)} fonts from {len(entries)} files")
        return records

    def list_fonts(
        self,
        page: int,
        page_size: int,
        filters: CatalogFilters | None = None,
    ) -> CatalogPage:
        """
        List one page of the catalog.

        Args:
            page: 1-based page number; clamped to the last page
            page_size: Maximum number of fonts per page
            filters: Optional category/name filters applied before pagination

        Returns:
            CatalogPage with the filtered total and the requested slice
        """
        if not isinstance(page, int) or page < 1:
            raise InvalidPageError(page)
        if not isinstance(page_size, int) or page_size < 1:
            raise InvalidPageSizeError(page_size)

        filters = filters or CatalogFilters()
        records = [record for record in self.build_records() if filters.matches(record)]
        if filters.sort_by_name:
            records.sort(key=lambda record: record.display_name.lower())

        total_items = len(records)
        total_pages = math.ceil(total_items / page_size)
        if total_pages >= 1:
            page = min(page, total_pages)

        start = (page - 1) * page_size
        items = records[start : start + page_size]

        logger.info(
            f"Listed page {page}/{total_pages} ({len(items)} of {total_items} fonts) "
            f"from {self.source.description}"
        )
        return CatalogPage(items=items, page=page, page_size=page_size, total_items=total_items)

    def _is_font(self, entry: CatalogEntry) -> bool:
        return entry.extension in self.font_extensions
