"""
Catalog Sources
===============

Sources enumerate raw font entries for the catalog indexer. A source only
reads; it never filters by extension or derives names.
"""

import logging
import sqlite3
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol
from urllib.parse import quote, urlparse

from ..core.exceptions import SourceUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """A raw entry as enumerated from a catalog source."""

    file_name: str
    resource_url: str
    name: str | None = None

    @property
    def extension(self) -> str:
        return PurePosixPath(self.file_name).suffix.lower()


class CatalogSource(Protocol):
    """Anything the indexer can enumerate."""

    description: str

    def entries(self) -> list[CatalogEntry]: ...


def join_resource_url(base_url: str, file_name: str) -> str:
    """Join a resource base URL and a file name, quoting the file name."""
    return f"{base_url.rstrip('/')}/{quote(file_name)}"


class DirectoryCatalogSource:
    """
    Enumerates font files in a single directory.

    Entries come back sorted by file name so repeated enumerations of the
    same directory produce the same order.
    """

    def __init__(self, fonts_dir: Path, resource_base_url: str = "/fonts"):
        self.fonts_dir = Path(fonts_dir)
        self.resource_base_url = resource_base_url
        self.description = str(self.fonts_dir)

    def entries(self) -> list[CatalogEntry]:
        if not self.fonts_dir.is_dir():
            raise SourceUnavailable(self.description, "not a directory")

        try:
            paths = sorted(
                (path for path in self.fonts_dir.iterdir() if path.is_file()),
                key=lambda path: path.name,
            )
        except OSError as e:
            raise SourceUnavailable(self.description, e) from e

        logger.debug(f"Enumerated {len(paths)} files in {self.fonts_dir}")
        return [
            CatalogEntry(
                file_name=path.name,
                resource_url=join_resource_url(self.resource_base_url, path.name),
            )
            for path in paths
        ]


class SQLiteCatalogSource:
    """
    Enumerates font rows from a SQLite table.

    The table needs a ``file_url`` column and may carry a ``name`` column.
    Relative ``file_url`` values are joined onto ``resource_base_url``;
    absolute URLs and rooted paths are used as they are.
    """

    def __init__(self, db_path: Path, table: str = "fonts", resource_base_url: str = "/fonts"):
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table}")
        self.db_path = Path(db_path)
        self.table = table
        self.resource_base_url = resource_base_url
        self.description = f"{self.db_path}:{table}"

    def _rows(self) -> Iterator[sqlite3.Row]:
        if not self.db_path.is_file():
            raise SourceUnavailable(self.description, "database file not found")

        try:
            connection = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            raise SourceUnavailable(self.description, e) from e

        try:
            connection.row_factory = sqlite3.Row
            cursor = connection.execute(f"SELECT * FROM {self.table} ORDER BY rowid")  # noqa: S608
            yield from cursor.fetchall()
        except sqlite3.Error as e:
            raise SourceUnavailable(self.description, e) from e
        finally:
            connection.close()

    def entries(self) -> list[CatalogEntry]:
        entries = []
        for row in self._rows():
            keys = row.keys()
            if "file_url" not in keys:
                raise SourceUnavailable(self.description, "missing file_url column")

            file_url = row["file_url"]
            if not file_url:
                logger.debug(f"Skipping row without file_url in {self.description}")
                continue

            parsed = urlparse(file_url)
            file_name = PurePosixPath(parsed.path).name
            if parsed.scheme or file_url.startswith("/"):
                resource_url = file_url
            else:
                resource_url = join_resource_url(self.resource_base_url, file_url)

            name = row["name"] if "name" in keys else None
            entries.append(CatalogEntry(file_name=file_name, resource_url=resource_url, name=name))

        logger.debug(f"Enumerated {len(entries)} rows from {self.description}")
        return entries
