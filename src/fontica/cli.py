"""
Fontica CLI
===========

Commands to list the font catalog, serve the listing endpoint, and preview
text against the catalog's fonts.
"""

import json
import logging
import sys
from concurrent.futures import as_completed
from pathlib import Path

import click
from tqdm import tqdm

from .catalog.api import HttpCatalogClient, create_server
from .catalog.indexer import CatalogIndexer
from .catalog.sources import DirectoryCatalogSource, SQLiteCatalogSource
from .client.fetchers import FontResourceFetcher
from .client.prober import GlyphCoverageProber
from .client.registry import FontRegistryClient
from .client.runtime import PillowRenderingRuntime
from .client.session import PreviewSession
from .core.config import AppConfig
from .core.exceptions import CatalogError, EmptyCatalog, FonticaError, ValidationError
from .core.models import CatalogFilters, PreviewRequest, TextDirection

logger = logging.getLogger(__name__)

EXIT_SOURCE_UNAVAILABLE = 1
EXIT_EMPTY_CATALOG = 2

CATEGORY_CHOICES = ["all", "serif", "sans-serif", "display", "handwriting", "monospace"]


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_indexer(config: AppConfig) -> CatalogIndexer:
    """Create an indexer over the configured catalog source."""
    catalog = config.catalog
    if catalog.database_path is not None:
        source = SQLiteCatalogSource(
            catalog.database_path, catalog.table_name, catalog.resource_base_url
        )
    else:
        source = DirectoryCatalogSource(catalog.fonts_dir, catalog.resource_base_url)
    return CatalogIndexer(source, catalog.font_extensions)


def exit_for_catalog_error(error: CatalogError | ValidationError) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(EXIT_EMPTY_CATALOG if isinstance(error, EmptyCatalog) else EXIT_SOURCE_UNAVAILABLE)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML configuration file",
)
@click.pass_context
def cli(ctx, verbose, config_path):
    """Fontica font catalog and preview CLI."""
    config = AppConfig.load_with_overrides(yaml_path=config_path)
    setup_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


@cli.command(name="list")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Fonts per page")
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), default="all")
@click.option("--search", default=None, help="Case-insensitive name filter")
@click.option("--sort", "sort_by_name", is_flag=True, help="Sort by name")
@click.option("--json", "as_json", is_flag=True, help="Print the endpoint payload")
@click.pass_obj
def list_fonts(config: AppConfig, page, limit, category, search, sort_by_name, as_json):
    """List one page of the font catalog."""
    indexer = build_indexer(config)
    filters = CatalogFilters(category=category, name_contains=search, sort_by_name=sort_by_name)

    try:
        catalog_page = indexer.list_fonts(page, limit or config.catalog.default_page_size, filters)
    except CatalogError as e:
        exit_for_catalog_error(e)
        return

    if as_json:
        click.echo(json.dumps(catalog_page.to_payload(), indent=2))
        return

    for record in catalog_page.items:
        styles = len(record.variants)
        click.echo(
            f"{record.display_name:<30} {record.category.value:<12} "
            f"{styles} style{'s' if styles != 1 else ''}  {record.resource_url}"
        )
    click.echo(
        f"\nPage {catalog_page.page}/{catalog_page.total_pages} "
        f"({catalog_page.total_items} fonts)"
    )


@cli.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", type=int, default=None, help="Bind port")
@click.pass_obj
def serve(config: AppConfig, host, port):
    """Serve the catalog listing endpoint and font files."""
    server_config = config.server.model_copy(
        update={k: v for k, v in {"host": host, "port": port}.items() if v is not None}
    )
    server = create_server(build_indexer(config), config.catalog, server_config)
    click.echo(f"Serving fonts from {config.catalog.fonts_dir} on {server.url}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down catalog server")
    finally:
        server.server_close()


@cli.command()
@click.argument("text")
@click.option("--catalog-url", default=None, help="Use a running catalog server")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Fonts per page")
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), default="all")
@click.option("--search", default="", help="Case-insensitive name filter")
@click.option("--size", type=click.IntRange(12, 80), default=32, show_default=True)
@click.option("--color", default="#000000", show_default=True)
@click.option("--rtl", is_flag=True, help="Right-to-left preview")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Write PNG samples for supported fonts",
)
@click.pass_obj
def preview(
    config: AppConfig,
    text,
    catalog_url,
    page,
    limit,
    category,
    search,
    size,
    color,
    rtl,
    output_dir,
):
    """Check which catalog fonts can render TEXT."""
    client_config = config.client
    if catalog_url:
        catalog = HttpCatalogClient(
            catalog_url, client_config.fetch_timeout_seconds, client_config.user_agent
        )
    else:
        catalog = build_indexer(config)

    runtime = PillowRenderingRuntime(client_config.fallback_font_path)
    fetcher = FontResourceFetcher(
        root_dir=config.catalog.fonts_dir,
        timeout_seconds=client_config.fetch_timeout_seconds,
        user_agent=client_config.user_agent,
    )
    registry = FontRegistryClient(fetcher, runtime, client_config.max_concurrent_loads)
    prober = GlyphCoverageProber(
        registry, runtime, client_config.reference_size_px, client_config.fallback_family
    )

    try:
        request = PreviewRequest(
            text=text,
            size_px=size,
            color=color,
            text_direction=TextDirection.RTL if rtl else TextDirection.LTR,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    with PreviewSession(
        catalog, registry, prober, limit or config.catalog.default_page_size, request
    ) as session:
        session.page = page
        session.update(search_query=search, selected_category=category)
        if session.refresh() is None:
            exit_for_catalog_error(session.catalog_error)
            return

        futures = session.load_visible()
        for future in tqdm(
            as_completed(futures.values()), total=len(futures), desc="Loading fonts", unit="font"
        ):
            # Failures show up as per-font status below
            future.exception()

        try:
            view = session.view()
        except FonticaError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(EXIT_SOURCE_UNAVAILABLE)

        for record in view.visible_fonts:
            status = view.status_of(record.id)
            click.echo(f"{record.display_name:<30} {record.category.value:<12} {status}")

            if output_dir is not None and status == "supported":
                output_dir.mkdir(parents=True, exist_ok=True)
                image = runtime.render_sample(record.id, request, client_config.fallback_family)
                image.save(output_dir / f"{record.id}.png")

        click.echo(f"\nPage {view.page}/{view.total_pages} ({view.total_fonts} fonts)")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
