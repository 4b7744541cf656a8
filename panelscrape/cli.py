"""panelscrape CLI: list, inspect and run catalog declarations.

Usage:
    panelscrape list                                # List available catalogs
    panelscrape inspect module.path:CatalogClass    # Show catalog settings
    panelscrape run module.path:CatalogClass        # Extract and print a table
    panelscrape run ... --format json --output icons.jsonl
"""

from __future__ import annotations

import asyncio
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from panelscrape.data_types import BaseCatalog, TieBreak

# Log output format shared by every command
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def import_catalog(catalog_path: str) -> type:
    """Import a catalog class from a dotted path.

    Args:
        catalog_path: ``"module.path:ClassName"`` string.

    Returns:
        The catalog class.

    Raises:
        click.BadParameter: If the format is invalid, import fails, or the
            attribute is not a BaseCatalog subclass.
    """
    if ":" not in catalog_path:
        raise click.BadParameter(
            f"Invalid catalog path '{catalog_path}'. "
            "Expected format: 'module.path:ClassName'"
        )

    module_path, class_name = catalog_path.rsplit(":", 1)
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise click.BadParameter(
            f"Could not import module '{module_path}': {e}"
        ) from e

    try:
        catalog_class = getattr(module, class_name)
    except AttributeError as e:
        raise click.BadParameter(
            f"Module '{module_path}' has no class '{class_name}'"
        ) from e

    if not (
        isinstance(catalog_class, type)
        and issubclass(catalog_class, BaseCatalog)
    ):
        raise click.BadParameter(
            f"'{catalog_path}' is not a BaseCatalog subclass"
        )
    return catalog_class


@click.group()
@click.version_option(package_name="panelscrape")
def cli() -> None:
    """panelscrape: sequential interface-driven extraction."""


_SKIP_DIRS = {
    "__pycache__",
    ".git",
    ".venv",
    "venv",
    ".env",
    "env",
    ".tox",
    ".nox",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    "node_modules",
    ".eggs",
    "dist",
    "build",
}


def _discover_catalogs(
    root: Path, verbose: bool = False
) -> list[tuple[str, type]]:
    """Discover BaseCatalog subclasses in ``.py`` files under *root*.

    Only files whose source text contains ``"BaseCatalog"`` are imported.
    *root* is added to ``sys.path`` (if absent) so package imports resolve.

    Returns:
        Sorted list of ``("module.path:ClassName", class)`` tuples.
    """
    root = root.resolve()
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    found: list[tuple[str, type]] = []

    for py_file in root.rglob("*.py"):
        if any(part in _SKIP_DIRS for part in py_file.parts):
            continue

        try:
            source = py_file.read_text(encoding="utf-8", errors="ignore")
        except OSError:
            continue
        if "BaseCatalog" not in source:
            continue

        rel = py_file.relative_to(root).with_suffix("")
        parts = list(rel.parts)
        if parts[-1] == "__init__":
            parts = parts[:-1]
        if not parts:
            continue
        module_path = ".".join(parts)

        try:
            module = importlib.import_module(module_path)
        except Exception as exc:
            if verbose:
                click.echo(
                    f"  skip {module_path}: {type(exc).__name__}: {exc}",
                    err=True,
                )
            continue

        for name in dir(module):
            obj = getattr(module, name, None)
            if (
                isinstance(obj, type)
                and issubclass(obj, BaseCatalog)
                and obj is not BaseCatalog
                and obj.__module__ == module.__name__
            ):
                found.append((f"{module_path}:{name}", obj))

    found.sort(key=lambda t: t[0])
    return found


@cli.command("list")
@click.option("-v", "--verbose", is_flag=True, help="Show import errors.")
def list_catalogs(verbose: bool) -> None:
    """List catalogs declared in the current directory tree."""
    catalogs = _discover_catalogs(Path.cwd(), verbose=verbose)
    if not catalogs:
        click.echo("No catalogs found.")
        return

    for full_path, cls in catalogs:
        description = f"  {cls.description}" if cls.description else ""
        click.echo(f"{full_path} [{cls.status.value}]{description}")


@cli.command()
@click.argument("catalog")
def inspect(catalog: str) -> None:
    """Inspect a catalog's page, discovery query, fields and pacing.

    CATALOG is a dotted import path in the form module.path:ClassName.

    \b
    Example:
        panelscrape inspect panelscrape.demo.catalog:DemoIconCatalog
    """
    catalog_class = import_catalog(catalog)

    click.echo(f"Class:     {catalog_class.__name__}")
    click.echo(f"Module:    {catalog_class.__module__}")
    click.echo(f"Status:    {catalog_class.status.value}")
    if catalog_class.version:
        click.echo(f"Version:   {catalog_class.version}")
    if catalog_class.url:
        click.echo(f"URL:       {catalog_class.url}")

    query = catalog_class.element_query
    if query is not None:
        click.echo("\nDiscovery:")
        click.echo(f"  container: {query.container}")
        click.echo(f"  candidate: {query.candidate}")
        for predicate in query.predicates:
            value = "(present)" if predicate.value is None else predicate.value
            click.echo(f"  [{predicate.name}] = {value}")

    click.echo(f"\nSections:  {catalog_class.section_selector}")
    if catalog_class.fields:
        click.echo(f"Fields ({len(catalog_class.fields)}):")
        for locator in catalog_class.fields:
            attribute = f" @{locator.attribute}" if locator.attribute else ""
            click.echo(
                f"  {locator.name}: marker {locator.marker!r} -> "
                f"{locator.value_selector}{attribute}"
            )

    click.echo(f"\nSettle:    {catalog_class.settle_delay_ms}ms")
    if catalog_class.ready is not None:
        click.echo(f"Ready:     {catalog_class.ready.selector}")
    click.echo(f"Tie-break: {catalog_class.tie_break.value}")

    rate_limits = catalog_class.rate_limits
    if rate_limits:
        parts = [f"{r.limit}/{r.interval}ms" for r in rate_limits]
        click.echo(f"Rate limits: {', '.join(parts)}")


@cli.command()
@click.argument("catalog")
@click.option(
    "--settle-delay-ms",
    type=int,
    default=None,
    help="Fixed wait after each activation (default: catalog's).",
)
@click.option(
    "--ready-timeout-ms",
    type=int,
    default=None,
    help="Readiness polling timeout (default: catalog's or 5000).",
)
@click.option(
    "--poll-interval-ms",
    type=int,
    default=None,
    help="Readiness polling interval (default: 100).",
)
@click.option(
    "--tie-break",
    type=click.Choice([t.value for t in TieBreak]),
    default=None,
    help="Which section wins when a marker matches several (default: catalog's).",
)
@click.option(
    "--max-elements",
    type=int,
    default=None,
    help="Process at most this many elements.",
)
@click.option(
    "--browser",
    "browser_type",
    type=click.Choice(["chromium", "firefox", "webkit"]),
    default="chromium",
    show_default=True,
    help="Browser engine to use.",
)
@click.option(
    "--headless/--no-headless",
    default=True,
    show_default=True,
    help="Hide or show the browser window.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "jsonl"]),
    default="table",
    show_default=True,
    help="How to print the result set.",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write records to this JSONL file as they are extracted.",
)
@click.option(
    "--show-skipped", is_flag=True, help="List skipped elements and why."
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def run(
    catalog: str,
    settle_delay_ms: int | None,
    ready_timeout_ms: int | None,
    poll_interval_ms: int | None,
    tie_break: str | None,
    max_elements: int | None,
    browser_type: str,
    headless: bool,
    output_format: str,
    output: str | None,
    show_skipped: bool,
    verbose: bool,
) -> None:
    """Run a catalog extraction in a browser.

    CATALOG is a dotted import path in the form module.path:ClassName.

    \b
    Examples:
        panelscrape run panelscrape.demo.catalog:DemoIconCatalog
        panelscrape run my.catalogs:Icons --settle-delay-ms 800 --format json
        panelscrape run my.catalogs:Icons --output icons.jsonl --show-skipped
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=log_level, format=_LOG_FORMAT)

    from panelscrape.common.settings import ExtractionSettings

    catalog_class = import_catalog(catalog)
    try:
        catalog_class.check()
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    try:
        settings = ExtractionSettings.from_catalog(
            catalog_class,
            settle_delay_ms=settle_delay_ms,
            ready_timeout_ms=ready_timeout_ms,
            poll_interval_ms=poll_interval_ms,
            tie_break=TieBreak(tie_break) if tie_break else None,
            max_elements=max_elements,
        )
    except ValidationError as e:
        raise click.BadParameter(f"Invalid settings: {e}") from e

    click.echo(f"Catalog: {catalog_class.__name__}", err=True)
    click.echo(f"URL:     {catalog_class.url}", err=True)

    result = _run_playwright(
        catalog_class(), settings, browser_type, headless, output
    )

    if output_format == "json":
        click.echo(result.to_json())
    elif output_format == "jsonl":
        for record in result.to_dicts():
            click.echo(_dumps(record))
    else:
        from panelscrape.driver.callbacks import render_table

        click.echo(render_table(result, show_skipped=show_skipped))

    if show_skipped and output_format != "table":
        for skipped in result.skipped:
            click.echo(_dumps(skipped.to_dict()), err=True)


def _dumps(data: dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False)


# ------------------------------------------------------------------
# Driver runner
# ------------------------------------------------------------------


def _run_playwright(
    catalog: Any,
    settings: Any,
    browser_type: str,
    headless: bool,
    output: str | None,
) -> Any:
    try:
        from panelscrape.driver.playwright_driver import PlaywrightDriver
    except ImportError as e:
        raise click.ClickException(
            f"Missing dependency: {e}. Install playwright and run "
            "'playwright install chromium'"
        ) from e

    from panelscrape.common.exceptions import PageLoadException
    from panelscrape.driver.callbacks import save_to_jsonl_file

    async def _go(on_record) -> Any:
        async with PlaywrightDriver.open(
            catalog,
            browser_type=browser_type,
            headless=headless,
            settings=settings,
            on_record=on_record,
        ) as driver:
            return await driver.run()

    try:
        if output is None:
            return asyncio.run(_go(None))

        click.echo(f"Output:  {output}", err=True)
        with open(output, "w", encoding="utf-8") as f:
            return asyncio.run(_go(save_to_jsonl_file(f)))
    except PageLoadException as e:
        raise click.ClickException(str(e)) from e


def main() -> None:
    """Entry point for the ``panelscrape`` console script."""
    cli()
