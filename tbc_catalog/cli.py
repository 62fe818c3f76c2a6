"""
TBC Catalog Parser — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action.
  5. Report result to stdout.

Install and run::

    pip install -e .
    tbc-catalog --help
    tbc-catalog validate-config
    tbc-catalog parse
    tbc-catalog parse --category gems --sequential --report-json data/catalog/report.json
    tbc-catalog inspect data/wowsims/all_items.go --collection Items
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="tbc-catalog",
    help="Convert WoWSims TBC item, enchant and gem data into catalog JSON.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from tbc_catalog.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from tbc_catalog.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("parse")
def parse(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    input_dir: Optional[str] = typer.Option(
        None,
        "--input-dir",
        "-i",
        help="Override the directory holding all_items.go / all_enchants.go / all_gems.go.",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Override the directory the catalog JSON files are written to.",
    ),
    categories: Optional[list[str]] = typer.Option(
        None,
        "--category",
        "-c",
        help="Only process this category (items, enchants, gems). Repeatable.",
    ),
    sequential: bool = typer.Option(
        False,
        "--sequential",
        help="Process categories one after another instead of on worker threads.",
    ),
    report_json: Optional[str] = typer.Option(
        None,
        "--report-json",
        help="Also write the run report as JSON to this path.",
    ),
) -> None:
    """Parse the sim data files and write the catalog JSON collections.

    Exits with code 1 if any category's array literal cannot be located.
    Skipped entries and unknown enum symbols are reported but never fail
    the run.
    """
    from tbc_catalog.config import CATEGORIES
    from tbc_catalog.pipeline.orchestrator import CatalogOrchestrator
    from tbc_catalog.reporting.export import export_to_json
    from tbc_catalog.reporting.formatters import format_run_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if categories:
        unknown = sorted(set(categories) - set(CATEGORIES))
        if unknown:
            typer.echo(
                f"[ERROR] Unknown category {unknown}. Valid: {', '.join(CATEGORIES)}",
                err=True,
            )
            raise typer.Exit(code=1)

    updates = {}
    if input_dir:
        updates["sources"] = config.sources.model_copy(update={"input_dir": input_dir})
    if output_dir:
        updates["output"] = config.output.model_copy(update={"output_dir": output_dir})
    if sequential:
        updates["pipeline"] = config.pipeline.model_copy(update={"parallel": False})
    if updates:
        config = config.model_copy(update=updates)

    typer.echo(f"Parsing sim data from: {config.sources.input_dir}")
    result = CatalogOrchestrator(config).run(categories or None)

    typer.echo(format_run_report(result.report, max_details=config.pipeline.max_diagnostics))

    if report_json:
        path = export_to_json(result.report.to_dict(), Path(report_json))
        typer.echo(f"\nReport written to: {path}")

    if result.failed:
        raise typer.Exit(code=1)
    typer.echo("\n[OK] Catalog written.")


@app.command("inspect")
def inspect_source(
    source_file: str = typer.Argument(..., help="Go source file to split."),
    collection: str = typer.Option(
        "Items",
        "--collection",
        help="Declared collection name (Items, Enchants, Gems).",
    ),
    show: int = typer.Option(
        3,
        "--show",
        help="How many entries to list with their top-level field names.",
    ),
) -> None:
    """Split one source file and show what the scanner found.

    Useful when the upstream data changes shape: prints the entry count,
    whether a trailing entry was truncated, and the top-level field names
    of the first few entries.
    """
    from tbc_catalog.exceptions import StructuralParseError
    from tbc_catalog.parsing.fields import extract_fields
    from tbc_catalog.parsing.splitter import split_source

    path = Path(source_file)
    if not path.exists():
        typer.echo(f"[ERROR] File not found: {path}", err=True)
        raise typer.Exit(code=1)

    try:
        split = split_source(path.read_text(encoding="utf-8"), collection, path=path)
    except StructuralParseError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Collection: {collection}")
    typer.echo(f"  Entries:   {len(split.entries)}")
    typer.echo(f"  Truncated: {split.truncated}")
    for entry in split.entries[:show]:
        fields = extract_fields(entry)
        typer.echo(f"  #{entry.index}: {', '.join(fields)}")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    from tbc_catalog.config import CATEGORIES

    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    for category in CATEGORIES:
        typer.echo(
            f"  {category:<9} {config.sources.source_path(category)} "
            f"[{config.sources.collection_name(category)}] -> "
            f"{config.output.output_path(category)}"
        )
    typer.echo(f"  Parallel:  {config.pipeline.parallel} (max_workers={config.pipeline.max_workers})")
    typer.echo(f"  Log level: {config.logging.level}")
    typer.echo(f"  Debug:     {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
