"""
ASCII terminal formatters for the run report.

All formatters accept a ``RunReport`` (or parts of one) and return plain
multi-line strings suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Status tags
-----------
Each category line starts with a tag so a CI log can be scanned at a glance::

  [OK]    parsed cleanly, no skips, no unknown symbols
  [WARN]  parsed, but entries were skipped or symbols were unknown
  [FAIL]  the array literal could not be located; no output written
"""

from __future__ import annotations

from tbc_catalog.reporting.emitter import CategorySummary, RunReport


def _status_tag(summary: CategorySummary) -> str:
    if summary.state == "failed":
        return "[FAIL]"
    if summary.skipped or summary.unknown_symbols or summary.truncated or summary.malformed_fields:
        return "[WARN]"
    return "[OK]"


# ── Category table ────────────────────────────────────────────────────────────


def format_category_table(categories: list[CategorySummary]) -> str:
    """Format per-category counts as an ASCII table.

    Example::

        Status  Category   Entries  Parsed  Skipped  Malformed  Unknown
        ---------------------------------------------------------------
        [OK]    items         5120    5118        2          0        0
    """
    header = (
        f"  {'Status':<6}  {'Category':<9}  {'Entries':>7}  {'Parsed':>6}  "
        f"{'Skipped':>7}  {'Malformed':>9}  {'Unknown':>7}"
    )
    lines = [header, "  " + "-" * (len(header) - 2)]
    for c in categories:
        lines.append(
            f"  {_status_tag(c):<6}  {c.category:<9}  {c.input_entries:>7}  "
            f"{c.parsed:>6}  {c.skipped:>7}  {c.malformed_fields:>9}  "
            f"{c.unknown_symbols:>7}"
        )
    return "\n".join(lines)


# ── Breakdowns ────────────────────────────────────────────────────────────────


def format_breakdown(title: str, counts: dict, label: str, unit: str) -> str:
    """Format a ``{key: count}`` breakdown, one line per key in dict order."""
    lines = [f"  {title}:"]
    if not counts:
        lines.append("    (none)")
    for key, count in counts.items():
        lines.append(f"    {label}{key}: {count} {unit}")
    return "\n".join(lines)


def format_unknown_symbols(unknown: dict[str, dict[str, int]], limit: int = 20) -> str:
    """List unmapped enum tokens per family, most frequent first."""
    lines = ["  Unknown enum symbols:"]
    if not unknown:
        lines.append("    (none)")
        return "\n".join(lines)
    for family, tokens in unknown.items():
        lines.append(f"    {family}:")
        ranked = sorted(tokens.items(), key=lambda kv: (-kv[1], kv[0]))
        for token, count in ranked[:limit]:
            lines.append(f"      {token}  x{count}")
        if len(ranked) > limit:
            lines.append(f"      … and {len(ranked) - limit} more")
    return "\n".join(lines)


def _format_details(summary: CategorySummary, limit: int) -> list[str]:
    lines: list[str] = []
    if summary.error:
        lines.append(f"  [{summary.category}] ERROR: {summary.error}")
    for label, details in (("skipped", summary.skip_details), ("malformed", summary.warning_details)):
        if not details:
            continue
        lines.append(f"  [{summary.category}] {label}:")
        for detail in details[:limit]:
            lines.append(f"    - {detail}")
        if len(details) > limit:
            lines.append(f"    … and {len(details) - limit} more")
    if summary.truncated:
        lines.append(
            f"  [{summary.category}] {summary.truncated} unterminated entry discarded"
        )
    return lines


# ── Full report ───────────────────────────────────────────────────────────────


def format_run_report(report: RunReport, max_details: int = 20) -> str:
    """Format the complete run report.

    Args:
        report:      Report built by ``build_run_report()``.
        max_details: Maximum skip / warning lines shown per category.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Catalog Parse Summary ===")
    lines.append(format_category_table(report.categories))

    lines.append("")
    lines.append(f"  Total parsed:  {report.total_parsed}")
    lines.append(f"  Total skipped: {report.total_skipped}")
    lines.append(f"  Unknown enum symbols: {report.unknown_symbol_count}")

    if report.summary_for("items") is not None:
        lines.append("")
        lines.append(format_breakdown("Items by phase", report.items_by_phase, "Phase ", "items"))
    if report.summary_for("gems") is not None:
        lines.append("")
        lines.append(format_breakdown("Gems by color", report.gems_by_color, "", "gems"))

    if report.unknown_symbols:
        lines.append("")
        lines.append(format_unknown_symbols(report.unknown_symbols, limit=max_details))

    details = [
        line for summary in report.categories
        for line in _format_details(summary, max_details)
    ]
    if details:
        lines.append("")
        lines.extend(details)

    outputs = [c for c in report.categories if c.output_path]
    if outputs:
        lines.append("")
        lines.append("  Outputs:")
        for c in outputs:
            lines.append(f"    {c.category:<9} {c.output_path}")

    if report.failed_categories:
        lines.append("")
        lines.append(f"[FAIL] Categories failed: {', '.join(report.failed_categories)}")

    return "\n".join(lines)
