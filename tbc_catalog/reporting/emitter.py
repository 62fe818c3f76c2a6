"""
Emitter: catalog JSON sinks and the run report.

``write_collection()`` writes one record collection as a JSON array in input
order, with absent optional fields omitted entirely.

``build_run_report()`` folds the per-category results into a ``RunReport``:
parsed / skipped counts per collection, items by phase, gems by colour, and
the unknown-enum-symbol count. The report is the human-facing signal for
silent regressions; an enum table that falls behind the source data shows up
here as a jump in unknown symbols long before anyone notices raw tokens in
the catalog.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Sequence

from tbc_catalog.models.records import CatalogRecord
from tbc_catalog.reporting.export import export_to_json

if TYPE_CHECKING:
    from tbc_catalog.pipeline.base import CategoryResult

logger = logging.getLogger(__name__)


def write_collection(
    records: Sequence[CatalogRecord],
    path: Path,
    indent: int = 2,
) -> Path:
    """Serialize ``records`` to ``path`` as a JSON array.

    Returns:
        ``path`` as written.
    """
    payload = [r.to_json_dict() for r in records]
    export_to_json(payload, path, indent=indent)
    logger.info("Wrote %d records to %s", len(payload), path)
    return path


# ── Run report ────────────────────────────────────────────────────────────────


@dataclass
class CategorySummary:
    """Report line for one category.

    Attributes:
        category:         ``"items"``, ``"enchants"`` or ``"gems"``.
        state:            Final pipeline state (``"done"`` or ``"failed"``).
        input_entries:    Balanced entries found in the source array.
        parsed:           Records written.
        skipped:          Entries dropped (``parsed + skipped == input_entries``).
        truncated:        Unterminated trailing entries discarded.
        malformed_fields: Fields / stat pairs treated as absent.
        unknown_symbols:  Unmapped enum tokens encountered.
        output_path:      JSON file written, if any.
        error:            Failure reason for a failed category.
        skip_details:     One line per skipped entry.
        warning_details:  One line per malformed field.
    """

    category:         str
    state:            str
    input_entries:    int = 0
    parsed:           int = 0
    skipped:          int = 0
    truncated:        int = 0
    malformed_fields: int = 0
    unknown_symbols:  int = 0
    output_path:      Optional[str] = None
    error:            Optional[str] = None
    skip_details:     list[str] = field(default_factory=list)
    warning_details:  list[str] = field(default_factory=list)


@dataclass
class RunReport:
    """Combined report for one catalog run."""

    categories:           list[CategorySummary] = field(default_factory=list)
    items_by_phase:       dict[int, int] = field(default_factory=dict)
    gems_by_color:        dict[str, int] = field(default_factory=dict)
    unknown_symbol_count: int = 0
    unknown_symbols:      dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def total_parsed(self) -> int:
        return sum(c.parsed for c in self.categories)

    @property
    def total_skipped(self) -> int:
        return sum(c.skipped for c in self.categories)

    @property
    def failed_categories(self) -> list[str]:
        return [c.category for c in self.categories if c.state == "failed"]

    def summary_for(self, category: str) -> Optional[CategorySummary]:
        for summary in self.categories:
            if summary.category == category:
                return summary
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form; phase keys become strings as JSON requires."""
        data = asdict(self)
        data["items_by_phase"] = {str(k): v for k, v in self.items_by_phase.items()}
        data["total_parsed"] = self.total_parsed
        data["total_skipped"] = self.total_skipped
        data["failed_categories"] = self.failed_categories
        return data


def _summarize(result: "CategoryResult") -> CategorySummary:
    run = result.run
    return CategorySummary(
        category=run.category,
        state=run.state.value,
        input_entries=run.input_entries,
        parsed=run.records_parsed,
        skipped=run.entries_skipped,
        truncated=run.entries_truncated,
        malformed_fields=run.fields_malformed,
        unknown_symbols=run.unknown_symbols,
        output_path=run.output_path,
        error=run.error_message,
        skip_details=[str(s) for s in result.skips],
        warning_details=[str(w) for w in result.warnings],
    )


def build_run_report(results: Sequence["CategoryResult"]) -> RunReport:
    """Fold per-category results into one ``RunReport``."""
    report = RunReport(categories=[_summarize(r) for r in results])

    merged: dict[str, Counter[str]] = {}
    for result in results:
        if result.category == "items":
            report.items_by_phase = result.phase_counts()
        elif result.category == "gems":
            report.gems_by_color = result.color_counts()
        for family, tokens in result.unknown_symbols.items():
            merged.setdefault(family, Counter()).update(tokens)

    report.unknown_symbols = {
        family: dict(sorted(tokens.items())) for family, tokens in sorted(merged.items())
    }
    report.unknown_symbol_count = sum(c.unknown_symbols for c in report.categories)
    return report
