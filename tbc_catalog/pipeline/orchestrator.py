"""
Full catalog run: items, enchants and gems, then the combined report.

The three categories are independent: no shared mutable state and no
ordering between them. With ``pipeline.parallel`` enabled each category runs
on its own worker thread and the orchestrator joins them all before building
the report; sequential mode produces byte-identical output.

Failure isolation
-----------------
- ``StructuralParseError`` / unreadable or non-UTF-8 source: that category is reported as
  ``failed`` and produces no output file; the others still run.
- Any other exception is a bug and propagates to the caller.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from tbc_catalog.config import CATEGORIES, AppConfig
from tbc_catalog.models.meta import PipelineState
from tbc_catalog.pipeline.base import TOKENIZING_ERRORS, CategoryResult, CategoryStage
from tbc_catalog.pipeline.stages import STAGES
from tbc_catalog.reporting.emitter import RunReport, build_run_report
from tbc_catalog.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class CatalogRunResult:
    """Outcome of one orchestrated run.

    Attributes:
        results:     Per-category results, in ``CATEGORIES`` order.
        report:      Combined run report.
        started_at:  UTC datetime when the run started.
        finished_at: UTC datetime when every category had finished.
    """

    results:     dict[str, CategoryResult] = field(default_factory=dict)
    report:      Optional[RunReport]       = None
    started_at:  Optional[datetime]        = None
    finished_at: Optional[datetime]        = None

    @property
    def failed(self) -> bool:
        return any(r.failed for r in self.results.values())


class CatalogOrchestrator:
    """Run the selected category pipelines and assemble the run report.

    Args:
        config: AppConfig for this run.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def run(self, categories: Optional[Iterable[str]] = None) -> CatalogRunResult:
        """Parse every selected category and build the combined report.

        Args:
            categories: Subset of ``CATEGORIES`` to process; all when ``None``.

        Raises:
            ValueError: If an unknown category name is requested.
        """
        selected = _select(categories)
        outcome = CatalogRunResult(started_at=utcnow())
        logger.info(
            "Catalog run starting | categories=%s parallel=%s",
            ",".join(selected), self.config.pipeline.parallel,
        )

        if self.config.pipeline.parallel and len(selected) > 1:
            workers = min(self.config.pipeline.max_workers, len(selected))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="catalog") as pool:
                futures = {c: pool.submit(self._run_category, c) for c in selected}
                results = {c: futures[c].result() for c in selected}
        else:
            results = {c: self._run_category(c) for c in selected}

        outcome.results = results
        outcome.report = build_run_report(list(results.values()))
        outcome.finished_at = utcnow()

        logger.info(
            "Catalog run finished | parsed=%d skipped=%d unknown_symbols=%d failed=%s",
            outcome.report.total_parsed, outcome.report.total_skipped,
            outcome.report.unknown_symbol_count, outcome.failed,
        )
        return outcome

    def _run_category(self, category: str) -> CategoryResult:
        stage: CategoryStage = STAGES[category](config=self.config)
        try:
            return stage.run()
        except TOKENIZING_ERRORS:
            # Only tokenizing failures are isolated; the stage already logged them.
            run = stage.last_run
            if run is None or run.state is not PipelineState.FAILED:
                raise
            return CategoryResult(run=run)


def _select(categories: Optional[Iterable[str]]) -> list[str]:
    if categories is None:
        return list(CATEGORIES)
    requested = set(categories)
    unknown = requested - set(CATEGORIES)
    if unknown:
        raise ValueError(
            f"Unknown categories {sorted(unknown)}. Valid: {list(CATEGORIES)}."
        )
    return [c for c in CATEGORIES if c in requested]
