"""
Abstract base class for the per-category catalog pipelines.

Every category (items, enchants, gems) follows the same contract:
  1. Receive ``AppConfig`` at construction.
  2. ``run(source_path=None, output_path=None)`` is the sole public API.
  3. ``run()`` creates a ``RunMetadata`` record and walks it through
     Tokenizing → Extracting → Building → Emitting → Done.
  4. Subclasses only declare ``category`` and ``kind``; field tables and
     build rules are looked up from the kind.

Failure policy:
  - An unreadable or non-UTF-8 file, or a missing array literal, marks the
    run ``failed`` and is re-raised (``TOKENIZING_ERRORS``).
  - Per-entry problems are absorbed: skipped entries and malformed fields are
    counted on the run record and kept as diagnostics on the result.

A category run owns its resolver, builder and counters outright, so several
categories can run on worker threads without sharing any mutable state.

Usage::

    stage = ItemsStage(config=app_config)
    result = stage.run()
    print(result.run.records_parsed, result.run.entries_skipped)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from uuid import uuid4

from tbc_catalog.config import AppConfig
from tbc_catalog.exceptions import CatalogParseError, EntrySkipped, MalformedField
from tbc_catalog.models.meta import PipelineState, RunMetadata
from tbc_catalog.parsing.enums import EnumResolver
from tbc_catalog.parsing.fields import ExtractedEntry, FieldExtractor
from tbc_catalog.parsing.splitter import split_source
from tbc_catalog.pipeline.builder import (
    FIELD_TABLES,
    CatalogRecordType,
    RecordBuilder,
    RecordKind,
)
from tbc_catalog.reporting.emitter import write_collection
from tbc_catalog.utils.logging import category_logger
from tbc_catalog.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

# Failures that mark a category run failed instead of propagating as bugs.
TOKENIZING_ERRORS = (OSError, UnicodeDecodeError, CatalogParseError)


@dataclass
class CategoryResult:
    """Everything one category run produced.

    Attributes:
        run:             Final ``RunMetadata`` (state, counters, timestamps).
        records:         Output records in source order.
        skips:           One ``EntrySkipped`` per dropped entry.
        warnings:        Malformed fields and stat pairs, in encounter order.
        unknown_symbols: Unmapped enum tokens by family, with occurrence counts.
    """

    run: RunMetadata
    records: list[CatalogRecordType] = field(default_factory=list)
    skips: list[EntrySkipped] = field(default_factory=list)
    warnings: list[MalformedField] = field(default_factory=list)
    unknown_symbols: dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def category(self) -> str:
        return self.run.category

    @property
    def failed(self) -> bool:
        return self.run.state is PipelineState.FAILED

    def phase_counts(self) -> dict[int, int]:
        """Record count per phase, ascending."""
        return dict(sorted(Counter(r.phase for r in self.records).items()))

    def color_counts(self) -> dict[str, int]:
        """Record count per gem colour, alphabetical (gems only)."""
        colors = Counter(getattr(r, "color", None) for r in self.records)
        colors.pop(None, None)
        return dict(sorted(colors.items()))


class CategoryStage(ABC):
    """Abstract base for the three category pipelines.

    Subclasses must set ``category`` (config key: ``"items"``, ``"enchants"``,
    ``"gems"``) and ``kind`` (the ``RecordKind`` built).

    Attributes:
        config:   The application configuration for this run.
        last_run: Run record of the most recent ``run()`` call, kept so callers
                  can report a run that failed while tokenizing.
    """

    category: str

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.last_run: Optional[RunMetadata] = None

    @property
    @abstractmethod
    def kind(self) -> RecordKind:
        """Record kind built by this stage (a plain class attribute in subclasses)."""

    @property
    def collection_name(self) -> str:
        return self.config.sources.collection_name(self.category)

    def run(
        self,
        source_path: Optional[Path] = None,
        output_path: Optional[Path] = None,
    ) -> CategoryResult:
        """Parse one category source file and write its JSON collection.

        Args:
            source_path: Input file. Defaults to the configured source path.
            output_path: Output file. Defaults to the configured output path.

        Returns:
            ``CategoryResult`` whose ``run.state`` is ``done``.

        Raises:
            StructuralParseError: If the array literal cannot be located.
            OSError: If the source file cannot be read.
            UnicodeDecodeError: If the source file is not UTF-8.
        """
        source = Path(source_path or self.config.sources.source_path(self.category))
        target = Path(output_path or self.config.output.output_path(self.category))

        run = RunMetadata(
            run_slug=str(uuid4()),
            category=self.category,
            source_path=str(source),
            started_at=utcnow(),
        )
        self.last_run = run
        result = CategoryResult(run=run)
        log = category_logger(logger, self.category)
        log.info("Stage [%s] starting | run_slug=%s", self.category, run.run_slug)

        # ── Tokenizing ────────────────────────────────────────────────────────
        run.advance(PipelineState.TOKENIZING)
        try:
            text = source.read_text(encoding="utf-8")
            split = split_source(text, self.collection_name, path=source)
        except TOKENIZING_ERRORS as exc:
            run.advance(PipelineState.FAILED)
            run.error_message = str(exc)
            run.finished_at = utcnow()
            log.error(
                "Stage [%s] FAILED: %s | run_slug=%s", self.category, exc, run.run_slug
            )
            raise

        run.input_entries = len(split.entries)
        run.entries_truncated = split.truncated
        log.info(
            "Stage [%s] found %d entries in %s", self.category, run.input_entries, source.name
        )

        # ── Extracting ────────────────────────────────────────────────────────
        run.advance(PipelineState.EXTRACTING)
        extractor = FieldExtractor(FIELD_TABLES[self.kind])
        extracted: list[ExtractedEntry] = [extractor.extract_entry(e) for e in split.entries]
        for entry in extracted:
            result.warnings.extend(entry.malformed)

        # ── Building ──────────────────────────────────────────────────────────
        run.advance(PipelineState.BUILDING)
        resolver = EnumResolver()
        builder = RecordBuilder(self.kind, resolver)
        for entry in extracted:
            try:
                result.records.append(builder.build(entry))
            except EntrySkipped as skip:
                log.warning("Stage [%s] skipped %s", self.category, skip)
                result.skips.append(skip)
        result.warnings.extend(builder.warnings)
        result.unknown_symbols = resolver.unknown_symbols()

        run.records_parsed = len(result.records)
        run.entries_skipped = len(result.skips)
        run.fields_malformed = len(result.warnings)
        run.unknown_symbols = resolver.unknown_count

        # ── Emitting ──────────────────────────────────────────────────────────
        run.advance(PipelineState.EMITTING)
        write_collection(result.records, target, indent=self.config.output.indent)
        run.output_path = str(target)

        run.advance(PipelineState.DONE)
        run.finished_at = utcnow()
        log.info(
            "Stage [%s] completed | parsed=%d skipped=%d unknown_symbols=%d | run_slug=%s",
            self.category, run.records_parsed, run.entries_skipped,
            run.unknown_symbols, run.run_slug,
        )
        return result
