"""
Run metadata — one audit record per category pipeline run.

``RunMetadata`` is the only mutable model in the package: its ``state`` and
counters are updated as the run moves through

    Idle → Tokenizing → Extracting → Building → Emitting → Done

with ``Failed`` reachable only from ``Tokenizing`` (the array literal could
not be located or the source could not be read). Per-entry problems never
change the state; they only move the counters.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PipelineState(StrEnum):
    IDLE = "idle"
    TOKENIZING = "tokenizing"
    EXTRACTING = "extracting"
    BUILDING = "building"
    EMITTING = "emitting"
    DONE = "done"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.TOKENIZING}),
    PipelineState.TOKENIZING: frozenset({PipelineState.EXTRACTING, PipelineState.FAILED}),
    PipelineState.EXTRACTING: frozenset({PipelineState.BUILDING}),
    PipelineState.BUILDING: frozenset({PipelineState.EMITTING}),
    PipelineState.EMITTING: frozenset({PipelineState.DONE}),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}


class RunMetadata(BaseModel):
    """Execution record for one category run.

    Attributes:
        run_slug: UUID4 string identifying this run.
        category: ``"items"``, ``"enchants"`` or ``"gems"``.
        state: Current pipeline state.
        source_path: Input file read by this run.
        output_path: JSON file written, once emitted.
        input_entries: Balanced entries found by the splitter.
        records_parsed: Records that made it into the output collection.
        entries_skipped: Entries dropped for a missing/malformed required field.
        entries_truncated: Unterminated trailing entries discarded by the splitter.
        fields_malformed: Present fields (or stat pairs) treated as absent.
        unknown_symbols: Unmapped enum tokens passed through or dropped.
        error_message: Reason for ``state == "failed"``.
        started_at: UTC datetime when the run began.
        finished_at: UTC datetime when the run reached a terminal state.
    """

    # Not frozen — state and counters are updated during execution
    model_config = ConfigDict(frozen=False)

    run_slug: str
    category: str
    state: PipelineState = PipelineState.IDLE
    source_path: Optional[str] = None
    output_path: Optional[str] = None
    input_entries: int = 0
    records_parsed: int = 0
    entries_skipped: int = 0
    entries_truncated: int = 0
    fields_malformed: int = 0
    unknown_symbols: int = 0
    error_message: Optional[str] = None
    started_at: datetime
    finished_at: Optional[datetime] = None

    def advance(self, new_state: PipelineState) -> None:
        """Move to ``new_state``.

        Raises:
            RuntimeError: If the transition is not allowed from the current state.
        """
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal pipeline transition {self.state.value} -> {new_state.value} "
                f"for run {self.run_slug}."
            )
        self.state = new_state
