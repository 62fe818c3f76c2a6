"""
tbc_catalog — WoWSims TBC data → catalog JSON.

Subpackages:
  taxonomy   — static enum symbol tables
  parsing    — record splitting, field extraction, enum and stat resolution
  models     — catalog record schema and run metadata
  pipeline   — per-category stages, record builder, orchestrator
  reporting  — JSON sinks, run report, terminal formatting
"""

__version__ = "0.1.0"
