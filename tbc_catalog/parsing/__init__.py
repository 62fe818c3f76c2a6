"""
Parsing layer — everything between raw Go source text and typed field values.

Modules:
  splitter — depth-counted scanner; locates the array literal and splits entries
  fields   — shape-driven extraction of top-level fields; per-kind field tables
  enums    — EnumResolver with unknown-symbol accounting
  stats    — CompositeStatsParser for ``stats.Stats{…}`` composites
"""
