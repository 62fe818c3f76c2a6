"""
Pipeline layer — turns one source file per category into one JSON collection.

Modules:
  builder      — RecordBuilder: defaulting, required fields, duplicate IDs
  base         — CategoryStage state machine and CategoryResult
  stages       — ItemsStage, EnchantsStage, GemsStage
  orchestrator — runs the categories (optionally in parallel) and builds the report
"""
