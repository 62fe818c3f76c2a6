"""
tbc_catalog.reporting — Catalog output and run reporting.

Modules:
  export     — JSON file writer.
  emitter    — Collection sinks and RunReport assembly.
  formatters — ASCII terminal formatters for the Typer CLI.
"""
