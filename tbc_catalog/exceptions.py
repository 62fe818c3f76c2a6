"""
Exception taxonomy for the catalog parser.

Only ``StructuralParseError`` escapes a category pipeline. Every other
condition is recovered where it occurs and aggregated into the run report:

  - ``EntrySkipped``     — a required field is missing or malformed; the
                           entry is dropped and counted.
  - ``MalformedField``   — a present field does not match its declared
                           shape; it is treated as absent.
  - ``MalformedNumber``  — the numeric flavour of ``MalformedField``.

Unknown enum symbols are not exceptions at all: the resolver passes the raw
token through and counts it (see ``tbc_catalog.parsing.enums``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class CatalogParseError(Exception):
    """Base class for every parser error."""


class StructuralParseError(CatalogParseError):
    """The top-level array literal could not be located in a source file."""

    def __init__(self, collection: str, path: Optional[Path] = None) -> None:
        self.collection = collection
        self.path = path
        where = f" in {path}" if path is not None else ""
        super().__init__(
            f"Could not locate the '{collection}' array literal{where}."
        )


class EntrySkipped(CatalogParseError):
    """One entry lacks a required field and is dropped from the collection.

    Attributes:
        index: Zero-based position of the entry in the source array.
        field: Source field name that was missing or malformed.
        reason: ``"missing"``, ``"malformed"`` or ``"duplicate"``.
    """

    def __init__(self, index: int, field: str, reason: str = "missing") -> None:
        self.index = index
        self.field = field
        self.reason = reason
        super().__init__(f"entry #{index}: {reason} {field}")


class MalformedField(CatalogParseError):
    """A field value does not match the syntactic shape declared for it."""

    def __init__(self, field: str, raw: str, expected: str) -> None:
        self.field = field
        self.raw = raw
        self.expected = expected
        super().__init__(f"Field '{field}' expected {expected}, got {raw[:60]!r}")


class MalformedNumber(MalformedField):
    """A field expected to be numeric did not parse as a finite number."""

    def __init__(self, field: str, raw: str) -> None:
        super().__init__(field, raw, "a number")
