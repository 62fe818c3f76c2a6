"""
Record splitting for generated Go literal sources.

The sim data files declare one big slice literal per file::

    var Items = []Item{
        {Name: "Spellstrike Hood", ID: 24266, Type: proto.ItemType_ItemTypeHead, ...,
         Stats: stats.Stats{stats.Intellect: 12, stats.SpellPower: 46}},
        {Name: "...", ...},
    }

Entries are located with a depth-counted scanner rather than a regular
expression: balanced brackets are not a regular language, and a pattern that
assumes one level of nesting silently merges or drops entries once a record
grows a deeper composite field.

``scan_tokens()`` is the single scanner. In code it jumps straight to the
next character that can change depth or state (a bracket, comma, colon,
quote, or comment marker); a string literal (double-quoted or backtick raw
string) or a comment is then consumed whole and reported as one span.
Everything else in this package (locating the declaration, entry splitting,
top-level comma splitting, key/value splitting) only ever acts on tokens
tagged as code, so braces, commas, and colons inside names or comments never
count.
"""

from __future__ import annotations

import logging
import re
from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from tbc_catalog.exceptions import StructuralParseError

logger = logging.getLogger(__name__)

_OPENERS = "{[("
_CLOSERS = "}])"

# Everything that can end a run of plain code.
_CODE_STOP_RE = re.compile(r'[{}\[\](),:"`]|//|/\*')
# Rest of a double-quoted string: escapes honoured, ends at the quote, a
# newline (unterminated string) or end of text.
_STRING_TAIL_RE = re.compile(r'(?:[^"\\\n]|\\.?)*(?:["\n]|\Z)', re.DOTALL)


class ScanState(Enum):
    """What a scanned span is."""

    CODE = "code"
    STRING = "string"
    RAW_STRING = "raw_string"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"


_COMMENTS = (ScanState.LINE_COMMENT, ScanState.BLOCK_COMMENT)

Token = tuple[int, int, ScanState]


def scan_tokens(text: str, pos: int = 0) -> Iterator[Token]:
    """Yield ``(start, end, state)`` spans of ``text`` from ``pos`` onwards.

    Code spans are single punctuation characters (``{}[](),:``); plain code
    between them is never yielded. String and comment spans cover the whole
    literal or comment, delimiters included. A line comment stops before its
    newline. An unterminated double-quoted string ends at (and includes) the
    newline so that one bad quote cannot swallow the rest of the file;
    unterminated raw strings and block comments run to the end of the text.
    """
    n = len(text)
    while True:
        match = _CODE_STOP_RE.search(text, pos)
        if match is None:
            return
        start = match.start()
        marker = match.group()

        if marker == '"':
            end = _STRING_TAIL_RE.match(text, start + 1).end()
            state = ScanState.STRING
        elif marker == "`":
            close = text.find("`", start + 1)
            end = n if close < 0 else close + 1
            state = ScanState.RAW_STRING
        elif marker == "//":
            close = text.find("\n", start + 2)
            end = n if close < 0 else close
            state = ScanState.LINE_COMMENT
        elif marker == "/*":
            close = text.find("*/", start + 2)
            end = n if close < 0 else close + 2
            state = ScanState.BLOCK_COMMENT
        else:
            end = match.end()
            state = ScanState.CODE

        yield start, end, state
        pos = end


def strip_comments(text: str) -> str:
    """Return ``text`` with every ``//`` and ``/* */`` comment removed."""
    pieces: list[str] = []
    cursor = 0
    for start, end, state in scan_tokens(text):
        if state in _COMMENTS:
            pieces.append(text[cursor:start])
            cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


def find_matching_close(text: str, open_index: int) -> Optional[int]:
    """Return the index of the bracket closing the one at ``open_index``.

    All three bracket kinds share one depth counter. Returns ``None`` when
    the text ends before depth returns to zero.
    """
    depth = 0
    for start, _, state in scan_tokens(text, open_index):
        if state is not ScanState.CODE:
            continue
        ch = text[start]
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth == 0:
                return start
    return None


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split ``text`` on ``sep`` where it appears outside brackets and strings.

    Comments are cut out in the same pass. Segments are stripped of
    surrounding whitespace; empty segments (from trailing separators) are
    dropped.
    """
    if len(sep) != 1 or sep not in ",:":
        raise ValueError(f"unsupported separator {sep!r}")
    parts: list[str] = []
    pieces: list[str] = []
    depth = 0
    cursor = 0
    for start, end, state in scan_tokens(text):
        if state in _COMMENTS:
            pieces.append(text[cursor:start])
            cursor = end
            continue
        if state is not ScanState.CODE:
            continue
        ch = text[start]
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == sep and depth == 0:
            pieces.append(text[cursor:start])
            parts.append("".join(pieces).strip())
            pieces = []
            cursor = end
    pieces.append(text[cursor:])
    parts.append("".join(pieces).strip())
    return [p for p in parts if p]


def split_key_value(segment: str) -> Optional[tuple[str, str]]:
    """Split a ``Key: value`` segment on its first top-level colon."""
    depth = 0
    for start, end, state in scan_tokens(segment):
        if state is not ScanState.CODE:
            continue
        ch = segment[start]
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        elif ch == ":" and depth == 0:
            key = segment[:start].strip()
            value = segment[end:].strip()
            if not key:
                return None
            return key, value
    return None


# ── Entries ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LiteralEntry:
    """One brace-delimited record inside the top-level array literal.

    Attributes:
        index: Zero-based position among the balanced entries of the block.
        text:  The entry text, including its outer braces.
    """

    index: int
    text: str

    @property
    def body(self) -> str:
        """The text between the outer braces."""
        return self.text[1:-1]


@dataclass
class SplitResult:
    """Entries found in one array block.

    Attributes:
        entries:   Balanced entries in source order.
        truncated: Number of unterminated trailing entries that were discarded.
    """

    entries: list[LiteralEntry] = field(default_factory=list)
    truncated: int = 0


def _declaration_pattern(collection: str) -> re.Pattern[str]:
    # ``var Items = []Item{``  or  ``Items = [``
    return re.compile(
        rf"\b{re.escape(collection)}\s*:?=\s*(?:\[\]\s*[\w.]+\s*(\{{)|(\[))"
    )


class _CodeMask:
    """Answers whether an offset of ``text`` lies outside strings and comments."""

    def __init__(self, text: str) -> None:
        spans = [(s, e) for s, e, state in scan_tokens(text) if state is not ScanState.CODE]
        self._starts = [s for s, _ in spans]
        self._ends = [e for _, e in spans]

    def is_code(self, offset: int) -> bool:
        i = bisect_right(self._starts, offset) - 1
        return i < 0 or offset >= self._ends[i]


def locate_array_block(
    text: str,
    collection: str,
    path: Optional[Path] = None,
) -> str:
    """Return the text inside the ``collection`` array literal.

    Args:
        text:       Full source text.
        collection: Declared collection name, e.g. ``"Items"``.
        path:       Source path, used only in error messages.

    Returns:
        The text between the array's opening and closing brackets. When the
        literal is never closed, the remainder of the file is returned and a
        warning is logged.

    Raises:
        StructuralParseError: If no declaration of ``collection`` is found
            in code. Mentions inside comments or string literals do not count.
    """
    mask: Optional[_CodeMask] = None
    open_index: Optional[int] = None
    for match in _declaration_pattern(collection).finditer(text):
        if mask is None:
            mask = _CodeMask(text)
        opener = match.start(1) if match.group(1) else match.start(2)
        if mask.is_code(match.start()) and mask.is_code(opener):
            open_index = opener
            break
        logger.debug("Ignoring '%s' declaration inside a comment or string at offset %d",
                     collection, match.start())
    if open_index is None:
        raise StructuralParseError(collection, path)

    close_index = find_matching_close(text, open_index)
    if close_index is None:
        logger.warning(
            "Array literal '%s' is never closed%s; scanning to end of file",
            collection, f" in {path}" if path else "",
        )
        return text[open_index + 1:]
    return text[open_index + 1:close_index]


def split_entries(block: str) -> SplitResult:
    """Split an array block into its top-level brace-delimited entries.

    An entry starts when brace depth goes from 0 to 1 and ends when it
    returns to 0. Anything between entries (commas, whitespace, comments)
    is ignored.
    """
    result = SplitResult()
    depth = 0
    start = -1

    for i, _, state in scan_tokens(block):
        if state is not ScanState.CODE:
            continue
        ch = block[i]
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}":
            if depth == 0:
                logger.warning("Unbalanced '}' at offset %d ignored", i)
                continue
            depth -= 1
            if depth == 0:
                result.entries.append(
                    LiteralEntry(index=len(result.entries), text=block[start:i + 1])
                )

    if depth > 0:
        result.truncated = 1
        logger.warning(
            "Unterminated entry after entry #%d discarded: %r",
            len(result.entries) - 1, block[start:start + 80],
        )

    return result


def split_source(
    text: str,
    collection: str,
    path: Optional[Path] = None,
) -> SplitResult:
    """Locate ``collection`` in ``text`` and split it into entries."""
    return split_entries(locate_array_block(text, collection, path))
