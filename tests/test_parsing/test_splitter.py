"""
Tests for tbc_catalog/parsing/splitter.py.

What we test
------------
scan_tokens():
  - Punctuation in code is yielded one character at a time; plain code is not.
  - A string or comment is one span, delimiters included.
  - An unterminated string ends at the newline.
  - Escaped quotes do not end a string.

split_top_level() / split_key_value():
  - Commas and colons inside brackets or strings never split.
  - Trailing separators and comments are dropped.

locate_array_block():
  - Finds ``var Items = []Item{`` and bare ``Items = [`` declarations.
  - Missing declaration raises StructuralParseError naming the collection.
  - Declarations mentioned inside comments or strings are ignored.
  - An unclosed literal returns the rest of the file.

split_entries():
  - Braces inside strings, raw strings, and comments are ignored.
  - Entries nested three or more levels deep split correctly.
  - Unterminated trailing entry is discarded and counted.
  - A stray closing brace is ignored.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tbc_catalog.exceptions import StructuralParseError
from tbc_catalog.parsing.splitter import (
    ScanState,
    find_matching_close,
    locate_array_block,
    scan_tokens,
    split_entries,
    split_key_value,
    split_source,
    split_top_level,
    strip_comments,
)


# ── scan_tokens ───────────────────────────────────────────────────────────────

def _tokens(text: str) -> list[tuple[str, ScanState]]:
    return [(text[start:end], state) for start, end, state in scan_tokens(text)]


class TestScanTokens:
    def test_punctuation_and_string(self):
        assert _tokens('{a: "b,c"}') == [
            ("{", ScanState.CODE),
            (":", ScanState.CODE),
            ('"b,c"', ScanState.STRING),
            ("}", ScanState.CODE),
        ]

    def test_plain_code_not_yielded(self):
        assert _tokens("stats.Stamina 16") == []

    def test_unterminated_string_ends_at_newline(self):
        assert _tokens('x"ab\n}') == [('"ab\n', ScanState.STRING), ("}", ScanState.CODE)]

    def test_escaped_quote_stays_in_string(self):
        assert _tokens(r'"a\"b"c') == [(r'"a\"b"', ScanState.STRING)]

    def test_trailing_backslash(self):
        assert _tokens('"a\\') == [('"a\\', ScanState.STRING)]

    def test_raw_string(self):
        assert _tokens("`a}`b,") == [("`a}`", ScanState.RAW_STRING), (",", ScanState.CODE)]

    def test_comments(self):
        assert _tokens("a/*}*/b//x,\n:") == [
            ("/*}*/", ScanState.BLOCK_COMMENT),
            ("//x,", ScanState.LINE_COMMENT),
            (":", ScanState.CODE),
        ]

    def test_unterminated_block_comment_runs_to_end(self):
        assert _tokens("{ /* }") == [("{", ScanState.CODE), ("/* }", ScanState.BLOCK_COMMENT)]

    def test_start_offset(self):
        assert [start for start, _, _ in scan_tokens("{}{", 2)] == [2]


def test_strip_comments():
    assert strip_comments("a // b\nc /* d */ e") == "a \nc  e"


def test_strip_comments_keeps_comment_markers_inside_strings():
    assert strip_comments('"http://x" // y') == '"http://x" '


class TestFindMatchingClose:
    def test_mixed_brackets(self):
        assert find_matching_close("a{b[c]d}e", 1) == 7

    def test_ignores_brackets_in_strings(self):
        text = '{"}"}'
        assert find_matching_close(text, 0) == 4

    def test_unterminated_returns_none(self):
        assert find_matching_close("{ {", 0) is None


# ── Top-level splitting ───────────────────────────────────────────────────────

class TestSplitTopLevel:
    def test_nested_and_quoted_commas(self):
        text = 'A: 1, B: x.Y{C: 2, D: 3}, E: "x, y",'
        assert split_top_level(text) == ["A: 1", "B: x.Y{C: 2, D: 3}", 'E: "x, y"']

    def test_drops_comments_and_blank_segments(self):
        text = "A: 1, // first\n B: 2, /* gone */ ,"
        assert split_top_level(text) == ["A: 1", "B: 2"]

    def test_empty(self):
        assert split_top_level("  ") == []

    def test_colon_separator(self):
        assert split_top_level('a: "b:c" : d', sep=":") == ["a", '"b:c"', "d"]

    def test_unsupported_separator(self):
        with pytest.raises(ValueError):
            split_top_level("a;b", sep=";")


class TestSplitKeyValue:
    def test_composite_value(self):
        assert split_key_value("Stats: stats.Stats{stats.Stamina: 6}") == (
            "Stats",
            "stats.Stats{stats.Stamina: 6}",
        )

    def test_colon_in_string_value(self):
        assert split_key_value('Name: "Ring: of Power"') == ("Name", '"Ring: of Power"')

    def test_no_colon(self):
        assert split_key_value("proto.Class_ClassMage") is None

    def test_empty_key(self):
        assert split_key_value(": 5") is None


# ── Locating the array literal ────────────────────────────────────────────────

class TestLocateArrayBlock:
    def test_go_slice_declaration(self):
        text = "package items\n\nvar Items = []Item{\n\t{ID: 1},\n\t{ID: 2},\n}\n"
        block = locate_array_block(text, "Items")
        assert block.strip() == "{ID: 1},\n\t{ID: 2},"

    def test_bare_bracket_declaration(self):
        text = "Items = [ {ID: 1}, {ID: 2} ]"
        assert split_entries(locate_array_block(text, "Items")).entries[1].text == "{ID: 2}"

    def test_other_collections_not_confused(self):
        text = "var Gems = []Gem{{ID: 9}}\nvar Items = []Item{{ID: 1}}\n"
        split = split_source(text, "Items")
        assert [e.text for e in split.entries] == ["{ID: 1}"]

    def test_missing_declaration_raises(self):
        with pytest.raises(StructuralParseError, match="'Items'") as exc_info:
            locate_array_block("package items\n", "Items", path=Path("all_items.go"))
        assert exc_info.value.collection == "Items"
        assert "all_items.go" in str(exc_info.value)

    def test_declaration_in_line_comment_ignored(self):
        text = (
            "// Items = []Item{ } is generated below\n"
            "var Items = []Item{\n"
            '\t{ID: 1, Name: "a"},\n'
            "}\n"
        )
        split = split_source(text, "Items")
        assert [e.text for e in split.entries] == ['{ID: 1, Name: "a"}']

    def test_declaration_in_block_comment_ignored(self):
        text = "/*\nvar Items = []Item{{ID: 0}}\n*/\nvar Items = []Item{{ID: 1}}\n"
        assert [e.text for e in split_source(text, "Items").entries] == ["{ID: 1}"]

    def test_declaration_in_string_ignored(self):
        text = 'var doc = "Items = [ {x} ]"\nItems = [ {ID: 1, Name: "a"} ]'
        split = split_source(text, "Items")
        assert [e.text for e in split.entries] == ['{ID: 1, Name: "a"}']

    def test_only_commented_declaration_raises(self):
        with pytest.raises(StructuralParseError):
            locate_array_block("// var Items = []Item{}\npackage items\n", "Items")

    def test_unclosed_literal_scans_to_end(self):
        text = "var Items = []Item{\n{ID: 1},\n{ID: 2"
        split = split_source(text, "Items")
        assert len(split.entries) == 1
        assert split.truncated == 1


# ── Entry splitting ───────────────────────────────────────────────────────────

class TestSplitEntries:
    def test_braces_in_strings_ignored(self):
        block = '{Name: "Odd } name {", ID: 1}, {Name: "Second", ID: 2}'
        result = split_entries(block)
        assert [e.text for e in result.entries] == [
            '{Name: "Odd } name {", ID: 1}',
            '{Name: "Second", ID: 2}',
        ]
        assert result.truncated == 0

    def test_escaped_quote_in_string(self):
        block = r'{Name: "A \"quoted\" } name", ID: 1}'
        assert len(split_entries(block).entries) == 1

    def test_raw_string(self):
        assert len(split_entries("{Name: `raw } text`, ID: 1}").entries) == 1

    def test_braces_in_comments_ignored(self):
        block = "{ID: 1}, // stray } brace\n /* { */ {ID: 2}"
        assert [e.text for e in split_entries(block).entries] == ["{ID: 1}", "{ID: 2}"]

    def test_deep_nesting(self):
        block = (
            '{ID: 1, Name: "a"},\n'
            '{ID: 2, Extra: A{B: C{D: E{F: 1}}}, Name: "b"},\n'
            '{ID: 3, Name: "c"}'
        )
        entries = split_entries(block).entries
        assert len(entries) == 3
        assert entries[1].text == '{ID: 2, Extra: A{B: C{D: E{F: 1}}}, Name: "b"}'
        assert entries[2].text == '{ID: 3, Name: "c"}'

    def test_indices_and_body(self):
        entries = split_entries("{ID: 1}, {ID: 2}").entries
        assert [e.index for e in entries] == [0, 1]
        assert entries[0].body == "ID: 1"

    def test_unterminated_tail_discarded(self):
        result = split_entries("{ID: 1}, {ID: 2, Stats: stats.Stats{")
        assert [e.text for e in result.entries] == ["{ID: 1}"]
        assert result.truncated == 1

    def test_stray_close_ignored(self):
        result = split_entries("{ID: 1}} , {ID: 2}")
        assert [e.text for e in result.entries] == ["{ID: 1}", "{ID: 2}"]

    def test_empty_block(self):
        result = split_entries("\n\t")
        assert result.entries == []
        assert result.truncated == 0


def test_sample_items_file(items_go):
    split = split_source(items_go, "Items")
    assert len(split.entries) == 5
    assert split.truncated == 0
    assert 'Name: "Thori\'dal, the Stars\' Fury"' in split.entries[2].text


def test_large_generated_file():
    entry = (
        '\t{{ID: {id}, Name: "Item {id}", Type: proto.ItemType_ItemTypeHead, '
        "Stats: stats.Stats{{stats.Stamina: 16, stats.SpellPower: 46}}, "
        "GemSockets: []proto.GemColor{{proto.GemColor_GemColorRed}}}}, // generated\n"
    )
    text = "var Items = []Item{\n" + "".join(entry.format(id=i) for i in range(6000)) + "}\n"
    split = split_source(text, "Items")
    assert len(split.entries) == 6000
    assert split.entries[-1].text.startswith("{ID: 5999,")
