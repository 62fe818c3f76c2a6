"""
Tests for tbc_catalog/parsing/fields.py.

What we test
------------
parse_number():
  - Integral values come back as int (``10.0`` -> ``10``).
  - Fractions, negatives, surrounding whitespace.
  - Exponents, words, and fractions in integer mode are rejected.

Field shapes:
  - Each shape accepts its syntax and raises MalformedField otherwise.
  - NumberShape(minimum=1) rejects phase 0.

extract_fields() / FieldExtractor:
  - Only top-level keys are read; a nested ``Name`` never shadows the entry's.
  - First occurrence of a duplicate key wins.
  - Absent fields are left out; malformed fields are recorded and left out.
"""

from __future__ import annotations

import pytest

from tbc_catalog.exceptions import MalformedField, MalformedNumber
from tbc_catalog.parsing.fields import (
    ABSENT,
    ITEM_FIELDS,
    BoolShape,
    CompositeShape,
    EnumArrayShape,
    EnumShape,
    FieldExtractor,
    NumberShape,
    StringShape,
    extract,
    extract_fields,
    parse_number,
)
from tbc_catalog.parsing.splitter import LiteralEntry
from tbc_catalog.taxonomy.enum_tables import EnumFamily


# ── parse_number ──────────────────────────────────────────────────────────────

class TestParseNumber:
    def test_integer(self):
        value = parse_number("10")
        assert value == 10
        assert isinstance(value, int)

    def test_integral_float_becomes_int(self):
        value = parse_number("10.0")
        assert value == 10
        assert isinstance(value, int)

    def test_fraction(self):
        assert parse_number("2.7") == pytest.approx(2.7)

    def test_negative(self):
        assert parse_number("-5") == -5

    def test_whitespace(self):
        assert parse_number(" 7 ") == 7

    @pytest.mark.parametrize("raw", ["abc", "1e5", "", "1.", ".5", "NaN"])
    def test_malformed(self, raw):
        with pytest.raises(MalformedNumber):
            parse_number(raw, "Ilvl")

    def test_fraction_rejected_in_integer_mode(self):
        with pytest.raises(MalformedNumber):
            parse_number("2.5", "ID", integer=True)

    def test_malformed_number_is_malformed_field(self):
        with pytest.raises(MalformedField) as exc_info:
            parse_number("x", "Phase")
        assert exc_info.value.field == "Phase"


# ── Shapes ────────────────────────────────────────────────────────────────────

class TestShapes:
    def test_string(self):
        assert StringShape().extract("Name", '"Spellstrike Hood"') == "Spellstrike Hood"

    def test_string_rejects_bare_word(self):
        with pytest.raises(MalformedField):
            StringShape().extract("Name", "Spellstrike")

    def test_number_minimum(self):
        shape = NumberShape(integer=True, minimum=1)
        assert shape.extract("Phase", "3") == 3
        with pytest.raises(MalformedNumber):
            shape.extract("Phase", "0")

    def test_bool(self):
        assert BoolShape().extract("Unique", "true") is True
        assert BoolShape().extract("Unique", "false") is False
        with pytest.raises(MalformedField):
            BoolShape().extract("Unique", "1")

    def test_enum(self):
        shape = EnumShape(EnumFamily.ITEM_SLOT)
        assert shape.extract("Type", "proto.ItemType_ItemTypeHead") == "proto.ItemType_ItemTypeHead"
        with pytest.raises(MalformedField):
            shape.extract("Type", '"Head"')

    def test_composite(self):
        shape = CompositeShape()
        assert shape.extract("Stats", "stats.Stats{stats.Stamina: 6}") == "stats.Stamina: 6"
        assert shape.extract("Stats", "stats.Stats{}") == ""
        assert shape.extract("Stats", "Stats{ Strength: 10 }") == " Strength: 10 "
        with pytest.raises(MalformedField):
            shape.extract("Stats", "42")

    def test_enum_array(self):
        shape = EnumArrayShape(EnumFamily.GEM_COLOR)
        raw = "[]proto.GemColor{proto.GemColor_GemColorRed, proto.GemColor_GemColorRed,}"
        assert shape.extract("GemSockets", raw) == [
            "proto.GemColor_GemColorRed",
            "proto.GemColor_GemColorRed",
        ]
        assert shape.extract("GemSockets", "[]proto.GemColor{}") == []

    def test_enum_array_rejects_scalar(self):
        with pytest.raises(MalformedField):
            EnumArrayShape(EnumFamily.CLASS_NAME).extract("ClassAllowlist", "proto.Class_ClassMage")

    def test_enum_array_rejects_non_symbol_element(self):
        with pytest.raises(MalformedField):
            EnumArrayShape(EnumFamily.CLASS_NAME).extract("ClassAllowlist", '[]proto.Class{"Mage"}')


# ── Extraction ────────────────────────────────────────────────────────────────

class TestExtractFields:
    def test_nested_name_does_not_shadow(self):
        entry = LiteralEntry(0, '{Stats: X{Name: "Inner"}, Name: "Outer", ID: 7}')
        fields = extract_fields(entry)
        assert list(fields) == ["Stats", "Name", "ID"]
        assert fields["Name"] == '"Outer"'

    def test_first_occurrence_wins(self):
        fields = extract_fields(LiteralEntry(0, "{ID: 1, ID: 2}"))
        assert fields == {"ID": "1"}

    def test_positional_segments_ignored(self):
        fields = extract_fields(LiteralEntry(0, "{proto.Class_ClassMage, ID: 4}"))
        assert fields == {"ID": "4"}

    def test_extract_absent(self):
        assert extract({}, "Phase", NumberShape()) is ABSENT
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"


class TestFieldExtractor:
    def test_present_fields_typed(self):
        entry = LiteralEntry(
            3,
            '{Name: "Dragonmaw", ID: 28438, Type: proto.ItemType_ItemTypeWeapon, '
            "SwingSpeed: 2.7, Unique: false}",
        )
        extracted = FieldExtractor(ITEM_FIELDS).extract_entry(entry)
        assert extracted.index == 3
        assert extracted.get("ID") == 28438
        assert extracted.get("Name") == "Dragonmaw"
        assert extracted.get("SwingSpeed") == pytest.approx(2.7)
        assert extracted.get("Unique") is False
        assert extracted.get("Phase") is ABSENT
        assert extracted.malformed == ()

    def test_malformed_fields_recorded_and_dropped(self):
        entry = LiteralEntry(0, '{ID: 1, Name: "x", Phase: 0, Ilvl: abc}')
        extracted = FieldExtractor(ITEM_FIELDS).extract_entry(entry)
        assert "Phase" not in extracted.values
        assert "Ilvl" not in extracted.values
        assert extracted.is_malformed("Phase")
        assert extracted.is_malformed("Ilvl")
        assert not extracted.is_malformed("ID")
        assert len(extracted.malformed) == 2

    def test_undeclared_fields_ignored(self):
        entry = LiteralEntry(0, '{ID: 1, Name: "x", Heroic: true}')
        extracted = FieldExtractor(ITEM_FIELDS).extract_entry(entry)
        assert set(extracted.values) == {"ID", "Name"}
