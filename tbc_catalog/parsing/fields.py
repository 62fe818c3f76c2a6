"""
Shape-driven field extraction.

An entry body is first split into its top-level ``Key: value`` pairs (see
``extract_fields``), so a ``Name:`` buried inside a nested composite can
never shadow the entry's own ``Name``. Each declared field is then matched
against exactly one ``FieldShape``:

  ============  =================================  ===========================
  Shape         Value syntax                       Extracted as
  ============  =================================  ===========================
  String        ``"…"``                            raw text, escapes kept
  Number        ``-?digits[.digits]``              ``int`` / ``float``
  Boolean       ``true`` / ``false``               ``bool``
  Enum          ``proto.Family_FamilyValue``       raw symbol
  Composite     ``stats.Stats{ Key: value, … }``   body text between braces
  EnumArray     ``[]proto.Type{ A, B, … }``        list of raw symbols
  ============  =================================  ===========================

Per-kind field tables (``ITEM_FIELDS``, ``ENCHANT_FIELDS``, ``GEM_FIELDS``)
declare which source fields are read and with which shape. Adding a field
is one table row; adding a syntax is one new ``FieldShape`` subclass.

Nothing here applies defaults: an unmatched field is simply absent.
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Optional, Union

from tbc_catalog.exceptions import MalformedField, MalformedNumber
from tbc_catalog.parsing.splitter import LiteralEntry, split_key_value, split_top_level
from tbc_catalog.taxonomy.enum_tables import EnumFamily

logger = logging.getLogger(__name__)

Number = Union[int, float]

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_SYMBOL_RE = re.compile(r"[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*")
_STRING_RE = re.compile(r'"(.*)"', re.DOTALL)
_COMPOSITE_RE = re.compile(r"[\w.]*\s*\{(.*)\}", re.DOTALL)
_ENUM_ARRAY_RE = re.compile(r"\[\]\s*[\w.]+\s*\{(.*)\}", re.DOTALL)


class _Absent:
    """Marker for a field that is not present in an entry."""

    _instance: ClassVar[Optional["_Absent"]] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def parse_number(text: str, field_name: str = "value", integer: bool = False) -> Number:
    """Parse a signed decimal literal.

    Integral values come back as ``int`` so that ``10`` and ``10.0`` both
    serialize as ``10``.

    Raises:
        MalformedNumber: If ``text`` is not a finite decimal (or not an
            integer when ``integer`` is set).
    """
    raw = text.strip()
    if not _NUMBER_RE.fullmatch(raw):
        raise MalformedNumber(field_name, text)
    value = float(raw)
    if not math.isfinite(value):
        raise MalformedNumber(field_name, text)
    if value.is_integer():
        return int(value) if "." in raw else int(raw)
    if integer:
        raise MalformedNumber(field_name, text)
    return value


# ── Field shapes ──────────────────────────────────────────────────────────────


class FieldShape(ABC):
    """One syntactic shape a field value can take."""

    label: ClassVar[str]

    @abstractmethod
    def extract(self, field_name: str, raw: str) -> Any:
        """Return the typed raw value, or raise ``MalformedField``."""


@dataclass(frozen=True)
class StringShape(FieldShape):
    label: ClassVar[str] = "a quoted string"

    def extract(self, field_name: str, raw: str) -> str:
        match = _STRING_RE.fullmatch(raw)
        if match is None:
            raise MalformedField(field_name, raw, self.label)
        return match.group(1)


@dataclass(frozen=True)
class NumberShape(FieldShape):
    """Signed decimal; ``integer`` rejects fractions, ``minimum`` rejects small values."""

    integer: bool = False
    minimum: Optional[int] = None
    label: ClassVar[str] = "a number"

    def extract(self, field_name: str, raw: str) -> Number:
        value = parse_number(raw, field_name, integer=self.integer)
        if self.minimum is not None and value < self.minimum:
            raise MalformedNumber(field_name, raw)
        return value


@dataclass(frozen=True)
class BoolShape(FieldShape):
    label: ClassVar[str] = "true or false"

    def extract(self, field_name: str, raw: str) -> bool:
        if raw == "true":
            return True
        if raw == "false":
            return False
        raise MalformedField(field_name, raw, self.label)


@dataclass(frozen=True)
class EnumShape(FieldShape):
    family: EnumFamily
    label: ClassVar[str] = "an enum symbol"

    def extract(self, field_name: str, raw: str) -> str:
        if not _SYMBOL_RE.fullmatch(raw):
            raise MalformedField(field_name, raw, self.label)
        return raw


@dataclass(frozen=True)
class CompositeShape(FieldShape):
    label: ClassVar[str] = "a composite literal"

    def extract(self, field_name: str, raw: str) -> str:
        match = _COMPOSITE_RE.fullmatch(raw)
        if match is None:
            raise MalformedField(field_name, raw, self.label)
        return match.group(1)


@dataclass(frozen=True)
class EnumArrayShape(FieldShape):
    family: EnumFamily
    label: ClassVar[str] = "an enum slice literal"

    def extract(self, field_name: str, raw: str) -> list[str]:
        match = _ENUM_ARRAY_RE.fullmatch(raw)
        if match is None:
            raise MalformedField(field_name, raw, self.label)
        symbols = split_top_level(match.group(1))
        for symbol in symbols:
            if not _SYMBOL_RE.fullmatch(symbol):
                raise MalformedField(field_name, raw, self.label)
        return symbols


FieldTable = Mapping[str, FieldShape]


# ── Extraction ────────────────────────────────────────────────────────────────


def extract_fields(entry: LiteralEntry) -> dict[str, str]:
    """Return the entry's top-level ``Key -> raw value text`` pairs.

    The first occurrence of a key wins. Segments without a top-level colon
    (positional values) are ignored.
    """
    pairs: dict[str, str] = {}
    for segment in split_top_level(entry.body):
        kv = split_key_value(segment)
        if kv is None:
            logger.debug("entry #%d: ignoring segment %r", entry.index, segment[:60])
            continue
        key, value = kv
        if key in pairs:
            logger.debug("entry #%d: duplicate field %s ignored", entry.index, key)
            continue
        pairs[key] = value
    return pairs


def extract(fields: Mapping[str, str], name: str, shape: FieldShape) -> Any:
    """Return field ``name`` typed by ``shape``, or ``ABSENT`` if not present.

    Raises:
        MalformedField: If the field is present but does not match ``shape``.
    """
    raw = fields.get(name)
    if raw is None:
        return ABSENT
    return shape.extract(name, raw)


@dataclass(frozen=True)
class ExtractedEntry:
    """The declared fields of one entry that were present and well-formed.

    Attributes:
        index:     Zero-based entry index in the source array.
        values:    Source field name → extracted value.
        malformed: Fields that were present but did not match their shape.
    """

    index: int
    values: Mapping[str, Any]
    malformed: tuple[MalformedField, ...] = field(default_factory=tuple)

    def get(self, name: str, default: Any = ABSENT) -> Any:
        return self.values.get(name, default)

    def is_malformed(self, name: str) -> bool:
        return any(m.field == name for m in self.malformed)


class FieldExtractor:
    """Apply a field table to literal entries."""

    def __init__(self, table: FieldTable) -> None:
        self.table = table

    def extract_entry(self, entry: LiteralEntry) -> ExtractedEntry:
        fields = extract_fields(entry)
        values: dict[str, Any] = {}
        malformed: list[MalformedField] = []
        for name, shape in self.table.items():
            try:
                value = extract(fields, name, shape)
            except MalformedField as exc:
                logger.warning("entry #%d: %s; treating as absent", entry.index, exc)
                malformed.append(exc)
                continue
            if value is not ABSENT:
                values[name] = value
        return ExtractedEntry(index=entry.index, values=values, malformed=tuple(malformed))


# ── Per-kind field tables ─────────────────────────────────────────────────────

ITEM_FIELDS: FieldTable = {
    "ID": NumberShape(integer=True),
    "Name": StringShape(),
    "Type": EnumShape(EnumFamily.ITEM_SLOT),
    "ArmorType": EnumShape(EnumFamily.ARMOR_TYPE),
    "Phase": NumberShape(integer=True, minimum=1),
    "Quality": EnumShape(EnumFamily.QUALITY),
    "Ilvl": NumberShape(integer=True),
    "Stats": CompositeShape(),
    "GemSockets": EnumArrayShape(EnumFamily.GEM_COLOR),
    "SocketBonus": CompositeShape(),
    "SetName": StringShape(),
    "Unique": BoolShape(),
    "ClassAllowlist": EnumArrayShape(EnumFamily.CLASS_NAME),
    "WeaponType": EnumShape(EnumFamily.WEAPON_TYPE),
    "HandType": EnumShape(EnumFamily.HAND_TYPE),
    "RangedWeaponType": EnumShape(EnumFamily.RANGED_WEAPON_TYPE),
    "WeaponDamageMin": NumberShape(),
    "WeaponDamageMax": NumberShape(),
    "SwingSpeed": NumberShape(),
}

ENCHANT_FIELDS: FieldTable = {
    "ID": NumberShape(integer=True),
    "EffectID": NumberShape(integer=True),
    "Name": StringShape(),
    "ItemType": EnumShape(EnumFamily.ITEM_SLOT),
    "Phase": NumberShape(integer=True, minimum=1),
    "Quality": EnumShape(EnumFamily.QUALITY),
    "Bonus": CompositeShape(),
    "EnchantType": EnumShape(EnumFamily.ENCHANT_TYPE),
    "ClassAllowlist": EnumArrayShape(EnumFamily.CLASS_NAME),
}

GEM_FIELDS: FieldTable = {
    "ID": NumberShape(integer=True),
    "Name": StringShape(),
    "Color": EnumShape(EnumFamily.GEM_COLOR),
    "Phase": NumberShape(integer=True, minimum=1),
    "Quality": EnumShape(EnumFamily.QUALITY),
    "Stats": CompositeShape(),
    "Unique": BoolShape(),
}
