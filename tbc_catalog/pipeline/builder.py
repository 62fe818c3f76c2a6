"""
Record assembly: one ``ExtractedEntry`` in, one typed catalog record out.

Defaulting rules (applied here and nowhere else):
  - ``phase``   → ``1`` when absent
  - ``quality`` → ``"Common"`` when absent
  - ``stats``   → ``{}`` when absent
  - every other optional field stays absent when the source omits it

Required fields are ``ID``, ``Name`` and the category-defining enum
(``Type`` for items, ``ItemType`` for enchants, ``Color`` for gems). A
missing or malformed required field, or an ``ID`` already emitted in this
collection, raises ``EntrySkipped``; the caller counts it and moves on.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from tbc_catalog.exceptions import EntrySkipped, MalformedField
from tbc_catalog.models.records import ParsedEnchant, ParsedGem, ParsedItem
from tbc_catalog.parsing.enums import EnumResolver
from tbc_catalog.parsing.fields import (
    ENCHANT_FIELDS,
    GEM_FIELDS,
    ITEM_FIELDS,
    EnumArrayShape,
    EnumShape,
    ExtractedEntry,
    FieldTable,
)
from tbc_catalog.parsing.stats import CompositeStatsParser
from tbc_catalog.taxonomy.enum_tables import DEFAULT_QUALITY

logger = logging.getLogger(__name__)

CatalogRecordType = Union[ParsedItem, ParsedEnchant, ParsedGem]


class RecordKind(StrEnum):
    ITEM = "item"
    ENCHANT = "enchant"
    GEM = "gem"


FIELD_TABLES: dict[RecordKind, FieldTable] = {
    RecordKind.ITEM: ITEM_FIELDS,
    RecordKind.ENCHANT: ENCHANT_FIELDS,
    RecordKind.GEM: GEM_FIELDS,
}

# Source field that defines the record's category, and the attribute it fills.
CATEGORY_FIELDS: dict[RecordKind, tuple[str, str]] = {
    RecordKind.ITEM: ("Type", "slot"),
    RecordKind.ENCHANT: ("ItemType", "slot"),
    RecordKind.GEM: ("Color", "color"),
}

_Converter = Callable[["RecordBuilder", str, Any], Any]


def _as_is(builder: "RecordBuilder", field_name: str, raw: Any) -> Any:
    return raw


def _enum(builder: "RecordBuilder", field_name: str, raw: str) -> str:
    return builder.resolve(field_name, raw)


def _enum_list(distinct: bool = False) -> _Converter:
    def convert(builder: "RecordBuilder", field_name: str, raw: list[str]) -> list[str]:
        resolved = [builder.resolve(field_name, token) for token in raw]
        if distinct:
            resolved = list(dict.fromkeys(resolved))
        return resolved
    return convert


def _stats(builder: "RecordBuilder", field_name: str, raw: str) -> dict:
    return builder.stats_parser.parse(raw, field_name)


# (output attribute, source field, converter)
_OPTIONAL_FIELDS: dict[RecordKind, tuple[tuple[str, str, _Converter], ...]] = {
    RecordKind.ITEM: (
        ("armor_type", "ArmorType", _enum),
        ("ilvl", "Ilvl", _as_is),
        ("gem_sockets", "GemSockets", _enum_list()),
        ("socket_bonus", "SocketBonus", _stats),
        ("set_name", "SetName", _as_is),
        ("unique", "Unique", _as_is),
        ("class_allowlist", "ClassAllowlist", _enum_list(distinct=True)),
        ("weapon_type", "WeaponType", _enum),
        ("hand_type", "HandType", _enum),
        ("ranged_weapon_type", "RangedWeaponType", _enum),
        ("weapon_damage_min", "WeaponDamageMin", _as_is),
        ("weapon_damage_max", "WeaponDamageMax", _as_is),
        ("swing_speed", "SwingSpeed", _as_is),
    ),
    RecordKind.ENCHANT: (
        ("effect_id", "EffectID", _as_is),
        ("enchant_type", "EnchantType", _enum),
        ("class_allowlist", "ClassAllowlist", _enum_list(distinct=True)),
    ),
    RecordKind.GEM: (
        ("unique", "Unique", _as_is),
    ),
}

# Source field holding the main stat composite for each kind.
_STATS_FIELDS: dict[RecordKind, str] = {
    RecordKind.ITEM: "Stats",
    RecordKind.ENCHANT: "Bonus",
    RecordKind.GEM: "Stats",
}

_MODELS: dict[RecordKind, type[CatalogRecordType]] = {
    RecordKind.ITEM: ParsedItem,
    RecordKind.ENCHANT: ParsedEnchant,
    RecordKind.GEM: ParsedGem,
}


class RecordBuilder:
    """Build typed records of one kind for one collection.

    The builder remembers every ``id`` it has emitted so the output
    collection never holds duplicates.

    Enum fields are resolved through the family their ``EnumShape`` or
    ``EnumArrayShape`` declares in the field table.

    Args:
        kind:     Record kind to build.
        resolver: Enum resolver owned by the same category run.
        table:    Field table the entries were extracted with. Defaults to
                  the table registered for ``kind``.
    """

    def __init__(
        self,
        kind: RecordKind,
        resolver: EnumResolver,
        table: Optional[FieldTable] = None,
    ) -> None:
        self.kind = kind
        self.resolver = resolver
        self.table = FIELD_TABLES[kind] if table is None else table
        self.stats_parser = CompositeStatsParser(resolver)
        self._seen_ids: set[int] = set()

    @property
    def warnings(self) -> list[MalformedField]:
        """Malformed stat pairs seen while building."""
        return self.stats_parser.warnings

    def build(self, entry: ExtractedEntry) -> CatalogRecordType:
        """Assemble one record from ``entry``.

        Raises:
            EntrySkipped: If a required field is missing or malformed, the
                ``ID`` repeats an earlier entry, or the record fails model
                validation.
        """
        record_id = self._require(entry, "ID")
        name = self._require(entry, "Name")
        category_field, category_attr = CATEGORY_FIELDS[self.kind]
        category_token = self._require(entry, category_field)

        if record_id in self._seen_ids:
            raise EntrySkipped(entry.index, "ID", reason="duplicate")

        payload: dict[str, Any] = {
            "id": record_id,
            "name": name,
            category_attr: self.resolve(category_field, category_token),
            "phase": entry.get("Phase", 1),
            "quality": self._quality(entry),
            "stats": self._main_stats(entry),
        }
        for attr, source_field, convert in _OPTIONAL_FIELDS[self.kind]:
            raw = entry.get(source_field, None)
            if raw is not None:
                payload[attr] = convert(self, source_field, raw)

        try:
            record = _MODELS[self.kind](**payload)
        except ValidationError as exc:
            loc = exc.errors()[0].get("loc", ("record",))
            logger.warning("entry #%d failed validation: %s", entry.index, exc)
            raise EntrySkipped(entry.index, str(loc[0]), reason="invalid") from exc

        self._seen_ids.add(record_id)
        return record

    def resolve(self, field_name: str, token: str) -> str:
        """Resolve ``token`` through the enum family declared for ``field_name``."""
        shape = self.table[field_name]
        if not isinstance(shape, (EnumShape, EnumArrayShape)):
            raise TypeError(f"{field_name} is not an enum field")
        return self.resolver.resolve(shape.family, token)

    def _require(self, entry: ExtractedEntry, field_name: str) -> Any:
        value = entry.get(field_name, None)
        if value is None:
            reason = "malformed" if entry.is_malformed(field_name) else "missing"
            raise EntrySkipped(entry.index, field_name, reason=reason)
        if isinstance(value, str) and not value.strip():
            raise EntrySkipped(entry.index, field_name, reason="malformed")
        return value

    def _quality(self, entry: ExtractedEntry) -> str:
        token = entry.get("Quality", None)
        if token is None:
            return DEFAULT_QUALITY
        return self.resolve("Quality", token)

    def _main_stats(self, entry: ExtractedEntry) -> dict:
        field_name = _STATS_FIELDS[self.kind]
        body = entry.get(field_name, None)
        if body is None:
            return {}
        return self.stats_parser.parse(body, field_name)
