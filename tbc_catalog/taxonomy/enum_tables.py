"""
Static symbol tables for every enum family found in the generated sim data.

Each family maps the fully-qualified Go symbol (``proto.ItemType_ItemTypeHead``,
``stats.SpellPower``) to the canonical display name written into the catalog
JSON (``"Head"``, ``"spellPower"``).

Families:
  - ``ItemSlot``          — ``Type`` / ``ItemType`` fields on items and enchants
  - ``ArmorType``         — cloth / leather / mail / plate
  - ``Quality``           — item rarity tier
  - ``GemColor``          — gem colour and socket colour
  - ``WeaponType``        — melee weapon family
  - ``HandType``          — main hand / off hand / one hand / two hand
  - ``RangedWeaponType``  — bow, gun, wand, …
  - ``ClassName``         — class allowlist entries
  - ``StatName``          — keys inside ``stats.Stats{…}`` composites
  - ``EnchantType``       — enchant application kind

The tables are read-only ``MappingProxyType`` views built once at import time.

This module has NO imports from any other ``tbc_catalog`` package.
"""

from __future__ import annotations

from enum import StrEnum
from types import MappingProxyType
from typing import Mapping


class EnumFamily(StrEnum):
    """Named category of symbolic tokens sharing one resolution table."""

    ITEM_SLOT = "ItemSlot"
    ARMOR_TYPE = "ArmorType"
    QUALITY = "Quality"
    GEM_COLOR = "GemColor"
    WEAPON_TYPE = "WeaponType"
    HAND_TYPE = "HandType"
    RANGED_WEAPON_TYPE = "RangedWeaponType"
    CLASS_NAME = "ClassName"
    STAT_NAME = "StatName"
    ENCHANT_TYPE = "EnchantType"


def _proto_symbols(proto_type: str, values: list[str]) -> Mapping[str, str]:
    """Build ``proto.<T>_<T><Value> -> <Value>`` entries for a protobuf enum."""
    return {f"proto.{proto_type}_{proto_type}{v}": v for v in values}


# ── Proto-generated enums ─────────────────────────────────────────────────────

_ITEM_SLOTS = _proto_symbols("ItemType", [
    "Head", "Neck", "Shoulder", "Back", "Chest", "Wrist", "Hands",
    "Waist", "Legs", "Feet", "Finger", "Trinket", "Weapon", "Ranged",
])

_ARMOR_TYPES = _proto_symbols("ArmorType", ["Cloth", "Leather", "Mail", "Plate"])

_QUALITIES = _proto_symbols("ItemQuality", [
    "Junk", "Common", "Uncommon", "Rare", "Epic", "Legendary",
])

_GEM_COLORS = _proto_symbols("GemColor", [
    "Red", "Blue", "Yellow", "Green", "Orange", "Purple", "Meta", "Prismatic",
])

_WEAPON_TYPES = _proto_symbols("WeaponType", [
    "Axe", "Dagger", "Fist", "Mace", "Sword", "Polearm", "Staff", "Shield", "OffHand",
])

_HAND_TYPES = _proto_symbols("HandType", ["MainHand", "OffHand", "OneHand", "TwoHand"])

_RANGED_WEAPON_TYPES = _proto_symbols("RangedWeaponType", [
    "Bow", "Crossbow", "Gun", "Thrown", "Wand",
])

_CLASSES = _proto_symbols("Class", [
    "Druid", "Hunter", "Mage", "Paladin", "Priest",
    "Rogue", "Shaman", "Warlock", "Warrior",
])

_ENCHANT_TYPES = _proto_symbols("EnchantType", ["Normal", "TwoHand", "Shield", "Kit"])

# ── Stat keys ─────────────────────────────────────────────────────────────────
# Stat names are camelCase in the catalog because sim consumers index them
# positionally by these exact keys.

_STAT_NAMES: Mapping[str, str] = {
    "stats.Strength": "strength",
    "stats.Agility": "agility",
    "stats.Stamina": "stamina",
    "stats.Intellect": "intellect",
    "stats.Spirit": "spirit",
    "stats.SpellPower": "spellPower",
    "stats.HealingPower": "healingPower",
    "stats.SpellCrit": "spellCrit",
    "stats.SpellHit": "spellHit",
    "stats.SpellHaste": "spellHaste",
    "stats.SpellPenetration": "spellPenetration",
    "stats.AttackPower": "attackPower",
    "stats.RangedAttackPower": "rangedAttackPower",
    "stats.MeleeCrit": "meleeCrit",
    "stats.MeleeHit": "meleeHit",
    "stats.MeleeHaste": "meleeHaste",
    "stats.ArmorPenetration": "armorPenetration",
    "stats.Armor": "armor",
    "stats.Defense": "defense",
    "stats.Dodge": "dodge",
    "stats.Parry": "parry",
    "stats.Block": "block",
    "stats.BlockValue": "blockValue",
    "stats.Resilience": "resilience",
    "stats.Health": "health",
    "stats.Mana": "mana",
    "stats.MP5": "mp5",
    "stats.ArcaneResistance": "arcaneResistance",
    "stats.FireResistance": "fireResistance",
    "stats.FrostResistance": "frostResistance",
    "stats.NatureResistance": "natureResistance",
    "stats.ShadowResistance": "shadowResistance",
    "stats.ArcaneSpellPower": "arcaneSpellPower",
    "stats.FireSpellPower": "fireSpellPower",
    "stats.FrostSpellPower": "frostSpellPower",
    "stats.NatureSpellPower": "natureSpellPower",
    "stats.ShadowSpellPower": "shadowSpellPower",
    "stats.HolySpellPower": "holySpellPower",
    "stats.FeralAttackPower": "feralAttackPower",
    "stats.Expertise": "expertise",
}


# Namespace prepended to unqualified symbols before lookup.
FAMILY_NAMESPACES: Mapping[EnumFamily, str] = MappingProxyType({
    EnumFamily.STAT_NAME: "stats",
    **{family: "proto" for family in EnumFamily if family != EnumFamily.STAT_NAME},
})

ENUM_TABLES: Mapping[EnumFamily, Mapping[str, str]] = MappingProxyType({
    EnumFamily.ITEM_SLOT: MappingProxyType(_ITEM_SLOTS),
    EnumFamily.ARMOR_TYPE: MappingProxyType(_ARMOR_TYPES),
    EnumFamily.QUALITY: MappingProxyType(_QUALITIES),
    EnumFamily.GEM_COLOR: MappingProxyType(_GEM_COLORS),
    EnumFamily.WEAPON_TYPE: MappingProxyType(_WEAPON_TYPES),
    EnumFamily.HAND_TYPE: MappingProxyType(_HAND_TYPES),
    EnumFamily.RANGED_WEAPON_TYPE: MappingProxyType(_RANGED_WEAPON_TYPES),
    EnumFamily.CLASS_NAME: MappingProxyType(_CLASSES),
    EnumFamily.STAT_NAME: MappingProxyType(dict(_STAT_NAMES)),
    EnumFamily.ENCHANT_TYPE: MappingProxyType(_ENCHANT_TYPES),
})

DEFAULT_QUALITY = "Common"
