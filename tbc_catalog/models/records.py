"""
Catalog record models — the JSON schema downstream consumers depend on.

Three independent collections, each keyed by its own ``id`` namespace:

  - ``ParsedItem``    — gear, with optional weapon and socket metadata
  - ``ParsedEnchant`` — enchants, keyed by item slot
  - ``ParsedGem``     — gems, keyed by colour

Python attributes are snake_case; serialized keys are camelCase
(``armor_type`` → ``armorType``). ``to_json_dict()`` omits every optional
field that is ``None``, so "not specified in source" never appears as
``null`` and stays distinct from an explicit ``0``, ``false`` or ``{}``.
"""

from __future__ import annotations

import math
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from tbc_catalog.taxonomy.enum_tables import DEFAULT_QUALITY

Number = Union[int, float]


class CatalogRecord(BaseModel):
    """Fields and behaviour shared by all three record kinds."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    name: str
    phase: int = 1
    quality: str = DEFAULT_QUALITY
    stats: dict[str, Number] = {}

    @field_validator("phase")
    @classmethod
    def validate_phase(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"phase must be >= 1, got {v}.")
        return v

    @field_validator("stats")
    @classmethod
    def validate_stats_finite(cls, v: dict[str, Number]) -> dict[str, Number]:
        for key, value in v.items():
            if not math.isfinite(value):
                raise ValueError(f"stat '{key}' is not finite: {value}.")
        return v

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping absent optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ParsedItem(CatalogRecord):
    """A piece of gear.

    Attributes:
        slot: Canonical ``ItemSlot`` (``"Head"``, ``"Weapon"``, …) or raw token.
        armor_type: Cloth / Leather / Mail / Plate for armour pieces.
        ilvl: Item level.
        gem_sockets: Socket colours in source order (repeats allowed).
        socket_bonus: Stats granted when all sockets match.
        set_name: Tier set name.
        unique: Unique-equipped flag, when the source states it.
        class_allowlist: Classes allowed to use the item, de-duplicated.
        weapon_type / hand_type / ranged_weapon_type: Weapon classification.
        weapon_damage_min / weapon_damage_max / swing_speed: Weapon numbers.
    """

    slot: str
    armor_type: Optional[str] = None
    ilvl: Optional[int] = None
    gem_sockets: Optional[list[str]] = None
    socket_bonus: Optional[dict[str, Number]] = None
    set_name: Optional[str] = None
    unique: Optional[bool] = None
    class_allowlist: Optional[list[str]] = None
    weapon_type: Optional[str] = None
    hand_type: Optional[str] = None
    ranged_weapon_type: Optional[str] = None
    weapon_damage_min: Optional[Number] = None
    weapon_damage_max: Optional[Number] = None
    swing_speed: Optional[Number] = None


class ParsedEnchant(CatalogRecord):
    """An enchant applicable to one item slot."""

    effect_id: Optional[int] = None
    slot: str
    enchant_type: Optional[str] = None
    class_allowlist: Optional[list[str]] = None


class ParsedGem(CatalogRecord):
    """A socketable gem."""

    color: str
    unique: Optional[bool] = None
