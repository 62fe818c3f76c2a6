"""
Shared pytest fixtures for the TBC catalog parser test suite.

Provides:
  - Go source samples (``items_go``, ``enchants_go``, ``gems_go``) shaped
    like the generated sim data files. Every enum symbol in them is mapped,
    so a clean run reports zero unknown symbols.
  - ``sim_data_dir``: a temp directory holding all three source files.
  - ``app_config``: an ``AppConfig`` pointing at ``sim_data_dir`` with output
    under a temp catalog directory.
  - ``write_sim_sources`` / ``config_factory``: the helpers behind those
    fixtures, for tests that need variations.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tbc_catalog.config import AppConfig, OutputConfig, PipelineConfig, SourcesConfig


ITEMS_GO = '''package items

import (
	"github.com/wowsims/tbc/sim/core/proto"
	"github.com/wowsims/tbc/sim/core/stats"
)

// Generated. DO NOT EDIT. {braces in comments are not entries}
var Items = []Item{
	{Name: "Spellstrike Hood", ID: 24266, Type: proto.ItemType_ItemTypeHead, ArmorType: proto.ArmorType_ArmorTypeCloth, Phase: 1, Quality: proto.ItemQuality_ItemQualityEpic, Ilvl: 105, Stats: stats.Stats{stats.Stamina: 16, stats.Intellect: 12, stats.SpellPower: 46, stats.SpellHit: 16, stats.SpellCrit: 24}, GemSockets: []proto.GemColor{proto.GemColor_GemColorRed, proto.GemColor_GemColorYellow, proto.GemColor_GemColorBlue}, SocketBonus: stats.Stats{stats.Stamina: 6}, SetName: "Spellstrike Infusion"},
	{Name: "Dragonmaw", ID: 28438, Type: proto.ItemType_ItemTypeWeapon, Phase: 1, Quality: proto.ItemQuality_ItemQualityEpic, Ilvl: 123, Stats: stats.Stats{stats.Stamina: 13, stats.MeleeHit: 11}, WeaponType: proto.WeaponType_WeaponTypeMace, HandType: proto.HandType_HandTypeOneHand, WeaponDamageMin: 189, WeaponDamageMax: 352, SwingSpeed: 2.7},
	{Name: "Thori'dal, the Stars' Fury", ID: 34334, Type: proto.ItemType_ItemTypeRanged, Phase: 5, Quality: proto.ItemQuality_ItemQualityLegendary, Stats: stats.Stats{stats.Agility: 19, stats.AttackPower: 34}, RangedWeaponType: proto.RangedWeaponType_RangedWeaponTypeBow, WeaponDamageMin: 146, WeaponDamageMax: 271, SwingSpeed: 3, ClassAllowlist: []proto.Class{proto.Class_ClassHunter}},
	{Name: "Band of the Eternal Sage", ID: 29309, Type: proto.ItemType_ItemTypeFinger, Phase: 2, Quality: proto.ItemQuality_ItemQualityEpic, Stats: stats.Stats{stats.Stamina: 28, stats.SpellPower: 34}, Unique: true},
	{Name: "Plain Cloth Belt", ID: 100001, Type: proto.ItemType_ItemTypeWaist},
}
'''

ENCHANTS_GO = '''package items

var Enchants = []Enchant{
	{ID: 29191, EffectID: 3003, Name: "Glyph of Power", ItemType: proto.ItemType_ItemTypeHead, Phase: 1, Quality: proto.ItemQuality_ItemQualityUncommon, Bonus: stats.Stats{stats.SpellPower: 22, stats.SpellHit: 14}},
	{ID: 22555, EffectID: 2669, Name: "Major Spellpower", ItemType: proto.ItemType_ItemTypeWeapon, Bonus: stats.Stats{stats.SpellPower: 40}, EnchantType: proto.EnchantType_EnchantTypeNormal},
	{ID: 28886, EffectID: 2995, Name: "Greater Inscription of Discipline", ItemType: proto.ItemType_ItemTypeShoulder, Phase: 1, Quality: proto.ItemQuality_ItemQualityEpic, Bonus: stats.Stats{stats.SpellPower: 18, stats.SpellCrit: 10}, ClassAllowlist: []proto.Class{proto.Class_ClassMage, proto.Class_ClassPriest, proto.Class_ClassWarlock}},
}
'''

GEMS_GO = '''package items

var Gems = []Gem{
	{Name: "Runed Living Ruby", ID: 24030, Color: proto.GemColor_GemColorRed, Phase: 1, Quality: proto.ItemQuality_ItemQualityRare, Stats: stats.Stats{stats.SpellPower: 9}},
	{Name: "Chaotic Skyfire Diamond", ID: 34220, Color: proto.GemColor_GemColorMeta, Phase: 1, Quality: proto.ItemQuality_ItemQualityRare, Stats: stats.Stats{stats.SpellCrit: 12}, Unique: false},
	{Name: "Potent Noble Topaz", ID: 24059, Color: proto.GemColor_GemColorOrange, Phase: 1, Quality: proto.ItemQuality_ItemQualityRare, Stats: stats.Stats{stats.SpellCrit: 4, stats.SpellPower: 5}},
	{Name: "Crimson Spinel", ID: 32196, Color: proto.GemColor_GemColorRed, Phase: 3, Quality: proto.ItemQuality_ItemQualityEpic, Stats: stats.Stats{stats.SpellPower: 12}, Unique: true},
}
'''


def write_sources(
    directory: Path,
    items: str = ITEMS_GO,
    enchants: str = ENCHANTS_GO,
    gems: str = GEMS_GO,
) -> Path:
    """Write the three source files into ``directory`` and return it."""
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "all_items.go").write_text(items, encoding="utf-8")
    (directory / "all_enchants.go").write_text(enchants, encoding="utf-8")
    (directory / "all_gems.go").write_text(gems, encoding="utf-8")
    return directory


def make_config(input_dir: Path, output_dir: Path, parallel: bool = False) -> AppConfig:
    """An ``AppConfig`` reading from ``input_dir`` and writing to ``output_dir``."""
    return AppConfig(
        sources=SourcesConfig(input_dir=str(input_dir)),
        output=OutputConfig(output_dir=str(output_dir)),
        pipeline=PipelineConfig(parallel=parallel),
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def sim_data_dir(tmp_path: Path) -> Path:
    """Temp directory holding ``all_items.go``, ``all_enchants.go``, ``all_gems.go``."""
    return write_sources(tmp_path / "wowsims")


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """Temp output directory (not created up front)."""
    return tmp_path / "catalog"


@pytest.fixture
def app_config(sim_data_dir: Path, catalog_dir: Path) -> AppConfig:
    """Sequential ``AppConfig`` over the sample sources."""
    return make_config(sim_data_dir, catalog_dir)


@pytest.fixture
def write_sim_sources():
    """``write_sources`` helper, for tests that need edited source text."""
    return write_sources


@pytest.fixture
def config_factory():
    """``make_config`` helper."""
    return make_config


@pytest.fixture
def items_go() -> str:
    return ITEMS_GO


@pytest.fixture
def enchants_go() -> str:
    return ENCHANTS_GO


@pytest.fixture
def gems_go() -> str:
    return GEMS_GO
