"""
Concrete category pipelines.

Each stage only names its config category and record kind; everything else
(field table, required fields, optional conversions) is keyed off the kind
in ``tbc_catalog.pipeline.builder``.
"""

from __future__ import annotations

from tbc_catalog.pipeline.base import CategoryStage
from tbc_catalog.pipeline.builder import RecordKind


class ItemsStage(CategoryStage):
    category = "items"
    kind = RecordKind.ITEM


class EnchantsStage(CategoryStage):
    category = "enchants"
    kind = RecordKind.ENCHANT


class GemsStage(CategoryStage):
    category = "gems"
    kind = RecordKind.GEM


STAGES: dict[str, type[CategoryStage]] = {
    ItemsStage.category: ItemsStage,
    EnchantsStage.category: EnchantsStage,
    GemsStage.category: GemsStage,
}
