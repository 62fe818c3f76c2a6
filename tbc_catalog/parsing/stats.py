"""
Composite stat map parsing (``Stats``, ``SocketBonus``, ``Bonus``).

Input is the body of a composite literal, e.g. the text between the braces
of ``stats.Stats{stats.Intellect: 12, stats.SpellPower: 46}``. Output is a
sparse ``{canonical_stat: number}`` dict.

Each pair is parsed on its own:
  - Keys go through the ``StatName`` table. Unknown keys are dropped (and
    counted by the resolver) because downstream sims address stats by fixed
    key and an unrecognised one has nowhere safe to go.
  - Values must be signed decimals; a malformed value drops only that pair.

An empty body yields ``{}``, which callers keep distinct from "field absent".
"""

from __future__ import annotations

import logging

from tbc_catalog.exceptions import MalformedField, MalformedNumber
from tbc_catalog.parsing.enums import EnumResolver
from tbc_catalog.parsing.fields import Number, parse_number
from tbc_catalog.parsing.splitter import split_key_value, split_top_level
from tbc_catalog.taxonomy.enum_tables import EnumFamily

logger = logging.getLogger(__name__)


class CompositeStatsParser:
    """Parse composite stat bodies into canonical stat maps.

    Attributes:
        resolver: Shared with the rest of the category run so unknown stat
            keys land in the same unknown-symbol count.
        warnings: Malformed pairs seen so far, in encounter order.
    """

    def __init__(self, resolver: EnumResolver) -> None:
        self.resolver = resolver
        self.warnings: list[MalformedField] = []

    def parse(self, body: str, field_name: str = "Stats") -> dict[str, Number]:
        stats: dict[str, Number] = {}
        for pair in split_top_level(body):
            kv = split_key_value(pair)
            if kv is None:
                self._warn(MalformedField(field_name, pair, "a 'Key: value' pair"))
                continue
            key, raw_value = kv

            stat = self.resolver.lookup(EnumFamily.STAT_NAME, key)
            if stat is None:
                continue

            try:
                stats[stat] = parse_number(raw_value, f"{field_name}.{key}")
            except MalformedNumber as exc:
                self._warn(exc)
        return stats

    def _warn(self, exc: MalformedField) -> None:
        logger.warning("%s; pair skipped", exc)
        self.warnings.append(exc)


def parse_stats(body: str, resolver: EnumResolver, field_name: str = "Stats") -> dict[str, Number]:
    """One-shot parse of a composite body; malformed pairs are logged and dropped."""
    return CompositeStatsParser(resolver).parse(body, field_name)
