"""
Enum symbol resolution.

``EnumResolver.resolve(family, token)`` maps a raw Go symbol to its canonical
catalog name. Lookup is total by fallback: an unmapped token comes back
verbatim and is counted, never dropped or guessed, because the generated data
gains new symbols faster than the tables here are updated.

One resolver is created per category run, so its counters are owned by a
single pipeline and need no locking when categories run on worker threads.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Mapping, Optional

from tbc_catalog.taxonomy.enum_tables import ENUM_TABLES, FAMILY_NAMESPACES, EnumFamily

logger = logging.getLogger(__name__)


class EnumResolver:
    """Resolve symbolic enum tokens against the static family tables.

    Args:
        tables:     Family → symbol table mapping. Defaults to ``ENUM_TABLES``.
        namespaces: Family → namespace used to qualify bare tokens.
    """

    def __init__(
        self,
        tables: Mapping[EnumFamily, Mapping[str, str]] = ENUM_TABLES,
        namespaces: Mapping[EnumFamily, str] = FAMILY_NAMESPACES,
    ) -> None:
        self._tables = tables
        self._namespaces = namespaces
        self._unknown: Counter[tuple[EnumFamily, str]] = Counter()

    def lookup(self, family: EnumFamily, token: str) -> Optional[str]:
        """Return the canonical name for ``token``, or ``None`` if unmapped.

        Unmapped tokens are counted. Tokens without a namespace
        (``Strength``) are qualified with the family namespace first.
        """
        table = self._tables.get(family, {})
        token = token.strip()
        canonical = table.get(token)
        if canonical is None and "." not in token:
            namespace = self._namespaces.get(family)
            if namespace:
                canonical = table.get(f"{namespace}.{token}")
        if canonical is None:
            self._record_unknown(family, token)
        return canonical

    def resolve(self, family: EnumFamily, token: str) -> str:
        """Return the canonical name for ``token``, or ``token`` itself if unmapped."""
        canonical = self.lookup(family, token)
        return canonical if canonical is not None else token.strip()

    @property
    def unknown_count(self) -> int:
        """Total unknown-symbol occurrences seen by this resolver."""
        return sum(self._unknown.values())

    def unknown_symbols(self) -> dict[str, dict[str, int]]:
        """Unknown tokens grouped by family, sorted for stable reporting."""
        grouped: dict[str, dict[str, int]] = {}
        for (family, token), count in sorted(self._unknown.items()):
            grouped.setdefault(family.value, {})[token] = count
        return grouped

    def _record_unknown(self, family: EnumFamily, token: str) -> None:
        key = (family, token)
        if key not in self._unknown:
            logger.warning("Unknown %s symbol %r passed through", family.value, token)
        else:
            logger.debug("Unknown %s symbol %r seen again", family.value, token)
        self._unknown[key] += 1
