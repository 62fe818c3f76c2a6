"""
JSON export helpers.

All functions write to disk and return the written ``Path``. Output is
deterministic for identical input: keys keep their insertion order, the
indent is fixed, and the file always ends with one newline.
"""

from __future__ import annotations

import json
from pathlib import Path


def export_to_json(
    data: dict | list,
    path: Path,
    indent: int = 2,
) -> Path:
    """Write ``data`` to a pretty-printed UTF-8 JSON file.

    Args:
        data:   Dict or list to serialise.
        path:   Destination file path (parent dirs created if missing).
        indent: Spaces per nesting level.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(data, indent=indent, ensure_ascii=False, default=str)
    path.write_text(text + "\n", encoding="utf-8")
    return path
