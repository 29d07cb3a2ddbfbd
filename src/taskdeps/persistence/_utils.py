"""Shared persistence utilities."""

import json
from pathlib import Path
from typing import Any


def atomic_write_json(path: Path, data: Any, indent: int = 2) -> None:
    """Write ``data`` as JSON next to ``path``, then swap it into place.

    Readers see either the previous file or the complete new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    staging = path.with_suffix(path.suffix + ".tmp")
    text = json.dumps(data, indent=indent, ensure_ascii=False)
    staging.write_text(text + "\n", encoding="utf-8")
    staging.replace(path)
