from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any | None:
    """
    Read a JSON file from disk.

    Returns None for missing files, empty files, or invalid JSON (the last one is logged).
    """
    if not path.exists():
        return None
    try:
        raw = path.read_text(encoding="utf-8")
        if not raw.strip():
            return None
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("JSON READ: ignoring invalid JSON in %s: %r", path, e)
        return None


def atomic_write_json(path: Path, payload: Any, *, indent: int = 2, sort_keys: bool = False) -> None:
    """
    Write JSON to a temp file next to `path`, then replace `path` with it.

    Keys keep insertion order by default; the document store relies on it.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
        f.write("\n")
    tmp_path.replace(path)
