"""Whole-document JSON persistence for the store files."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

SCHEMA_VERSION = 1


def read_document(path: Path) -> Optional[Dict[str, Any]]:
    """Return the decoded mapping at ``path`` or ``None`` when missing or corrupt."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    return data


def write_document(path: Path, payload: Dict[str, Any]) -> None:
    """Replace the document at ``path`` with ``payload``.

    The payload is written to a sibling temporary file first and then moved into
    place, so readers never observe a half-written document.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    os.replace(tmp_path, path)


__all__ = ["SCHEMA_VERSION", "read_document", "write_document"]
