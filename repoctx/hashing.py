"""Deterministic fingerprints for file content, symbol surfaces and storage keys."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable

_SHORT_DIGEST = 12
_CHUNK_SIZE = 1024 * 1024


def hash_bytes(data: bytes) -> str:
    """Return the hex digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def hash_file(path: Path) -> str:
    """Return the hex digest of the file at ``path``.

    Raises ``OSError`` (including ``FileNotFoundError``) when the file cannot be read.
    """
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def surface_hash(names: Iterable[str]) -> str:
    """Fingerprint a set of symbol names independent of their order."""
    joined = "\n".join(sorted(names))
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()[:_SHORT_DIGEST]


def storage_ref(key: str) -> str:
    """Record filename derived from a logical key, never from content."""
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:_SHORT_DIGEST]
    return f"{digest}.json"


__all__ = ["hash_bytes", "hash_file", "storage_ref", "surface_hash"]
