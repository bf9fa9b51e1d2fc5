"""Classifies module cards against the files they describe."""

from __future__ import annotations

from pathlib import Path

from .hashing import hash_file
from .models import Freshness, ModuleCard


class StalenessOracle:
    """Compares a card's stored content hash with the file on disk.

    Classification never raises: an unreadable file is reported as
    ``Freshness.MISSING`` so one vanished file cannot fail a full listing.
    """

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = Path(repo_root)

    def classify(self, card: ModuleCard) -> Freshness:
        if card.is_meta:
            return Freshness.FRESH
        try:
            current = hash_file(self.repo_root / card.path)
        except OSError:
            return Freshness.MISSING
        return Freshness.FRESH if current == card.content_hash else Freshness.STALE


__all__ = ["StalenessOracle"]
