"""Keyword to module-path buckets backing topic lookups."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from ..models import ModuleCard


class KeywordIndex:
    """Denormalised ``keyword -> [paths]`` mapping derived from module card keywords.

    The only source of truth for bucket membership is the ``keywords`` field of
    each module card. ``reconcile`` keeps the buckets in lockstep with a card on
    every save by removing the path everywhere and re-adding it where it belongs.
    """

    def __init__(self, buckets: Dict[str, List[str]] | None = None) -> None:
        self._buckets: Dict[str, List[str]] = buckets if buckets is not None else {}

    @classmethod
    def from_dict(cls, raw: object) -> "KeywordIndex":
        buckets: Dict[str, List[str]] = {}
        if not isinstance(raw, dict):
            return cls(buckets)
        for keyword, paths in raw.items():
            if not isinstance(keyword, str) or not isinstance(paths, list):
                continue
            members = _dedupe(path for path in paths if isinstance(path, str))
            if members:
                buckets[keyword] = members
        return cls(buckets)

    @classmethod
    def rebuild(cls, cards: Iterable[ModuleCard]) -> "KeywordIndex":
        index = cls()
        for card in cards:
            index.reconcile(card.path, card.keywords)
        return index

    def reconcile(self, path: str, keywords: Iterable[str]) -> None:
        """Make ``path`` a member of exactly the buckets named by ``keywords``."""
        for keyword in list(self._buckets):
            members = [member for member in self._buckets[keyword] if member != path]
            if members:
                self._buckets[keyword] = members
            else:
                del self._buckets[keyword]
        for keyword in keywords:
            if not keyword:
                continue
            bucket = self._buckets.setdefault(keyword, [])
            if path not in bucket:
                bucket.append(path)

    def lookup_or(self, keywords: Sequence[str]) -> List[str]:
        """Union of the buckets for ``keywords``; each path appears once."""
        return _dedupe(
            path for keyword in keywords for path in self._buckets.get(keyword, ())
        )

    def paths_for(self, keyword: str) -> List[str]:
        return list(self._buckets.get(keyword, ()))

    def keywords(self) -> List[str]:
        return list(self._buckets)

    def to_dict(self) -> Dict[str, List[str]]:
        return {keyword: list(paths) for keyword, paths in self._buckets.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeywordIndex):
            return NotImplemented
        mine = {keyword: set(paths) for keyword, paths in self._buckets.items()}
        theirs = {keyword: set(paths) for keyword, paths in other._buckets.items()}
        return mine == theirs

    def __repr__(self) -> str:
        return f"KeywordIndex({self._buckets!r})"


def _dedupe(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


__all__ = ["KeywordIndex"]
