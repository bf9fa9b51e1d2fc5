"""Parsers for the compact comma-separated argument formats."""

from __future__ import annotations

from typing import List, Optional

from .models import DEFAULT_RELATION, SYMBOL_KINDS, ExportEntry, SymbolRelation


def split_list(raw: Optional[str], *, unique: bool = True) -> List[str]:
    """Split ``"a, b,,c"`` into ``["a", "b", "c"]``.

    Repeated items are dropped unless ``unique`` is false, in which case the
    list keeps every non-empty item in order.
    """
    if not raw:
        return []
    items = [part.strip() for part in raw.split(",") if part.strip()]
    if not unique:
        return items
    return list(dict.fromkeys(items))


def parse_related(raw: Optional[str]) -> List[SymbolRelation]:
    """Parse ``"symbol:relation,symbol"`` pairs.

    Everything after the first colon is the relation label; a missing or blank
    label becomes ``"related"``.
    """
    relations: List[SymbolRelation] = []
    for segment in _segments(raw):
        symbol, _, relation = segment.partition(":")
        symbol = symbol.strip()
        if not symbol:
            continue
        relations.append(
            SymbolRelation(symbol=symbol, relation=relation.strip() or DEFAULT_RELATION)
        )
    return relations


def parse_exports(raw: Optional[str]) -> List[ExportEntry]:
    """Parse ``"name:kind,name"`` export entries; unknown kinds become ``other``."""
    exports: List[ExportEntry] = []
    for segment in _segments(raw):
        name, _, kind = segment.partition(":")
        name = name.strip()
        if not name:
            continue
        kind = kind.strip().lower()
        exports.append(ExportEntry(name=name, kind=kind if kind in SYMBOL_KINDS else "other"))
    return exports


def _segments(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [segment.strip() for segment in raw.split(",") if segment.strip()]


__all__ = ["parse_exports", "parse_related", "split_list"]
