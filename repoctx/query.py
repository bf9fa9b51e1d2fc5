"""Retrieval of module and symbol cards by symbol, keyword or path."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .models import Freshness, ModuleCard, StaleEntry, SymbolCard
from .staleness import StalenessOracle
from .stores import CardStore

OUTDATED_NOTE = "! Context outdated (file changed since last save)"
MISSING_NOTE = "! File not found (may have been deleted or moved)"
SYMBOLS_HEADER = "-- Symbols " + "-" * 48


@dataclass(frozen=True)
class ModuleResult:
    """A module card together with its freshness at query time."""

    card: ModuleCard
    freshness: Freshness


class QueryEngine:
    """Answers symbol, keyword and path queries over a ``CardStore``."""

    def __init__(self, store: CardStore, oracle: StalenessOracle) -> None:
        self.store = store
        self.oracle = oracle

    def find_symbol(self, name: str) -> Optional[SymbolCard]:
        return self.store.load_symbol(name)

    def select_modules(
        self,
        filter_path: Optional[str] = None,
        keywords: Optional[Sequence[str]] = None,
    ) -> List[ModuleResult]:
        """Modules matching the keyword set (OR) and/or the canonical path filter."""
        index = self.store.load_index()
        if keywords:
            candidates = index.keywords.lookup_or(list(keywords))
        else:
            candidates = list(index.files)

        results: List[ModuleResult] = []
        for path in candidates:
            if filter_path is not None and not path_matches(path, filter_path):
                continue
            entry = index.files.get(path)
            card = self.store.read_module(entry) if entry is not None else None
            if card is None:
                continue
            results.append(ModuleResult(card=card, freshness=self.oracle.classify(card)))
        return results

    def select_symbols(self, keywords: Optional[Sequence[str]] = None) -> List[SymbolCard]:
        """All symbol cards, or those whose own keywords intersect ``keywords``."""
        symbols = self.store.load_all_symbols()
        if not keywords:
            return symbols
        wanted = set(keywords)
        return [card for card in symbols if wanted.intersection(card.keywords)]

    def stale(self) -> List[StaleEntry]:
        entries: List[StaleEntry] = []
        for card in self.store.iter_modules():
            freshness = self.oracle.classify(card)
            if freshness is not Freshness.FRESH:
                entries.append(StaleEntry(path=card.path, freshness=freshness))
        return entries

    def render(
        self,
        filter_path: Optional[str] = None,
        keywords: Optional[Sequence[str]] = None,
        symbol: Optional[str] = None,
    ) -> str:
        """Format matching cards as text; an empty string means nothing matched."""
        if symbol:
            card = self.find_symbol(symbol)
            if card is None:
                return f'No symbol found: "{symbol}"'
            return format_symbol_card(card)

        lines: List[str] = []
        for result in self.select_modules(filter_path, keywords):
            lines.extend(format_module_result(result))
            lines.append("")

        symbols = self.select_symbols(keywords)
        if symbols:
            lines.append(SYMBOLS_HEADER)
            for card in symbols:
                lines.extend(format_symbol_brief(card))
                lines.append("")
        return "\n".join(lines)


def path_matches(path: str, filter_path: str) -> bool:
    """True when ``path`` equals ``filter_path`` or lives under it as a directory."""
    if filter_path in ("", "."):
        return True
    prefix = filter_path.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")


def format_module_result(result: ModuleResult) -> List[str]:
    card = result.card
    lines = [f"[{card.path}]", card.summary]
    if card.symbols:
        lines.append(f"Symbols: {', '.join(card.symbols)}")
    if card.exports:
        rendered = ", ".join(f"{entry.name}({entry.kind})" for entry in card.exports)
        lines.append(f"Exports: {rendered}")
    if card.keywords:
        lines.append(f"Keywords: {', '.join(card.keywords)}")
    if card.dependencies:
        lines.append(f"Deps: {', '.join(card.dependencies)}")
    if card.footguns:
        lines.append(f"Footguns: {card.footguns}")
    if card.delta:
        lines.append(f"Last change: {card.delta}")
    if result.freshness is Freshness.STALE:
        lines.append(OUTDATED_NOTE)
    elif result.freshness is Freshness.MISSING:
        lines.append(MISSING_NOTE)
    return lines


def format_symbol_card(card: SymbolCard) -> str:
    lines = [
        f"[symbol: {card.symbol}]",
        f"Kind: {card.kind}",
        f"File: {card.file}",
        f"Purpose: {card.purpose}",
    ]
    if card.signature:
        lines.append(f"Signature: {card.signature}")
    if card.related:
        lines.append("Related:")
        lines.extend(f"  - {edge.symbol} ({edge.relation})" for edge in card.related)
    if card.keywords:
        lines.append(f"Keywords: {', '.join(card.keywords)}")
    lines.append(f"Updated: {card.updated_at}")
    return "\n".join(lines)


def format_symbol_brief(card: SymbolCard) -> List[str]:
    lines = [f"[symbol: {card.symbol}] ({card.kind}) {card.file}", f"  {card.purpose}"]
    if card.signature:
        lines.append(f"  Sig: {card.signature}")
    if card.related:
        rendered = ", ".join(f"{edge.symbol} ({edge.relation})" for edge in card.related)
        lines.append(f"  Related: {rendered}")
    return lines


__all__ = [
    "ModuleResult",
    "QueryEngine",
    "format_module_result",
    "format_symbol_card",
    "path_matches",
]
