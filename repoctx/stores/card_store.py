"""On-disk records for module and symbol cards."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..hashing import storage_ref
from ..logging import get_logger
from ..models import (
    DEFAULT_RELATION,
    SYMBOL_KINDS,
    ExportEntry,
    ModuleCard,
    SymbolCard,
    SymbolRelation,
)
from .documents import SCHEMA_VERSION, read_document, write_document
from .keyword_index import KeywordIndex

_INDEX_FILENAME = "index.json"
_SYMBOLS_INDEX_FILENAME = "symbols-index.json"
_FILES_DIR = "files"
_SYMBOLS_DIR = "symbols"
_SYMBOL_KEY_PREFIX = "symbol:"

logger = get_logger("store")


@dataclass
class IndexEntry:
    """Top-level index entry pointing at a module card record."""

    content_hash: str
    ref: str


@dataclass
class ModuleIndex:
    """The module index document: path entries plus the keyword buckets."""

    files: Dict[str, IndexEntry] = field(default_factory=dict)
    keywords: KeywordIndex = field(default_factory=KeywordIndex)
    version: int = SCHEMA_VERSION


class CardStore:
    """Reads and writes cards under a storage root such as ``.repoctx/``.

    Indices are re-read from disk on every call and written back whole, so each
    operation is correct in isolation. There is no cross-process locking; a
    single writer per storage root is assumed.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    @property
    def files_dir(self) -> Path:
        return self.root / _FILES_DIR

    @property
    def symbols_dir(self) -> Path:
        return self.root / _SYMBOLS_DIR

    @property
    def index_path(self) -> Path:
        return self.root / _INDEX_FILENAME

    @property
    def symbols_index_path(self) -> Path:
        return self.root / _SYMBOLS_INDEX_FILENAME

    def ensure_dirs(self) -> None:
        self.files_dir.mkdir(parents=True, exist_ok=True)
        self.symbols_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Module cards

    def load_index(self) -> ModuleIndex:
        data = read_document(self.index_path)
        if data is None:
            return ModuleIndex()
        files: Dict[str, IndexEntry] = {}
        raw_files = data.get("files")
        if isinstance(raw_files, dict):
            for path, raw in raw_files.items():
                entry = _index_entry_from_dict(raw)
                if isinstance(path, str) and entry is not None:
                    files[path] = entry
        # Older documents carry no keyword_index section.
        keywords = KeywordIndex.from_dict(data.get("keyword_index"))
        version = data.get("version")
        return ModuleIndex(
            files=files,
            keywords=keywords,
            version=version if isinstance(version, int) else SCHEMA_VERSION,
        )

    def save_index(self, index: ModuleIndex) -> None:
        payload = {
            "version": SCHEMA_VERSION,
            "files": {path: asdict(entry) for path, entry in index.files.items()},
            "keyword_index": index.keywords.to_dict(),
        }
        write_document(self.index_path, payload)

    def save_module(self, card: ModuleCard) -> str:
        """Persist ``card`` and reconcile the keyword index for its path."""
        self.ensure_dirs()
        index = self.load_index()
        ref = storage_ref(card.path)
        write_document(self.files_dir / ref, module_card_to_dict(card))
        index.files[card.path] = IndexEntry(content_hash=card.content_hash, ref=ref)
        index.keywords.reconcile(card.path, card.keywords)
        self.save_index(index)
        logger.debug("Saved module card %s -> %s", card.path, ref)
        return ref

    def load_module(self, path: str) -> Optional[ModuleCard]:
        entry = self.load_index().files.get(path)
        if entry is None:
            return None
        return self.read_module(entry)

    def module_paths(self) -> List[str]:
        return list(self.load_index().files)

    def iter_modules(self) -> Iterator[ModuleCard]:
        """Yield every readable module card in index order."""
        for entry in self.load_index().files.values():
            card = self.read_module(entry)
            if card is not None:
                yield card

    def lookup_keywords(self, keywords: List[str]) -> List[str]:
        return self.load_index().keywords.lookup_or(keywords)

    def rebuild_keyword_index(self) -> KeywordIndex:
        """Replay every module card into a fresh keyword index and persist it."""
        index = self.load_index()
        cards = [
            card
            for card in map(self.read_module, index.files.values())
            if card is not None
        ]
        index.keywords = KeywordIndex.rebuild(cards)
        self.save_index(index)
        return index.keywords

    def read_module(self, entry: IndexEntry) -> Optional[ModuleCard]:
        data = read_document(self.files_dir / entry.ref)
        card = module_card_from_dict(data) if data is not None else None
        if card is None:
            logger.debug("Skipping unreadable module record %s", entry.ref)
        return card

    # ------------------------------------------------------------------
    # Symbol cards

    def load_symbols_index(self) -> Dict[str, str]:
        data = read_document(self.symbols_index_path)
        if data is None:
            return {}
        raw = data.get("symbols")
        if not isinstance(raw, dict):
            return {}
        return {
            name: ref
            for name, ref in raw.items()
            if isinstance(name, str) and isinstance(ref, str)
        }

    def save_symbol(self, card: SymbolCard) -> str:
        self.ensure_dirs()
        symbols = self.load_symbols_index()
        ref = storage_ref(_SYMBOL_KEY_PREFIX + card.symbol)
        write_document(self.symbols_dir / ref, symbol_card_to_dict(card))
        symbols[card.symbol] = ref
        write_document(
            self.symbols_index_path,
            {"version": SCHEMA_VERSION, "symbols": symbols},
        )
        logger.debug("Saved symbol card %s -> %s", card.symbol, ref)
        return ref

    def load_symbol(self, name: str) -> Optional[SymbolCard]:
        """Return the symbol card matching ``name`` case-insensitively."""
        symbols = self.load_symbols_index()
        ref = symbols.get(name)
        if ref is None:
            wanted = name.lower()
            ref = next(
                (value for key, value in symbols.items() if key.lower() == wanted),
                None,
            )
        if ref is None:
            return None
        return self._read_symbol(ref)

    def load_all_symbols(self) -> List[SymbolCard]:
        cards: List[SymbolCard] = []
        for ref in self.load_symbols_index().values():
            card = self._read_symbol(ref)
            if card is not None:
                cards.append(card)
        return cards

    def _read_symbol(self, ref: str) -> Optional[SymbolCard]:
        data = read_document(self.symbols_dir / ref)
        card = symbol_card_from_dict(data) if data is not None else None
        if card is None:
            logger.debug("Skipping unreadable symbol record %s", ref)
        return card


# ----------------------------------------------------------------------
# Serialisation


def module_card_to_dict(card: ModuleCard) -> Dict[str, Any]:
    data = asdict(card)
    data["version"] = SCHEMA_VERSION
    return data


def module_card_from_dict(payload: object) -> Optional[ModuleCard]:
    if not isinstance(payload, dict):
        return None
    path = payload.get("path")
    content_hash = payload.get("content_hash")
    summary = payload.get("summary")
    if (
        not isinstance(path, str)
        or not isinstance(content_hash, str)
        or not isinstance(summary, str)
    ):
        return None
    exports: List[ExportEntry] = []
    for raw in _as_list(payload.get("exports")):
        if isinstance(raw, dict) and isinstance(raw.get("name"), str):
            exports.append(ExportEntry(name=raw["name"], kind=_as_kind(raw.get("kind"))))
    return ModuleCard(
        path=path,
        content_hash=content_hash,
        summary=summary,
        symbols=_as_str_list(payload.get("symbols")),
        updated_at=_as_str(payload.get("updated_at")) or "",
        public_surface_hash=_as_str(payload.get("public_surface_hash")),
        exports=exports,
        keywords=_as_str_list(payload.get("keywords")),
        dependencies=_as_str_list(payload.get("dependencies")),
        footguns=_as_str(payload.get("footguns")),
        delta=_as_str(payload.get("delta")),
        revision_at_save=_as_str(payload.get("revision_at_save")),
    )


def symbol_card_to_dict(card: SymbolCard) -> Dict[str, Any]:
    data = asdict(card)
    data["version"] = SCHEMA_VERSION
    return data


def symbol_card_from_dict(payload: object) -> Optional[SymbolCard]:
    if not isinstance(payload, dict):
        return None
    symbol = payload.get("symbol")
    file = payload.get("file")
    purpose = payload.get("purpose")
    if (
        not isinstance(symbol, str)
        or not isinstance(file, str)
        or not isinstance(purpose, str)
    ):
        return None
    related: List[SymbolRelation] = []
    for raw in _as_list(payload.get("related")):
        if isinstance(raw, dict) and isinstance(raw.get("symbol"), str):
            relation = _as_str(raw.get("relation")) or DEFAULT_RELATION
            related.append(SymbolRelation(symbol=raw["symbol"], relation=relation))
    return SymbolCard(
        symbol=symbol,
        kind=_as_kind(payload.get("kind")),
        file=file,
        purpose=purpose,
        signature=_as_str(payload.get("signature")),
        related=related,
        keywords=_as_str_list(payload.get("keywords")),
        updated_at=_as_str(payload.get("updated_at")) or "",
    )


def _index_entry_from_dict(payload: object) -> Optional[IndexEntry]:
    if not isinstance(payload, dict):
        return None
    content_hash = payload.get("content_hash")
    ref = payload.get("ref")
    if not isinstance(content_hash, str) or not isinstance(ref, str):
        return None
    return IndexEntry(content_hash=content_hash, ref=ref)


def _as_list(value: object) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_str(value: object) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_str_list(value: object) -> List[str]:
    return [item for item in _as_list(value) if isinstance(item, str)]


def _as_kind(value: object) -> str:
    return value if isinstance(value, str) and value in SYMBOL_KINDS else "other"


__all__ = [
    "CardStore",
    "IndexEntry",
    "ModuleIndex",
    "module_card_from_dict",
    "module_card_to_dict",
    "symbol_card_from_dict",
    "symbol_card_to_dict",
]
