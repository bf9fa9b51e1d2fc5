"""Caller-facing operations composing the store, queries and checkpoints."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .checkpoint import CheckpointLedger
from .config import RepoctxConfig, load_config
from .git.diff import ChangeSummarizer, ChangeSummary
from .git.vcs import GitVCS, VCSError, VersionControl
from .hashing import hash_file, surface_hash
from .logging import get_logger
from .models import (
    META_HASH,
    SYMBOL_KINDS,
    Checkpoint,
    ExportEntry,
    ModuleCard,
    StaleEntry,
    SymbolCard,
    SymbolRelation,
    utc_timestamp,
)
from .query import QueryEngine
from .staleness import StalenessOracle
from .stores import CardStore
from .where_used import ReferenceScanner

_GITIGNORE_HEADER = "# repoctx context index"


@dataclass
class InitOutcome:
    """Result of initialising the store in a repository."""

    store_path: Path
    gitignore_updated: bool


class ContextService:
    """Entry point for saving and retrieving repository context."""

    def __init__(
        self,
        root: Path | str = ".",
        *,
        config: RepoctxConfig | None = None,
        vcs: VersionControl | None = None,
        reference_scanner: ReferenceScanner | None = None,
    ) -> None:
        self.root = Path(os.path.abspath(Path(root).expanduser()))
        self.config = config or load_config(self.root)
        self.store = CardStore(self.root / self.config.store_dir)
        self.vcs = vcs or GitVCS(self.root)
        self.oracle = StalenessOracle(self.root)
        self.query_engine = QueryEngine(self.store, self.oracle)
        self.ledger = CheckpointLedger(self.store.root, self.vcs, repo_root=self.root)
        self.summarizer = ChangeSummarizer(self.vcs, excerpt_lines=self.config.diff.excerpt_lines)
        self.reference_scanner = reference_scanner or ReferenceScanner(
            self.config.where_used, store_dir=self.config.store_dir
        )
        self.logger = get_logger("service")

    def init(self) -> InitOutcome:
        """Create the store directories and keep them out of version control."""
        self.store.ensure_dirs()
        gitignore = self.root / ".gitignore"
        entry = self.config.store_dir.strip("/")
        try:
            existing = gitignore.read_text(encoding="utf-8")
        except FileNotFoundError:
            existing = ""
        ignored = {line.strip().strip("/") for line in existing.splitlines()}
        if entry in ignored:
            return InitOutcome(store_path=self.store.root, gitignore_updated=False)

        with gitignore.open("a", encoding="utf-8") as handle:
            handle.write(f"\n{_GITIGNORE_HEADER}\n{entry}\n")
        self.logger.debug("Added %s to %s", entry, gitignore)
        return InitOutcome(store_path=self.store.root, gitignore_updated=True)

    def save_module(
        self,
        file_path: str,
        summary: str,
        *,
        symbols: Sequence[str] = (),
        exports: Sequence[ExportEntry] = (),
        keywords: Sequence[str] = (),
        dependencies: Sequence[str] = (),
        footguns: Optional[str] = None,
        delta: Optional[str] = None,
        meta: bool = False,
    ) -> str:
        """Save a module card and return its canonical path.

        Meta entries use ``file_path`` verbatim as a virtual key and are never
        hashed. For real files a ``FileNotFoundError`` propagates when the file
        does not exist.
        """
        if meta:
            rel = str(file_path).replace("\\", "/")
            content_hash = META_HASH
            used_in: List[str] = []
        else:
            rel = canonical_path(self.root, file_path)
            content_hash = hash_file(self.root / rel)
            used_in = self.reference_scanner.find(self.root, rel)

        if used_in:
            summary = f"{summary}\nUsed in: {', '.join(used_in)}"

        card = ModuleCard(
            path=rel,
            content_hash=content_hash,
            summary=summary,
            symbols=list(symbols),
            updated_at=utc_timestamp(),
            public_surface_hash=surface_hash(symbols) if symbols else None,
            exports=list(exports),
            keywords=list(keywords),
            dependencies=list(dependencies),
            footguns=footguns or None,
            delta=delta or None,
            revision_at_save=self._current_revision(),
        )
        self.store.save_module(card)
        self.logger.debug("Saved context for %s (%d keywords)", rel, len(card.keywords))
        return rel

    def save_symbol(
        self,
        symbol: str,
        purpose: str,
        *,
        file: str,
        kind: str = "function",
        signature: Optional[str] = None,
        related: Sequence[SymbolRelation] = (),
        keywords: Sequence[str] = (),
    ) -> str:
        if kind not in SYMBOL_KINDS:
            raise ValueError(f"Unknown symbol kind {kind!r}; expected one of {', '.join(SYMBOL_KINDS)}")
        card = SymbolCard(
            symbol=symbol,
            kind=kind,
            file=file,
            purpose=purpose,
            signature=signature or None,
            related=list(related),
            keywords=list(keywords),
            updated_at=utc_timestamp(),
        )
        self.store.save_symbol(card)
        self.logger.debug("Saved symbol card for %s", symbol)
        return symbol

    def get(
        self,
        filter_path: Optional[str] = None,
        keywords: Optional[Sequence[str]] = None,
        symbol: Optional[str] = None,
    ) -> str:
        canonical = canonical_path(self.root, filter_path) if filter_path is not None else None
        return self.query_engine.render(filter_path=canonical, keywords=keywords, symbol=symbol)

    def stale(self) -> List[StaleEntry]:
        return self.query_engine.stale()

    def checkpoint(self) -> Checkpoint:
        """Record the current revision as the diff baseline; raises ``VCSError`` outside git."""
        checkpoint = self.ledger.capture()
        self.logger.debug("Checkpoint %s on %s", checkpoint.short_revision, checkpoint.branch)
        return checkpoint

    def diff(self, top: Optional[int] = None) -> ChangeSummary:
        if top is None:
            top = self.config.diff.top
        return self.summarizer.summarize(self.ledger.load(), top=top)

    def reindex(self) -> int:
        """Rebuild the keyword index from the module cards; returns the keyword count."""
        keywords = self.store.rebuild_keyword_index()
        count = len(keywords.keywords())
        self.logger.debug("Rebuilt keyword index with %d keywords", count)
        return count

    def _current_revision(self) -> Optional[str]:
        try:
            return self.vcs.current_revision() or None
        except VCSError as exc:
            self.logger.debug("No revision recorded: %s", exc)
            return None


def canonical_path(root: Path, raw: str) -> str:
    """Repository-relative, slash-separated form of ``raw``.

    Relative inputs are interpreted against ``root``; the root itself becomes ``"."``.
    """
    target = os.path.abspath(os.path.join(root, os.path.expanduser(raw)))
    return os.path.relpath(target, root).replace(os.sep, "/").replace("\\", "/")


__all__ = ["ContextService", "InitOutcome", "canonical_path"]
