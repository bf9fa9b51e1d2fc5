"""Core data models shared across repoctx components."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import List, Optional

SYMBOL_KINDS = ("function", "class", "constant", "type", "other")

META_HASH = "meta"

DEFAULT_RELATION = "related"


@dataclass
class ExportEntry:
    """A typed entry in a module's exported surface."""

    name: str
    kind: str = "other"


@dataclass
class SymbolRelation:
    """Directed, labelled edge from one symbol card to another symbol."""

    symbol: str
    relation: str = DEFAULT_RELATION


@dataclass
class ModuleCard:
    """Summary of one indexed file, or of a virtual meta entry."""

    path: str
    content_hash: str
    summary: str
    symbols: List[str] = field(default_factory=list)
    updated_at: str = ""
    public_surface_hash: Optional[str] = None
    exports: List[ExportEntry] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    footguns: Optional[str] = None
    delta: Optional[str] = None
    revision_at_save: Optional[str] = None

    @property
    def is_meta(self) -> bool:
        return self.content_hash == META_HASH


@dataclass
class SymbolCard:
    """Detailed record for one named function, class, constant or type."""

    symbol: str
    kind: str
    file: str
    purpose: str
    signature: Optional[str] = None
    related: List[SymbolRelation] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    updated_at: str = ""


@dataclass(frozen=True)
class Checkpoint:
    """Baseline revision used as the reference point for change summaries."""

    revision: str
    branch: str
    timestamp: str

    @property
    def short_revision(self) -> str:
        return self.revision[:7]


class Freshness(str, Enum):
    """Classification of a module card against the file it describes."""

    FRESH = "fresh"
    STALE = "stale"
    MISSING = "missing"


_STALE_REASONS = {
    Freshness.STALE: "file content changed",
    Freshness.MISSING: "file not found",
}


@dataclass(frozen=True)
class StaleEntry:
    """A module card whose backing file changed or disappeared."""

    path: str
    freshness: Freshness

    @property
    def reason(self) -> str:
        return _STALE_REASONS.get(self.freshness, self.freshness.value)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with a trailing ``Z``."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
