"""Best-effort reverse reference scan for the "Used in" annotation."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Iterator, List, Sequence

from .config import WhereUsedConfig
from .logging import get_logger

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    "dist",
    ".repoctx",
}

logger = get_logger("where_used")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            if self.directory_only and rel_path.startswith(f"{self.pattern}/"):
                return True
            return False

        for part in rel_path.split("/"):
            if fnmatchcase(part, self.pattern):
                return True
        return False


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return []

    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class ReferenceScanner:
    """Finds files that mention a module's basename.

    This is a heuristic: false positives (unrelated files sharing a word) and
    false negatives (aliased imports) are expected.
    """

    def __init__(self, config: WhereUsedConfig | None = None, *, store_dir: str | None = None) -> None:
        self.config = config or WhereUsedConfig()
        self._excluded_dirs = set(_EXCLUDED_DIRS).union(self.config.exclude_dirs)
        if store_dir:
            self._excluded_dirs.add(store_dir)

    def find(self, root: Path, rel_path: str) -> List[str]:
        """Return up to ``limit`` repository-relative files referencing ``rel_path``."""
        if not self.config.enabled or self.config.limit <= 0:
            return []
        needle = PurePosixPath(rel_path).stem
        if not needle:
            return []

        root = Path(root)
        rules = _parse_gitignore(root / ".gitignore")
        matches: List[str] = []
        for candidate in self._iter_files(root, rules):
            if candidate == rel_path:
                continue
            try:
                text = (root / candidate).read_text(encoding="utf-8", errors="ignore")
            except OSError as exc:
                logger.debug("Skipping %s during reference scan: %s", candidate, exc)
                continue
            if needle in text:
                matches.append(candidate)
                if len(matches) >= self.config.limit:
                    break
        return matches

    def _iter_files(self, root: Path, rules: Sequence[IgnoreRule]) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in self._excluded_dirs:
                    continue
                rel = f"{rel_dir}/{name}" if rel_dir else name
                if _should_ignore(rel, True, rules):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                if not self._is_included(filename):
                    continue
                rel = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel, False, rules):
                    continue
                yield rel

    def _is_included(self, filename: str) -> bool:
        return any(fnmatchcase(filename, pattern) for pattern in self.config.include)


__all__ = ["IgnoreRule", "ReferenceScanner"]
