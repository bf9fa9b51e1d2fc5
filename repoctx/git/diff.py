"""Change summaries between the checkpoint and the current revision."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..logging import get_logger
from ..models import Checkpoint
from .vcs import FileChange, VCSError, VersionControl

DEFAULT_EXCERPT_LINES = 40

STATUS_NO_BASELINE = "no_baseline"
STATUS_NO_VCS = "no_vcs"
STATUS_UNCHANGED = "unchanged"
STATUS_ERROR = "error"
STATUS_CHANGED = "changed"


@dataclass(frozen=True)
class DiffExcerpt:
    """Added and removed lines for one changed file."""

    file: str
    lines: Sequence[str]


@dataclass(frozen=True)
class ChangeSummary:
    """Ranked repository changes since the checkpoint."""

    status: str
    checkpoint: Optional[Checkpoint] = None
    current_revision: Optional[str] = None
    changes: Sequence[FileChange] = field(default_factory=tuple)
    shown: Sequence[FileChange] = field(default_factory=tuple)
    excerpts: Sequence[DiffExcerpt] = field(default_factory=tuple)

    @property
    def remaining(self) -> int:
        return len(self.changes) - len(self.shown)

    def render(self) -> str:
        if self.status == STATUS_NO_BASELINE:
            return "No checkpoint found. Run `repoctx checkpoint` first."
        if self.status == STATUS_NO_VCS:
            return "Not in a git repository."
        if self.checkpoint is None:
            return ""
        short = self.checkpoint.short_revision
        if self.status == STATUS_UNCHANGED:
            return f"No changes since checkpoint ({short})."
        if self.status == STATUS_ERROR:
            return f"Could not compute diff from {short}."

        lines: List[str] = [
            f"# Repoctx Diff (since {short} at {self.checkpoint.timestamp})",
            "",
            f"Files changed ({len(self.changes)}):",
            "",
        ]
        for change in self.shown:
            lines.append(f"- {change.file} (+{change.insertions} -{change.deletions})")
        if self.remaining > 0:
            lines.append(f"... and {self.remaining} more files")
        lines.extend(["", "---", ""])
        for excerpt in self.excerpts:
            lines.append(f"[{excerpt.file}]")
            lines.extend(excerpt.lines)
            lines.append("")
        return "\n".join(lines)


class ChangeSummarizer:
    """Ranks changed files and extracts bounded diff excerpts."""

    def __init__(self, vcs: VersionControl, *, excerpt_lines: int = DEFAULT_EXCERPT_LINES) -> None:
        self.vcs = vcs
        self.excerpt_lines = excerpt_lines
        self.logger = get_logger("diff")

    def summarize(self, checkpoint: Optional[Checkpoint], *, top: int | None = None) -> ChangeSummary:
        if checkpoint is None:
            return ChangeSummary(status=STATUS_NO_BASELINE)

        try:
            current = self.vcs.current_revision()
        except VCSError as exc:
            self.logger.debug("Unable to resolve current revision: %s", exc)
            return ChangeSummary(status=STATUS_NO_VCS, checkpoint=checkpoint)

        if current == checkpoint.revision:
            return ChangeSummary(
                status=STATUS_UNCHANGED, checkpoint=checkpoint, current_revision=current
            )

        try:
            stats = self.vcs.diff_stats(checkpoint.revision, current)
        except VCSError as exc:
            self.logger.debug("Diff statistics failed from %s: %s", checkpoint.revision, exc)
            return ChangeSummary(
                status=STATUS_ERROR, checkpoint=checkpoint, current_revision=current
            )

        ranked = sorted(stats, key=lambda change: change.total, reverse=True)
        shown = ranked[:top] if top else ranked

        excerpts: List[DiffExcerpt] = []
        for change in shown:
            try:
                text = self.vcs.file_diff(checkpoint.revision, current, change.file)
            except VCSError as exc:
                self.logger.debug("Skipping diff for %s: %s", change.file, exc)
                continue
            lines = extract_changed_lines(text, limit=self.excerpt_lines)
            if lines:
                excerpts.append(DiffExcerpt(file=change.file, lines=lines))

        return ChangeSummary(
            status=STATUS_CHANGED,
            checkpoint=checkpoint,
            current_revision=current,
            changes=tuple(ranked),
            shown=tuple(shown),
            excerpts=tuple(excerpts),
        )


def extract_changed_lines(diff_text: str, *, limit: int = DEFAULT_EXCERPT_LINES) -> List[str]:
    """Keep added/removed content lines, dropping ``+++``/``---`` file headers."""
    lines: List[str] = []
    for line in diff_text.splitlines():
        if line.startswith(("+++", "---")):
            continue
        if not line.startswith(("+", "-")):
            continue
        lines.append(line)
        if len(lines) >= limit:
            break
    return lines


__all__ = [
    "ChangeSummarizer",
    "ChangeSummary",
    "DiffExcerpt",
    "extract_changed_lines",
]
