"""Version-control capability used for checkpoints and change summaries."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Protocol


class VCSError(RuntimeError):
    """Raised when the version-control tool is unavailable or a command fails."""


@dataclass(frozen=True)
class FileChange:
    """Line statistics for one file in a revision range."""

    file: str
    insertions: int
    deletions: int

    @property
    def total(self) -> int:
        return self.insertions + self.deletions


class VersionControl(Protocol):
    """The four queries the store needs from a version-control system."""

    def current_revision(self) -> str: ...

    def current_branch(self) -> str: ...

    def diff_stats(self, start: str, end: str) -> List[FileChange]: ...

    def file_diff(self, start: str, end: str, file: str) -> str: ...


class GitVCS:
    """``VersionControl`` backed by the ``git`` command line."""

    def __init__(self, repo_path: Path | str, runner: Callable[..., str] | None = None) -> None:
        self.repo_path = Path(repo_path)
        self._runner = runner or self._default_runner

    def current_revision(self) -> str:
        return self._run(["git", "rev-parse", "HEAD"]).strip()

    def current_branch(self) -> str:
        return self._run(["git", "rev-parse", "--abbrev-ref", "HEAD"]).strip()

    def diff_stats(self, start: str, end: str = "HEAD") -> List[FileChange]:
        output = self._run(["git", "diff", "--numstat", f"{start}..{end}"])
        return parse_numstat(output)

    def file_diff(self, start: str, end: str, file: str) -> str:
        return self._run(["git", "diff", f"{start}..{end}", "--", file])

    def _run(self, args: Iterable[str]) -> str:
        args = list(args)
        try:
            output = self._runner(args, cwd=self.repo_path, capture_output=True)
        except VCSError:
            raise
        except (OSError, RuntimeError) as exc:
            raise VCSError(f"`{' '.join(args)}` failed: {exc}") from exc
        return output or ""

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        import subprocess

        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd),
                check=True,
                text=True,
                capture_output=capture_output,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise VCSError(detail) from exc
        return completed.stdout if capture_output else ""


def parse_numstat(output: str) -> List[FileChange]:
    """Parse ``git diff --numstat`` output; binary files count as zero lines."""
    changes: List[FileChange] = []
    for line in output.splitlines():
        parts = line.split("\t", 2)
        if len(parts) != 3 or not parts[2]:
            continue
        changes.append(
            FileChange(
                file=parts[2],
                insertions=_count(parts[0]),
                deletions=_count(parts[1]),
            )
        )
    return changes


def _count(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


__all__ = ["FileChange", "GitVCS", "VCSError", "VersionControl", "parse_numstat"]
