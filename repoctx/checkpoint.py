"""Singleton baseline revision used for change summaries."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .git.vcs import VersionControl
from .logging import get_logger
from .models import Checkpoint, utc_timestamp
from .stores.documents import SCHEMA_VERSION, read_document, write_document

_STATE_FILENAME = "state.json"

logger = get_logger("checkpoint")


class CheckpointLedger:
    """Stores at most one checkpoint; every save overwrites the previous one."""

    def __init__(self, store_root: Path, vcs: VersionControl, *, repo_root: Path | None = None) -> None:
        self.store_root = Path(store_root)
        self.vcs = vcs
        self.repo_root = repo_root

    @property
    def state_path(self) -> Path:
        return self.store_root / _STATE_FILENAME

    def save(self, revision: str, branch: str) -> Checkpoint:
        checkpoint = Checkpoint(revision=revision, branch=branch, timestamp=utc_timestamp())
        payload = {
            "version": SCHEMA_VERSION,
            "repo_root": str(self.repo_root) if self.repo_root is not None else None,
            "checkpoint": {
                "revision": checkpoint.revision,
                "branch": checkpoint.branch,
                "timestamp": checkpoint.timestamp,
            },
        }
        write_document(self.state_path, payload)
        logger.debug("Checkpoint stored at %s", self.state_path)
        return checkpoint

    def capture(self) -> Checkpoint:
        """Save the current revision and branch as the baseline.

        Raises ``VCSError`` when no version-control context is available.
        """
        revision = self.vcs.current_revision()
        branch = self.vcs.current_branch()
        return self.save(revision, branch)

    def load(self) -> Optional[Checkpoint]:
        data = read_document(self.state_path)
        if data is None:
            return None
        raw = data.get("checkpoint")
        if not isinstance(raw, dict):
            return None
        revision = raw.get("revision")
        branch = raw.get("branch")
        timestamp = raw.get("timestamp")
        if not all(isinstance(value, str) for value in (revision, branch, timestamp)):
            return None
        return Checkpoint(revision=revision, branch=branch, timestamp=timestamp)


__all__ = ["CheckpointLedger"]
