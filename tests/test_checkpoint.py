"""Tests for the checkpoint ledger."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repoctx.checkpoint import CheckpointLedger
from repoctx.git.vcs import VCSError
from tests._fixtures.fake_vcs import FakeVCS


def test_capture_records_revision_and_branch(tmp_path: Path) -> None:
    vcs = FakeVCS(revision="1234567890abcdef", branch="feature/x")
    ledger = CheckpointLedger(tmp_path / ".repoctx", vcs, repo_root=tmp_path)

    checkpoint = ledger.capture()

    assert checkpoint.revision == "1234567890abcdef"
    assert checkpoint.branch == "feature/x"
    assert checkpoint.short_revision == "1234567"
    assert checkpoint.timestamp.endswith("Z")
    assert ledger.load() == checkpoint
    state = json.loads(ledger.state_path.read_text(encoding="utf-8"))
    assert state["version"] == 1
    assert state["repo_root"] == str(tmp_path)


def test_save_overwrites_previous_checkpoint(tmp_path: Path) -> None:
    ledger = CheckpointLedger(tmp_path / ".repoctx", FakeVCS())
    ledger.save("r1", "main")
    second = ledger.save("r2", "dev")

    assert ledger.load() == second
    assert [path.name for path in ledger.store_root.iterdir()] == ["state.json"]


def test_capture_without_vcs_raises_and_keeps_state(tmp_path: Path) -> None:
    vcs = FakeVCS()
    ledger = CheckpointLedger(tmp_path / ".repoctx", vcs)
    previous = ledger.save("r1", "main")
    vcs.available = False

    with pytest.raises(VCSError):
        ledger.capture()

    assert ledger.load() == previous


def test_load_returns_none_for_missing_or_corrupt_state(tmp_path: Path) -> None:
    ledger = CheckpointLedger(tmp_path / ".repoctx", FakeVCS())
    assert ledger.load() is None

    ledger.store_root.mkdir(parents=True)
    ledger.state_path.write_text('{"version": 1, "checkpoint": {"revision": 5}}', encoding="utf-8")
    assert ledger.load() is None
