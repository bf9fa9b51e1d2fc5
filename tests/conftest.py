from __future__ import annotations

from pathlib import Path

import pytest

from repoctx.service import ContextService
from tests._fixtures.fake_vcs import FakeVCS
from tests._fixtures.repo_builder import RepoBuilder


@pytest.fixture
def repo_builder(tmp_path: Path) -> RepoBuilder:
    """Provide a reusable repo builder rooted at the pytest tmp_path."""
    return RepoBuilder(tmp_path)


@pytest.fixture
def fake_vcs() -> FakeVCS:
    return FakeVCS()


@pytest.fixture
def service(repo_builder: RepoBuilder, fake_vcs: FakeVCS) -> ContextService:
    """A context service over the builder's repository with a scripted VCS."""
    return ContextService(repo_builder.root, vcs=fake_vcs)
