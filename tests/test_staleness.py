"""Tests for staleness classification."""

from __future__ import annotations

from repoctx.hashing import hash_file
from repoctx.models import Freshness, ModuleCard
from repoctx.staleness import StalenessOracle
from tests._fixtures.repo_builder import RepoBuilder


def _card_for(builder: RepoBuilder, rel: str) -> ModuleCard:
    return ModuleCard(path=rel, content_hash=hash_file(builder.root / rel), summary="s")


def test_untouched_file_is_fresh(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/app.py": "print('hi')\n"})
    oracle = StalenessOracle(repo_builder.root)

    assert oracle.classify(_card_for(repo_builder, "src/app.py")) is Freshness.FRESH


def test_modified_file_is_stale(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/app.py": "print('hi')\n"})
    card = _card_for(repo_builder, "src/app.py")
    repo_builder.write({"src/app.py": "print('bye')\n"})

    assert StalenessOracle(repo_builder.root).classify(card) is Freshness.STALE


def test_deleted_file_is_missing(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"src/app.py": "print('hi')\n"})
    card = _card_for(repo_builder, "src/app.py")
    repo_builder.remove("src/app.py")

    assert StalenessOracle(repo_builder.root).classify(card) is Freshness.MISSING


def test_directory_in_place_of_file_is_missing(repo_builder: RepoBuilder) -> None:
    (repo_builder.root / "pkg").mkdir()
    card = ModuleCard(path="pkg", content_hash="0" * 64, summary="s")

    assert StalenessOracle(repo_builder.root).classify(card) is Freshness.MISSING


def test_meta_cards_are_always_fresh(repo_builder: RepoBuilder) -> None:
    card = ModuleCard(path=".meta/glossary", content_hash="meta", summary="terms")

    assert StalenessOracle(repo_builder.root).classify(card) is Freshness.FRESH
