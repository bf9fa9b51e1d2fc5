"""Tests for the card store."""

from __future__ import annotations

import json
from pathlib import Path

from repoctx.hashing import storage_ref
from repoctx.models import ExportEntry, ModuleCard, SymbolCard, SymbolRelation
from repoctx.stores import CardStore, KeywordIndex


def _module(path: str, keywords: list[str] | None = None, **overrides: object) -> ModuleCard:
    fields: dict[str, object] = {
        "path": path,
        "content_hash": "abc123",
        "summary": f"Summary of {path}",
        "symbols": ["run"],
        "keywords": keywords or [],
        "updated_at": "2026-01-01T00:00:00Z",
    }
    fields.update(overrides)
    return ModuleCard(**fields)  # type: ignore[arg-type]


def _symbol(name: str, keywords: list[str] | None = None) -> SymbolCard:
    return SymbolCard(
        symbol=name,
        kind="function",
        file="src/app.py",
        purpose=f"{name} purpose",
        keywords=keywords or [],
        updated_at="2026-01-01T00:00:00Z",
    )


def test_module_round_trip(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    card = _module(
        "src/users/dal.js",
        ["dal", "users"],
        exports=[ExportEntry(name="run", kind="function")],
        dependencies=["mongoose"],
        footguns="soft delete",
        delta="added run",
        public_surface_hash="0123456789ab",
        revision_at_save="f" * 40,
    )

    store.save_module(card)

    assert store.load_module("src/users/dal.js") == card
    assert store.load_module("src/users/other.js") is None
    assert store.module_paths() == ["src/users/dal.js"]


def test_save_module_uses_path_derived_ref(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    store.save_module(_module("a.py", summary="first"))
    store.save_module(_module("a.py", summary="second", content_hash="def456"))

    index = json.loads(store.index_path.read_text(encoding="utf-8"))
    ref = storage_ref("a.py")

    assert index["version"] == 1
    assert index["files"] == {"a.py": {"content_hash": "def456", "ref": ref}}
    assert sorted(path.name for path in store.files_dir.iterdir()) == [ref]
    loaded = store.load_module("a.py")
    assert loaded is not None and loaded.summary == "second"


def test_resave_with_new_keywords_leaves_no_stale_membership(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    store.save_module(_module("a.py", ["auth", "sessions"]))
    store.save_module(_module("b.py", ["auth"]))
    store.save_module(_module("a.py", ["http"]))

    assert store.lookup_keywords(["auth"]) == ["b.py"]
    assert store.lookup_keywords(["sessions"]) == []
    assert store.lookup_keywords(["http"]) == ["a.py"]
    assert "sessions" not in store.load_index().keywords.keywords()


def test_saving_same_card_twice_keeps_index_equivalent(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    store.save_module(_module("a.py", ["dal", "http"]))
    store.save_module(_module("b.py", ["dal"]))
    before = store.load_index().keywords

    store.save_module(_module("a.py", ["dal", "http"]))

    assert store.load_index().keywords == before


def test_corrupt_module_record_is_treated_as_absent(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    store.save_module(_module("a.py"))
    store.save_module(_module("b.py"))
    (store.files_dir / storage_ref("a.py")).write_text("{not json", encoding="utf-8")

    assert store.load_module("a.py") is None
    assert [card.path for card in store.iter_modules()] == ["b.py"]


def test_index_without_keyword_section_loads_as_empty(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    store.root.mkdir(parents=True)
    store.index_path.write_text(
        json.dumps({"version": 1, "files": {"a.py": {"content_hash": "h", "ref": "x.json"}}}),
        encoding="utf-8",
    )

    index = store.load_index()

    assert list(index.files) == ["a.py"]
    assert index.keywords.to_dict() == {}
    assert store.lookup_keywords(["anything"]) == []


def test_missing_or_garbage_index_is_empty(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    assert store.module_paths() == []

    store.root.mkdir(parents=True)
    store.index_path.write_text("[]", encoding="utf-8")
    assert store.module_paths() == []


def test_rebuild_keyword_index_matches_incremental_state(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    store.save_module(_module("a.py", ["dal", "http"]))
    store.save_module(_module("b.py", ["dal"]))
    store.save_module(_module("a.py", ["http"]))
    incremental = store.load_index().keywords

    # Simulate a damaged keyword section.
    index = store.load_index()
    index.keywords = KeywordIndex({"ghost": ["nowhere.py"]})
    store.save_index(index)

    rebuilt = store.rebuild_keyword_index()

    assert rebuilt == incremental
    assert store.load_index().keywords == incremental


def test_symbol_round_trip_and_case_insensitive_lookup(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    card = SymbolCard(
        symbol="FooBar",
        kind="class",
        file="src/foo.py",
        purpose="Does foo things",
        signature="class FooBar(Base)",
        related=[SymbolRelation(symbol="Baz", relation="subclass")],
        keywords=["foo"],
        updated_at="2026-01-01T00:00:00Z",
    )
    store.save_symbol(card)

    assert store.load_symbol("FooBar") == card
    assert store.load_symbol("foobar") == card
    assert store.load_symbol("FOOBAR") == card
    assert store.load_symbol("Foo") is None


def test_symbol_refs_do_not_collide_with_path_refs(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    store.save_module(_module("run"))
    store.save_symbol(_symbol("run"))

    symbols_index = json.loads(store.symbols_index_path.read_text(encoding="utf-8"))

    assert symbols_index["symbols"]["run"] == storage_ref("symbol:run")
    assert symbols_index["symbols"]["run"] != storage_ref("run")


def test_load_all_symbols_skips_corrupt_entries(tmp_path: Path) -> None:
    store = CardStore(tmp_path / ".repoctx")
    store.save_symbol(_symbol("alpha"))
    store.save_symbol(_symbol("beta"))
    store.save_symbol(_symbol("gamma"))
    (store.symbols_dir / storage_ref("symbol:beta")).write_text("garbage", encoding="utf-8")
    (store.symbols_dir / storage_ref("symbol:gamma")).unlink()

    assert [card.symbol for card in store.load_all_symbols()] == ["alpha"]
