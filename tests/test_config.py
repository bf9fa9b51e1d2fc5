"""Tests for repoctx.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from repoctx.config import ConfigError, RepoctxConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, RepoctxConfig)
    assert config.root == tmp_path.resolve()
    assert config.store_dir == ".repoctx"
    assert config.store_path == tmp_path.resolve() / ".repoctx"
    assert config.diff.excerpt_lines == 40
    assert config.diff.top is None
    assert config.where_used.enabled is True
    assert config.where_used.limit == 5
    assert "*.py" in config.where_used.include


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".repoctx.yml"
    config_file.write_text(
        """
store_dir: .context
diff:
  excerpt_lines: 12
  top: 8
where_used:
  enabled: false
  limit: 3
  include: ["*.go"]
  exclude_dirs:
    - vendor
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.store_dir == ".context"
    assert config.diff.excerpt_lines == 12
    assert config.diff.top == 8
    assert config.where_used.enabled is False
    assert config.where_used.limit == 3
    assert config.where_used.include == ["*.go"]
    assert config.where_used.exclude_dirs == ["vendor"]


def test_load_config_ignores_invalid_values(tmp_path: Path) -> None:
    (tmp_path / ".repoctx.yml").write_text(
        "diff:\n  excerpt_lines: -1\n  top: many\nwhere_used:\n  limit: lots\n",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.diff.excerpt_lines == 40
    assert config.diff.top is None
    assert config.where_used.limit == 5


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".repoctx.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".repoctx.yml").write_text("diff: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".repoctx.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).store_dir == ".repoctx"
