"""Tests for sandboxgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from sandboxgen.config import ConfigError, SandboxGenConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path, environ={})

    assert isinstance(config, SandboxGenConfig)
    assert config.registry.base_url == "https://unpkg.com"
    assert config.registry.timeout == pytest.approx(30.0)
    assert config.registry.max_workers == 8
    assert config.dependencies.exclude == []
    assert config.dependencies.aliases == {}


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".sandboxgen.yml"
    config_file.write_text(
        """
registry:
  base_url: "https://registry.internal/cdn/"
  timeout: 12.5
  max_workers: 4
dependencies:
  exclude: [webpack, webpack-cli]
  exclude_prefixes:
    - "@internal/"
  aliases:
    request: axios
""",
        encoding="utf-8",
    )

    config = load_config(config_file, environ={})

    assert config.registry.base_url == "https://registry.internal/cdn"
    assert config.registry.timeout == pytest.approx(12.5)
    assert config.registry.max_workers == 4
    assert config.dependencies.exclude == ["webpack", "webpack-cli"]
    assert config.dependencies.exclude_prefixes == ["@internal/"]
    assert config.dependencies.aliases == {"request": "axios"}


def test_environment_overrides_file(tmp_path: Path) -> None:
    (tmp_path / ".sandboxgen.yml").write_text(
        "registry:\n  base_url: https://from-file.example\n  timeout: 5\n",
        encoding="utf-8",
    )

    config = load_config(
        tmp_path,
        environ={
            "SANDBOXGEN_REGISTRY_URL": "https://from-env.example/",
            "SANDBOXGEN_REGISTRY_TIMEOUT": "90",
        },
    )

    assert config.registry.base_url == "https://from-env.example"
    assert config.registry.timeout == pytest.approx(90.0)


def test_invalid_values_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / ".sandboxgen.yml").write_text(
        "registry:\n  timeout: -1\n  max_workers: many\n", encoding="utf-8"
    )

    config = load_config(tmp_path, environ={})

    assert config.registry.timeout == pytest.approx(30.0)
    assert config.registry.max_workers == 8


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".sandboxgen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_malformed_yaml_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".sandboxgen.yml").write_text("registry: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})


def test_config_defaults_need_no_arguments() -> None:
    config = SandboxGenConfig()

    assert config.registry.base_url == "https://unpkg.com"
    assert config.dependencies.aliases == {}
