"""Tests for sandboxgen.manifest."""

from __future__ import annotations

import pytest

from sandboxgen.errors import ManifestMissing, ManifestParseError
from sandboxgen.manifest import load_manifest, parse_manifest
from sandboxgen.models import build_tree


def test_parse_manifest_reads_expected_fields() -> None:
    manifest = parse_manifest(
        """
        {
          "name": "demo",
          "description": "A demo app",
          "keywords": ["react", 3, "demo"],
          "main": "./src/app.js",
          "scripts": {"start": "react-scripts start"},
          "dependencies": {"react": "^18.2.0"},
          "devDependencies": {"jest": "^29.0.0"}
        }
        """
    )

    assert manifest.display_title == "demo"
    assert manifest.description == "A demo app"
    assert manifest.keywords == ["react", "demo"]
    assert manifest.main == "./src/app.js"
    assert manifest.scripts == {"start": "react-scripts start"}
    assert manifest.dependencies == {"react": "^18.2.0"}
    assert manifest.dev_dependencies == {"jest": "^29.0.0"}


def test_title_takes_precedence_over_name() -> None:
    manifest = parse_manifest('{"name": "pkg", "title": "Pretty Title"}')
    assert manifest.display_title == "Pretty Title"


def test_missing_dependency_maps_default_to_empty() -> None:
    manifest = parse_manifest('{"name": "bare", "dependencies": ["not", "a", "map"]}')
    assert manifest.dependencies == {}
    assert manifest.dev_dependencies == {}


def test_parse_manifest_rejects_malformed_json() -> None:
    with pytest.raises(ManifestParseError):
        parse_manifest("{ not json")


def test_parse_manifest_rejects_non_object_root() -> None:
    with pytest.raises(ManifestParseError):
        parse_manifest('["a", "b"]')


def test_load_manifest_requires_package_json() -> None:
    with pytest.raises(ManifestMissing):
        load_manifest(build_tree({"src/index.js": ""}))
