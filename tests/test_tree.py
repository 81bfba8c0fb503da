"""Tests for source tree loading and denormalization."""

from __future__ import annotations

from pathlib import Path

import pytest

from sandboxgen.errors import DuplicatePath
from sandboxgen.models import build_tree
from sandboxgen.tree import denormalize_tree, load_directory, shortid


def test_denormalize_builds_parent_referencing_records() -> None:
    tree = build_tree(
        {
            "package.json": "{}",
            "src/index.js": "console.log(1)",
            "src/components/App.js": "export default 1",
        }
    )

    modules, directories = denormalize_tree(tree)

    assert [module.path for module in modules] == [
        "package.json",
        "src/components/App.js",
        "src/index.js",
    ]
    assert [directory.path for directory in directories] == ["src", "src/components"]

    by_path = {directory.path: directory for directory in directories}
    assert by_path["src"].directory_shortid is None
    assert by_path["src/components"].directory_shortid == by_path["src"].shortid

    modules_by_path = {module.path: module for module in modules}
    assert modules_by_path["package.json"].directory_shortid is None
    assert modules_by_path["src/index.js"].directory_shortid == by_path["src"].shortid
    assert modules_by_path["src/components/App.js"].title == "App.js"
    assert modules_by_path["src/components/App.js"].code == "export default 1"


def test_shortids_are_stable_and_distinct() -> None:
    assert shortid("module", "src") == shortid("module", "src")
    assert shortid("module", "src") != shortid("directory", "src")


def test_build_tree_normalizes_paths() -> None:
    tree = build_tree({"./src/index.js": "", "/package.json": "{}"})

    assert set(tree) == {"src/index.js", "package.json"}


def test_build_tree_rejects_paths_that_collide_after_normalization() -> None:
    with pytest.raises(DuplicatePath) as excinfo:
        build_tree({"./a.js": "first", "a.js": "second"})

    assert excinfo.value.path == "a.js"


def test_load_directory_skips_vendor_dirs_and_flags_binaries(tree_builder) -> None:
    root = tree_builder.write(
        {
            "package.json": '{"name": "demo"}',
            "src/index.js": "import 'react';",
            "node_modules/react/index.js": "module.exports = {};",
        }
    ).materialize()
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\xff\xfe")

    tree = load_directory(root)

    assert set(tree) == {"package.json", "src/index.js", "logo.png"}
    assert tree["src/index.js"].content == "import 'react';"
    assert tree["logo.png"].is_binary is True
    assert tree["logo.png"].content == ""


def test_load_directory_rejects_missing_path(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_directory(tmp_path / "missing")
