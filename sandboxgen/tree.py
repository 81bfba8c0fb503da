"""Source tree loading and denormalization into flat sandbox records."""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Dict, List, Protocol, Tuple

from .models import SandboxDirectory, SandboxModule, SourceFile, SourceTree

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    "bower_components",
    ".cache",
    ".next",
    ".nuxt",
    "coverage",
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}

_MAX_TEXT_BYTES = 2 * 1024 * 1024

Denormalized = Tuple[List[SandboxModule], List[SandboxDirectory]]


class Denormalizer(Protocol):
    """Flattens a source tree into parent-referencing module and directory records."""

    def denormalize(self, tree: SourceTree) -> Denormalized:
        """Return modules and directories for the tree."""


def shortid(kind: str, path: str) -> str:
    """Return a stable short identifier for a tree entry."""
    return hashlib.sha1(f"{kind}:{path}".encode("utf-8")).hexdigest()[:10]


def denormalize_tree(tree: SourceTree) -> Denormalized:
    """Return modules in path order plus every directory they live in."""
    directories: Dict[str, SandboxDirectory] = {}

    def _ensure_directory(path: str) -> str | None:
        if not path:
            return None
        existing = directories.get(path)
        if existing is not None:
            return existing.shortid
        parent_path, _, title = path.rpartition("/")
        parent_id = _ensure_directory(parent_path)
        directory = SandboxDirectory(
            title=title,
            path=path,
            shortid=shortid("directory", path),
            directory_shortid=parent_id,
        )
        directories[path] = directory
        return directory.shortid

    modules: List[SandboxModule] = []
    for path in sorted(tree):
        source = tree[path]
        parent_path, _, title = path.rpartition("/")
        modules.append(
            SandboxModule(
                title=title,
                path=path,
                code=source.content,
                shortid=shortid("module", path),
                directory_shortid=_ensure_directory(parent_path),
                is_binary=source.is_binary,
            )
        )

    ordered = sorted(directories.values(), key=lambda directory: directory.path)
    return modules, ordered


class TreeDenormalizer:
    """Default denormalizer used by the assembler."""

    def denormalize(self, tree: SourceTree) -> Denormalized:
        return denormalize_tree(tree)


def load_directory(root: str | os.PathLike[str]) -> SourceTree:
    """Read a local directory into a source tree."""
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Source path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Source path is not a directory: {root}")

    tree: SourceTree = {}
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        current = Path(dirpath)
        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            file_path = current / filename
            rel_path = file_path.relative_to(root_path).as_posix()
            tree[rel_path] = _read_source(file_path, rel_path)
    return tree


def _read_source(path: Path, rel_path: str) -> SourceFile:
    size = path.stat().st_size
    metadata = {"size": size}
    if size > _MAX_TEXT_BYTES:
        return SourceFile(path=rel_path, content="", is_binary=True, metadata=metadata)
    data = path.read_bytes()
    try:
        content = data.decode("utf-8")
    except UnicodeDecodeError:
        return SourceFile(path=rel_path, content="", is_binary=True, metadata=metadata)
    if "\x00" in content:
        return SourceFile(path=rel_path, content="", is_binary=True, metadata=metadata)
    return SourceFile(path=rel_path, content=content, metadata=metadata)


__all__ = [
    "Denormalized",
    "Denormalizer",
    "TreeDenormalizer",
    "denormalize_tree",
    "load_directory",
    "shortid",
]
