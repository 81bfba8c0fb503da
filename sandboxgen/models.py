"""Core data models shared across sandboxgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import DuplicatePath


@dataclass
class SourceFile:
    """A single file of the fetched source tree."""

    path: str
    content: str
    is_binary: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)


SourceTree = Dict[str, SourceFile]


def build_tree(files: Mapping[str, str]) -> SourceTree:
    """Build a source tree from a plain `path -> content` mapping.

    Raises :class:`DuplicatePath` when two keys normalize to the same path.
    """
    tree: SourceTree = {}
    for raw_path, content in files.items():
        path = normalize_path(raw_path)
        if path in tree:
            raise DuplicatePath(path)
        tree[path] = SourceFile(path=path, content=content)
    return tree


def normalize_path(path: str) -> str:
    """Return a relative POSIX path without leading `./` or `/`."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


@dataclass
class Manifest:
    """Parsed view of package.json."""

    name: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    main: Optional[str] = None
    scripts: Dict[str, str] = field(default_factory=dict)
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_title(self) -> Optional[str]:
        return self.title or self.name


@dataclass
class HtmlInfo:
    """Body fragment and external resources extracted from an HTML entry."""

    body: Optional[str] = None
    external_resources: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SandboxModule:
    """Flat file record referencing its parent directory."""

    title: str
    path: str
    code: str
    shortid: str
    directory_shortid: Optional[str]
    is_binary: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "path": self.path,
            "code": self.code,
            "shortid": self.shortid,
            "directoryShortid": self.directory_shortid,
            "isBinary": self.is_binary,
        }


@dataclass(frozen=True)
class SandboxDirectory:
    """Flat directory record referencing its parent directory."""

    title: str
    path: str
    shortid: str
    directory_shortid: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "path": self.path,
            "shortid": self.shortid,
            "directoryShortid": self.directory_shortid,
        }


@dataclass(frozen=True)
class SandboxDescriptor:
    """Final output of the assembly pipeline."""

    title: Optional[str]
    description: Optional[str]
    tags: List[str]
    modules: List[SandboxModule]
    directories: List[SandboxDirectory]
    dependencies: Dict[str, str]
    external_resources: List[str]
    template: str
    entry: str

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-ready mapping of the descriptor."""
        return {
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "modules": [module.to_dict() for module in self.modules],
            "directories": [directory.to_dict() for directory in self.directories],
            "npmDependencies": dict(self.dependencies),
            "externalResources": list(self.external_resources),
            "template": self.template,
            "entry": self.entry,
        }
