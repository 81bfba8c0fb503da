"""Error taxonomy for sandbox assembly."""

from __future__ import annotations

from typing import Iterable, Tuple


class SandboxError(RuntimeError):
    """Base class for failures that abort sandbox assembly."""


class ManifestMissing(SandboxError):
    """Raised when the source tree has no package.json."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Could not find {path}")
        self.path = path


class ManifestParseError(SandboxError):
    """Raised when package.json is not a JSON object."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to parse {path}: {reason}")
        self.path = path
        self.reason = reason


class DuplicatePath(SandboxError):
    """Raised when two input paths normalize to the same tree path."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Duplicate file path after normalization: {path}")
        self.path = path


class EntryNotFound(SandboxError):
    """Raised when no candidate entry file exists in the source tree."""

    def __init__(self, candidates: Iterable[str]) -> None:
        self.candidates: Tuple[str, ...] = tuple(dict.fromkeys(candidates))
        listed = ", ".join(f"'{candidate}'" for candidate in self.candidates)
        super().__init__(f"Cannot find the entry point: {listed}")


class DependencyResolutionFailed(SandboxError):
    """Raised when one or more dependencies cannot be resolved to a version."""

    def __init__(self, names: Iterable[str], reason: str) -> None:
        self.names: Tuple[str, ...] = tuple(sorted(set(names)))
        self.reason = reason
        listed = ", ".join(self.names) or "<unknown>"
        super().__init__(f"Failed to resolve dependencies ({listed}): {reason}")


__all__ = [
    "DependencyResolutionFailed",
    "DuplicatePath",
    "EntryNotFound",
    "ManifestMissing",
    "ManifestParseError",
    "SandboxError",
]
