"""Dependency selection, filtering and version resolution."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from .config import DependencyConfig
from .errors import DependencyResolutionFailed
from .logging import get_logger
from .models import Manifest, SandboxModule
from .registry import VersionResolver
from .usage import matches_dependency, scan_usages

# Packages that do nothing inside a browser sandbox: git hooks, type checkers
# and platform-native builds.
DEFAULT_EXCLUDED: FrozenSet[str] = frozenset(
    {
        "flow-bin",
        "fsevents",
        "husky",
        "lint-staged",
        "pre-commit",
    }
)

# Type-only packages.
DEFAULT_EXCLUDED_PREFIXES: Tuple[str, ...] = ("@types/",)

# Native packages replaced by their pure JavaScript equivalents.
DEFAULT_ALIASES: Mapping[str, str] = {
    "node-sass": "sass",
    "bcrypt": "bcryptjs",
}


def select_used_dev_dependencies(
    dev_dependencies: Mapping[str, str], usages: Iterable[str]
) -> Dict[str, str]:
    """Keep the dev dependencies referenced by at least one usage."""
    references = list(usages)
    return {
        name: specifier
        for name, specifier in dev_dependencies.items()
        if any(matches_dependency(reference, name) for reference in references)
    }


def merge_dependencies(
    runtime: Mapping[str, str], dev_used: Mapping[str, str]
) -> Dict[str, str]:
    """Merge dev dependencies into runtime ones; runtime specifiers always win ties."""
    merged = dict(runtime)
    for name, specifier in dev_used.items():
        if name not in merged:
            merged[name] = specifier
    return merged


@dataclass(frozen=True)
class DependencyPolicy:
    """Names to drop or rename before version resolution."""

    excluded: FrozenSet[str] = DEFAULT_EXCLUDED
    excluded_prefixes: Tuple[str, ...] = DEFAULT_EXCLUDED_PREFIXES
    aliases: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_ALIASES))

    @classmethod
    def from_config(cls, config: DependencyConfig) -> "DependencyPolicy":
        aliases = dict(DEFAULT_ALIASES)
        aliases.update(config.aliases)
        return cls(
            excluded=DEFAULT_EXCLUDED | frozenset(config.exclude),
            excluded_prefixes=DEFAULT_EXCLUDED_PREFIXES + tuple(config.exclude_prefixes),
            aliases=aliases,
        )

    def is_excluded(self, name: str) -> bool:
        return name in self.excluded or name.startswith(self.excluded_prefixes)

    def apply(self, dependencies: Mapping[str, str]) -> Dict[str, str]:
        """Return dependencies with excluded names removed and aliases rewritten.

        A rewritten package resolves to the latest release of its replacement,
        since the original specifier describes a different package. An alias
        never overrides a replacement that is already declared.
        """
        kept: Dict[str, str] = {}
        renamed: Dict[str, str] = {}
        for name, specifier in dependencies.items():
            if self.is_excluded(name):
                continue
            target = self.aliases.get(name)
            if target is None:
                kept[name] = specifier
            elif not self.is_excluded(target):
                renamed.setdefault(target, "latest")

        for target, specifier in renamed.items():
            kept.setdefault(target, specifier)
        return kept


class DependencyResolver:
    """Turns a manifest and the sandbox modules into concrete dependency versions."""

    def __init__(
        self,
        version_resolver: VersionResolver,
        *,
        policy: DependencyPolicy | None = None,
        timeout: Optional[float] = 30.0,
    ) -> None:
        self.version_resolver = version_resolver
        self.policy = policy or DependencyPolicy()
        self.timeout = timeout
        self.logger = get_logger("resolver")

    def candidates(
        self, manifest: Manifest, modules: Iterable[SandboxModule]
    ) -> Dict[str, str]:
        """Return the filtered `name -> specifier` mapping that needs resolving."""
        usages = scan_usages(modules)
        dev_used = select_used_dev_dependencies(manifest.dev_dependencies, usages)
        merged = merge_dependencies(manifest.dependencies, dev_used)
        filtered = self.policy.apply(merged)
        self.logger.debug(
            "Selected %d dependencies (%d runtime, %d used dev)",
            len(filtered),
            len(manifest.dependencies),
            len(dev_used),
        )
        return filtered

    async def resolve(
        self, manifest: Manifest, modules: Iterable[SandboxModule]
    ) -> Dict[str, str]:
        """Resolve every selected dependency or fail the whole call."""
        candidates = self.candidates(manifest, modules)
        if not candidates:
            return {}

        try:
            resolved = await asyncio.wait_for(
                self.version_resolver.resolve_versions(candidates), timeout=self.timeout
            )
        except DependencyResolutionFailed:
            raise
        except asyncio.TimeoutError as exc:
            raise DependencyResolutionFailed(
                candidates, f"version resolution timed out after {self.timeout}s"
            ) from exc
        except Exception as exc:
            raise DependencyResolutionFailed(candidates, str(exc) or type(exc).__name__) from exc

        missing = [name for name in candidates if not resolved.get(name)]
        if missing:
            raise DependencyResolutionFailed(missing, "no version returned")
        return {name: resolved[name] for name in candidates}


__all__ = [
    "DEFAULT_ALIASES",
    "DEFAULT_EXCLUDED",
    "DEFAULT_EXCLUDED_PREFIXES",
    "DependencyPolicy",
    "DependencyResolver",
    "merge_dependencies",
    "select_used_dev_dependencies",
]
