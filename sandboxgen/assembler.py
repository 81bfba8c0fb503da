"""Assemble a sandbox descriptor from a source tree."""

from __future__ import annotations

import asyncio
from typing import Optional, Tuple

from .assets import extract_html_info
from .config import SandboxGenConfig
from .errors import EntryNotFound
from .logging import get_logger
from .manifest import load_manifest
from .models import HtmlInfo, Manifest, SandboxDescriptor, SourceFile, SourceTree, normalize_path
from .registry import RegistryVersionResolver
from .resolver import DependencyPolicy, DependencyResolver
from .templates import Template, classify, default_entry_file
from .tree import Denormalizer, TreeDenormalizer

HTML_ENTRY_CANDIDATES: Tuple[str, ...] = ("index.html", "public/index.html")


class SandboxAssembler:
    """Runs the template, HTML, dependency and tree steps for one source tree."""

    def __init__(
        self,
        resolver: DependencyResolver,
        denormalizer: Denormalizer | None = None,
    ) -> None:
        self.resolver = resolver
        self.denormalizer = denormalizer or TreeDenormalizer()
        self.logger = get_logger("assembler")

    @classmethod
    def from_config(cls, config: SandboxGenConfig) -> "SandboxAssembler":
        """Build an assembler backed by the registry described in the config."""
        resolver = DependencyResolver(
            RegistryVersionResolver(config.registry),
            policy=DependencyPolicy.from_config(config.dependencies),
            timeout=config.registry.timeout,
        )
        return cls(resolver)

    async def assemble(self, tree: SourceTree) -> SandboxDescriptor:
        """Build the sandbox descriptor; any failure aborts the whole call.

        The HTML entry of ``tree`` is rewritten in place to its body markup.
        """
        manifest = load_manifest(tree)
        template = classify(manifest, tree)
        entry = resolve_entry(manifest, template, tree)

        html_info = apply_html_entry(find_html_entry(tree))
        modules, directories = self.denormalizer.denormalize(tree)

        dependencies = await self.resolver.resolve(manifest, modules)

        self.logger.info("Creating sandbox with template %s", template.value)

        return SandboxDescriptor(
            title=manifest.display_title,
            description=manifest.description,
            tags=list(manifest.keywords),
            modules=list(modules),
            directories=list(directories),
            dependencies=dependencies,
            external_resources=list(html_info.external_resources),
            template=template.value,
            entry=entry,
        )

    def assemble_sync(self, tree: SourceTree) -> SandboxDescriptor:
        """Run :meth:`assemble` on a fresh event loop."""
        return asyncio.run(self.assemble(tree))


def resolve_entry(manifest: Manifest, template: Template, tree: SourceTree) -> str:
    """Return the declared entry if present, else the template default."""
    candidates = []
    if manifest.main:
        candidates.append(normalize_path(manifest.main))
    candidates.append(default_entry_file(template))
    for candidate in candidates:
        if candidate in tree:
            return candidate
    raise EntryNotFound(candidates)


def find_html_entry(tree: SourceTree) -> Optional[SourceFile]:
    """Return the first HTML entry candidate present in the tree."""
    for path in HTML_ENTRY_CANDIDATES:
        source = tree.get(path)
        if source is not None:
            return source
    return None


def apply_html_entry(source: Optional[SourceFile]) -> HtmlInfo:
    """Extract HTML info and replace the entry content with its body."""
    if source is None or source.is_binary:
        return HtmlInfo(body=None, external_resources=[])
    info = extract_html_info(source.content)
    if info.body:
        source.content = info.body
    return info


__all__ = [
    "HTML_ENTRY_CANDIDATES",
    "SandboxAssembler",
    "apply_html_entry",
    "find_html_entry",
    "resolve_entry",
]
