"""Build sandbox descriptors from imported source trees."""

from .assembler import SandboxAssembler
from .errors import (
    DependencyResolutionFailed,
    DuplicatePath,
    EntryNotFound,
    ManifestMissing,
    ManifestParseError,
    SandboxError,
)
from .models import SandboxDescriptor, SourceFile, SourceTree, build_tree
from .registry import RegistryVersionResolver, VersionResolver
from .resolver import DependencyPolicy, DependencyResolver
from .templates import Template

__all__ = [
    "DependencyPolicy",
    "DependencyResolutionFailed",
    "DependencyResolver",
    "DuplicatePath",
    "EntryNotFound",
    "ManifestMissing",
    "ManifestParseError",
    "RegistryVersionResolver",
    "SandboxAssembler",
    "SandboxDescriptor",
    "SandboxError",
    "SourceFile",
    "SourceTree",
    "Template",
    "VersionResolver",
    "build_tree",
]
