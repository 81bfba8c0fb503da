"""Locate and parse package.json from a source tree."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .errors import ManifestMissing, ManifestParseError
from .models import Manifest, SourceTree

MANIFEST_PATH = "package.json"


def load_manifest(tree: SourceTree) -> Manifest:
    """Return the parsed manifest of the tree or raise a typed failure."""
    source = tree.get(MANIFEST_PATH)
    if source is None:
        raise ManifestMissing(MANIFEST_PATH)
    return parse_manifest(source.content)


def parse_manifest(content: str) -> Manifest:
    """Parse package.json text into a Manifest."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(MANIFEST_PATH, str(exc)) from exc
    if not isinstance(data, dict):
        raise ManifestParseError(MANIFEST_PATH, "expected a JSON object at the root")

    main = data.get("main")
    return Manifest(
        name=_as_str(data.get("name")),
        title=_as_str(data.get("title")),
        description=_as_str(data.get("description")),
        keywords=_as_str_list(data.get("keywords")),
        main=main if isinstance(main, str) and main.strip() else None,
        scripts=_as_str_map(data.get("scripts")),
        dependencies=_as_str_map(data.get("dependencies")),
        dev_dependencies=_as_str_map(data.get("devDependencies")),
        raw=data,
    )


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _as_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _as_str_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): str(spec) for key, spec in value.items() if isinstance(spec, str)}


__all__ = ["MANIFEST_PATH", "load_manifest", "parse_manifest"]
