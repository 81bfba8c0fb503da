"""Static scanning of source files for module usage references.

The scan is lexical: comments are blanked first so commented-out imports do
not count, but string contents are left alone, so an import-like snippet
quoted inside a string literal is reported. Specifiers built at runtime
(``require(name)``, interpolated template literals) are missed. Both
tradeoffs only affect which devDependencies survive filtering.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional, Set

from .models import SandboxModule

SCRIPT_SUFFIXES = (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".vue", ".svelte")

_QUOTED = r"(['\"`])([^'\"`\n]+)\1"

_USAGE_PATTERNS = (
    # import x from 'a'; import {x} from 'a'; export * from 'a'
    re.compile(r"\b(?:import|export)\s+(?:type\s+)?[^'\"`;()]*?\bfrom\s*" + _QUOTED),
    # import 'a'
    re.compile(r"\bimport\s*" + _QUOTED),
    # import('a')
    re.compile(r"\bimport\s*\(\s*" + _QUOTED + r"\s*\)"),
    # require('a'), require.resolve('a')
    re.compile(r"\brequire(?:\.resolve)?\s*\(\s*" + _QUOTED + r"\s*\)"),
)

# Tokens after which a slash starts a regex literal rather than a division.
_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%~^")
_REGEX_KEYWORD = re.compile(
    r"\b(?:await|case|delete|do|else|in|instanceof|new|of|return|throw|typeof|void|yield)\s*\Z"
)


def matches_dependency(reference: str, name: str) -> bool:
    """Return True when a usage reference points at the named package or a subpath of it."""
    return reference == name or reference.startswith(name + "/")


def scan_usages(modules: Iterable[SandboxModule]) -> Set[str]:
    """Return every bare module specifier referenced by the script modules."""
    references: Set[str] = set()
    for module in modules:
        if module.is_binary or not module.path.lower().endswith(SCRIPT_SUFFIXES):
            continue
        references.update(scan_source(module.code))
    return references


def scan_source(text: str) -> Set[str]:
    """Return the bare module specifiers referenced in one source text."""
    if not text:
        return set()
    stripped = strip_comments(text)
    references: Set[str] = set()
    for pattern in _USAGE_PATTERNS:
        for match in pattern.finditer(stripped):
            specifier = match.group(2).strip()
            if _is_bare_specifier(specifier):
                references.add(specifier)
    return references


def strip_comments(text: str) -> str:
    """Blank out line and block comments, leaving string literals intact.

    Regular expression literals are blanked too, so quotes or slashes inside
    them cannot open a fake string or comment. Newlines are kept so offsets
    and line numbers stay meaningful.
    """
    out = []
    index = 0
    length = len(text)
    quote = None
    previous = ""
    while index < length:
        char = text[index]
        if quote is not None:
            out.append(char)
            if char == "\\" and index + 1 < length:
                out.append(text[index + 1])
                index += 2
                continue
            if char == quote or (char == "\n" and quote != "`"):
                quote = None
            index += 1
            continue

        if char in ("'", '"', "`"):
            quote = char
            previous = char
            out.append(char)
            index += 1
            continue

        if text.startswith("//", index):
            end = text.find("\n", index)
            end = length if end < 0 else end
            out.append(" " * (end - index))
            index = end
            continue

        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            end = length if end < 0 else end + 2
            out.append("".join("\n" if c == "\n" else " " for c in text[index:end]))
            index = end
            continue

        if char == "/" and _starts_regex(text, index, previous):
            end = _regex_end(text, index)
            if end is not None:
                out.append("/" + " " * (end - index - 2) + "/")
                previous = "/"
                index = end
                continue

        out.append(char)
        if not char.isspace():
            previous = char
        index += 1
    return "".join(out)


def _starts_regex(text: str, index: int, previous: str) -> bool:
    # A slash opens a regex literal where an operand is expected, never after one.
    if not previous or previous in _REGEX_PRECEDERS:
        return True
    if previous.isalnum() or previous in "_$":
        return bool(_REGEX_KEYWORD.search(text, max(0, index - 32), index))
    return False


def _regex_end(text: str, index: int) -> Optional[int]:
    """Return the offset just past the closing slash, or None on a line break."""
    position = index + 1
    in_class = False
    while position < len(text):
        char = text[position]
        if char == "\n":
            return None
        if char == "\\":
            position += 2
            continue
        if char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        elif char == "/" and not in_class:
            return position + 1
        position += 1
    return None


def _is_bare_specifier(specifier: str) -> bool:
    if not specifier or "${" in specifier:
        return False
    if specifier.startswith((".", "/")):
        return False
    return "://" not in specifier


__all__ = [
    "SCRIPT_SUFFIXES",
    "matches_dependency",
    "scan_source",
    "scan_usages",
    "strip_comments",
]
