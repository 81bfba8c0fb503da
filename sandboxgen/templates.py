"""Template classification for imported source trees."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Set, Tuple

from .models import Manifest, SourceTree


class Template(str, Enum):
    """Supported sandbox templates."""

    NUXT = "nuxt"
    NEXT = "next"
    APOLLO = "apollo"
    EMBER = "ember"
    SAPPER = "sapper"
    REASON = "reason"
    GATSBY = "gatsby"
    PARCEL = "parcel"
    CREATE_REACT_APP = "create-react-app"
    CREATE_REACT_APP_TYPESCRIPT = "create-react-app-typescript"
    ANGULAR_CLI = "angular-cli"
    PREACT_CLI = "preact-cli"
    SVELTE = "svelte"
    VUE_CLI = "vue-cli"
    CXJS = "cxjs"
    STATIC = "static"
    NODE = "node"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class _Context:
    manifest: Manifest
    dependencies: Set[str]
    paths: Set[str]


Predicate = Callable[[_Context], bool]


@dataclass(frozen=True)
class TemplateRule:
    """A predicate that selects a template when it matches."""

    template: Template
    predicate: Predicate


def _depends_on(*names: str) -> Predicate:
    def _check(context: _Context) -> bool:
        return any(name in context.dependencies for name in names)

    return _check


def _has_file_suffix(*suffixes: str) -> Predicate:
    def _check(context: _Context) -> bool:
        return any(path.endswith(suffixes) for path in context.paths)

    return _check


def _has_file(*paths: str) -> Predicate:
    def _check(context: _Context) -> bool:
        return any(path in context.paths for path in paths)

    return _check


def _is_static_site(context: _Context) -> bool:
    if context.dependencies or "index.html" not in context.paths:
        return False
    # A start or build script means something other than a plain file server.
    return not {"start", "build"}.intersection(context.manifest.scripts)


TEMPLATE_RULES: Tuple[TemplateRule, ...] = (
    TemplateRule(Template.NUXT, _depends_on("nuxt", "nuxt-edge")),
    TemplateRule(Template.NEXT, _depends_on("next")),
    TemplateRule(Template.APOLLO, _depends_on("apollo-server")),
    TemplateRule(Template.EMBER, _depends_on("ember-cli")),
    TemplateRule(Template.SAPPER, _depends_on("sapper")),
    TemplateRule(Template.REASON, _has_file_suffix(".re")),
    TemplateRule(Template.GATSBY, _depends_on("gatsby")),
    TemplateRule(Template.PARCEL, _depends_on("parcel-bundler", "parcel")),
    TemplateRule(Template.CREATE_REACT_APP, _depends_on("react-scripts")),
    TemplateRule(Template.CREATE_REACT_APP_TYPESCRIPT, _depends_on("react-scripts-ts")),
    TemplateRule(Template.ANGULAR_CLI, _depends_on("@angular/core")),
    TemplateRule(Template.ANGULAR_CLI, _has_file("angular.json", ".angular-cli.json")),
    TemplateRule(Template.PREACT_CLI, _depends_on("preact-cli")),
    TemplateRule(Template.SVELTE, _depends_on("svelte")),
    TemplateRule(Template.VUE_CLI, _depends_on("vue")),
    TemplateRule(Template.CXJS, _depends_on("cx", "cx-core")),
    TemplateRule(Template.STATIC, _is_static_site),
)

DEFAULT_TEMPLATE = Template.NODE

_DEFAULT_ENTRIES: Dict[Template, str] = {
    Template.NUXT: "pages/index.vue",
    Template.NEXT: "pages/index.js",
    Template.GATSBY: "src/pages/index.js",
    Template.REASON: "src/Main.re",
    Template.PARCEL: "index.html",
    Template.CREATE_REACT_APP_TYPESCRIPT: "src/index.tsx",
    Template.ANGULAR_CLI: "src/main.ts",
    Template.VUE_CLI: "src/main.js",
    Template.SVELTE: "src/main.js",
    Template.CXJS: "app/index.js",
    Template.STATIC: "index.html",
}

_DEFAULT_ENTRY = "src/index.js"


def classify(manifest: Manifest, tree: SourceTree) -> Template:
    """Return the first template whose rule matches; never fails."""
    context = _Context(
        manifest=manifest,
        dependencies=set(manifest.dependencies) | set(manifest.dev_dependencies),
        paths=set(tree),
    )
    for rule in TEMPLATE_RULES:
        if rule.predicate(context):
            return rule.template
    return DEFAULT_TEMPLATE


def default_entry_file(template: Template) -> str:
    """Return the conventional entry file for a template."""
    return _DEFAULT_ENTRIES.get(template, _DEFAULT_ENTRY)


__all__ = [
    "DEFAULT_TEMPLATE",
    "TEMPLATE_RULES",
    "Template",
    "TemplateRule",
    "classify",
    "default_entry_file",
]
