"""Tests for dependency selection, policy and resolution."""

from __future__ import annotations

import asyncio

import pytest

from sandboxgen.config import DependencyConfig
from sandboxgen.errors import DependencyResolutionFailed
from sandboxgen.models import Manifest, SandboxModule
from sandboxgen.resolver import (
    DependencyPolicy,
    DependencyResolver,
    merge_dependencies,
    select_used_dev_dependencies,
)
from tests._fixtures.stubs import ExplodingVersionResolver, StubVersionResolver


def _module(path: str, code: str) -> SandboxModule:
    return SandboxModule(
        title=path.rsplit("/", 1)[-1],
        path=path,
        code=code,
        shortid=path,
        directory_shortid=None,
    )


def _resolve(resolver: DependencyResolver, manifest: Manifest, modules=()) -> dict:
    return asyncio.run(resolver.resolve(manifest, list(modules)))


def test_merge_keeps_runtime_specifier_on_conflict() -> None:
    merged = merge_dependencies({"react": "^18.0.0"}, {"react": "^16.0.0", "jest": "^29"})

    assert merged == {"react": "^18.0.0", "jest": "^29"}


def test_merge_does_not_mutate_inputs() -> None:
    runtime = {"a": "1"}
    dev = {"b": "2"}

    merge_dependencies(runtime, dev)

    assert runtime == {"a": "1"}
    assert dev == {"b": "2"}


def test_select_used_dev_dependencies_uses_path_prefix_match() -> None:
    dev = {"lodash": "^4", "react": "^18", "jest": "^29", "@babel/core": "^7"}
    usages = {"lodash/pickBy", "react-dom", "@babel/core"}

    assert select_used_dev_dependencies(dev, usages) == {
        "lodash": "^4",
        "@babel/core": "^7",
    }


def test_policy_drops_excluded_and_type_only_packages() -> None:
    policy = DependencyPolicy()

    result = policy.apply(
        {"react": "^18", "@types/react": "^18", "husky": "^8", "fsevents": "^2"}
    )

    assert result == {"react": "^18"}


def test_policy_rewrites_aliases_to_latest() -> None:
    policy = DependencyPolicy()

    assert policy.apply({"node-sass": "^4.14.0"}) == {"sass": "latest"}


def test_alias_never_overrides_declared_target() -> None:
    policy = DependencyPolicy()

    assert policy.apply({"node-sass": "^4", "sass": "^1.60.0"}) == {"sass": "^1.60.0"}


def test_policy_from_config_extends_defaults() -> None:
    policy = DependencyPolicy.from_config(
        DependencyConfig(
            exclude=["webpack"],
            exclude_prefixes=["@internal/"],
            aliases={"request": "axios"},
        )
    )

    result = policy.apply(
        {
            "webpack": "^5",
            "@internal/tools": "1",
            "@types/node": "20",
            "request": "^2",
            "react": "18",
        }
    )

    assert result == {"axios": "latest", "react": "18"}


def test_empty_manifest_resolves_to_empty_without_calling_registry() -> None:
    stub = StubVersionResolver()
    resolver = DependencyResolver(stub)

    assert _resolve(resolver, Manifest(name="empty")) == {}
    assert stub.calls == []


def test_resolve_includes_runtime_and_used_dev_dependencies() -> None:
    stub = StubVersionResolver({"react": "18.2.0", "react-dom": "18.2.0"})
    resolver = DependencyResolver(stub)
    manifest = Manifest(
        name="demo",
        dependencies={"react": "^18"},
        dev_dependencies={"react-dom": "^18", "jest": "^29"},
    )
    modules = [_module("src/index.js", "import { createRoot } from 'react-dom/client';")]

    result = _resolve(resolver, manifest, modules)

    assert result == {"react": "18.2.0", "react-dom": "18.2.0"}
    assert stub.calls == [{"react": "^18", "react-dom": "^18"}]


def test_runtime_specifier_is_sent_when_dev_declares_same_name() -> None:
    stub = StubVersionResolver()
    resolver = DependencyResolver(stub)
    manifest = Manifest(
        name="demo",
        dependencies={"lodash": "^4.17.0"},
        dev_dependencies={"lodash": "^3.0.0"},
    )

    _resolve(resolver, manifest, [_module("a.js", "require('lodash')")])

    assert stub.calls == [{"lodash": "^4.17.0"}]


def test_excluded_names_never_reach_output() -> None:
    stub = StubVersionResolver()
    resolver = DependencyResolver(stub)
    manifest = Manifest(
        name="demo",
        dependencies={"@types/react": "^18", "node-sass": "^4", "vue": "^3"},
    )

    result = _resolve(resolver, manifest)

    assert set(result) == {"vue", "sass"}
    assert "@types/react" not in stub.calls[0]
    assert "node-sass" not in stub.calls[0]


def test_unknown_package_fails_whole_resolution() -> None:
    resolver = DependencyResolver(StubVersionResolver(unknown=("left-pad",)))
    manifest = Manifest(name="demo", dependencies={"react": "18", "left-pad": "1"})

    with pytest.raises(DependencyResolutionFailed) as excinfo:
        _resolve(resolver, manifest)

    assert excinfo.value.names == ("left-pad",)


def test_missing_version_in_result_fails() -> None:
    resolver = DependencyResolver(StubVersionResolver({"react": "18.2.0"}, default=None))
    manifest = Manifest(name="demo", dependencies={"react": "18", "vue": "3"})

    with pytest.raises(DependencyResolutionFailed) as excinfo:
        _resolve(resolver, manifest)

    assert excinfo.value.names == ("vue",)


def test_transport_failure_is_wrapped() -> None:
    resolver = DependencyResolver(ExplodingVersionResolver())
    manifest = Manifest(name="demo", dependencies={"react": "18"})

    with pytest.raises(DependencyResolutionFailed) as excinfo:
        _resolve(resolver, manifest)

    assert excinfo.value.names == ("react",)
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_timeout_fails_resolution() -> None:
    resolver = DependencyResolver(StubVersionResolver(delay=1.0), timeout=0.01)
    manifest = Manifest(name="demo", dependencies={"react": "18"})

    with pytest.raises(DependencyResolutionFailed) as excinfo:
        _resolve(resolver, manifest)

    assert "timed out" in excinfo.value.reason
