"""Tests for rt.services.release.catalog module."""

from __future__ import annotations

from types import MappingProxyType

from rt.core.config import PlanConfig, ReleaseConfig
from rt.core.result import Err, Ok
from rt.services.release.catalog import (
    BuiltinDefault,
    PlanCatalog,
    UserDefined,
    load_plan_catalog,
)


def _catalog(config: ReleaseConfig) -> PlanCatalog:
    loaded = load_plan_catalog(config)
    assert isinstance(loaded, Ok), loaded
    return loaded.value


def _with_plans(**plans: tuple[str, ...]) -> ReleaseConfig:
    return ReleaseConfig(
        plans=MappingProxyType({name: PlanConfig(commands=cmds) for name, cmds in plans.items()})
    )


def test_defaults_without_config() -> None:
    catalog = _catalog(ReleaseConfig())

    assert catalog.names() == ["development", "release"]
    assert isinstance(catalog.entry("release"), BuiltinDefault)
    assert catalog.is_builtin("development")

    release = catalog.get("release")
    assert isinstance(release, Ok)
    assert release.value.templates[-1] == "git tag ${RELEASE_VERSION}"


def test_user_plan_overrides_default() -> None:
    catalog = _catalog(_with_plans(release=("git tag v$RELEASE_VERSION",)))

    entry = catalog.entry("release")
    assert isinstance(entry, UserDefined)
    assert entry.plan.templates == ("git tag v$RELEASE_VERSION",)
    assert isinstance(catalog.entry("development"), BuiltinDefault)


def test_extra_user_plans() -> None:
    catalog = _catalog(_with_plans(publish=("npm publish",)))
    assert catalog.names() == ["development", "publish", "release"]
    assert not catalog.is_builtin("publish")


def test_unknown_plan() -> None:
    result = _catalog(ReleaseConfig()).get("publish")
    assert isinstance(result, Err)
    assert result.error.kind == "plan_not_found"
    assert "'publish'" in result.error.message


def test_malformed_user_plan_fails_loading() -> None:
    result = load_plan_catalog(_with_plans(publish=('npm publish "',)))
    assert isinstance(result, Err)
    assert result.error.kind == "malformed_command"
