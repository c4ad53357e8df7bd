"""Named plans, from `.release.json` or built-in defaults.

Every plan under ``plans`` in the config is user defined. ``release`` and
``development`` fall back to built-in defaults when the config does not
declare them. The choice is made once, when the catalog is loaded.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from rt.core.config import ReleaseConfig
from rt.core.result import Err, Ok, Result
from rt.services.release.errors import ReleaseError
from rt.services.release.plan import Plan, build_plan

DEFAULT_PLAN_TEMPLATES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "release": (
            "git add .",
            'git commit -m "Release ${RELEASE_VERSION}"',
            "git tag ${RELEASE_VERSION}",
        ),
        "development": (
            "git add .",
            'git commit -m "Continue development on ${DEVELOPMENT_VERSION}"',
        ),
    }
)


@dataclass(frozen=True, slots=True)
class UserDefined:
    plan: Plan


@dataclass(frozen=True, slots=True)
class BuiltinDefault:
    plan: Plan


CatalogEntry = UserDefined | BuiltinDefault


@dataclass(frozen=True, slots=True)
class PlanCatalog:
    entries: Mapping[str, CatalogEntry]

    def get(self, name: str) -> Result[Plan, ReleaseError]:
        entry = self.entries.get(name)
        if entry is None:
            return Err(
                ReleaseError(
                    kind="plan_not_found",
                    message=f"No plan exists in .release.json, nor in the defaults, for '{name}'",
                    hint=f'add "plans": {{"{name}": {{"commands": [...]}}}} to .release.json',
                )
            )
        return Ok(entry.plan)

    def entry(self, name: str) -> CatalogEntry | None:
        return self.entries.get(name)

    def names(self) -> list[str]:
        return sorted(self.entries)

    def is_builtin(self, name: str) -> bool:
        return isinstance(self.entries.get(name), BuiltinDefault)


def load_plan_catalog(config: ReleaseConfig) -> Result[PlanCatalog, ReleaseError]:
    """Build every plan eagerly so malformed templates surface at startup."""
    entries: dict[str, CatalogEntry] = {}

    for name, plan_config in config.plans.items():
        built = build_plan(name, plan_config.commands)
        if isinstance(built, Err):
            return built
        entries[name] = UserDefined(built.value)

    for name, templates in DEFAULT_PLAN_TEMPLATES.items():
        if name in entries:
            continue
        built = build_plan(name, templates)
        if isinstance(built, Err):
            return built
        entries[name] = BuiltinDefault(built.value)

    return Ok(PlanCatalog(entries=MappingProxyType(entries)))
