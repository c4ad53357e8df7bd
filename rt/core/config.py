"""Typed loading of the `.release.json` configuration file.

The file is optional. When present it may declare the project type used for
bumping manifests, named plans with their commands and env overrides, a
global env block, and Travis CI routing info.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_str_map, get_table

__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "PlanConfig",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = ".release.json"

TRAVIS_ENDPOINTS = ("org", "pro")


def _empty_env() -> Mapping[str, str]:
    return MappingProxyType({})


def _empty_plans() -> Mapping[str, PlanConfig]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when `.release.json` cannot be loaded or parsed."""

    message: str
    path: Path | None = None

    @property
    def hint(self) -> str | None:
        return str(self.path) if self.path is not None else None


@dataclass(frozen=True, slots=True)
class PlanConfig:
    """A plan declared under ``plans`` in the config file."""

    commands: tuple[str, ...]
    env: Mapping[str, str] = field(default_factory=_empty_env)


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container.

    Attributes:
        type: Project type used to pick manifests to bump (e.g. "JavaScript").
        plans: Plans declared by the user, by name.
        env: Global variable overrides applied to every plan.
        slug: Repository slug (owner/name) for CI delegation.
        travis: Travis CI endpoint ("org" or "pro"); set means delegate to CI.
    """

    type: str | None = None
    plans: Mapping[str, PlanConfig] = field(default_factory=_empty_plans)
    env: Mapping[str, str] = field(default_factory=_empty_env)
    slug: str | None = None
    travis: str | None = None

    def plan_env(self, name: str) -> Mapping[str, str]:
        plan = self.plans.get(name)
        if plan is None:
            return _empty_env()
        return plan.env

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create a config from parsed JSON.

        Raises:
            ValueError: If a section has the wrong shape.
        """
        plans: dict[str, PlanConfig] = {}
        plans_table: StrDict = get_table(data, "plans") or {}
        if "plans" in data and get_table(data, "plans") is None:
            raise ValueError("'plans' must be an object")

        for name, raw in plans_table.items():
            plan = as_str_dict(raw)
            if plan is None:
                raise ValueError(f"plan '{name}' must be an object")
            commands = get_str_list(plan, "commands")
            if commands is None:
                raise ValueError(f"plan '{name}' needs a 'commands' list of strings")
            env = get_str_map(plan, "env")
            if "env" in plan and env is None:
                raise ValueError(f"plan '{name}' env must map names to strings")
            plans[name] = PlanConfig(
                commands=commands,
                env=MappingProxyType(env or {}),
            )

        env = get_str_map(data, "env")
        if "env" in data and env is None:
            raise ValueError("'env' must map names to strings")

        travis = get_str(data, "travis")
        if travis is not None and travis not in TRAVIS_ENDPOINTS:
            raise ValueError(f"'travis' must be one of {', '.join(TRAVIS_ENDPOINTS)}")

        return cls(
            type=get_str(data, "type"),
            plans=MappingProxyType(plans),
            env=MappingProxyType(env or {}),
            slug=get_str(data, "slug"),
            travis=travis,
        )


def _parse_json(path: Path) -> Result[StrDict, ConfigError]:
    try:
        data_obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path.name}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path.name}", path=path))
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"{path.name} is not valid JSON: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading {path.name}: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError(f"{path.name} root must be a JSON object", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse configuration from a JSON file.

    Args:
        path: Path to `.release.json`

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_json(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid {path.name}: {e}", path=path))


def load_config_or_default(root: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load `.release.json` from ``root``; a missing file means defaults.

    A file that exists but is broken is still an error.
    """
    path = root / CONFIG_FILENAME
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
