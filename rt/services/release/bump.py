"""Bump the version recorded in project manifests.

Which manifests are touched depends on the project type declared in
`.release.json`. Every manifest is read and checked before any is
written, so a version mismatch in one file leaves all of them untouched.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from rt.core.result import Err, Ok, Result
from rt.core.structured import StrDict, as_str_dict, get_str
from rt.platform.files import atomic_write_text
from rt.services.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class Manifest:
    name: str
    required: bool = True


# Manifests bumped for each project type, in order.
PROJECT_MANIFESTS: dict[str, tuple[Manifest, ...]] = {
    "JavaScript": (
        Manifest("package.json"),
        Manifest("bower.json", required=False),
    ),
}


@dataclass(frozen=True, slots=True)
class PendingWrite:
    path: Path
    data: StrDict


def read_manifest(root: Path, name: str) -> Result[StrDict | None, ReleaseError]:
    """Read a JSON manifest; a missing file is ``Ok(None)``."""
    path = root / name
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Ok(None)
    except OSError as e:
        return Err(ReleaseError(kind="manifest_error", message=f"Unable to read {name}: {e}"))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(ReleaseError(kind="manifest_error", message=f"{name} is not valid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(ReleaseError(kind="manifest_error", message=f"{name} root must be an object"))
    return Ok(data)


def read_manifest_version(root: Path, name: str = "package.json") -> str | None:
    """Version declared in a manifest, or None if unavailable."""
    result = read_manifest(root, name)
    if isinstance(result, Err) or result.value is None:
        return None
    return get_str(result.value, "version")


def read_manifest_name(root: Path, name: str = "package.json") -> str | None:
    result = read_manifest(root, name)
    if isinstance(result, Err) or result.value is None:
        return None
    return get_str(result.value, "name")


def _prepare(
    root: Path, manifest: Manifest, from_version: str, to_version: str
) -> Result[PendingWrite | None, ReleaseError]:
    read = read_manifest(root, manifest.name)
    if isinstance(read, Err):
        return read
    data = read.value
    if data is None:
        if manifest.required:
            return Err(
                ReleaseError(kind="manifest_error", message=f"{manifest.name} does not exist")
            )
        return Ok(None)

    version = data.get("version")
    if not version:
        return Err(
            ReleaseError(
                kind="manifest_error",
                message=f"A version number is not present in {manifest.name}",
            )
        )
    if version != from_version:
        return Err(
            ReleaseError(
                kind="manifest_error",
                message=f"Unexpected version in {manifest.name} '{version}'",
                hint=f"expected '{from_version}'",
            )
        )

    updated = dict(data)
    updated["version"] = to_version
    return Ok(PendingWrite(path=root / manifest.name, data=updated))


def bump_versions(
    root: Path,
    from_version: str,
    to_version: str,
    project_type: str | None,
) -> Result[list[Path], ReleaseError]:
    """Rewrite manifest versions from ``from_version`` to ``to_version``.

    Returns:
        Ok(paths written), possibly empty when no project type is configured.
    """
    if project_type is None:
        return Ok([])

    manifests = PROJECT_MANIFESTS.get(project_type)
    if manifests is None:
        known = ", ".join(sorted(PROJECT_MANIFESTS))
        return Err(
            ReleaseError(
                kind="invalid_config",
                message=f"Unrecognized project type '{project_type}'",
                hint=f"supported types: {known}",
            )
        )

    pending: list[PendingWrite] = []
    for manifest in manifests:
        prepared = _prepare(root, manifest, from_version, to_version)
        if isinstance(prepared, Err):
            return prepared
        if prepared.value is not None:
            pending.append(prepared.value)

    written: list[Path] = []
    for item in pending:
        try:
            atomic_write_text(item.path, json.dumps(item.data, indent=2, ensure_ascii=False) + "\n")
        except OSError as e:
            return Err(
                ReleaseError(kind="manifest_error", message=f"Unable to write {item.path.name}: {e}")
            )
        written.append(item.path)
    return Ok(written)
