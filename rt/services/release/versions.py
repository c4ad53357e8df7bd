"""Version rules.

A version plays one of three roles during a release:

- current: the version in the manifest right now (a development version in
  the default workflow, any semantic version when bumping);
- release or release candidate: no development marker; a prerelease, if
  any, must be ``alpha``, ``beta`` or ``rc`` with an optional ``.N``;
- development: the prerelease is exactly one of the development markers.

All checks are pure and total: any string goes in, a Result comes out.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rt.core.result import Err, Ok, Result
from rt.services.release.errors import ReleaseError

# semver 2.0.0 grammar, https://semver.org
_SEMVER_RE = re.compile(
    r"(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
)
_RELEASE_CANDIDATE_RE = re.compile(r"(alpha|beta|rc)(\.\d+)?")

DEVELOPMENT_MARKERS = frozenset({"dev", "snapshot", "SNAPSHOT"})


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    @property
    def core(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump_patch(self) -> SemVer:
        return SemVer(self.major, self.minor, self.patch + 1)

    def __str__(self) -> str:
        text = self.core
        if self.prerelease is not None:
            text += f"-{self.prerelease}"
        if self.build is not None:
            text += f"+{self.build}"
        return text


def parse_version(version: str) -> Result[SemVer, ReleaseError]:
    m = _SEMVER_RE.fullmatch(version)
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=f"Not a Semantic Version '{version}'",
                hint="Expected MAJOR.MINOR.PATCH[-PRERELEASE][+BUILD]",
            )
        )
    return Ok(
        SemVer(
            major=int(m.group(1)),
            minor=int(m.group(2)),
            patch=int(m.group(3)),
            prerelease=m.group(4),
            build=m.group(5),
        )
    )


def assert_valid_semantic_version(version: str) -> Result[None, ReleaseError]:
    parsed = parse_version(version)
    if isinstance(parsed, Err):
        return parsed
    return Ok(None)


def extract_prerelease(version: str) -> Result[str | None, ReleaseError]:
    """Return the prerelease component, or None when there is none."""
    return parse_version(version).map(lambda v: v.prerelease)


def assert_valid_development_version(version: str) -> Result[None, ReleaseError]:
    prerelease = extract_prerelease(version)
    if isinstance(prerelease, Err):
        return prerelease
    if prerelease.value not in DEVELOPMENT_MARKERS:
        return Err(
            ReleaseError(
                kind="not_development_version",
                message=f"Not a recognized Development Version '{version}'",
                hint="Development versions end in -dev, -snapshot or -SNAPSHOT",
            )
        )
    return Ok(None)


def assert_valid_release_version(version: str) -> Result[None, ReleaseError]:
    prerelease = extract_prerelease(version)
    if isinstance(prerelease, Err):
        return prerelease
    if prerelease.value is not None:
        return Err(
            ReleaseError(
                kind="has_prerelease",
                message=f"A Release cannot include a prerelease version '{version}'",
            )
        )
    return Ok(None)


def assert_valid_release_candidate_version(version: str) -> Result[None, ReleaseError]:
    prerelease = extract_prerelease(version)
    if isinstance(prerelease, Err):
        return prerelease
    if prerelease.value is None or _RELEASE_CANDIDATE_RE.fullmatch(prerelease.value) is None:
        return Err(
            ReleaseError(
                kind="not_release_candidate",
                message=f"Not a recognized Release Candidate version '{version}'",
                hint="Release candidates end in -alpha, -beta or -rc, optionally followed by .N",
            )
        )
    return Ok(None)


def assert_valid_release_or_release_candidate_version(
    version: str,
) -> Result[None, ReleaseError]:
    as_release = assert_valid_release_version(version)
    if isinstance(as_release, Ok):
        return as_release
    as_candidate = assert_valid_release_candidate_version(version)
    if isinstance(as_candidate, Ok):
        return as_candidate
    return Err(
        ReleaseError(
            kind="not_release_or_candidate",
            message=f"Not a recognized Release or Release Candidate version '{version}'",
            causes=(as_release.error, as_candidate.error),
        )
    )


def is_release_candidate_version(version: str) -> bool:
    return isinstance(assert_valid_release_candidate_version(version), Ok)


def suggest_release_version(current: str) -> str | None:
    """Default answer for the release prompt: the current version's core."""
    parsed = parse_version(current)
    if isinstance(parsed, Err):
        return None
    return parsed.value.core


def suggest_development_version(release: str) -> str | None:
    """Default answer for the development prompt.

    After a final release the patch number moves on (1.2.0 -> 1.2.1-dev);
    after a release candidate development continues on the same core
    (1.2.0-rc.1 -> 1.2.0-dev).
    """
    parsed = parse_version(release)
    if isinstance(parsed, Err):
        return None
    base = SemVer(parsed.value.major, parsed.value.minor, parsed.value.patch)
    if not is_release_candidate_version(release):
        base = base.bump_patch()
    return f"{base.core}-dev"
