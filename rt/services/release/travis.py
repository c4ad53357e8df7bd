"""Delegate a release to Travis CI.

Instead of running plans locally, the tool can ask Travis CI to build the
branch with an ``after_success`` step that re-runs this tool
non-interactively with the versions chosen here.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from typing import Literal
from urllib.parse import quote

from rt.core.result import Err, Ok, Result
from rt.platform.http import HttpClient
from rt.services.release.errors import ReleaseError

TravisEndpoint = Literal["org", "pro"]

TRAVIS_API_VERSION = "3"


@dataclass(frozen=True, slots=True)
class RemoteRun:
    """The non-interactive invocation Travis CI runs after a green build."""

    branch: str
    current_version: str
    release_version: str
    development_version: str | None = None
    bump: bool = False
    publish: bool = False

    def argv(self) -> list[str]:
        args = ["release", "run"]
        if self.bump:
            args.append("-b")
        args.append("-n")
        if self.publish:
            args.append("-p")
        args += ["-x", "--branch", self.branch, self.current_version, self.release_version]
        if self.development_version:
            args.append(self.development_version)
        return args

    def command_line(self) -> str:
        return shlex.join(self.argv())


@dataclass(frozen=True, slots=True)
class TravisRequest:
    slug: str
    token: str
    run: RemoteRun
    endpoint: TravisEndpoint = "org"

    @property
    def url(self) -> str:
        tld = "com" if self.endpoint == "pro" else "org"
        return f"https://api.travis-ci.{tld}/repo/{quote(self.slug, safe='')}/requests"

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Travis-API-Version": TRAVIS_API_VERSION,
            "Authorization": f"token {self.token}",
        }

    def payload(self) -> dict[str, object]:
        return {
            "request": {
                "branch": self.run.branch,
                "config": {"after_success": self.run.command_line()},
            }
        }


def validate_slug(slug: str) -> Result[str, ReleaseError]:
    slug = slug.strip()
    owner, sep, name = slug.partition("/")
    if not sep or not owner or not name or "/" in name:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"Repository slug must be of the form owner/name: '{slug}'",
            )
        )
    return Ok(slug)


def trigger_build(client: HttpClient, request: TravisRequest) -> Result[str, ReleaseError]:
    """Ask Travis CI to run the release; returns the API response body."""
    response = client.post_json(request.url, request.payload(), request.headers())
    if isinstance(response, Err):
        error = response.error
        return Err(
            ReleaseError(
                kind="ci_failed",
                message=f"Travis CI request failed: {error}",
                hint=error.body.strip() or None,
            )
        )
    return Ok(response.value)
