"""Tests for rt.services.release.plan module."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from rt.core.result import Err, Ok
from rt.output.console import MockConsole
from rt.services.release.plan import Plan, PlanState, build_plan

PY = shlex.quote(sys.executable)


def _touch(name: str) -> str:
    return f"{PY} -c \"open('{name}', 'w').close()\""


def _exit(code: int) -> str:
    return f'{PY} -c "import sys; sys.exit({code})"'


def _plan(name: str, templates: list[str]) -> Plan:
    built = build_plan(name, templates)
    assert isinstance(built, Ok), built
    return built.value


class TestBuildPlan:
    def test_keeps_templates_and_order(self) -> None:
        plan = _plan("release", ["git add .", "git tag $V"])
        assert len(plan) == 2
        assert plan.templates == ("git add .", "git tag $V")
        assert plan.state is PlanState.CREATED

    def test_malformed_command_names_plan_and_index(self) -> None:
        built = build_plan("publish", ["npm test", "npm publish 'oops"])
        assert isinstance(built, Err)
        assert built.error.kind == "malformed_command"
        assert built.error.message.startswith("Plan 'publish', command 2: ")

    def test_empty_plan_is_allowed(self) -> None:
        assert len(_plan("noop", [])) == 0


class TestRun:
    def test_runs_all_commands_in_order(self, tmp_path: Path) -> None:
        console = MockConsole()
        plan = _plan("release", [_touch("one"), _touch("$NAME")])

        result = plan.run({"NAME": "two"}, cwd=tmp_path, console=console)

        assert result == Ok(None)
        assert plan.state is PlanState.SUCCEEDED
        assert (tmp_path / "one").exists()
        assert (tmp_path / "two").exists()
        assert len(console.commands) == 2

    def test_stops_at_first_failure(self, tmp_path: Path) -> None:
        plan = _plan("release", [_touch("first"), _exit(3), _touch("third")])

        result = plan.run({}, cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.kind == "command_failed"
        assert result.error.returncode == 3
        assert (tmp_path / "first").exists()
        assert not (tmp_path / "third").exists()
        assert plan.state is PlanState.FAILED

    def test_missing_variable_runs_nothing(self, tmp_path: Path) -> None:
        plan = _plan("release", [_touch("first"), "git tag $RELEASE_VERSION"])

        result = plan.run({}, cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.kind == "unresolved_variable"
        assert not (tmp_path / "first").exists()
        assert plan.state is PlanState.FAILED

    def test_env_is_passed_to_commands(self, tmp_path: Path) -> None:
        import os

        check = f"{PY} -c \"import os, sys; sys.exit(0 if os.environ['V'] == '1.0.0' else 5)\""
        plan = _plan("release", [check])
        env = {**os.environ, "V": "1.0.0"}
        assert plan.run({}, cwd=tmp_path, env=env) == Ok(None)

    def test_plan_runs_only_once(self, tmp_path: Path) -> None:
        plan = _plan("release", [_touch("x")])
        assert plan.run({}, cwd=tmp_path) == Ok(None)

        again = plan.run({}, cwd=tmp_path)

        assert isinstance(again, Err)
        assert again.error.kind == "plan_consumed"

    def test_fresh_copy_can_run_after_failure(self, tmp_path: Path) -> None:
        plan = _plan("release", [_exit(1)])
        assert isinstance(plan.run({}, cwd=tmp_path), Err)

        retry = plan.fresh()

        assert retry.state is PlanState.CREATED
        assert retry.commands == plan.commands

    @pytest.mark.parametrize("state", [PlanState.SUCCEEDED, PlanState.FAILED])
    def test_terminal_states(self, state: PlanState) -> None:
        assert state.is_terminal
        assert not PlanState.RUNNING.is_terminal


class TestDescribe:
    def test_with_variables(self) -> None:
        plan = _plan("release", ['git commit -m "Release $V"', "git tag $V $MISSING"])
        lines = plan.describe({"V": "1.0.0"})
        assert lines[0] == "git commit -m 'Release 1.0.0'"
        assert "$MISSING" in lines[1]

    def test_describe_does_not_consume(self) -> None:
        plan = _plan("release", ["git tag $V"])
        plan.describe({"V": "1.0.0"})
        assert plan.state is PlanState.CREATED
        assert "release" in repr(plan)
