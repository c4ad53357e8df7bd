"""Tests for rt.services.release.command module."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from rt.core.result import Err, Ok
from rt.services.release.command import Command, parse_command


def _parse(template: str) -> Command:
    result = parse_command(template)
    assert isinstance(result, Ok), result
    return result.value


class TestParseCommand:
    def test_shell_quoting(self) -> None:
        command = _parse('git commit -m "Release ${RELEASE_VERSION}"')
        assert command.argv == ["git", "commit", "-m", "Release ${RELEASE_VERSION}"]
        assert command.program == "git"
        assert command.resolved is False

    def test_single_quotes(self) -> None:
        assert _parse("echo 'a b' c").argv == ["echo", "a b", "c"]

    def test_unbalanced_quote_is_malformed(self) -> None:
        result = parse_command('git commit -m "oops')
        assert isinstance(result, Err)
        assert result.error.kind == "malformed_command"

    @pytest.mark.parametrize("template", ["", "   "])
    def test_empty_is_malformed(self, template: str) -> None:
        result = parse_command(template)
        assert isinstance(result, Err)
        assert result.error.kind == "malformed_command"

    def test_escaped_dollar_becomes_literal(self) -> None:
        assert _parse(r"echo \$HOME").argv == ["echo", "$HOME"]

    def test_shell_operators_are_plain_arguments(self) -> None:
        assert _parse("echo a | wc").argv == ["echo", "a", "|", "wc"]


class TestFromTokens:
    def test_builds_command(self) -> None:
        result = Command.from_tokens(["git", "tag", "$V"])
        assert isinstance(result, Ok)
        assert result.value.tokens == ("git", "tag", "$V")

    def test_empty_tokens(self) -> None:
        result = Command.from_tokens([])
        assert isinstance(result, Err)
        assert result.error.kind == "malformed_command"


class TestSubstitute:
    def test_replaces_both_forms(self) -> None:
        command = _parse("git tag ${RELEASE_VERSION} -m $BRANCH")
        result = command.substitute({"RELEASE_VERSION": "1.0.0", "BRANCH": "main"})
        assert isinstance(result, Ok)
        assert result.value.argv == ["git", "tag", "1.0.0", "-m", "main"]
        assert result.value.resolved is True

    def test_inside_a_token(self) -> None:
        result = _parse("echo v${V}.tgz").substitute({"V": "2.0.0"})
        assert isinstance(result, Ok)
        assert result.value.argv == ["echo", "v2.0.0.tgz"]

    def test_value_with_spaces_stays_one_argument(self) -> None:
        result = _parse("git commit -m $MSG").substitute({"MSG": "a b; rm -rf /"})
        assert isinstance(result, Ok)
        assert result.value.argv == ["git", "commit", "-m", "a b; rm -rf /"]

    def test_missing_variable(self) -> None:
        result = _parse("git tag $A $B").substitute({"A": "x"})
        assert isinstance(result, Err)
        assert result.error.kind == "unresolved_variable"
        assert "B" in result.error.message

    def test_unbalanced_brace_stays_literal(self) -> None:
        result = _parse("echo ${FOO $BAR").substitute({"BAR": "x"})
        assert isinstance(result, Ok)
        assert result.value.argv == ["echo", "${FOO", "x"]

    def test_escaped_dollar_is_never_substituted(self) -> None:
        result = _parse(r"echo \$HOME $HOME").substitute({"HOME": "/home/me"})
        assert isinstance(result, Ok)
        assert result.value.argv == ["echo", "$HOME", "/home/me"]

    def test_substitute_twice_is_idempotent(self) -> None:
        variables = {"MSG": "costs $PRICE", "PRICE": "10"}
        once = _parse("echo $MSG").substitute(variables)
        assert isinstance(once, Ok)
        twice = once.value.substitute(variables)
        assert isinstance(twice, Ok)
        assert twice.value.tokens == once.value.tokens
        assert twice.value.argv == ["echo", "costs $PRICE"]

    def test_template_is_unchanged(self) -> None:
        command = _parse("git tag $V")
        command.substitute({"V": "1.0.0"})
        assert command.tokens == ("git", "tag", "$V")


class TestDescribe:
    def test_resolved_line_is_shell_quoted(self) -> None:
        result = _parse('git commit -m "Release $V"').substitute({"V": "1.0.0"})
        assert isinstance(result, Ok)
        assert result.value.describe() == "git commit -m 'Release 1.0.0'"

    def test_template_keeps_escape(self) -> None:
        assert r"\$HOME" in _parse(r"echo \$HOME").describe()


class TestExecute:
    def test_success(self, tmp_path: Path) -> None:
        result = Command.from_tokens([sys.executable, "-c", "pass"])
        assert isinstance(result, Ok)
        assert result.value.execute(cwd=tmp_path) == Ok(None)

    def test_failure_keeps_exit_code(self, tmp_path: Path) -> None:
        result = Command.from_tokens([sys.executable, "-c", "import sys; sys.exit(4)"])
        assert isinstance(result, Ok)

        executed = result.value.execute(cwd=tmp_path)

        assert isinstance(executed, Err)
        assert executed.error.kind == "command_failed"
        assert executed.error.returncode == 4
        assert "exited with code 4" in executed.error.message

    def test_missing_program(self, tmp_path: Path) -> None:
        executed = _parse("rt-definitely-not-a-program --flag").execute(cwd=tmp_path)
        assert isinstance(executed, Err)
        assert executed.error.kind == "command_failed"
        assert "could not be started" in executed.error.message

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
    def test_killed_by_signal_is_not_a_start_failure(self, tmp_path: Path) -> None:
        code = "import os, signal; os.kill(os.getpid(), signal.SIGHUP)"
        result = Command.from_tokens([sys.executable, "-c", code])
        assert isinstance(result, Ok)

        executed = result.value.execute(cwd=tmp_path)

        assert isinstance(executed, Err)
        assert executed.error.returncode == -1
        assert "killed by signal 1" in executed.error.message
        assert "could not be started" not in executed.error.message

    def test_env_reaches_child(self, tmp_path: Path) -> None:
        code = "import os, sys; sys.exit(0 if os.environ.get('RT_MARKER') == 'yes' else 9)"
        result = Command.from_tokens([sys.executable, "-c", code])
        assert isinstance(result, Ok)
        env = {**os.environ, "RT_MARKER": "yes"}
        assert result.value.execute(cwd=tmp_path, env=env) == Ok(None)
