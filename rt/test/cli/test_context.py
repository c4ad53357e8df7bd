"""Tests for rt.cli.context module."""

from __future__ import annotations

from pathlib import Path

import pytest
import typer

from rt.cli.context import VERBOSE_ENV, build_context
from rt.core.config import CONFIG_FILENAME
from rt.core.errors import ErrorCode
from rt.output.console import RichConsole


def test_defaults_without_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(VERBOSE_ENV, raising=False)

    ctx = build_context()

    assert ctx.root == tmp_path.resolve()
    assert ctx.config.plans == {}
    assert ctx.repo.path == ctx.root
    assert isinstance(ctx.console, RichConsole)
    assert ctx.console.verbose is False


def test_verbose_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv(VERBOSE_ENV, "1")

    ctx = build_context()

    assert isinstance(ctx.console, RichConsole)
    assert ctx.console.verbose is True


def test_broken_config_exits_with_env_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / CONFIG_FILENAME).write_text('{"plans": 1}', encoding="utf-8")

    with pytest.raises(typer.Exit) as exc:
        build_context()

    assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)
