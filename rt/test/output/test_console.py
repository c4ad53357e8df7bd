"""Tests for rt.output.console module."""

from __future__ import annotations

import pytest

from rt.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.COMMAND) == "command"


class TestMockConsole:
    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_field_format(self) -> None:
        console = MockConsole()
        console.field("Branch", "main")
        assert console.messages == ["! Branch: main"]
        assert console.count(Style.FIELD) == 1

    def test_commands_in_order(self) -> None:
        console = MockConsole()
        console.command("git add .")
        console.info("between")
        console.command("git tag 1.0.0")
        assert console.commands == ["git add .", "git tag 1.0.0"]

    def test_debug_respects_verbose(self) -> None:
        quiet = MockConsole(verbose=False)
        quiet.debug("hidden")
        assert quiet.messages == []

        loud = MockConsole()
        loud.debug("shown")
        assert loud.messages == ["shown"]

    def test_error_helpers(self) -> None:
        console = MockConsole()
        assert not console.has_error()
        console.error("bad")
        assert console.has_error()
        assert console.find("bad")[0].message == "error: bad"

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.success("ok")
        assert isinstance(console, MockConsole)


class TestRichConsole:
    def test_markup_in_messages_is_not_interpreted(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.error("[bold]x[/bold]")
        console.field("Name", "[red]pkg")
        out = capsys.readouterr().out
        assert "[bold]x[/bold]" in out
        assert "! Name: [red]pkg" in out

    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().debug("diag")
        assert "diag" not in capsys.readouterr().out
        RichConsole(verbose=True).debug("diag")
        assert "diag" in capsys.readouterr().out
