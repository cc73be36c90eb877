"""Tests for srm.output.console module."""

from __future__ import annotations

import pytest

from srm.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.DEBUG) == "debug"
        assert str(Style.INFO) == "info"


class TestMockConsole:
    def test_debug_is_captured(self) -> None:
        console = MockConsole()
        console.debug('Filter commits by package path: "packages/foo"')

        assert console.messages == ['debug: Filter commits by package path: "packages/foo"']
        assert console.count(Style.DEBUG) == 1

    def test_info_and_error(self) -> None:
        console = MockConsole()
        console.info("Found 1 commits for package foo since last release")
        console.error("git diff-tree abc: bad object")

        assert console.has_error() is True
        assert console.find("Found 1 commits")[0].style == Style.INFO

    def test_clear(self) -> None:
        console = MockConsole()
        console.print("x")
        console.clear()
        assert console.text == ""

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.print("ok", Style.DIM)


class TestRichConsole:
    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().debug("hidden trace")
        RichConsole(verbose=True).debug("shown trace")

        out = capsys.readouterr().out
        assert "hidden trace" not in out
        assert "shown trace" in out

    def test_brackets_survive(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("feat[scope]: thing")
        console.info("package [beta]")

        out = capsys.readouterr().out
        assert "feat[scope]: thing" in out
        assert "package [beta]" in out
