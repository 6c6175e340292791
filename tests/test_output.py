"""Tests for the output formatting system.

Covers format resolution, NO_COLOR handling, stdout/stderr discipline,
quiet and verbose modes, and table rendering in each format.
"""

from __future__ import annotations

import json

import pytest

from grimoire import output as output_module
from grimoire.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture(autouse=True)
def _reset_global_output():
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("grimoire.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("grimoire.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty):
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_no_color(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        assert _should_disable_color() is False


class TestStreams:
    def test_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(no_color=True).print_data("fireball")
        captured = capfd.readouterr()
        assert captured.out == "fireball\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        getattr(OutputManager(no_color=True), method)("cache miss")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "cache miss" in captured.err

    def test_quiet_suppresses_info_not_errors(self, capfd, non_tty):
        out = OutputManager(no_color=True, quiet=True)
        out.info("hidden")
        out.success("hidden")
        out.warning("shown")
        out.error("shown too")
        err = capfd.readouterr().err
        assert "hidden" not in err
        assert "Warning: shown" in err
        assert "Error: shown too" in err

    def test_debug_only_when_verbose(self, capfd, non_tty):
        OutputManager(no_color=True).debug("Cache hit: x")
        assert capfd.readouterr().err == ""
        OutputManager(no_color=True, verbose=True).debug("Cache hit: x")
        assert capfd.readouterr().err == "[debug] Cache hit: x\n"

    def test_debug_markup_escaped_in_color_mode(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        OutputManager(verbose=True).debug("GET https://x.test/api/spells?level=3")
        err = capfd.readouterr().err
        assert "[debug] GET https://x.test/api/spells?level=3" in err


class TestDataFormats:
    def test_json_format_data(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_data({"index": "fireball"})
        assert json.loads(capfd.readouterr().out) == {"index": "fireball"}

    def test_plain_format_dict(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).format_data({"index": "fireball", "level": 3})
        assert capfd.readouterr().out == "index\tfireball\nlevel\t3\n"

    def test_plain_table(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN).print_table(
            ["index", "name"], [["fireball", "Fireball"], ["fly", "Fly"]]
        )
        assert capfd.readouterr().out == "index\tname\nfireball\tFireball\nfly\tFly\n"

    def test_json_table(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(["index"], [["fireball"]])
        assert json.loads(capfd.readouterr().out) == [{"index": "fireball"}]

    def test_none_cells(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(["index", "url"], [["fly", None]])
        assert json.loads(capfd.readouterr().out) == [{"index": "fly"}]
        OutputManager(format=OutputFormat.PLAIN).print_table(["index", "level"], [["fly", None], ["fireball", 3]])
        assert capfd.readouterr().out == "index\tlevel\nfly\t\nfireball\t3\n"

    def test_plain_paragraphs(self, capfd, non_tty):
        out = OutputManager(format=OutputFormat.PLAIN)
        out.print_paragraphs(["First.", "", "Second."], heading="Description:")
        out.print_paragraphs([], heading="At higher levels:")
        assert capfd.readouterr().out == "Description:\nFirst.\nSecond.\n"

    def test_rich_table_contains_cells(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            ["index", "name"], [["fireball", "Fireball"]], title="1 items"
        )
        out = capfd.readouterr().out
        assert "fireball" in out
        assert "Fireball" in out


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_output_installs_instance(self):
        manager = OutputManager(quiet=True)
        set_output(manager)
        assert get_output() is manager

    def test_convenience_functions_delegate(self, capfd, non_tty):
        set_output(OutputManager(no_color=True, verbose=True))
        output_module.info("i")
        output_module.debug("d")
        err = capfd.readouterr().err
        assert "i\n" in err
        assert "[debug] d" in err
