"""Tests for output.py - Console output."""

import json

from codekit.output import MessageType, OutputManager, VerbosityLevel, message, output_json


class TestOutputManager:

    def test_filters_on_verbosity(self, capsys):
        output = OutputManager(verbosity=1)
        output.message("shown", MessageType.NORMAL, VerbosityLevel.VERBOSE)
        output.message("hidden", MessageType.NORMAL, VerbosityLevel.DEBUG)

        out = capsys.readouterr().out
        assert "shown" in out
        assert "hidden" not in out

    def test_errors_and_warnings_go_to_stderr(self, capsys):
        output = OutputManager()
        output.message("bad", MessageType.ERROR)
        output.message("careful", MessageType.WARNING)
        output.message("fine", MessageType.SUCCESS)

        captured = capsys.readouterr()
        assert "✗ bad" in captured.err
        assert "⚠ careful" in captured.err
        assert "✓ fine" in captured.out

    def test_prefix_keeps_leading_newlines(self):
        assert OutputManager().format("\nheading", MessageType.INFO) == "\ni heading"

    def test_normal_and_blank_lines_unprefixed(self):
        output = OutputManager()
        assert output.format("plain", MessageType.NORMAL) == "plain"
        assert output.format("", MessageType.SUCCESS) == ""

    def test_color(self):
        formatted = OutputManager(use_color=True).format("ok", MessageType.SUCCESS)
        assert formatted.startswith("\033[32m")
        assert formatted.endswith("\033[0m")


class TestModuleFunctions:

    def test_message_uses_global_verbosity(self, reset_output, capsys):
        message("quiet", MessageType.DEBUG, VerbosityLevel.DEBUG)
        assert capsys.readouterr().out == ""

        reset_output.verbosity = 3
        message("loud", MessageType.DEBUG, VerbosityLevel.DEBUG)
        assert "[debug] loud" in capsys.readouterr().out

    def test_output_json(self, capsys):
        output_json({"path": object.__name__, "count": 2})
        assert json.loads(capsys.readouterr().out) == {"path": "object", "count": 2}
