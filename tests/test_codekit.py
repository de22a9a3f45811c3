"""Tests for codekit.py - CLI entry point."""

import json
from unittest.mock import patch

import pytest

from codekit.codekit import build_parser, main
from codekit.config.config import TEMPLATES_DIR_ENV, Config
from codekit.core.types import ArtifactKind, Tier
from codekit.output import get_output


@pytest.fixture
def config(tmp_path, templates_dir, paths, monkeypatch):
    """A config file pointing every tier at the temporary directory."""
    monkeypatch.delenv(TEMPLATES_DIR_ENV, raising=False)
    config = Config(config_dir=tmp_path / "cfg")
    with patch("codekit.config.config.message"):
        config.write({
            "templates_dir": str(templates_dir),
            "project_dir": str(paths.project_root),
            "global_dir": str(paths.global_root),
        })
    with patch("codekit.codekit.Config", return_value=config):
        yield config


class TestParser:

    def test_help_lists_command_groups(self):
        help_text = build_parser().format_help()
        assert "resource commands:" in help_text
        assert "sources" in help_text
        assert "init" in help_text

    def test_no_command_prints_help(self, capsys):
        main([])
        assert "usage: codekit" in capsys.readouterr().out

    def test_verbosity_and_color(self, config):
        with patch("codekit.codekit.ConfigCommands.process_cli_command"):
            main(["-vv", "--no-color", "config", "where"])
        assert get_output().verbosity == 2
        assert get_output().use_color is False


class TestMain:

    def test_install_and_list(self, config, add_bundled, paths, capsys):
        add_bundled(ArtifactKind.AGENT, "api-docs")
        add_bundled(ArtifactKind.AGENT, "writer", dependencies=("api-docs",))
        add_bundled(ArtifactKind.AGENT, "reviewer")

        main(["agents", "add", "writer"])
        capsys.readouterr()
        main(["agents", "list", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert sorted(a["name"] for a in data["project"]) == ["api-docs", "writer"]
        assert data["available"] == ["reviewer"]
        assert paths.artifact_location(ArtifactKind.AGENT, Tier.PROJECT, "writer").is_file()

    def test_init(self, config, add_bundled, paths):
        add_bundled(ArtifactKind.AGENT, "writer")
        add_bundled(ArtifactKind.COMMAND, "deploy")

        main(["init", "--yes"])

        assert paths.artifact_location(ArtifactKind.AGENT, Tier.PROJECT, "writer").is_file()
        assert paths.artifact_location(ArtifactKind.COMMAND, Tier.PROJECT, "deploy").is_file()

    def test_codekit_errors_exit_non_zero(self, config, add_bundled, capsys):
        add_bundled(ArtifactKind.AGENT, "writer")
        main(["agents", "add", "writer"])

        with pytest.raises(SystemExit) as exc_info:
            main(["agents", "add", "writer"])

        assert exc_info.value.code == 1
        assert "Error: 'writer' is already installed" in capsys.readouterr().err

    def test_unknown_artifact_suggests(self, config, add_bundled, capsys):
        add_bundled(ArtifactKind.AGENT, "writer")

        with pytest.raises(SystemExit):
            main(["agents", "add", "writr"])

        assert "Did you mean: writer?" in capsys.readouterr().err

    def test_config_errors_exit_non_zero(self, config, capsys):
        config.config_file.write_text("fetch_timeout: [broken\n")

        with pytest.raises(SystemExit) as exc_info:
            main(["sources", "list"])

        assert exc_info.value.code == 1
        assert "Failed to parse configuration file" in capsys.readouterr().err

    def test_keyboard_interrupt(self, config):
        with (
            patch("codekit.codekit.ResourceCommands.process_cli_command", side_effect=KeyboardInterrupt),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["skills", "list"])
        assert exc_info.value.code == 130
