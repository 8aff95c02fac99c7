"""
Tests for the command-line interface.
"""

import json

import pytest

from contractfix.cli.commands import EXIT_ERROR, EXIT_FINDINGS, EXIT_OK
from contractfix.cli_entry import create_parser, main

SOURCE = "def f(x):\n    Contract.ensures(x)\n    return x\n"


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project directory with one fixable file, used as the working directory."""
    monkeypatch.chdir(tmp_path)
    src = tmp_path / "src"
    src.mkdir()
    (src / "mod.py").write_text(SOURCE, encoding="utf-8")
    return tmp_path


class TestParser:
    def test_global_options(self):
        args = create_parser().parse_args(["--no-rich", "-v", "analyze", "src", "--rules", "CR04"])

        assert args.no_rich and args.verbose
        assert args.command == "analyze"
        assert args.rules == ["CR04"]

    def test_no_command(self, capsys):
        assert main([]) == EXIT_ERROR


class TestAnalyzeCommand:
    def test_text_output(self, project, capsys):
        code = main(["--no-rich", "analyze", "src"])

        out = capsys.readouterr().out
        assert code == EXIT_OK
        assert "CR04" in out
        assert "1 finding(s), 1 fixable" in out

    def test_fail_on_findings(self, project):
        assert main(["--no-rich", "analyze", "src", "--fail-on-findings"]) == EXIT_FINDINGS

    def test_json_output(self, project, capsys):
        main(["--no-rich", "analyze", "src", "--format", "json"])

        data = json.loads(capsys.readouterr().out)
        assert [f["rule_id"] for f in data["findings"]] == ["CR04"]

    def test_missing_path(self, project, capsys):
        assert main(["--no-rich", "analyze", "nowhere"]) == EXIT_ERROR
        assert "does not exist" in capsys.readouterr().out


class TestFixCommand:
    def test_prints_diff_without_writing(self, project, capsys):
        assert main(["--no-rich", "fix", "src"]) == EXIT_OK

        out = capsys.readouterr().out
        assert "-    Contract.ensures(x)" in out
        assert (project / "src" / "mod.py").read_text(encoding="utf-8") == SOURCE

    def test_write_with_backup(self, project):
        assert main(["--no-rich", "fix", "src", "--write"]) == EXIT_OK

        assert (project / "src" / "mod.py").read_text(encoding="utf-8") == "def f(x):\n    return x\n"
        assert (project / "src" / "mod.py.bak").exists()

    def test_write_without_backup(self, project):
        assert main(["--no-rich", "fix", "src", "--write", "--no-backup"]) == EXIT_OK

        assert not (project / "src" / "mod.py.bak").exists()


class TestRulesAndConfigCommands:
    def test_rules_listing(self, project, capsys):
        assert main(["--no-rich", "rules"]) == EXIT_OK

        out = capsys.readouterr().out
        assert "CR03 | no | Contract call to debug assertion" in out
        assert "CR01 | yes" in out
        assert "CR07 | no | Missing condition string" in out

    def test_config_init_and_show(self, project, capsys):
        assert main(["--no-rich", "config", "init"]) == EXIT_OK
        assert (project / "contractfix.yaml").exists()
        assert main(["--no-rich", "config", "init"]) == EXIT_ERROR
        capsys.readouterr()

        assert main(["--no-rich", "config", "show"]) == EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert data["library"]["legacy_class"] == "Contract"

    def test_invalid_config_file(self, project, capsys):
        (project / "bad.yaml").write_text("library:\n  legacy_class: ''\n", encoding="utf-8")

        assert main(["--no-rich", "--config", "bad.yaml", "rules"]) == EXIT_ERROR
        assert "Configuration error" in capsys.readouterr().out
