"""Tests for the accesstree CLI."""
from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def config_file(tmp_path: Path) -> str:
    config = {
        "store": {"path": str(tmp_path / "access_db.yaml")},
        "audit": {"enabled": True, "log_path": str(tmp_path / "access_audit.jsonl")},
        "identity": {
            "players": {
                "aedil": {"level": 45, "affiliations": ["docs"]},
                "frogo": {"level": 1},
                "dios": {"level": 1},
            }
        },
    }
    path = tmp_path / "access.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return str(path)


# ---------------------------------------------------------------------------
# version / init
# ---------------------------------------------------------------------------


class TestVersionAndInit:
    def test_version(self, runner: CliRunner) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "accesstree" in result.output

    def test_init_writes_config_and_database(self, runner: CliRunner, tmp_path: Path) -> None:
        from accesstree.cli.main import cli

        with runner.isolated_filesystem(temp_dir=tmp_path):
            result = runner.invoke(cli, ["init"])
            assert result.exit_code == 0
            assert Path("access.yaml").exists()
            assert Path("access_db.yaml").exists()

            check = runner.invoke(cli, ["check", "/tmp/x", "--as", "admin", "--level", "grant-write"])
            assert check.exit_code == 0

    def test_init_refuses_to_overwrite(self, runner: CliRunner, tmp_path: Path) -> None:
        from accesstree.cli.main import cli

        with runner.isolated_filesystem(temp_dir=tmp_path):
            runner.invoke(cli, ["init"])
            result = runner.invoke(cli, ["init"])
            assert result.exit_code == 1
            assert "Refusing" in result.output
            assert runner.invoke(cli, ["init", "--force"]).exit_code == 0


# ---------------------------------------------------------------------------
# resolve / check / level
# ---------------------------------------------------------------------------


class TestInspection:
    def test_resolve_home(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "resolve", "~/x/../y", "--as", "frogo"])
        assert result.exit_code == 0
        assert "/players/frogo/y" in result.output

    def test_resolve_invalid(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "resolve", "", "--as", "frogo"])
        assert result.exit_code == 1

    def test_check_allowed(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(
            cli, ["-c", config_file, "check", "/tmp/x", "--as", "frogo", "--level", "write"]
        )
        assert result.exit_code == 0
        assert "ALLOWED" in result.output

    def test_check_denied_is_audited(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(
            cli, ["-c", config_file, "check", "/data/x", "--as", "frogo", "--level", "read"]
        )
        assert result.exit_code == 1
        assert "DENIED" in result.output

        audit = runner.invoke(cli, ["-c", config_file, "audit", "show"])
        assert audit.exit_code == 0
        assert "Total audit records: 1" in audit.output

    def test_check_own_character_record(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        args = ["-c", config_file, "check", "/characters/f/frogo.o", "--as", "frogo", "--level", "write"]
        assert runner.invoke(cli, args).exit_code == 1
        assert runner.invoke(cli, [*args, "--session"]).exit_code == 0

    def test_check_bad_level(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(
            cli, ["-c", config_file, "check", "/tmp", "--as", "frogo", "--level", "bogus"]
        )
        assert result.exit_code == 2

    def test_level_shows_source(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "level", "/players/frogo", "--as", "frogo"])
        assert result.exit_code == 0
        assert "grant" in result.output
        assert "!" in result.output

    def test_invalid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        from accesstree.cli.main import cli

        path = tmp_path / "broken.yaml"
        path.write_text("tiers: [unclosed\n", encoding="utf-8")
        result = runner.invoke(cli, ["-c", str(path), "groups"])
        assert result.exit_code == 2
        assert "Invalid configuration" in result.output


# ---------------------------------------------------------------------------
# grant / reset
# ---------------------------------------------------------------------------


class TestMutation:
    def test_grant_persists(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(
            cli, ["-c", config_file, "grant", "frogo", "write", "/d/Elandar", "--actor", "aedil"]
        )
        assert result.exit_code == 0
        assert "Granted" in result.output

        check = runner.invoke(
            cli, ["-c", config_file, "check", "/d/Elandar/castle.c", "--as", "frogo", "--level", "write"]
        )
        assert check.exit_code == 0

    def test_grant_refused(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(
            cli, ["-c", config_file, "grant", "dios", "read", "/data", "--actor", "frogo"]
        )
        assert result.exit_code == 1
        assert "not_authorized" in result.output

    def test_grant_none_removes(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        base = ["-c", config_file, "grant", "frogo"]
        runner.invoke(cli, [*base, "write", "/d/Elandar", "--actor", "aedil"])
        result = runner.invoke(cli, [*base, "none", "/d/Elandar", "--actor", "aedil"])
        assert result.exit_code == 0
        assert "Removed" in result.output
        assert "principal_removed" in result.output

    def test_reset(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        runner.invoke(cli, ["-c", config_file, "grant", "frogo", "write", "/d/Elandar", "--actor", "aedil"])
        result = runner.invoke(cli, ["-c", config_file, "reset", "frogo", "--actor", "aedil"])
        assert result.exit_code == 0
        assert "Reset" in result.output

        again = runner.invoke(cli, ["-c", config_file, "reset", "frogo", "--actor", "aedil"])
        assert again.exit_code == 1
        assert "not_found" in again.output


# ---------------------------------------------------------------------------
# group / groups / show
# ---------------------------------------------------------------------------


class TestGroupsAndListing:
    def test_group_add_and_remove(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        added = runner.invoke(cli, ["-c", config_file, "group", "add", "frogo", "Arch_docs", "--actor", "aedil"])
        assert added.exit_code == 0
        assert "Arch_docs" in added.output

        groups = runner.invoke(cli, ["-c", config_file, "groups", "frogo"])
        assert "Arch_docs" in groups.output

        removed = runner.invoke(
            cli, ["-c", config_file, "group", "remove", "frogo", "Arch_docs", "--actor", "aedil"]
        )
        assert removed.exit_code == 0
        assert "(none)" in removed.output

    def test_group_add_refused(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "group", "add", "frogo", "Ghosts", "--actor", "aedil"])
        assert result.exit_code == 1
        assert "unknown_group" in result.output

    def test_all_groups(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "groups"])
        assert result.exit_code == 0
        assert "Arch_full" in result.output
        assert "Arch_web" in result.output

    def test_show_json_fallback(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "show", "frogo", "--format", "json"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["listed_as"] == "*"
        assert payload["fallback_to_default"] is True

    def test_show_detailed(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "show", "aedil", "--format", "plain"])
        assert result.exit_code == 0
        assert "group 'Arch_full'" in result.output
        assert "group 'Arch_docs'" in result.output

    def test_show_unknown_group(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "show", "Nope"])
        assert result.exit_code == 1
        assert "Archwizards can create a group" in result.output

    def test_audit_show_empty(self, runner: CliRunner, config_file: str) -> None:
        from accesstree.cli.main import cli

        result = runner.invoke(cli, ["-c", config_file, "audit", "show"])
        assert result.exit_code == 0
        assert "No audit entries found." in result.output
