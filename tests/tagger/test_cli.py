"""
Tagger - Command Line Tests

Drives main() end to end against a JSON database in a temp directory.
"""
import json
import pytest
from loguru import logger

from src.tagger import __version__
from src.tagger.cli import COMMANDS, main


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger.remove()


@pytest.fixture
def cli(tmp_path, config_path, capsys):
    """Runs the CLI with a temp config; returns (exit_code, stdout, stderr)."""
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump({"storage": {"backend": "json", "database_path": str(tmp_path / "db.json")}}, f)

    def run(*argv):
        code = main(["--config", config_path, *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err

    return run


class TestInfoCommands:
    """Tests for help/version and bad invocations."""

    def test_no_command_prints_usage(self, capsys):
        assert main([]) == 1
        out = capsys.readouterr().out
        assert out.startswith("Usage: tagger-cli [command] <arguments>")

    def test_help_lists_every_command(self, capsys):
        assert main(["help"]) == 0
        out = capsys.readouterr().out
        for name, description in COMMANDS:
            assert f"  {name}: {description}" in out

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert capsys.readouterr().out == f"tagger-cli v{__version__}\n"

    def test_match_without_filter(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["match"])
        assert exc.value.code == 2


class TestFileCommands:
    """Tests for add/move/remove/files."""

    def test_add_prints_id(self, cli):
        code, out, _ = cli("add", "/a.txt")
        file_id = out.strip()

        assert code == 0
        assert cli("files")[1] == f"{file_id} /a.txt\n"

    def test_move_and_remove(self, cli):
        file_id = cli("add", "/a")[1].strip()

        assert cli("move", "/a", "/b")[0] == 0
        assert cli("files")[1] == f"{file_id} /b\n"

        assert cli("remove", f"uuid:{file_id}")[0] == 0
        assert cli("files")[1] == ""

    def test_unknown_file(self, cli):
        code, out, err = cli("remove", "/ghost")

        assert code == 1
        assert out == ""
        assert err.startswith("Error: no such file in storage")


class TestTagCommands:
    """Tests for set/unset/get/match."""

    def test_set_and_get(self, cli):
        cli("add", "/a")
        cli("set", "/a", "draft")
        cli("set", "/a", "rating", "-2")

        assert cli("get", "/a") == (0, "draft rating=-2\n", "")

    def test_set_invalid_value(self, cli):
        cli("add", "/a")
        code, _, err = cli("set", "/a", "rating", "high")

        assert code == 1
        assert "invalid tag value" in err

    def test_set_rejects_unqueryable_name(self, cli):
        cli("add", "/a")
        code, _, err = cli("set", "/a", "2024")

        assert code == 1
        assert "invalid tag name: '2024'" in err
        assert cli("get", "/a")[1] == "\n"

    def test_unset_missing_tag(self, cli):
        cli("add", "/a")
        code, _, err = cli("unset", "/a", "x")

        assert code == 1
        assert "no such tag on file: x" in err

    def test_match(self, cli):
        f1 = cli("add", "/f1")[1].strip()
        cli("add", "/f2")
        cli("set", "/f1", "role", "1")
        cli("set", "/f1", "status")
        cli("set", "/f2", "role", "2")

        assert cli("match", "role", "==", "1", "OR", "status") == (0, f"{f1} /f1\n", "")
        assert cli("match", "(role > 1)")[1].endswith(" /f2\n")

    def test_match_nothing(self, cli):
        cli("add", "/a")

        assert cli("match", "x") == (0, "", "")
        code, _, err = cli("match", "--strict", "x")
        assert code == 1
        assert "no matching files in storage" in err

    def test_match_syntax_error(self, cli):
        code, out, err = cli("match", "a", "AND")

        assert code == 1
        assert out == ""
        assert "expected" in err and "position 5" in err


class TestConfigCommand:
    """Tests for config show/get/set/path."""

    def test_path(self, cli, config_path):
        assert cli("config", "path")[1] == f"{config_path}\n"

    def test_show(self, cli, tmp_path):
        code, out, _ = cli("config")
        shown = json.loads(out)

        assert code == 0
        assert shown["storage"]["database_path"] == str(tmp_path / "db.json")
        assert shown["storage"]["match_concurrency"] == 16

    def test_set(self, cli, config_path):
        assert cli("config", "set", "storage", "match_concurrency", "4")[0] == 0

        with open(config_path, encoding="utf-8") as f:
            assert json.load(f)["storage"]["match_concurrency"] == 4

    def test_set_rejects_invalid(self, cli):
        assert cli("config", "set", "storage", "match_concurrency", "0")[0] == 1
        assert cli("config", "set", "storage", "nope", "1")[0] == 1

    def test_set_needs_three_values(self, cli):
        code, _, err = cli("config", "set", "storage")

        assert code == 2
        assert "config set SECTION KEY VALUE" in err

    def test_get(self, cli, tmp_path):
        assert cli("config", "get", "storage", "match_concurrency") == (0, "16\n", "")
        assert cli("config", "get", "storage", "database_path")[1] == f"{tmp_path / 'db.json'}\n"
        assert cli("config", "get", "general", "log_dir")[1] == "null\n"

    def test_get_rejects_unknown(self, cli):
        code, _, err = cli("config", "get", "storage", "nope")

        assert code == 1
        assert "Invalid key: nope" in err
        assert cli("config", "get", "storage")[0] == 2

    def test_set_log_dir_starts_file_logging(self, cli, tmp_path):
        log_dir = tmp_path / "logs"

        assert cli("config", "set", "general", "log_dir", str(log_dir))[0] == 0

        logger.complete()
        files = list(log_dir.glob("tagger_*.log"))
        assert len(files) == 1
        assert "Logging initialized." in files[0].read_text(encoding="utf-8")
