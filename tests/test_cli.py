"""Tests for the sbx command surface."""
import logging

import pytest

from secretbase import __version__
from secretbase.__main__ import main
from secretbase.cli import build_parser, run
from secretbase.session import Session
from secretbase.utils import resolve_log_level


@pytest.fixture
def workdir(tmp_path):
    """Fixture for a project directory named 'myapp'."""
    path = tmp_path / "myapp"
    path.mkdir()
    return path


@pytest.fixture
def session(tmp_path, workdir):
    """Fixture providing a session rooted at the project directory."""
    with Session(str(tmp_path / "db" / "secretbase.db"), root=str(workdir)) as s:
        yield s


@pytest.fixture
def sbx(session):
    """Fixture that runs one command line in the shared session."""
    parser = build_parser()
    return lambda *argv: run(parser, list(argv), session)


class TestCommands:
    """Test suite for one-shot commands."""

    def test_create_defaults_to_directory_name(self, sbx, capsys):
        assert sbx("create") == 0
        out = capsys.readouterr().out
        assert "Using current directory name as project name: myapp" in out
        assert sbx("projects") == 0
        assert "myapp" in capsys.readouterr().out

    def test_create_duplicate_fails(self, sbx, capsys):
        sbx("create", "-n", "web")
        assert sbx("create", "-n", "web") == 1
        assert "already exists" in capsys.readouterr().err

    def test_share_and_show_single_secret(self, sbx, capsys):
        sbx("create")
        assert sbx("share", "-d", "-s", "FOO=bar") == 0
        assert sbx("share", "--dev", "--secret", "FOO=baz") == 0
        capsys.readouterr()
        assert sbx("secrets", "-d") == 0
        out = capsys.readouterr().out
        assert "| FOO | baz   |" in out
        assert "bar" not in out

    def test_share_malformed_secret(self, sbx, capsys):
        sbx("create")
        assert sbx("share", "-d", "-s", "novalue") == 1
        assert "Invalid secret" in capsys.readouterr().err

    def test_missing_project_is_reported(self, sbx, capsys):
        assert sbx("grab", "-p", "ghost", "-r") == 1
        assert "Project 'ghost' does not exist." in capsys.readouterr().err

    def test_share_directory_then_grab(self, sbx, workdir):
        (workdir / ".env").write_text("A=1 # one\n")
        sbx("create")
        assert sbx("share", "-g") == 0
        (workdir / ".env").unlink()
        assert sbx("grab", "-s") == 0
        assert (workdir / ".env").read_text() == "A=1\n"

    def test_setup_writes_examples(self, sbx, workdir):
        (workdir / ".env").write_text("B=2 # note\nA=1\n")
        assert sbx("setup") == 0
        assert (workdir / ".env.example").read_text() == "A=''\nB='' # note"

    def test_register_and_list_users(self, sbx, capsys):
        assert sbx("register", "-e", "dev@example.com", "-p", "pw", "-a") == 0
        capsys.readouterr()
        sbx("users")
        out = capsys.readouterr().out
        assert "dev@example.com" in out
        assert "Yes" in out

    def test_share_undecodable_env_file(self, sbx, workdir, capsys):
        sbx("create")
        (workdir / ".env").write_bytes(b"A=\xff\xfe\n")
        assert sbx("share", "-d") == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_setup_undecodable_env_file(self, sbx, workdir, capsys):
        (workdir / ".env").write_bytes(b"A=\xff\xfe\n")
        assert sbx("setup") == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_verbose_logs_command(self, sbx, caplog):
        root = logging.getLogger()
        old_level = root.level
        try:
            assert sbx("-v", "version") == 0
        finally:
            root.setLevel(old_level)
        assert "Running command version" in caplog.text

    def test_environment_flag_is_required(self, sbx):
        with pytest.raises(SystemExit) as exc:
            sbx("grab")
        assert exc.value.code == 2

    def test_environment_flags_are_exclusive(self, sbx):
        with pytest.raises(SystemExit) as exc:
            sbx("secrets", "-d", "-r")
        assert exc.value.code == 2


class TestInteractive:
    """Test suite for the start loop."""

    def test_runs_commands_until_exit(self, sbx, monkeypatch, capsys):
        lines = iter(["create -n web", "", "bogus", "projects", "quit"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
        assert sbx("start") == 0
        out = capsys.readouterr().out
        assert "Project and associated environments created successfully" in out
        assert "web" in out
        assert "Exiting SecretBase CLI..." in out

    def test_errors_do_not_end_loop(self, sbx, monkeypatch, capsys):
        lines = iter(["grab -p ghost -d", "projects"])
        monkeypatch.setattr("builtins.input", _then_eof(lines))
        assert sbx("start") == 0
        captured = capsys.readouterr()
        assert "Project 'ghost' does not exist." in captured.err
        assert "Exiting SecretBase CLI..." in captured.out


def _then_eof(lines):
    def _input(prompt=""):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError
    return _input


class TestMain:
    """Test suite for the module entrypoint."""

    def test_version(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--db", str(tmp_path / "x.db"), "version"])
        assert exc.value.code == 0
        assert f"SecretBase version {__version__}" in capsys.readouterr().out

    def test_command_error_exit_code(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--db", str(tmp_path / "x.db"), "secrets", "-p", "ghost", "-d"])
        assert exc.value.code == 1

    def test_invalid_log_level_is_config_error(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("SECRETBASE_LOG_LEVEL", "LOUD")
        with pytest.raises(SystemExit) as exc:
            main(["--db", str(tmp_path / "x.db"), "version"])
        assert exc.value.code == 1
        assert "Invalid SECRETBASE_LOG_LEVEL: LOUD" in capsys.readouterr().err

    def test_log_level_names(self):
        assert resolve_log_level("debug") == logging.DEBUG
        assert resolve_log_level(" warning ") == logging.WARNING
