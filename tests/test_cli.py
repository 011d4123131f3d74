"""Test suite for CLI commands."""
import io
import json
import sys
from argparse import Namespace

import pytest

from secretmemo.cli import main as cli
from secretmemo.secrets.domains import preferences
from secretmemo.secrets.domains.secret_memo import SecretMemo


@pytest.fixture
def fast_hashing(temp_home, monkeypatch):
    """Temporary home with a low iteration count from the environment."""
    monkeypatch.setenv("SECRETMEMO_ITERATIONS", "1000")
    return temp_home


def run_cli(monkeypatch, *argv, stdin=None):
    monkeypatch.setattr(sys, "argv", ["secretmemo", *argv])
    if stdin is not None:
        monkeypatch.setattr(sys, "stdin", io.StringIO(stdin))
    with pytest.raises(SystemExit) as exc_info:
        cli.main()
        sys.exit(0)
    return exc_info.value.code


class TestConfigCommands:
    """Test suite for config subcommands."""

    def test_set_path_validates_file_exists(self, temp_home, tmp_path):
        """Test that config set-path validates file exists."""
        args = Namespace(path=str(tmp_path / "nonexistent.yml"))

        with pytest.raises(SystemExit) as exc_info:
            cli.cmd_config_set_path(args)

        assert exc_info.value.code == 1

    def test_set_path_stores_absolute_path(self, temp_home, tmp_path):
        """Test that config set-path stores absolute path."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("hashing:\n  iterations: 2000\n")

        cli.cmd_config_set_path(Namespace(path=str(config_file)))

        assert preferences.get_preference("config_path") == str(config_file.resolve())

    def test_show_with_preference(self, temp_home, tmp_path, capsys):
        """Test config show with a preference set reports its path and settings."""
        config_file = tmp_path / "config.yml"
        config_file.write_text("hashing:\n  iterations: 2000\n")
        preferences.set_preference("config_path", str(config_file))

        cli.cmd_config_show(Namespace())

        out = capsys.readouterr().out
        assert str(config_file) in out
        assert "preference" in out.lower()
        assert "2000" in out

    def test_show_defaults(self, temp_home, capsys):
        """Test config show without any config file reports built-in settings."""
        cli.cmd_config_show(Namespace())

        out = capsys.readouterr().out
        assert "default" in out.lower()
        assert "100000" in out

    def test_clear_removes_preference(self, temp_home, capsys):
        """Test config clear command removes preference."""
        preferences.set_preference("config_path", "/some/config.yml")

        cli.cmd_config_clear(Namespace())

        assert preferences.get_preference("config_path") is None
        assert "cleared" in capsys.readouterr().out.lower()


class TestSecretsCommands:
    """Test suite for secrets subcommands."""

    def test_hash_from_stdin(self, fast_hashing, monkeypatch, capsys):
        """Test that secrets hash reads the value from stdin."""
        code = run_cli(monkeypatch, "secrets", "hash", stdin="s3cr3t\n")

        digest = capsys.readouterr().out.strip()
        assert code == 0
        assert SecretMemo(iterations=1000).verify("s3cr3t", digest).matches

    def test_hash_strips_single_line_terminator(self, fast_hashing, monkeypatch, capsys):
        """Test that only one trailing newline is dropped from stdin."""
        code = run_cli(monkeypatch, "secrets", "hash", stdin="abc\n\n")

        digest = capsys.readouterr().out.strip()
        memo = SecretMemo(iterations=1000)
        assert code == 0
        assert memo.verify("abc\n", digest).matches
        assert not memo.verify("abc", digest).matches

    def test_hash_strips_single_crlf(self, fast_hashing, monkeypatch, capsys):
        """Test that a CRLF terminator is dropped as one line ending."""
        run_cli(monkeypatch, "secrets", "hash", stdin="abc\r\n")

        digest = capsys.readouterr().out.strip()
        assert SecretMemo(iterations=1000).verify("abc", digest).matches

    def test_hash_keeps_value_without_terminator(self, fast_hashing, monkeypatch, capsys):
        """Test that stdin without a trailing newline is hashed as is."""
        run_cli(monkeypatch, "secrets", "hash", stdin="abc\r")

        digest = capsys.readouterr().out.strip()
        assert SecretMemo(iterations=1000).verify("abc\r", digest).matches

    def test_hash_from_env(self, fast_hashing, monkeypatch, capsys):
        """Test that secrets hash reads the value from --from-env."""
        monkeypatch.setenv("MY_TOKEN", "token-value")

        code = run_cli(monkeypatch, "secrets", "hash", "--from-env", "MY_TOKEN")

        digest = capsys.readouterr().out.strip()
        assert code == 0
        assert SecretMemo(iterations=1000).verify("token-value", digest).matches

    def test_hash_missing_env(self, fast_hashing, monkeypatch):
        """Test that an unset --from-env variable is a usage error."""
        monkeypatch.delenv("MY_TOKEN", raising=False)
        assert run_cli(monkeypatch, "secrets", "hash", "--from-env", "MY_TOKEN") == 2

    def test_check_match(self, fast_hashing, monkeypatch, capsys):
        """Test that secrets check exits 0 on a matching value."""
        digest = SecretMemo(iterations=1000).hash("s3cr3t").digest

        code = run_cli(monkeypatch, "secrets", "check", digest, stdin="s3cr3t\n")

        assert code == 0
        assert capsys.readouterr().out.strip() == "match"

    def test_check_keeps_extra_newlines(self, fast_hashing, monkeypatch, capsys):
        """Test that secrets check compares a value ending in a newline correctly."""
        digest = SecretMemo(iterations=1000).hash("abc\n").digest

        assert run_cli(monkeypatch, "secrets", "check", digest, stdin="abc\n\n") == 0

    def test_check_mismatch(self, fast_hashing, monkeypatch, capsys):
        """Test that secrets check exits 1 on a different value."""
        digest = SecretMemo(iterations=1000).hash("s3cr3t").digest

        code = run_cli(monkeypatch, "secrets", "check", digest, stdin="other\n")

        assert code == 1
        assert capsys.readouterr().out.strip() == "mismatch"

    def test_check_malformed_digest(self, fast_hashing, monkeypatch):
        """Test that an unrecognized digest is a usage error."""
        assert run_cli(monkeypatch, "secrets", "check", "garbage", stdin="s3cr3t") == 2

    def test_no_subcommand(self, monkeypatch):
        """Test that secrets without a subcommand is a usage error."""
        assert run_cli(monkeypatch, "secrets") == 2


class TestStateApply:
    """Test suite for state apply."""

    def apply(self, monkeypatch, state_path, *extra):
        return run_cli(
            monkeypatch, "state", "apply",
            "--state", str(state_path),
            "--resource", "endpoint",
            "--attribute", "password",
            "--secret-name", "ENDPOINT_PASSWORD",
            *extra
        )

    def test_apply_cycle(self, fast_hashing, monkeypatch, tmp_path, capsys):
        """Test apply reports changed, then unchanged, then changed after rotation."""
        state_path = tmp_path / "state.json"

        monkeypatch.setenv("ENDPOINT_PASSWORD", "s3cr3t")
        assert self.apply(monkeypatch, state_path) == 0
        assert capsys.readouterr().out.strip() == "changed"

        stored = json.loads(state_path.read_text())["endpoint"]["password_hash"]
        assert "s3cr3t" not in state_path.read_text()
        assert SecretMemo(iterations=1000).verify("s3cr3t", stored).matches

        assert self.apply(monkeypatch, state_path) == 0
        assert capsys.readouterr().out.strip() == "unchanged"

        monkeypatch.setenv("ENDPOINT_PASSWORD", "new-s3cr3t")
        assert self.apply(monkeypatch, state_path) == 0
        assert capsys.readouterr().out.strip() == "changed"

    def test_invalid_attribute(self, fast_hashing, monkeypatch, tmp_path):
        """Test that a digest companion name is rejected as an attribute."""
        code = run_cli(
            monkeypatch, "state", "apply",
            "--state", str(tmp_path / "state.json"),
            "--resource", "endpoint",
            "--attribute", "password_hash",
            "--secret-name", "ENDPOINT_PASSWORD"
        )
        assert code == 2

    def test_corrupt_state_is_runtime_error(self, fast_hashing, monkeypatch, tmp_path, capsys):
        """Test that an unreadable state file exits 1 with an error message."""
        state_path = tmp_path / "state.json"
        state_path.write_text("{broken")
        monkeypatch.setenv("ENDPOINT_PASSWORD", "s3cr3t")

        assert self.apply(monkeypatch, state_path) == 1
        assert "Error:" in capsys.readouterr().err


class TestVersion:
    """Test suite for the version command."""

    def test_version(self, monkeypatch, capsys):
        """Test that version prints the package version."""
        assert run_cli(monkeypatch, "version") == 0
        assert cli.VERSION in capsys.readouterr().out
