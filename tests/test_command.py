"""Tests for the whitespace-split command runner."""

import subprocess

import pytest

from orpheus.errors import CommandExecutionError, EmptyCommand, InvalidCommandPrefix
from orpheus.tools.command import CommandRunner


class TestValidation:
    @pytest.mark.parametrize("raw", ["", "   ", "\t\n"])
    def test_empty_command(self, raw):
        with pytest.raises(EmptyCommand):
            CommandRunner().run(raw)

    def test_empty_command_on_prefixed_runner(self):
        with pytest.raises(EmptyCommand):
            CommandRunner(prefix="gcloud").run("")

    def test_invalid_prefix(self):
        with pytest.raises(InvalidCommandPrefix) as exc:
            CommandRunner(prefix="gcloud").run("notgcloud foo")
        assert exc.value.expected == "gcloud"
        assert exc.value.actual == "notgcloud"
        assert "must start with 'gcloud'" in str(exc.value)

    def test_prefix_must_be_whole_token(self):
        with pytest.raises(InvalidCommandPrefix):
            CommandRunner(prefix="gcloud").run("gcloudx version")

    def test_split_keeps_tokens_verbatim(self):
        runner = CommandRunner(prefix="gcloud")
        assert runner.split("  gcloud  compute   instances list ") == [
            "gcloud", "compute", "instances", "list",
        ]


class TestExecution:
    def test_success_returns_output(self):
        assert CommandRunner().run("echo hello") == "hello\n"

    def test_no_shell_interpretation(self):
        # Quotes are passed through literally; there is no way to group words
        assert CommandRunner().run('echo "a b"') == '"a b"\n'
        assert CommandRunner().run("echo $HOME") == "$HOME\n"

    def test_repeated_whitespace_collapses(self):
        assert CommandRunner().run("echo a     b") == "a b\n"

    def test_output_matches_raw_process_output(self):
        expected = subprocess.run(
            ["ls", "-a", "/"], stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
        ).stdout.decode()
        assert CommandRunner().run("ls -a /") == expected

    def test_utf8_output_unchanged(self):
        assert CommandRunner().run("printf h\\303\\251llo") == "héllo"

    def test_invalid_utf8_bytes_replaced(self):
        assert CommandRunner().run("printf a\\377b") == "a\ufffdb"

    def test_unconstrained_runner_executes_any_program(self):
        with pytest.raises(CommandExecutionError) as exc:
            CommandRunner().run("notgcloud foo")
        assert "notgcloud" in str(exc.value)
        assert exc.value.returncode is None

    def test_missing_program_carries_os_error(self):
        with pytest.raises(CommandExecutionError) as exc:
            CommandRunner().run("orpheus-no-such-binary --flag")
        assert "No such file or directory" in exc.value.cause

    def test_nonzero_exit_carries_combined_output(self):
        with pytest.raises(CommandExecutionError) as exc:
            CommandRunner(label="linux").run("ls /orpheus-missing-dir")
        err = exc.value
        assert err.returncode != 0
        assert "orpheus-missing-dir" in err.output
        assert "linux command error" in str(err)
        assert "Output:" in str(err)

    def test_nonzero_exit_without_output(self):
        with pytest.raises(CommandExecutionError) as exc:
            CommandRunner().run("false")
        assert exc.value.returncode == 1
        assert exc.value.output == ""

    def test_timeout(self):
        with pytest.raises(CommandExecutionError) as exc:
            CommandRunner(timeout=0.2).run("sleep 5")
        assert "timed out" in str(exc.value)

    def test_default_has_no_timeout(self):
        assert CommandRunner().timeout is None
