"""Tests for the subprocess wrapper."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from null_annotator.utils.errors import CommandError, CommandTimeoutError
from null_annotator.utils.subprocess_runner import CommandResult, CommandRunner


def completed(return_code: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    mock_proc = MagicMock()
    mock_proc.stdout = stdout
    mock_proc.stderr = stderr
    mock_proc.returncode = return_code
    return mock_proc


class TestCommandResult:
    """Test CommandResult dataclass."""

    def test_success_true(self) -> None:
        """Test success property when return code is 0."""
        result = CommandResult(stdout="ok", stderr="", return_code=0, command=["make"])
        assert result.success is True

    def test_success_false(self) -> None:
        """Test success property when return code is non-zero."""
        result = CommandResult(stdout="", stderr="error", return_code=1, command=["make"])
        assert result.success is False


class TestCommandSplitting:
    """Test command line tokenization."""

    def test_splits_quoted_arguments(self) -> None:
        """Quoted arguments stay together."""
        assert CommandRunner.split('./gradlew build -Pflags="a b"') == [
            "./gradlew",
            "build",
            "-Pflags=a b",
        ]

    def test_sequence_is_kept(self) -> None:
        """Argument lists are used as given."""
        assert CommandRunner.split(["mvn", "compile"]) == ["mvn", "compile"]

    @pytest.mark.parametrize("command", ["", "   ", []])
    def test_empty_command(self, command: str | list[str]) -> None:
        """Empty commands are rejected."""
        with pytest.raises(CommandError, match="Empty command"):
            CommandRunner.split(command)

    def test_unbalanced_quotes(self) -> None:
        """Commands that cannot be tokenized are rejected."""
        with pytest.raises(CommandError, match="Cannot parse"):
            CommandRunner.split('make "unterminated')


class TestCommandRunner:
    """Test command execution."""

    async def test_runs_without_shell(self, tmp_path: Path) -> None:
        """Commands run through subprocess.run with shell=False in the configured cwd."""
        runner = CommandRunner(cwd=tmp_path, default_timeout=10, env={"A": "1"})
        with patch("subprocess.run", return_value=completed(stdout="done")) as mock_run:
            result = await runner.run("make all")

        assert result.success
        assert result.stdout == "done"
        assert result.command == ["make", "all"]
        args, kwargs = mock_run.call_args
        assert args[0] == ["make", "all"]
        assert kwargs["shell"] is False
        assert kwargs["cwd"] == tmp_path
        assert kwargs["env"] == {"A": "1"}
        assert kwargs["timeout"] == 10

    async def test_failure_without_check(self) -> None:
        """A non-zero exit is reported in the result when check is off."""
        with patch("asyncio.to_thread", new_callable=AsyncMock) as mock_thread:
            mock_thread.return_value = completed(return_code=2, stderr="boom")
            result = await CommandRunner().run("make")
        assert not result.success
        assert result.return_code == 2

    async def test_failure_with_check(self) -> None:
        """A non-zero exit raises CommandError carrying the status."""
        with patch("asyncio.to_thread", new_callable=AsyncMock) as mock_thread:
            mock_thread.return_value = completed(return_code=3, stderr="compile error")
            with pytest.raises(CommandError, match="compile error") as excinfo:
                await CommandRunner().run("make", check=True)
        assert excinfo.value.return_code == 3

    async def test_timeout(self) -> None:
        """Test that command timeout raises CommandTimeoutError."""
        with patch("asyncio.to_thread", new_callable=AsyncMock) as mock_thread:
            mock_thread.side_effect = subprocess.TimeoutExpired(["make"], 1)
            with pytest.raises(CommandTimeoutError):
                await CommandRunner(default_timeout=1).run("make")

    async def test_missing_executable(self) -> None:
        """A command that cannot start raises CommandError."""
        with patch("asyncio.to_thread", new_callable=AsyncMock) as mock_thread:
            mock_thread.side_effect = FileNotFoundError("no such file")
            with pytest.raises(CommandError, match="Cannot run"):
                await CommandRunner().run("./missing-build")
