"""Subprocess wrapper for the build and checker commands.

This module runs the configured external commands so that:
- shell=True is never used; command strings are split with shlex
- every run has a timeout
- failures surface as CommandError with the exit status attached
"""

from __future__ import annotations

import asyncio
import shlex
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from null_annotator.utils.errors import CommandError, CommandTimeoutError

log = structlog.get_logger()


@dataclass
class CommandResult:
    """Result of one command execution."""

    stdout: str
    stderr: str
    return_code: int
    command: list[str]

    @property
    def success(self) -> bool:
        """Return True if the command succeeded."""
        return self.return_code == 0


class CommandRunner:
    """Runs external commands in a fixed working directory and environment.

    Example:
        runner = CommandRunner(cwd=Path("/src/project"), default_timeout=600)
        result = await runner.run("./gradlew compileJava")
    """

    DEFAULT_TIMEOUT = 3600

    def __init__(
        self,
        cwd: Path | None = None,
        default_timeout: int = DEFAULT_TIMEOUT,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._cwd = cwd
        self._default_timeout = default_timeout
        self._env = dict(env) if env is not None else None

    @staticmethod
    def split(command: str | Sequence[str]) -> list[str]:
        """Split a command string into arguments.

        Raises:
            CommandError: If the command is empty or cannot be tokenized.
        """
        if isinstance(command, str):
            try:
                args = shlex.split(command)
            except ValueError as e:
                raise CommandError(f"Cannot parse command {command!r}: {e}") from e
        else:
            args = list(command)
        if not args:
            raise CommandError("Empty command")
        return args

    async def run(
        self,
        command: str | Sequence[str],
        timeout: int | None = None,
        check: bool = False,
    ) -> CommandResult:
        """Run a command and capture its output.

        Args:
            command: Command line or argument list.
            timeout: Timeout in seconds (uses default if None).
            check: If True, raise on a non-zero exit status.

        Returns:
            CommandResult with stdout, stderr, and return code.

        Raises:
            CommandTimeoutError: If the command times out.
            CommandError: If the command cannot be started, or check=True and it fails.
        """
        args = self.split(command)
        effective_timeout = timeout or self._default_timeout

        log.debug("executing_command", command=args, cwd=str(self._cwd), timeout=effective_timeout)

        def run_sync() -> subprocess.CompletedProcess[str]:
            return subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=effective_timeout,
                cwd=self._cwd,
                env=self._env,
                shell=False,
            )

        try:
            proc = await asyncio.wait_for(
                asyncio.to_thread(run_sync),
                timeout=effective_timeout + 5,
            )
        except (subprocess.TimeoutExpired, TimeoutError) as e:
            log.error("command_timeout", command=args, timeout=effective_timeout)
            raise CommandTimeoutError(
                f"Command timed out after {effective_timeout}s: {args}"
            ) from e
        except OSError as e:
            raise CommandError(f"Cannot run {args[0]}: {e}") from e

        result = CommandResult(
            stdout=proc.stdout,
            stderr=proc.stderr,
            return_code=proc.returncode,
            command=args,
        )
        log.debug("command_finished", command=args, return_code=result.return_code)

        if check and not result.success:
            raise CommandError(
                f"Command {args} exited with {result.return_code}: "
                f"{(result.stderr or result.stdout)[-2000:]}",
                return_code=result.return_code,
            )
        return result
