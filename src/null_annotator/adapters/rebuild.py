"""Rebuild trigger running the configured build command."""

from __future__ import annotations

import os
from collections.abc import Sequence

import structlog
from pydantic import BaseModel

from null_annotator.config.schema import BuildConfig, TargetConfig
from null_annotator.utils.errors import CommandError, RebuildFailure
from null_annotator.utils.subprocess_runner import CommandRunner

log = structlog.get_logger()

CHECKER_CONFIG_ENV = "NULL_ANNOTATOR_CHECKER_CONFIG"


class CheckerSettings(BaseModel):
    """Configuration file the checker plugin reads at build time."""

    work_list: list[str]
    suggest: bool
    output: str


class CommandRebuildTrigger:
    """Runs ``build.command`` with the checker configured for one round.

    The checker configuration path is exported to the build as
    ``NULL_ANNOTATOR_CHECKER_CONFIG``.
    """

    def __init__(
        self,
        build: BuildConfig,
        target: TargetConfig,
        runner: CommandRunner | None = None,
    ) -> None:
        self._build = build
        self._target = target
        self._runner = runner or CommandRunner(
            cwd=target.source_root,
            default_timeout=build.timeout,
            env={**os.environ, CHECKER_CONFIG_ENV: str(build.checker_config)},
        )

    def write_checker_config(self, work_list: Sequence[str], suggest_fixes: bool) -> None:
        settings = CheckerSettings(
            work_list=list(work_list),
            suggest=suggest_fixes,
            output=str(self._target.checker_output),
        )
        path = self._build.checker_config
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")

    async def rebuild(self, work_list: Sequence[str], suggest_fixes: bool) -> bool:
        """Run the build; a non-zero exit status is a failed round.

        Raises:
            RebuildFailure: If the command cannot be executed or times out.
        """
        self.write_checker_config(work_list, suggest_fixes)
        # A failed build must not leave the previous round's output behind.
        self._target.checker_output.unlink(missing_ok=True)
        try:
            result = await self._runner.run(self._build.command)
        except CommandError as e:
            raise RebuildFailure(str(e)) from e
        if not result.success:
            log.warning(
                "build_command_failed",
                return_code=result.return_code,
                stderr=result.stderr[-2000:],
            )
        return result.success
