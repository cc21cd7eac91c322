"""Downstream checker running the configured dependency build."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel

from null_annotator.config.schema import DownstreamConfig
from null_annotator.core.checker_output import CheckerOutputParser
from null_annotator.models.fix import Action, Fix
from null_annotator.models.location import LocationKind
from null_annotator.models.records import LocationRecord
from null_annotator.models.region import Error
from null_annotator.utils.errors import CommandError, RebuildFailure
from null_annotator.utils.subprocess_runner import CommandRunner

LIBRARY_MODEL_ENV = "NULL_ANNOTATOR_LIBRARY_MODEL"


class LibraryModel(BaseModel):
    """Nullability assumptions the downstream checker applies to the target's API."""

    nullable_returns: list[LocationRecord] = []
    nullable_fields: list[LocationRecord] = []

    @classmethod
    def of(cls, fixes: Iterable[Fix]) -> LibraryModel:
        returns, fields = [], []
        for fix in fixes:
            if fix.action != Action.ADD:
                continue
            if fix.location.kind == LocationKind.METHOD_RETURN:
                returns.append(LocationRecord.from_location(fix.location))
            elif fix.location.kind == LocationKind.FIELD:
                fields.append(LocationRecord.from_location(fix.location))
        return cls(nullable_returns=returns, nullable_fields=fields)


class CommandDownstreamChecker:
    """Builds dependent modules against a library model of the target.

    Dependents are never edited; each call describes the fixes through the
    library model file exported as ``NULL_ANNOTATOR_LIBRARY_MODEL``.
    """

    def __init__(
        self,
        config: DownstreamConfig,
        cwd: Path | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self._config = config
        self._parser = CheckerOutputParser()
        self._runner = runner or CommandRunner(
            cwd=cwd,
            default_timeout=config.timeout,
            env={**os.environ, LIBRARY_MODEL_ENV: str(config.library_model)},
        )

    async def check(self, fixes: Iterable[Fix]) -> frozenset[Error]:
        model = LibraryModel.of(fixes)
        path = self._config.library_model
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(model.model_dump_json(indent=2), encoding="utf-8")
        self._config.checker_output.unlink(missing_ok=True)
        try:
            await self._runner.run(self._config.command, check=True)
        except CommandError as e:
            raise RebuildFailure(f"Downstream build failed: {e}") from e
        return self._parser.read(self._config.checker_output).errors
