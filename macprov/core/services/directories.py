"""Development directories under $HOME."""

from __future__ import annotations

from macprov.adapters.shell.filesystem import ensure_directory
from macprov.core.context import RunContext
from macprov.core.models.stage import StageResult

STEP = "directories"


def setup_directories(ctx: RunContext) -> StageResult:
    result = StageResult(name=STEP)
    for raw in ctx.config.directories:
        result.add(ensure_directory(ctx.home_path(raw), step=STEP, action=f"mkdir:{raw}"))
    return result
