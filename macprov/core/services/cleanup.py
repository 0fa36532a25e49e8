"""Cleanup — prune Homebrew caches and restart apps that cache preferences."""

from __future__ import annotations

from macprov.core.context import RunContext
from macprov.core.models.stage import StageResult
from macprov.core.services.homebrew import brew_cleanup
from macprov.core.services.preferences import restart_apps

STEP = "cleanup"


def run_cleanup(ctx: RunContext) -> StageResult:
    result = StageResult(name=STEP)
    result.add(brew_cleanup(ctx, STEP))
    if ctx.config.preferences.enabled:
        result.add(restart_apps(ctx, STEP))
    return result
