"""
Verification — re-check the expected tools and report.

Purely diagnostic: a missing tool is a failed receipt and bumps the
missing count, but nothing here can stop the run. ``brew doctor`` runs
first as a best-effort check and never touches the count.
"""

from __future__ import annotations

import logging

from macprov.core.context import RunContext
from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult
from macprov.core.services.homebrew import brew_doctor

logger = logging.getLogger(__name__)

STEP = "verify"

# Tools whose version query is not ``--version``
VERSION_ARGS: dict[str, list[str]] = {
    "go": ["version"],
}


def tool_version(ctx: RunContext, tool: str) -> str:
    """First line of the tool's version output, or ``unknown``."""
    args = VERSION_ARGS.get(tool, ["--version"])
    result = ctx.run(tool, *args)
    if not result.ok:
        return "unknown"
    return result.first_line or "unknown"


def check_tool(ctx: RunContext, tool: str) -> Receipt:
    if not ctx.which(tool):
        logger.info("%s not found", tool)
        return Receipt.failure(step=STEP, action=f"check:{tool}", error=f"{tool} not found")
    version = tool_version(ctx, tool)
    return Receipt.success(
        step=STEP,
        action=f"check:{tool}",
        output=f"{tool}: {version}",
        metadata={"version": version},
    )


def verify_installation(ctx: RunContext) -> StageResult:
    result = StageResult(name=STEP)
    settings = ctx.config.verify

    if settings.brew_doctor:
        result.add(brew_doctor(ctx, STEP))

    missing = 0
    for tool in settings.tools:
        receipt = result.add(check_tool(ctx, tool))
        if receipt.failed:
            missing += 1
    result.missing_tools = missing

    if missing == 0:
        result.add(Receipt.success(step=STEP, action="summary", output="All verifications passed!"))
    else:
        result.add(
            Receipt.failure(
                step=STEP,
                action="summary",
                error=f"{missing} tools had issues",
                metadata={"missing": missing, "checked": len(settings.tools)},
            )
        )
    return result
