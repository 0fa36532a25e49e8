"""
Preflight — the gate every run must pass before touching anything.

Two checks, both fatal:
    1. The host is macOS.
    2. The Xcode Command Line Tools are installed. If not, their
       installer is started and the run stops: that installer is an
       interactive GUI flow, so the user finishes it and re-runs.
"""

from __future__ import annotations

import logging

from macprov.core.context import ProvisionAbort, RunContext
from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult

logger = logging.getLogger(__name__)

STEP = "preflight"


def check_platform(ctx: RunContext) -> Receipt:
    """Abort unless running on macOS."""
    if not ctx.is_macos:
        logger.error("Unsupported platform: %s", ctx.platform_id)
        raise ProvisionAbort(
            "platform",
            "This tool is designed for macOS only",
            hint=f"Detected platform: {ctx.platform_id}",
        )
    return Receipt.success(
        step=STEP,
        action="platform",
        output=f"Running on macOS ({ctx.machine})",
        metadata={"platform": ctx.platform_id, "machine": ctx.machine},
    )


def check_xcode_tools(ctx: RunContext) -> Receipt:
    """Abort (after starting the installer) unless the CLT are present."""
    xcode = ctx.run("xcode-select", "-p")
    if xcode.ok:
        return Receipt.success(
            step=STEP,
            action="xcode-tools",
            output="Xcode Command Line Tools found",
            metadata={"path": xcode.first_line},
        )

    logger.warning("Xcode Command Line Tools not found, starting installer")
    install = ctx.run("xcode-select", "--install", interactive=True)
    if not install.ok:
        logger.warning("xcode-select --install exited with %d", install.returncode)

    raise ProvisionAbort(
        "toolchain",
        "Xcode Command Line Tools not found. Installing...",
        hint="Please complete the Xcode Command Line Tools installation and re-run macprov",
    )


def run_preflight(ctx: RunContext) -> StageResult:
    result = StageResult(name=STEP)
    result.add(check_platform(ctx))
    result.add(check_xcode_tools(ctx))
    return result
