"""
Engine executor — the provisioning state machine.

    Preflight → Bootstrap → ManifestApply → EnvConfig → PrefApply → Verify → Cleanup → Done

Stages run once, strictly forward. Two edges lead to ``aborted``:
a ``ProvisionAbort`` raised by preflight (wrong platform, missing
toolchain) or by manifest application (no Brewfile). Any other
exception inside a stage is logged and downgraded to a failed receipt
so the run still reaches ``done``. ``KeyboardInterrupt`` (SIGTERM is
mapped onto it by the CLI) also ends the run in ``aborted``, with
abort reason ``interrupted``.

The run context is threaded explicitly: each stage gets the current
context and returns a ``StageResult``; its ``env_updates`` produce the
context the next stage sees.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from macprov.core.context import ProvisionAbort, RunContext
from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult
from macprov.core.services.cleanup import run_cleanup
from macprov.core.services.directories import setup_directories
from macprov.core.services.git_config import configure_git
from macprov.core.services.homebrew import apply_manifest, bootstrap_homebrew
from macprov.core.services.preferences import apply_preferences
from macprov.core.services.preflight import run_preflight
from macprov.core.services.shell_config import configure_shell
from macprov.core.services.ssh_setup import setup_ssh
from macprov.core.services.verification import verify_installation

logger = logging.getLogger(__name__)

# Terminal states
DONE = "done"
ABORTED = "aborted"

INTERRUPTED = "interrupted"  # abort reason for SIGINT/SIGTERM


@dataclass(frozen=True)
class Stage:
    """One step of the state machine."""

    name: str
    title: str
    run: Callable[[RunContext], StageResult]
    # Only these stages may end the run with ProvisionAbort
    may_abort: bool = False


STAGES: tuple[Stage, ...] = (
    Stage("preflight", "Checking for Xcode Command Line Tools...", run_preflight, may_abort=True),
    Stage("bootstrap", "Checking Homebrew...", bootstrap_homebrew),
    Stage("manifest", "Installing packages from Brewfile...", apply_manifest, may_abort=True),
    Stage("shell", "Configuring shell...", configure_shell),
    Stage("git", "Configuring Git...", configure_git),
    Stage("ssh", "Setting up SSH...", setup_ssh),
    Stage("directories", "Creating development directories...", setup_directories),
    Stage("preferences", "Setting macOS defaults...", apply_preferences),
    Stage("verify", "Verifying installation...", verify_installation),
    Stage("cleanup", "Cleaning up...", run_cleanup),
)


class Reporter(Protocol):
    """Receives progress events; the CLI prints them."""

    def start(self) -> None: ...

    def stage(self, stage: Stage) -> None: ...

    def receipt(self, receipt: Receipt) -> None: ...

    def finish(self, report: ProvisionReport) -> None: ...


class NullReporter:
    """Reporter that discards everything (library use, tests)."""

    def start(self) -> None:
        pass

    def stage(self, stage: Stage) -> None:
        pass

    def receipt(self, receipt: Receipt) -> None:
        pass

    def finish(self, report: ProvisionReport) -> None:
        pass


@dataclass
class ProvisionReport:
    """Result of a whole provisioning run."""

    operation_id: str = ""
    state: str = DONE
    stages: list[StageResult] = field(default_factory=list)
    abort_reason: str | None = None
    abort_message: str | None = None
    abort_hint: str = ""
    missing_tools: int | None = None
    duration_ms: int = 0

    @property
    def exit_code(self) -> int:
        return 0 if self.state == DONE else 1

    @property
    def preflight_passed(self) -> bool:
        """Whether the run got past the preflight gate."""
        return self.stage("preflight") is not None and self.abort_reason not in (
            "platform",
            "toolchain",
        )

    @property
    def receipts(self) -> list[Receipt]:
        return [r for s in self.stages for r in s.receipts]

    @property
    def warnings(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def status(self) -> str:
        if self.state != DONE:
            return "failed"
        return "ok" if self.warnings == 0 else "partial"

    def stage(self, name: str) -> StageResult | None:
        for s in self.stages:
            if s.name == name:
                return s
        return None

    def to_dict(self) -> dict:
        data: dict = {
            "operation_id": self.operation_id,
            "state": self.state,
            "status": self.status,
            "exit_code": self.exit_code,
            "warnings": self.warnings,
            "missing_tools": self.missing_tools,
            "duration_ms": self.duration_ms,
            "stages": [s.to_dict() for s in self.stages],
        }
        if self.abort_reason:
            data["abort"] = {
                "reason": self.abort_reason,
                "message": self.abort_message,
                "hint": self.abort_hint,
            }
        return data


def _run_stage(stage: Stage, ctx: RunContext) -> StageResult:
    """Run one stage, downgrading unexpected errors to a failed receipt."""
    try:
        return stage.run(ctx)
    except ProvisionAbort as abort:
        if stage.may_abort:
            raise
        logger.warning("Stage %s cannot abort the run, downgrading: %s", stage.name, abort.message)
        error = abort.message
    except Exception as e:
        logger.exception("Stage %s failed unexpectedly", stage.name)
        error = f"{stage.title.rstrip('.')} failed: {e}"

    return StageResult(
        name=stage.name,
        receipts=[Receipt.failure(step=stage.name, action="unexpected-error", error=error)],
    )


def execute_stages(
    ctx: RunContext,
    stages: tuple[Stage, ...] = STAGES,
    reporter: Reporter | None = None,
    operation_id: str | None = None,
) -> ProvisionReport:
    """Drive the state machine to a terminal state.

    Args:
        ctx: Initial run context.
        stages: Stage sequence (tests pass a subset).
        reporter: Progress sink; defaults to ``NullReporter``.
        operation_id: Identifier for the run ledger.

    Returns:
        ProvisionReport. Never raises for stage failures, aborts or
        interruption; those are encoded in ``report.state``.
    """
    reporter = reporter or NullReporter()
    report = ProvisionReport(operation_id=operation_id or generate_operation_id())
    start = time.monotonic()
    reporter.start()

    try:
        for stage in stages:
            logger.info("Stage %s", stage.name)
            reporter.stage(stage)
            try:
                result = _run_stage(stage, ctx)
            except ProvisionAbort as abort:
                report.stages.append(StageResult(name=stage.name))
                report.state = ABORTED
                report.abort_reason = abort.reason
                report.abort_message = abort.message
                report.abort_hint = abort.hint
                logger.warning("Run aborted in %s: %s", stage.name, abort.message)
                break

            report.stages.append(result)
            for receipt in result.receipts:
                reporter.receipt(receipt)

            if result.missing_tools is not None:
                report.missing_tools = result.missing_tools
            ctx = ctx.with_env(result.env_updates)

    except KeyboardInterrupt:
        report.state = ABORTED
        report.abort_reason = INTERRUPTED
        report.abort_message = "Provisioning interrupted"
        logger.warning("Run interrupted by signal")

    report.duration_ms = int((time.monotonic() - start) * 1000)
    reporter.finish(report)
    return report


def generate_operation_id() -> str:
    """Generate a unique run identifier."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"prov-{now}-{short}"
