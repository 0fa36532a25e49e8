"""
Provision use case — the full vertical slice of one run.

Loads configuration, builds the run context, drives the state machine
and records the outcome in the run ledger. The CLI is a thin wrapper
around ``provision``; tests call it directly with fakes.
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from macprov.adapters.base import CommandRunner, Prompter
from macprov.adapters.shell.command import SubprocessRunner
from macprov.core.config.loader import ConfigError, load_config
from macprov.core.context import RunContext
from macprov.core.engine.executor import STAGES, ProvisionReport, Reporter, Stage, execute_stages
from macprov.core.persistence.audit import AuditEntry, AuditWriter

logger = logging.getLogger(__name__)


@dataclass
class ProvisionResult:
    """Result of a provisioning run."""

    report: ProvisionReport | None = None
    config_path: Path | None = None
    audit_path: Path | None = None
    error: str | None = None

    @property
    def exit_code(self) -> int:
        if self.error or self.report is None:
            return 1
        return self.report.exit_code

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        data: dict = {
            "config_path": str(self.config_path) if self.config_path else None,
            "audit_path": str(self.audit_path) if self.audit_path else None,
        }
        if self.report:
            data["report"] = self.report.to_dict()
        return data


def provision(
    prompter: Prompter,
    config_path: Path | None = None,
    workdir: Path | None = None,
    runner: CommandRunner | None = None,
    reporter: Reporter | None = None,
    environ: Mapping[str, str] | None = None,
    platform_id: str | None = None,
    machine: str | None = None,
    stages: tuple[Stage, ...] = STAGES,
) -> ProvisionResult:
    """Provision this machine.

    Args:
        prompter: Answers interactive questions (git identity, ssh key).
        config_path: Explicit provision.yml; searched from ``workdir`` if None.
        workdir: Directory holding Brewfile and dotfile templates (default: cwd).
        runner: Command runner; ``SubprocessRunner`` if None.
        reporter: Progress sink for the CLI.
        environ: Process environment override (tests).
        platform_id: ``sys.platform`` override (tests).
        machine: ``platform.machine()`` override (tests).
        stages: Stage sequence override (tests).

    Returns:
        ProvisionResult; ``error`` is set only for configuration errors.
    """
    result = ProvisionResult(config_path=config_path)
    workdir = (workdir or Path.cwd()).resolve()

    try:
        config = load_config(config_path, start_dir=workdir)
    except ConfigError as e:
        result.error = str(e)
        return result

    ctx = RunContext.from_environment(
        config,
        runner or SubprocessRunner(),
        prompter,
        environ=environ,
        workdir=workdir,
        platform_id=platform_id,
        machine=machine,
    )

    report = execute_stages(ctx, stages=stages, reporter=reporter)
    result.report = report

    # Nothing is written anywhere until the machine passed preflight
    if config.audit.enabled and report.preflight_passed:
        writer = AuditWriter(ctx.work_path(config.audit.path))
        entry = AuditEntry.from_report(
            report,
            host=socket.gethostname(),
            user=ctx.user,
            context={"workdir": str(ctx.workdir), "machine": ctx.machine},
        )
        if writer.write(entry):
            result.audit_path = writer.path

    return result
