"""
Console UI — progress lines and prompts for an interactive run.

    🚀 stage header      ✅ ok      ℹ️  skipped      ⚠️  failed (non-fatal)      ❌ fatal
"""

from __future__ import annotations

import click

from macprov.adapters.base import Prompter
from macprov.core.engine.executor import DONE, INTERRUPTED, ProvisionReport, Stage
from macprov.core.models.action import Receipt


class ClickPrompter(Prompter):
    """Prompts on the terminal via click.

    click turns Ctrl-C (and SIGTERM, which the CLI maps onto it) at a
    prompt into ``click.exceptions.Abort``; it is raised again as
    ``KeyboardInterrupt`` so the engine ends the run as interrupted.
    """

    def prompt(self, text: str) -> str:
        try:
            return click.prompt(text, default="", show_default=False)
        except click.exceptions.Abort:
            raise KeyboardInterrupt from None

    def confirm(self, text: str, default: bool = False) -> bool:
        try:
            return click.confirm(text, default=default)
        except click.exceptions.Abort:
            raise KeyboardInterrupt from None


def log_step(msg: str) -> None:
    click.secho(f"🚀 {msg}", fg="magenta")


def log_success(msg: str) -> None:
    click.secho(f"✅ {msg}", fg="green")


def log_info(msg: str) -> None:
    click.secho(f"ℹ️  {msg}", fg="blue")


def log_warning(msg: str) -> None:
    click.secho(f"⚠️  {msg}", fg="yellow")


def log_error(msg: str) -> None:
    click.secho(f"❌ {msg}", fg="red", err=True)


class ConsoleReporter:
    """Prints engine events as they happen.

    ``quiet`` hides per-step lines; stage headers, aborts and the final
    summary are always shown.
    """

    def __init__(self, quiet: bool = False, verbose: bool = False):
        self.quiet = quiet
        self.verbose = verbose

    def start(self) -> None:
        log_step("Starting Mac provisioning...")

    def stage(self, stage: Stage) -> None:
        log_step(stage.title)

    def receipt(self, receipt: Receipt) -> None:
        if self.quiet:
            return
        if receipt.ok:
            log_success(receipt.message)
        elif receipt.failed:
            log_warning(receipt.message)
        elif self.verbose:
            log_info(receipt.message)

    def finish(self, report: ProvisionReport) -> None:
        if report.state == DONE:
            if report.warnings:
                log_warning(f"Finished with {report.warnings} warning(s)")
            log_success("🎉 Provisioning complete!")
            log_info("Please restart your terminal or run 'exec zsh' to apply shell changes")
            return

        if report.abort_reason == INTERRUPTED:
            log_error("Provisioning interrupted")
            return

        log_error(report.abort_message or "Provisioning aborted")
        if report.abort_hint:
            log_info(report.abort_hint)
