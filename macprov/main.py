"""
macprov — CLI entrypoint.

Usage:
    macprov                 provision this Mac from the current directory
    macprov --verbose       same, with skipped steps and INFO logging
    macprov --json          same, printing the run report as JSON at the end
    python -m macprov.main --help

Exit codes: 0 when the run completes (warnings included), 1 on wrong
platform, missing Xcode Command Line Tools, missing Brewfile, invalid
provision.yml, or interruption.
"""

from __future__ import annotations

import json
import os
import signal
import sys
from pathlib import Path

import click

from macprov import __version__
from macprov.core.observability.logging_config import setup_logging


def _raise_interrupt(signum, frame) -> None:
    raise KeyboardInterrupt


@click.command()
@click.version_option(version=__version__, prog_name="macprov")
@click.option("--verbose", "-v", is_flag=True, help="Show skipped steps and INFO logging.")
@click.option("--quiet", "-q", is_flag=True, help="Only show stage headers and the summary.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the run report as JSON.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to provision.yml (default: auto-detect).",
)
def cli(
    verbose: bool,
    quiet: bool,
    debug: bool,
    as_json: bool,
    config_path: str | None,
) -> None:
    """macprov — provision a macOS workstation.

    Run from the directory holding your Brewfile (and optionally
    zshrc_additions, gitconfig, gitignore_global, macos_defaults.sh).
    """
    from macprov.core.engine.executor import NullReporter
    from macprov.core.use_cases.provision import provision
    from macprov.ui.console import ClickPrompter, ConsoleReporter, log_error

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("MACPROV_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("MACPROV_LOG_FILE"),
        log_file_level=os.environ.get("MACPROV_LOG_FILE_LEVEL"),
    )

    if as_json:
        reporter = NullReporter()
    else:
        reporter = ConsoleReporter(quiet=quiet, verbose=verbose or debug)

    # SIGTERM ends the run the same way Ctrl-C does
    previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        result = provision(
            prompter=ClickPrompter(),
            config_path=Path(config_path) if config_path else None,
            reporter=reporter,
        )
    except KeyboardInterrupt:
        # Interrupted outside the stage loop (config load, ledger write)
        log_error("Provisioning interrupted")
        sys.exit(1)
    finally:
        signal.signal(signal.SIGTERM, previous)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.error:
        log_error(result.error)

    sys.exit(result.exit_code)


if __name__ == "__main__":
    cli()
