"""
Subprocess runner — the single place external tools are executed.

Every brew, git, ssh-keygen and defaults invocation goes through
``SubprocessRunner.run``. No shell interpretation: arguments are passed
as a list. Commands that need a shell (the Homebrew installer) say so
explicitly by running ``/bin/bash -c``.
"""

from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from macprov.adapters.base import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

# Exit status shells use for "command not found"
EXIT_NOT_FOUND = 127


class SubprocessRunner(CommandRunner):
    """Run commands with ``subprocess.run``; never raises for failures."""

    def run(
        self,
        args: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        input: str | None = None,
        interactive: bool = False,
    ) -> CommandResult:
        argv = tuple(str(a) for a in args)
        logger.debug("Executing: %s (cwd=%s)", " ".join(argv), cwd)
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                env=dict(env) if env is not None else None,
                cwd=cwd,
                input=input,
                capture_output=not interactive,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            logger.debug("Executable not found: %s", argv[0] if argv else "")
            return CommandResult(
                args=argv,
                returncode=EXIT_NOT_FOUND,
                stderr=f"command not found: {e.filename or argv[0]}",
            )
        except OSError as e:
            return CommandResult(
                args=argv,
                returncode=1,
                stderr=f"Command execution error: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = result.stdout or ""
        stderr = result.stderr or ""

        if result.returncode != 0:
            logger.debug(
                "%s exited with %d: %s",
                argv[0],
                result.returncode,
                stderr.strip()[:200],
            )

        return CommandResult(
            args=argv,
            returncode=result.returncode,
            stdout=stdout,
            stderr=stderr,
            duration_ms=elapsed_ms,
        )
