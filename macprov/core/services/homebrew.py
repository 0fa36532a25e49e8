"""
Homebrew — bootstrap the package manager and apply the Brewfile.

Bootstrap:
    brew found      → ``brew update`` (issues are warnings)
    brew not found  → official installer, then on Apple Silicon persist
                      ``brew shellenv`` in ~/.zprofile (once) and hand the
                      exports back as env updates so this run finds brew.

Manifest:
    Brewfile missing → fatal (nothing to install is a config error)
    Brewfile present → ``brew bundle --file=…``; its exit status is
                       recorded, a failure is downgraded to a warning.
"""

from __future__ import annotations

import logging
from pathlib import Path

from macprov.adapters.shell.filesystem import apply_once, contains
from macprov.core.context import ProvisionAbort, RunContext
from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult

logger = logging.getLogger(__name__)

INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
ZPROFILE = "~/.zprofile"


def shellenv_line(prefix: str) -> str:
    """The line ~/.zprofile needs so login shells find brew."""
    return f'eval "$({prefix}/bin/brew shellenv)"'


def shellenv_exports(prefix: str, current_path: str = "") -> dict[str, str]:
    """The variables ``brew shellenv`` exports, as a mapping.

    ``PATH`` gets ``<prefix>/bin`` and ``<prefix>/sbin`` in front unless
    they are already there.
    """
    path_entries = [p for p in current_path.split(":") if p]
    front = [p for p in (f"{prefix}/bin", f"{prefix}/sbin") if p not in path_entries]
    return {
        "HOMEBREW_PREFIX": prefix,
        "HOMEBREW_CELLAR": f"{prefix}/Cellar",
        "HOMEBREW_REPOSITORY": prefix,
        "PATH": ":".join(front + path_entries),
    }


def find_brew(ctx: RunContext) -> str | None:
    """Locate brew on PATH, or at the architecture's install prefix."""
    found = ctx.which("brew")
    if found:
        return found
    candidate = Path(ctx.brew_prefix) / "bin" / "brew"
    if candidate.is_file():
        return str(candidate)
    return None


def _persist_shellenv(ctx: RunContext, result: StageResult) -> None:
    """Apple Silicon: write the zprofile line once and export for this run."""
    if not ctx.is_apple_silicon:
        return

    line = shellenv_line(ctx.brew_prefix)
    result.add(
        apply_once(
            ctx.home_path(ZPROFILE),
            contains(line),
            lambda _target: f"\n{line}\n",
            step=result.name,
            action="zprofile-shellenv",
        )
    )
    result.env_updates.update(shellenv_exports(ctx.brew_prefix, ctx.env.get("PATH", "")))


def bootstrap_homebrew(ctx: RunContext) -> StageResult:
    """Make sure brew is installed and current."""
    result = StageResult(name="bootstrap")
    brew = find_brew(ctx)

    if brew:
        result.add(
            Receipt.success(
                step=result.name,
                action="detect",
                output="Homebrew already installed",
                metadata={"path": brew},
            )
        )
        # Found at the prefix but not on PATH (fresh shell before zprofile)
        if not ctx.which("brew"):
            _persist_shellenv(ctx, result)
            ctx = ctx.with_env(result.env_updates)

        logger.info("Updating Homebrew")
        update = ctx.run("brew", "update", interactive=True)
        if update.ok:
            result.add(Receipt.success(step=result.name, action="update", output="Homebrew updated"))
        else:
            result.add(
                Receipt.failure(
                    step=result.name,
                    action="update",
                    error=f"brew update reported issues (exit {update.returncode})",
                    metadata={"returncode": update.returncode},
                )
            )
        return result

    logger.info("Installing Homebrew from %s", INSTALL_SCRIPT_URL)
    install = ctx.run(
        "/bin/bash",
        "-c",
        f'/bin/bash -c "$(curl -fsSL {INSTALL_SCRIPT_URL})"',
        interactive=True,
    )
    if not install.ok:
        result.add(
            Receipt.failure(
                step=result.name,
                action="install",
                error=f"Homebrew installer failed (exit {install.returncode})",
                metadata={"returncode": install.returncode},
            )
        )
        return result

    result.add(
        Receipt.success(step=result.name, action="install", output="Homebrew installed successfully")
    )
    _persist_shellenv(ctx, result)
    return result


def apply_manifest(ctx: RunContext) -> StageResult:
    """Install everything listed in the Brewfile via ``brew bundle``."""
    result = StageResult(name="manifest")
    manifest = ctx.work_path(ctx.config.manifest)

    if not manifest.is_file():
        logger.error("Manifest not found: %s", manifest)
        raise ProvisionAbort(
            "manifest",
            f"{manifest.name} not found!",
            hint=f"Expected the package manifest at {manifest}",
        )

    bundle = ctx.run("brew", "bundle", f"--file={manifest}", "--verbose", interactive=True)
    if bundle.ok:
        result.add(
            Receipt.success(
                step=result.name,
                action="bundle",
                output="All packages installed successfully",
                metadata={"manifest": str(manifest), "returncode": 0},
            )
        )
    else:
        result.add(
            Receipt.failure(
                step=result.name,
                action="bundle",
                error=f"brew bundle failed (exit {bundle.returncode}); some packages may be missing",
                metadata={"manifest": str(manifest), "returncode": bundle.returncode},
            )
        )
    return result


def brew_doctor(ctx: RunContext, step: str) -> Receipt:
    """Best-effort ``brew doctor``; never counts as a missing tool."""
    if not ctx.which("brew"):
        return Receipt.skip(step=step, action="brew-doctor", reason="Homebrew not on PATH")
    doctor = ctx.run("brew", "doctor")
    if doctor.ok:
        return Receipt.success(step=step, action="brew-doctor", output="Homebrew doctor found no issues")
    return Receipt.failure(
        step=step,
        action="brew-doctor",
        error="Homebrew doctor found issues (this might be normal)",
        metadata={"best_effort": True, "returncode": doctor.returncode},
    )


def brew_cleanup(ctx: RunContext, step: str) -> Receipt:
    if not ctx.which("brew"):
        return Receipt.skip(step=step, action="brew-cleanup", reason="Homebrew not on PATH")
    cleanup = ctx.run("brew", "cleanup")
    if cleanup.ok:
        return Receipt.success(step=step, action="brew-cleanup", output="Cleanup completed")
    return Receipt.failure(
        step=step,
        action="brew-cleanup",
        error=f"brew cleanup failed: {cleanup.describe_failure()}",
    )
