"""
Run context — everything a provisioning stage is allowed to see.

There is no ambient state. The host facts (platform, architecture,
home, working directory), the environment handed to child processes,
the command runner, the prompter and the loaded configuration travel
together in one ``RunContext`` value that the engine threads through
every stage.

Stages never mutate it. Environment changes (Homebrew's PATH on Apple
Silicon, an ssh-agent socket) come back as ``StageResult.env_updates``
and the engine derives the next context with ``with_env``.
"""

from __future__ import annotations

import dataclasses
import os
import platform
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from macprov.adapters.base import CommandResult, CommandRunner, Prompter
from macprov.core.models.config import ProvisionConfig

SUPPORTED_PLATFORM = "darwin"

# Homebrew install prefixes per architecture
BREW_PREFIX_ARM64 = "/opt/homebrew"
BREW_PREFIX_X86_64 = "/usr/local"


class ProvisionAbort(Exception):
    """A fatal condition: the run stops with a non-zero exit.

    ``reason`` is a stable code (``platform``, ``toolchain``, ``manifest``)
    so callers can tell the fatal cases apart without parsing messages.
    """

    def __init__(self, reason: str, message: str, hint: str = ""):
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.hint = hint


@dataclass(frozen=True)
class RunContext:
    """Immutable view of one provisioning run."""

    config: ProvisionConfig
    runner: CommandRunner
    prompter: Prompter
    home: Path
    workdir: Path
    platform_id: str
    machine: str
    user: str = ""
    env: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_environment(
        cls,
        config: ProvisionConfig,
        runner: CommandRunner,
        prompter: Prompter,
        *,
        environ: Mapping[str, str] | None = None,
        workdir: Path | None = None,
        platform_id: str | None = None,
        machine: str | None = None,
    ) -> RunContext:
        """Build the context from the current process (or explicit overrides)."""
        env = dict(os.environ if environ is None else environ)
        home = Path(env["HOME"]) if env.get("HOME") else Path.home()
        return cls(
            config=config,
            runner=runner,
            prompter=prompter,
            home=home,
            workdir=(workdir or Path.cwd()).resolve(),
            platform_id=platform_id if platform_id is not None else sys.platform,
            machine=machine if machine is not None else platform.machine(),
            user=env.get("USER", ""),
            env=env,
        )

    # ── Derived facts ───────────────────────────────────────────

    @property
    def is_macos(self) -> bool:
        return self.platform_id.startswith(SUPPORTED_PLATFORM)

    @property
    def is_apple_silicon(self) -> bool:
        return self.machine == "arm64"

    @property
    def brew_prefix(self) -> str:
        return BREW_PREFIX_ARM64 if self.is_apple_silicon else BREW_PREFIX_X86_64

    def home_path(self, raw: str) -> Path:
        """Resolve a ``~/``-style config path against this run's home."""
        if raw == "~":
            return self.home
        if raw.startswith("~/"):
            return self.home / raw[2:]
        path = Path(raw)
        return path if path.is_absolute() else self.home / path

    def work_path(self, raw: str) -> Path:
        """Resolve a config path relative to the working directory."""
        path = Path(raw)
        return path if path.is_absolute() else self.workdir / path

    # ── Environment threading ───────────────────────────────────

    def with_env(self, updates: Mapping[str, str]) -> RunContext:
        """Return a new context whose child-process environment includes ``updates``."""
        if not updates:
            return self
        merged = dict(self.env)
        merged.update(updates)
        return dataclasses.replace(self, env=merged)

    # ── External commands ───────────────────────────────────────

    def run(
        self,
        *args: str,
        input: str | None = None,
        interactive: bool = False,
    ) -> CommandResult:
        """Run an external command with this context's environment."""
        return self.runner.run(
            args,
            env=self.env,
            cwd=self.workdir,
            input=input,
            interactive=interactive,
        )

    def which(self, tool: str) -> str | None:
        """Locate ``tool`` on this context's PATH, or None."""
        result = self.run("which", tool)
        if not result.ok:
            return None
        return result.first_line or None
