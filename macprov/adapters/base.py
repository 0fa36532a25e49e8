"""
Adapter base — the contract between provisioning services and the outside world.

Two seams isolate everything environment-dependent:

    CommandRunner — runs an external tool (brew, git, ssh-keygen, defaults)
    Prompter      — asks the operator a question

Services only talk to these interfaces, never to ``subprocess`` or
``input()`` directly, so tests swap in ``MockRunner`` / ``ScriptedPrompter``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class CommandResult:
    """Exit status plus captured output of one external command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = field(default=0, compare=False)

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def first_line(self) -> str:
        """First non-empty line of stdout (falls back to stderr)."""
        for text in (self.stdout, self.stderr):
            for line in text.splitlines():
                if line.strip():
                    return line.strip()
        return ""

    def describe_failure(self) -> str:
        """Short error text for receipts."""
        detail = self.stderr.strip() or self.stdout.strip()
        if detail:
            return detail.splitlines()[-1]
        return f"{self.args[0] if self.args else 'command'} exited with code {self.returncode}"


class CommandRunner(ABC):
    """Run an external command and report how it went.

    Implementations MUST never raise for command failures: a missing
    executable or a non-zero exit are both reported in the result.
    ``KeyboardInterrupt`` is the only exception allowed through.
    """

    @abstractmethod
    def run(
        self,
        args: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        input: str | None = None,
        interactive: bool = False,
    ) -> CommandResult:
        """Run ``args`` and return its exit status and output.

        Args:
            args: Program and arguments (no shell interpretation).
            env: Full environment for the child process.
            cwd: Working directory.
            input: Text piped to stdin.
            interactive: Inherit the terminal instead of capturing output,
                for installers and prompts that talk to the user.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class Prompter(ABC):
    """Ask the operator for input. Blocks until answered."""

    @abstractmethod
    def prompt(self, text: str) -> str:
        """Ask a free-text question."""

    @abstractmethod
    def confirm(self, text: str, default: bool = False) -> bool:
        """Ask a yes/no question."""
