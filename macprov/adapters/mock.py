"""
Mock adapters — test doubles for the command runner and the prompter.

``MockRunner`` never executes anything. It answers ``which <tool>`` from
a set of "installed" tools, returns canned results for configured
command prefixes, and succeeds with empty output otherwise. Every call
is logged so tests can assert what would have run.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from macprov.adapters.base import CommandResult, CommandRunner, Prompter


@dataclass
class MockCall:
    """One recorded ``run`` invocation."""

    args: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict)
    cwd: Path | None = None
    input: str | None = None
    interactive: bool = False


class MockRunner(CommandRunner):
    """Universal command double.

    Responses are matched by the longest configured argument prefix, so
    ``set_response(["git", "config", "--global", "user.name"], ...)``
    wins over ``set_response(["git"], ...)``.
    """

    def __init__(self, installed: Iterable[str] = (), default_stdout: str = ""):
        self._installed: set[str] = set(installed)
        self._default_stdout = default_stdout
        self._responses: dict[tuple[str, ...], CommandResult | BaseException] = {}
        self._call_log: list[MockCall] = []

    # ── Configuration ───────────────────────────────────────────

    def install(self, *tools: str) -> None:
        """Make ``which`` find these tools."""
        self._installed.update(tools)

    def uninstall(self, *tools: str) -> None:
        self._installed.difference_update(tools)

    def set_response(
        self,
        prefix: Sequence[str],
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Set a canned result for commands starting with ``prefix``."""
        key = tuple(prefix)
        self._responses[key] = CommandResult(
            args=key, returncode=returncode, stdout=stdout, stderr=stderr
        )

    def set_failure(
        self,
        prefix: Sequence[str],
        returncode: int = 1,
        stderr: str = "Mock failure",
    ) -> None:
        """Configure commands starting with ``prefix`` to fail."""
        self.set_response(prefix, returncode=returncode, stderr=stderr)

    def set_raise(self, prefix: Sequence[str], exc: BaseException) -> None:
        """Raise ``exc`` when a command starting with ``prefix`` runs."""
        self._responses[tuple(prefix)] = exc

    # ── Inspection ──────────────────────────────────────────────

    @property
    def call_log(self) -> list[MockCall]:
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls_to(self, *prefix: str) -> list[MockCall]:
        """All recorded calls whose args start with ``prefix``."""
        n = len(prefix)
        return [c for c in self._call_log if c.args[:n] == prefix]

    def called(self, *prefix: str) -> bool:
        return bool(self.calls_to(*prefix))

    # ── CommandRunner ───────────────────────────────────────────

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
        self._call_log.append(
            MockCall(
                args=argv,
                env=dict(env or {}),
                cwd=cwd,
                input=input,
                interactive=interactive,
            )
        )

        response = self._match(argv)
        if isinstance(response, BaseException):
            raise response
        if response is not None:
            return CommandResult(
                args=argv,
                returncode=response.returncode,
                stdout=response.stdout,
                stderr=response.stderr,
            )

        if argv and argv[0] == "which" and len(argv) > 1:
            tool = argv[1]
            if tool in self._installed:
                return CommandResult(args=argv, returncode=0, stdout=f"/usr/local/bin/{tool}\n")
            return CommandResult(args=argv, returncode=1)

        return CommandResult(args=argv, returncode=0, stdout=self._default_stdout)

    def _match(self, argv: tuple[str, ...]) -> CommandResult | BaseException | None:
        best: tuple[str, ...] | None = None
        for prefix in self._responses:
            if argv[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        return self._responses[best] if best is not None else None


class ScriptedPrompter(Prompter):
    """Prompter that answers from scripted replies and records the questions.

    Unscripted questions get ``""`` / the confirm default.
    """

    def __init__(
        self,
        answers: Mapping[str, str] | None = None,
        confirmations: Mapping[str, bool] | None = None,
    ):
        self._answers = dict(answers or {})
        self._confirmations = dict(confirmations or {})
        self.asked: list[str] = []

    def _lookup(self, table: Mapping, text: str):
        for key, value in table.items():
            if key in text:
                return value
        return None

    def prompt(self, text: str) -> str:
        self.asked.append(text)
        answer = self._lookup(self._answers, text)
        return answer if answer is not None else ""

    def confirm(self, text: str, default: bool = False) -> bool:
        self.asked.append(text)
        answer = self._lookup(self._confirmations, text)
        return default if answer is None else answer
