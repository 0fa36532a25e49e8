"""Adapters — bindings to external tools and to the operator.

Public re-exports for convenient access.
"""

from macprov.adapters.base import CommandResult, CommandRunner, Prompter
from macprov.adapters.mock import MockRunner, ScriptedPrompter
from macprov.adapters.shell.command import SubprocessRunner

__all__ = [
    "CommandResult",
    "CommandRunner",
    "MockRunner",
    "Prompter",
    "ScriptedPrompter",
    "SubprocessRunner",
]
