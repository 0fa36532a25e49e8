"""
Shell configuration — install zshrc_additions and source it from ~/.zshrc.

The additions file is copied on every run (copying twice gives the same
result). The sourcing stanza goes into ~/.zshrc at most once: any line
mentioning the additions file (or the stanza marker) means it is already
sourced, so edits the user makes around it are never lost.
"""

from __future__ import annotations

import logging
from pathlib import Path

from macprov.adapters.shell.filesystem import apply_once, copy_file
from macprov.core.context import RunContext
from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult

logger = logging.getLogger(__name__)

STEP = "shell"

SOURCE_MARKER = "# >>> macprov: shell additions >>>"
_END_MARKER = "# <<< macprov: shell additions <<<"

BASELINE_ZSHRC = """\
# Basic zsh configuration
autoload -Uz compinit
compinit
"""


def sourcing_stanza(additions_ref: str) -> str:
    """The block that sources the additions file if it exists."""
    return (
        f"\n{SOURCE_MARKER}\n"
        f"if [ -f {additions_ref} ]; then\n"
        f"    source {additions_ref}\n"
        f"fi\n"
        f"{_END_MARKER}\n"
    )


def _stanza_present(additions_ref: str):
    # Any mention of the additions file counts (source, ".", older unmarked stanzas)
    name = Path(additions_ref).name

    def _present(target: Path) -> bool:
        if not target.is_file():
            return False
        text = target.read_text(encoding="utf-8", errors="replace")
        return SOURCE_MARKER in text or name in text

    return _present


def configure_shell(ctx: RunContext) -> StageResult:
    result = StageResult(name=STEP)
    settings = ctx.config.shell

    source = ctx.work_path(settings.additions_source)
    target = ctx.home_path(settings.additions_target)

    if source.is_file():
        result.add(copy_file(source, target, step=STEP, action="copy-additions"))
    else:
        result.add(
            Receipt.skip(
                step=STEP,
                action="copy-additions",
                reason=f"No {source.name} in {ctx.workdir}, nothing to copy",
            )
        )

    additions_ref = settings.additions_target
    stanza = sourcing_stanza(additions_ref)

    def _produce(rc: Path) -> str:
        if rc.exists():
            return stanza
        return BASELINE_ZSHRC + stanza

    result.add(
        apply_once(
            ctx.home_path(settings.rc_file),
            _stanza_present(additions_ref),
            _produce,
            step=STEP,
            action="source-additions",
        )
    )
    return result
