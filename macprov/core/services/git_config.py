"""
Git configuration — templates, identity, and sane global defaults.

Order matters:
    1. Copy gitignore_global / gitconfig templates into $HOME, only where
       no file exists yet (a user's own ~/.gitconfig is never replaced).
    2. Prompt for user.name / user.email only if they are still unset.
    3. Re-apply the fixed defaults every run; setting them twice is harmless.
"""

from __future__ import annotations

import logging

from macprov.adapters.shell.filesystem import apply_once, copy_from, file_exists
from macprov.core.context import RunContext
from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult

logger = logging.getLogger(__name__)

STEP = "git"

IDENTITY_PROMPTS: dict[str, str] = {
    "user.name": "Enter your Git username",
    "user.email": "Enter your Git email",
}


def get_global(ctx: RunContext, key: str) -> str:
    """Current global value of ``key`` ('' when unset)."""
    result = ctx.run("git", "config", "--global", key)
    return result.stdout.strip() if result.ok else ""


def set_global(ctx: RunContext, key: str, value: str) -> Receipt:
    result = ctx.run("git", "config", "--global", key, value)
    if result.ok:
        return Receipt.success(
            step=STEP,
            action=f"set:{key}",
            output=f"git {key} = {value}",
        )
    return Receipt.failure(
        step=STEP,
        action=f"set:{key}",
        error=f"Could not set git {key}: {result.describe_failure()}",
        metadata={"returncode": result.returncode},
    )


def copy_templates(ctx: RunContext, result: StageResult) -> None:
    for template, destination in ctx.config.git.templates.items():
        source = ctx.work_path(template)
        if not source.is_file():
            result.add(
                Receipt.skip(step=STEP, action=f"template:{template}", reason=f"No {template} template")
            )
            continue
        result.add(
            apply_once(
                ctx.home_path(destination),
                file_exists,
                copy_from(source),
                step=STEP,
                action=f"template:{template}",
                mode="write",
            )
        )


def ensure_identity(ctx: RunContext, result: StageResult) -> None:
    for key, question in IDENTITY_PROMPTS.items():
        current = get_global(ctx, key)
        if current:
            result.add(
                Receipt.skip(step=STEP, action=f"identity:{key}", reason=f"git {key} already set")
            )
            continue
        if not ctx.config.git.prompt_identity:
            result.add(
                Receipt.skip(step=STEP, action=f"identity:{key}", reason=f"git {key} unset, prompting disabled")
            )
            continue

        value = ctx.prompter.prompt(question).strip()
        if not value:
            result.add(
                Receipt.skip(step=STEP, action=f"identity:{key}", reason=f"No value entered for git {key}")
            )
            continue
        result.add(set_global(ctx, key, value))


def configure_git(ctx: RunContext) -> StageResult:
    result = StageResult(name=STEP)

    if not ctx.which("git"):
        result.add(Receipt.failure(step=STEP, action="detect", error="git not found on PATH"))
        return result

    copy_templates(ctx, result)
    ensure_identity(ctx, result)

    for key, value in ctx.config.git.defaults.items():
        result.add(set_global(ctx, key, value))

    return result
