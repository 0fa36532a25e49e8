"""
SSH setup — generate a key pair once, on request.

If any conventional private key already exists this is a no-op that
reports success: no prompt, no new files. Otherwise, after confirmation,
an unencrypted ed25519 key is generated, added to the agent (starting
one if none is reachable) and its public half put on the clipboard.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from macprov.core.context import RunContext
from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult

logger = logging.getLogger(__name__)

STEP = "ssh"

_AGENT_VAR = re.compile(r"(SSH_AUTH_SOCK|SSH_AGENT_PID)=([^;\s]+);")


def parse_agent_env(output: str) -> dict[str, str]:
    """Extract the variables from ``ssh-agent -s`` output."""
    return {m.group(1): m.group(2) for m in _AGENT_VAR.finditer(output)}


def existing_keys(ctx: RunContext) -> list[Path]:
    return [p for p in (ctx.home_path(k) for k in ctx.config.ssh.existing_keys) if p.exists()]


def setup_ssh(ctx: RunContext) -> StageResult:
    result = StageResult(name=STEP)
    settings = ctx.config.ssh

    found = existing_keys(ctx)
    if found:
        result.add(
            Receipt.success(
                step=STEP,
                action="detect",
                output="SSH key already exists",
                metadata={"keys": [str(p) for p in found]},
            )
        )
        return result

    if not ctx.prompter.confirm("Generate SSH key?", default=False):
        result.add(Receipt.skip(step=STEP, action="generate", reason="SSH key generation declined"))
        return result

    email = ctx.prompter.prompt("Enter email for SSH key").strip()
    key = ctx.home_path(settings.key_path)
    public_key = key.with_name(key.name + ".pub")

    try:
        key.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as e:
        result.add(Receipt.failure(step=STEP, action="generate", error=f"Could not create {key.parent}: {e}"))
        return result

    keygen = ctx.run("ssh-keygen", "-t", settings.key_type, "-C", email, "-f", str(key), "-N", "")
    if not keygen.ok:
        result.add(
            Receipt.failure(
                step=STEP,
                action="generate",
                error=f"ssh-keygen failed: {keygen.describe_failure()}",
                metadata={"returncode": keygen.returncode},
            )
        )
        return result
    result.add(Receipt.success(step=STEP, action="generate", output=f"SSH key generated at {key}"))

    if not ctx.env.get("SSH_AUTH_SOCK"):
        agent = ctx.run("ssh-agent", "-s")
        if agent.ok:
            result.env_updates.update(parse_agent_env(agent.stdout))
        else:
            logger.warning("ssh-agent could not be started: %s", agent.describe_failure())

    add = ctx.with_env(result.env_updates).run("ssh-add", str(key))
    if add.ok:
        result.add(Receipt.success(step=STEP, action="agent", output="Key added to ssh-agent"))
    else:
        result.add(
            Receipt.failure(step=STEP, action="agent", error=f"ssh-add failed: {add.describe_failure()}")
        )

    if settings.copy_to_clipboard:
        result.add(_copy_public_key(ctx, public_key))

    return result


def _copy_public_key(ctx: RunContext, public_key: Path) -> Receipt:
    try:
        text = public_key.read_text(encoding="utf-8")
    except OSError as e:
        return Receipt.failure(step=STEP, action="clipboard", error=f"Could not read {public_key}: {e}")

    copy = ctx.run("pbcopy", input=text)
    if not copy.ok:
        return Receipt.failure(
            step=STEP,
            action="clipboard",
            error=f"pbcopy failed: {copy.describe_failure()}",
        )
    return Receipt.success(
        step=STEP,
        action="clipboard",
        output="Public key copied to clipboard. Add this key to your GitHub/GitLab account",
    )
