"""
Idempotent file mutations — the primitive behind every dotfile write.

``apply_once`` takes a target path, a predicate that detects whether the
mutation is already there, and a producer for the content to write. It
mutates the file only when the predicate is false, so re-running a
provisioning step never duplicates a block or clobbers a file the user
has edited since the first run.

Used for:
    - the sourcing stanza in ~/.zshrc          (append if marker absent)
    - the brew shellenv line in ~/.zprofile    (append if marker absent)
    - git templates copied into $HOME          (write if file absent)
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Literal

from macprov.core.models.action import Receipt

logger = logging.getLogger(__name__)

Predicate = Callable[[Path], bool]
Producer = Callable[[Path], str | bytes]


def file_exists(target: Path) -> bool:
    """Predicate: the target is already present."""
    return target.exists()


def contains(marker: str) -> Predicate:
    """Predicate factory: the target exists and contains ``marker``."""

    def _contains(target: Path) -> bool:
        if not target.is_file():
            return False
        return marker in target.read_text(encoding="utf-8", errors="replace")

    return _contains


def copy_from(source: Path) -> Producer:
    """Producer factory: the raw bytes of ``source``, copied as-is."""

    def _copy(_target: Path) -> bytes:
        return source.read_bytes()

    return _copy


def apply_once(
    target: Path,
    is_applied: Predicate,
    produce: Producer,
    *,
    step: str,
    action: str,
    mode: Literal["append", "write"] = "append",
) -> Receipt:
    """Apply a file mutation unless it is already in place.

    Args:
        target: File to mutate.
        is_applied: Returns True when the mutation is already present.
        produce: Returns the text or bytes to append/write. Receives the
            target so it can differ for a fresh file versus an existing one.
        step: Receipt step name.
        action: Receipt action name.
        mode: ``append`` adds to the end (creating the file if needed),
            ``write`` replaces the whole file.

    Returns:
        ``skipped`` when already applied, ``ok`` when written,
        ``failed`` on an OS error.
    """
    try:
        if is_applied(target):
            logger.debug("%s already applied to %s", action, target)
            return Receipt.skip(
                step=step,
                action=action,
                reason=f"{target} already up to date",
                metadata={"path": str(target), "changed": False},
            )

        existed = target.exists()
        content = produce(target)
        target.parent.mkdir(parents=True, exist_ok=True)

        if isinstance(content, str):
            content = content.encode("utf-8")
        with target.open("ab" if mode == "append" else "wb") as f:
            f.write(content)

    except OSError as e:
        logger.warning("Could not update %s: %s", target, e)
        return Receipt.failure(
            step=step,
            action=action,
            error=f"Could not update {target}: {e}",
            metadata={"path": str(target)},
        )

    verb = "Updated" if existed else "Created"
    logger.info("%s %s (%s)", verb, target, action)
    return Receipt.success(
        step=step,
        action=action,
        output=f"{verb} {target}",
        metadata={"path": str(target), "changed": True, "created": not existed},
    )


def copy_file(source: Path, target: Path, *, step: str, action: str) -> Receipt:
    """Copy ``source`` over ``target`` unconditionally (copy-idempotent)."""
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
    except OSError as e:
        return Receipt.failure(
            step=step,
            action=action,
            error=f"Could not copy {source.name} to {target}: {e}",
        )
    return Receipt.success(
        step=step,
        action=action,
        output=f"Copied {source.name} to {target}",
        metadata={"path": str(target)},
    )


def ensure_directory(target: Path, *, step: str, action: str) -> Receipt:
    """``mkdir -p`` with a receipt."""
    if target.is_dir():
        return Receipt.skip(step=step, action=action, reason=f"{target} exists")
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return Receipt.failure(
            step=step,
            action=action,
            error=f"Could not create {target}: {e}",
        )
    return Receipt.success(
        step=step,
        action=action,
        output=f"Created {target}",
        metadata={"path": str(target)},
    )
