"""
Receipt model — the outcome contract of every provisioning step.

Services never raise for recoverable problems. Each step they take
(copy a file, set a git key, check a tool) produces a Receipt, and the
engine folds receipts into stage results. Only fatal preflight or
manifest problems escape as exceptions.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of a single provisioning step.

    ``step`` is the stage that produced it (``shell``, ``git`` ...),
    ``action`` identifies the step inside that stage (``copy-additions``,
    ``set:init.defaultBranch`` ...).
    """

    step: str
    action: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the step succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the step failed."""
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def message(self) -> str:
        """The human-readable line for this receipt."""
        if self.failed:
            return self.error or self.output
        return self.output

    @classmethod
    def success(
        cls,
        step: str,
        action: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(step=step, action=action, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        step: str,
        action: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(step=step, action=action, status="failed", error=error, **kwargs)

    @classmethod
    def skip(
        cls,
        step: str,
        action: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt (the step was already applied or not wanted)."""
        return cls(step=step, action=action, status="skipped", output=reason, **kwargs)
