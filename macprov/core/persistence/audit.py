"""
Run ledger — append-only record of provisioning runs.

Each run that gets past preflight appends one JSON line to
``.state/audit.ndjson`` in the working directory: when it ran, how it
ended, each stage's status and the missing-tool count. Entries are
never rewritten.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from macprov.core.engine.executor import ProvisionReport

logger = logging.getLogger(__name__)


class AuditEntry(BaseModel):
    """A single ledger entry."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""

    host: str = ""
    user: str = ""

    state: str = ""                # done, aborted
    status: str = ""               # ok, partial, failed
    stages: dict[str, str] = Field(default_factory=dict)
    warnings: int = 0
    missing_tools: int | None = None
    duration_ms: int = 0

    errors: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_report(cls, report: ProvisionReport, **kwargs: Any) -> AuditEntry:
        errors = [r.message for r in report.receipts if r.failed]
        if report.abort_message:
            errors.append(report.abort_message)
        return cls(
            operation_id=report.operation_id,
            state=report.state,
            status=report.status,
            stages={s.name: s.status for s in report.stages},
            warnings=report.warnings,
            missing_tools=report.missing_tools,
            duration_ms=report.duration_ms,
            errors=errors,
            **kwargs,
        )


class AuditWriter:
    """Append-only ledger writer."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> bool:
        """Append an entry. A ledger failure is logged, never raised."""
        line = json.dumps(entry.model_dump(mode="json"), ensure_ascii=False) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            logger.error("Failed to write audit entry: %s", e)
            return False
        logger.debug("Audit entry written: %s", entry.operation_id)
        return True
