"""
StageResult — what one provisioning stage hands back to the engine.

Stages never mutate the run context. Their effects on it are returned
here: the receipts of every step, environment variables later stages
must see, and (verification only) the count of missing tools.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from macprov.core.models.action import Receipt


@dataclass
class StageResult:
    """Outcome of a single stage."""

    name: str
    receipts: list[Receipt] = field(default_factory=list)
    env_updates: dict[str, str] = field(default_factory=dict)
    missing_tools: int | None = None

    def add(self, receipt: Receipt) -> Receipt:
        self.receipts.append(receipt)
        return receipt

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def status(self) -> str:
        if not self.receipts:
            return "skipped"
        if self.failed == 0:
            return "ok" if self.succeeded else "skipped"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        data: dict = {
            "name": self.name,
            "status": self.status,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }
        if self.env_updates:
            data["env_updates"] = sorted(self.env_updates)
        if self.missing_tools is not None:
            data["missing_tools"] = self.missing_tools
        return data
