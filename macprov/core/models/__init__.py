"""
Domain models — Pydantic types for provisioning.

    from macprov.core.models import ProvisionConfig, Receipt, StageResult
"""

from macprov.core.models.action import Receipt
from macprov.core.models.stage import StageResult
from macprov.core.models.config import (
    AuditSettings,
    GitSettings,
    PreferenceSettings,
    ProvisionConfig,
    ShellSettings,
    SshSettings,
    VerifySettings,
)

__all__ = [
    # action.py
    "Receipt",
    # config.py
    "AuditSettings",
    "GitSettings",
    "PreferenceSettings",
    "ProvisionConfig",
    "ShellSettings",
    "SshSettings",
    "VerifySettings",
    # stage.py
    "StageResult",
]
