"""
Provisioning configuration — loaded from an optional provision.yml.

Every field has a default matching the stock layout of a provisioning
checkout (Brewfile, zshrc_additions, gitconfig templates next to it),
so a missing provision.yml is the common case, not an error.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ShellSettings(BaseModel):
    """Where the shell additions come from and where they are sourced."""

    additions_source: str = "zshrc_additions"      # relative to the working dir
    additions_target: str = "~/.zshrc_additions"
    rc_file: str = "~/.zshrc"


class GitSettings(BaseModel):
    """Git templates, identity prompts and the defaults applied every run."""

    # template file (working dir) → destination (home)
    templates: dict[str, str] = Field(
        default_factory=lambda: {
            "gitignore_global": "~/.gitignore_global",
            "gitconfig": "~/.gitconfig",
        }
    )
    prompt_identity: bool = True
    defaults: dict[str, str] = Field(
        default_factory=lambda: {
            "init.defaultBranch": "main",
            "pull.rebase": "false",
            "core.autocrlf": "input",
            "core.excludesfile": "~/.gitignore_global",
        }
    )


class SshSettings(BaseModel):
    """SSH key generation settings."""

    key_type: str = "ed25519"
    # Any of these existing means "a key is already set up"
    existing_keys: list[str] = Field(
        default_factory=lambda: ["~/.ssh/id_ed25519", "~/.ssh/id_rsa"]
    )
    copy_to_clipboard: bool = True

    @property
    def key_path(self) -> str:
        return f"~/.ssh/id_{self.key_type}"


class PreferenceSettings(BaseModel):
    """macOS `defaults` application."""

    enabled: bool = True
    script: str = "macos_defaults.sh"             # optional, relative to the working dir
    screenshots_dir: str = "~/Desktop/Screenshots"
    restart_apps: list[str] = Field(default_factory=lambda: ["Finder", "Dock"])


class VerifySettings(BaseModel):
    """Post-install verification checks."""

    tools: list[str] = Field(
        default_factory=lambda: ["git", "node", "python3", "go", "terraform"]
    )
    brew_doctor: bool = True


class AuditSettings(BaseModel):
    enabled: bool = True
    path: str = ".state/audit.ndjson"             # relative to the working dir


class ProvisionConfig(BaseModel):
    """Root configuration for a provisioning run."""

    manifest: str = "Brewfile"
    shell: ShellSettings = Field(default_factory=ShellSettings)
    git: GitSettings = Field(default_factory=GitSettings)
    ssh: SshSettings = Field(default_factory=SshSettings)
    directories: list[str] = Field(
        default_factory=lambda: [
            "~/Development",
            "~/Development/personal",
            "~/Development/work",
            "~/Development/opensource",
        ]
    )
    preferences: PreferenceSettings = Field(default_factory=PreferenceSettings)
    verify: VerifySettings = Field(default_factory=VerifySettings)
    audit: AuditSettings = Field(default_factory=AuditSettings)
