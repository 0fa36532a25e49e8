"""
Tests for macOS preferences and the app restart that follows them.
"""

from pathlib import Path

from macprov.adapters.mock import MockRunner
from macprov.core.models.config import PreferenceSettings, ProvisionConfig
from macprov.core.services.preferences import (
    DEFAULT_PREFERENCES,
    Preference,
    apply_preferences,
    restart_apps,
)

# ── Preference entries ───────────────────────────────────────────────


class TestPreference:
    def test_command(self):
        pref = Preference("com.apple.dock", "autohide", "bool", "true")
        assert pref.command("/Users/ada") == [
            "defaults", "write", "com.apple.dock", "autohide", "-bool", "true",
        ]

    def test_current_host(self):
        pref = Preference("NSGlobalDomain", "com.apple.mouse.tapBehavior", "int", "1", current_host=True)
        assert pref.command("/Users/ada")[:3] == ["defaults", "-currentHost", "write"]

    def test_home_expansion(self):
        pref = Preference("com.apple.finder", "NewWindowTargetPath", "string", "file://{home}/")
        assert pref.command("/Users/ada")[-1] == "file:///Users/ada/"

    def test_default_list_is_well_formed(self):
        assert len(DEFAULT_PREFERENCES) > 50
        assert {p.type for p in DEFAULT_PREFERENCES} <= {"bool", "int", "float", "string"}


# ── apply_preferences ────────────────────────────────────────────────


class TestApplyPreferences:
    def test_writes_every_entry(self, make_ctx, runner: MockRunner, home: Path):
        result = apply_preferences(make_ctx())
        writes = [c for c in runner.call_log if c.args[0] == "defaults"]
        assert len(writes) == len(DEFAULT_PREFERENCES) + 1
        assert (home / "Desktop" / "Screenshots").is_dir()
        location = runner.calls_to("defaults", "write", "com.apple.screencapture", "location")
        assert location[0].args[-1] == str(home / "Desktop" / "Screenshots")
        summary = next(r for r in result.receipts if r.action == "defaults")
        assert summary.ok
        assert summary.metadata["applied"] == len(DEFAULT_PREFERENCES) + 1

    def test_closes_system_settings_first(self, make_ctx, runner: MockRunner):
        apply_preferences(make_ctx())
        assert runner.call_log[0].args[0] == "osascript"

    def test_failed_writes_are_counted(self, make_ctx, runner: MockRunner):
        runner.set_failure(["defaults", "write", "com.apple.dock"])
        result = apply_preferences(make_ctx())
        dock = sum(1 for p in DEFAULT_PREFERENCES if p.domain == "com.apple.dock" and not p.current_host)
        summary = next(r for r in result.receipts if r.action == "defaults")
        assert summary.failed
        assert summary.error.startswith(f"{dock} of ")
        assert len(summary.metadata["failed"]) == dock

    def test_disabled(self, make_ctx, runner: MockRunner):
        config = ProvisionConfig(preferences=PreferenceSettings(enabled=False))
        result = apply_preferences(make_ctx(config))
        assert result.status == "skipped"
        assert runner.call_count == 0

    def test_runs_script_when_present(self, make_ctx, runner: MockRunner, workdir: Path):
        (workdir / "macos_defaults.sh").write_text("#!/bin/bash\n")
        result = apply_preferences(make_ctx())
        call = runner.calls_to("bash")[0]
        assert call.args[1].endswith("macos_defaults.sh")
        assert call.interactive
        assert result.receipts[-1].action == "script"

    def test_script_failure_is_a_warning(self, make_ctx, runner: MockRunner, workdir: Path):
        (workdir / "macos_defaults.sh").write_text("exit 1\n")
        runner.set_failure(["bash"], returncode=1)
        result = apply_preferences(make_ctx())
        assert result.receipts[-1].failed
        assert result.status == "partial"

    def test_no_script_no_bash(self, make_ctx, runner: MockRunner):
        apply_preferences(make_ctx())
        assert not runner.called("bash")


# ── Restart ──────────────────────────────────────────────────────


class TestRestartApps:
    def test_apps_not_running_is_fine(self, make_ctx, runner: MockRunner):
        runner.set_failure(["killall"], stderr="No matching processes")
        receipt = restart_apps(make_ctx(), "cleanup")
        assert receipt.ok
        assert receipt.metadata["restarted"] == []

    def test_restarts_configured_apps(self, make_ctx, runner: MockRunner):
        receipt = restart_apps(make_ctx(), "cleanup")
        assert [c.args for c in runner.calls_to("killall")] == [("killall", "Finder"), ("killall", "Dock")]
        assert receipt.output == "Restarted Finder, Dock"
