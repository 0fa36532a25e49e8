"""
Tests for preflight — platform gate and Xcode Command Line Tools check.
"""

import pytest

from macprov.adapters.mock import MockRunner
from macprov.core.context import ProvisionAbort
from macprov.core.services.preflight import check_platform, check_xcode_tools, run_preflight


class TestCheckPlatform:
    def test_macos_passes(self, make_ctx):
        receipt = check_platform(make_ctx())
        assert receipt.ok
        assert receipt.metadata["machine"] == "arm64"

    def test_linux_aborts(self, make_ctx, runner: MockRunner):
        with pytest.raises(ProvisionAbort) as exc:
            check_platform(make_ctx(platform_id="linux"))
        assert exc.value.reason == "platform"
        assert exc.value.message == "This tool is designed for macOS only"
        assert runner.call_count == 0


class TestCheckXcodeTools:
    def test_present(self, make_ctx, runner: MockRunner):
        runner.set_response(["xcode-select", "-p"], stdout="/Library/Developer/CommandLineTools\n")
        receipt = check_xcode_tools(make_ctx())
        assert receipt.ok
        assert receipt.metadata["path"] == "/Library/Developer/CommandLineTools"
        assert not runner.called("xcode-select", "--install")

    def test_missing_starts_installer_and_aborts(self, make_ctx, runner: MockRunner):
        runner.set_failure(["xcode-select", "-p"], returncode=2)
        with pytest.raises(ProvisionAbort) as exc:
            check_xcode_tools(make_ctx())
        assert exc.value.reason == "toolchain"
        assert "re-run" in exc.value.hint
        install = runner.calls_to("xcode-select", "--install")
        assert len(install) == 1
        assert install[0].interactive

    def test_installer_failure_still_aborts(self, make_ctx, runner: MockRunner):
        runner.set_failure(["xcode-select", "-p"], returncode=2)
        runner.set_failure(["xcode-select", "--install"], returncode=1)
        with pytest.raises(ProvisionAbort):
            check_xcode_tools(make_ctx())


class TestRunPreflight:
    def test_both_receipts(self, make_ctx):
        result = run_preflight(make_ctx())
        assert result.name == "preflight"
        assert [r.action for r in result.receipts] == ["platform", "xcode-tools"]
        assert result.status == "ok"

    def test_platform_checked_before_toolchain(self, make_ctx, runner: MockRunner):
        with pytest.raises(ProvisionAbort):
            run_preflight(make_ctx(platform_id="win32"))
        assert not runner.called("xcode-select")
