"""
Tests for the run context: host facts, path resolution, env threading.
"""

from pathlib import Path

from macprov.adapters.mock import MockRunner, ScriptedPrompter
from macprov.core.context import RunContext
from macprov.core.models.config import ProvisionConfig


class TestFromEnvironment:
    def test_reads_home_and_user(self, tmp_path: Path):
        ctx = RunContext.from_environment(
            ProvisionConfig(),
            MockRunner(),
            ScriptedPrompter(),
            environ={"HOME": str(tmp_path), "USER": "ada"},
            workdir=tmp_path,
            platform_id="darwin",
            machine="arm64",
        )
        assert ctx.home == tmp_path
        assert ctx.user == "ada"
        assert ctx.workdir == tmp_path.resolve()
        assert ctx.env["USER"] == "ada"

    def test_platform_family(self, make_ctx):
        assert make_ctx(platform_id="darwin").is_macos
        assert make_ctx(platform_id="darwin23").is_macos
        assert not make_ctx(platform_id="linux").is_macos

    def test_brew_prefix_by_architecture(self, make_ctx):
        assert make_ctx(machine="arm64").brew_prefix == "/opt/homebrew"
        assert make_ctx(machine="x86_64").brew_prefix == "/usr/local"


class TestPaths:
    def test_home_path(self, make_ctx, home: Path):
        ctx = make_ctx()
        assert ctx.home_path("~/.zshrc") == home / ".zshrc"
        assert ctx.home_path("~") == home
        assert ctx.home_path("Development") == home / "Development"
        assert ctx.home_path("/etc/zshrc") == Path("/etc/zshrc")

    def test_work_path(self, make_ctx, workdir: Path):
        ctx = make_ctx()
        assert ctx.work_path("Brewfile") == workdir.resolve() / "Brewfile"


class TestEnvThreading:
    def test_with_env_returns_new_context(self, make_ctx):
        ctx = make_ctx()
        updated = ctx.with_env({"SSH_AUTH_SOCK": "/tmp/agent"})
        assert updated.env["SSH_AUTH_SOCK"] == "/tmp/agent"
        assert "SSH_AUTH_SOCK" not in ctx.env

    def test_with_empty_env_is_identity(self, make_ctx):
        ctx = make_ctx()
        assert ctx.with_env({}) is ctx

    def test_run_passes_env_and_cwd(self, make_ctx, runner: MockRunner, workdir: Path):
        ctx = make_ctx().with_env({"HOMEBREW_PREFIX": "/opt/homebrew"})
        ctx.run("brew", "update")
        call = runner.calls_to("brew", "update")[0]
        assert call.env["HOMEBREW_PREFIX"] == "/opt/homebrew"
        assert call.cwd == workdir.resolve()

    def test_which(self, make_ctx):
        ctx = make_ctx()
        assert ctx.which("git") == "/usr/local/bin/git"
        assert ctx.which("terraform") is None
