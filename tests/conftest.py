"""
Shared test fixtures: a fake home, a working directory with a Brewfile,
and a RunContext factory wired to MockRunner / ScriptedPrompter.
"""

from pathlib import Path

import pytest

from macprov.adapters.mock import MockRunner, ScriptedPrompter
from macprov.core.context import RunContext
from macprov.core.models.config import ProvisionConfig


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """A provisioning checkout holding only a Brewfile."""
    path = tmp_path / "work"
    path.mkdir()
    (path / "Brewfile").write_text('brew "git"\nbrew "node"\n')
    return path


@pytest.fixture
def runner() -> MockRunner:
    return MockRunner(installed=["brew", "git"])


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def environ(home: Path) -> dict[str, str]:
    return {"HOME": str(home), "USER": "tester", "PATH": "/usr/bin:/bin"}


@pytest.fixture
def make_ctx(environ, workdir, runner, prompter):
    """Build a RunContext; keyword overrides replace the fixture defaults."""

    def _make(
        config: ProvisionConfig | None = None,
        *,
        platform_id: str = "darwin",
        machine: str = "arm64",
        runner=runner,
        prompter=prompter,
        env: dict[str, str] | None = None,
    ) -> RunContext:
        merged = dict(environ)
        merged.update(env or {})
        return RunContext.from_environment(
            config or ProvisionConfig(),
            runner,
            prompter,
            environ=merged,
            workdir=workdir,
            platform_id=platform_id,
            machine=machine,
        )

    return _make
