"""
Tests for git configuration — templates, identity prompts and defaults.
"""

from pathlib import Path

from macprov.adapters.mock import MockRunner, ScriptedPrompter
from macprov.core.models.config import GitSettings, ProvisionConfig
from macprov.core.services.git_config import configure_git


def _set_calls(runner: MockRunner) -> list[tuple[str, ...]]:
    """``git config --global <key> <value>`` calls, as (key, value)."""
    return [c.args[3:] for c in runner.calls_to("git", "config", "--global") if len(c.args) == 5]


class TestTemplates:
    def test_templates_copied_when_absent(self, make_ctx, workdir: Path, home: Path):
        (workdir / "gitconfig").write_text("[core]\n  editor = vim\n")
        (workdir / "gitignore_global").write_text(".DS_Store\n")
        configure_git(make_ctx())
        assert (home / ".gitconfig").read_text() == "[core]\n  editor = vim\n"
        assert (home / ".gitignore_global").read_text() == ".DS_Store\n"

    def test_existing_gitconfig_never_replaced(self, make_ctx, workdir: Path, home: Path):
        (workdir / "gitconfig").write_text("[core]\n")
        (home / ".gitconfig").write_text("[user]\n  name = Mine\n")
        result = configure_git(make_ctx())
        assert (home / ".gitconfig").read_text() == "[user]\n  name = Mine\n"
        template = next(r for r in result.receipts if r.action == "template:gitconfig")
        assert template.skipped

    def test_missing_templates_skipped(self, make_ctx):
        result = configure_git(make_ctx())
        templates = [r for r in result.receipts if r.action.startswith("template:")]
        assert len(templates) == 2
        assert all(r.skipped for r in templates)

    def test_non_utf8_template_copied_and_stage_continues(
        self, make_ctx, runner: MockRunner, workdir: Path, home: Path
    ):
        (workdir / "gitconfig").write_bytes(b"[user]\n  name = Jos\xe9\n")
        result = configure_git(make_ctx())
        assert (home / ".gitconfig").read_bytes() == b"[user]\n  name = Jos\xe9\n"
        assert ("init.defaultBranch", "main") in _set_calls(runner)
        assert not any(r.failed for r in result.receipts)


class TestIdentity:
    def test_identity_already_set_means_no_prompts(self, make_ctx, runner: MockRunner):
        runner.set_response(["git", "config", "--global", "user.name"], stdout="Ada\n")
        runner.set_response(["git", "config", "--global", "user.email"], stdout="ada@example.com\n")
        prompter = ScriptedPrompter()
        configure_git(make_ctx(prompter=prompter))
        assert prompter.asked == []
        assert all(key not in ("user.name", "user.email") for key, _ in _set_calls(runner))

    def test_prompts_and_sets_when_unset(self, make_ctx, runner: MockRunner):
        prompter = ScriptedPrompter(answers={"username": "Ada", "email": "ada@example.com"})
        result = configure_git(make_ctx(prompter=prompter))
        assert prompter.asked == ["Enter your Git username", "Enter your Git email"]
        calls = _set_calls(runner)
        assert ("user.name", "Ada") in calls
        assert ("user.email", "ada@example.com") in calls
        assert result.status == "ok"

    def test_empty_answer_is_skipped(self, make_ctx, runner: MockRunner):
        result = configure_git(make_ctx())
        identity = [r for r in result.receipts if r.action.startswith("identity:")]
        assert [r.skipped for r in identity] == [True, True]
        assert all(key != "user.name" for key, _ in _set_calls(runner))

    def test_prompting_disabled(self, make_ctx):
        prompter = ScriptedPrompter(answers={"username": "Ada"})
        config = ProvisionConfig(git=GitSettings(prompt_identity=False))
        configure_git(make_ctx(config, prompter=prompter))
        assert prompter.asked == []


class TestDefaults:
    def test_defaults_applied(self, make_ctx, runner: MockRunner):
        configure_git(make_ctx())
        calls = _set_calls(runner)
        assert ("init.defaultBranch", "main") in calls
        assert ("pull.rebase", "false") in calls
        assert ("core.autocrlf", "input") in calls
        assert ("core.excludesfile", "~/.gitignore_global") in calls

    def test_defaults_reapplied_every_run(self, make_ctx, runner: MockRunner):
        configure_git(make_ctx())
        configure_git(make_ctx())
        calls = _set_calls(runner)
        assert calls.count(("init.defaultBranch", "main")) == 2

    def test_set_failure_is_a_warning(self, make_ctx, runner: MockRunner):
        runner.set_failure(["git", "config", "--global", "pull.rebase", "false"], stderr="locked")
        result = configure_git(make_ctx())
        failed = [r for r in result.receipts if r.failed]
        assert [r.action for r in failed] == ["set:pull.rebase"]
        assert result.status == "partial"

    def test_git_missing(self, make_ctx, runner: MockRunner):
        runner.uninstall("git")
        result = configure_git(make_ctx())
        assert result.status == "failed"
        assert result.receipts[0].error == "git not found on PATH"
        assert not runner.called("git")
