"""
Tests for configuration loading — provision.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from macprov.core.config.loader import ConfigError, find_config_file, load_config
from macprov.core.models.config import ProvisionConfig


@pytest.fixture
def custom_yml(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        manifest: Brewfile.work
        shell:
          additions_source: dotfiles/zshrc_additions
        git:
          prompt_identity: false
          defaults:
            init.defaultBranch: trunk
        directories:
          - ~/Code
        verify:
          tools: [git, kubectl]
          brew_doctor: false
        preferences:
          enabled: false
    """)
    path = tmp_path / "provision.yml"
    path.write_text(content)
    return path


class TestDefaults:
    def test_defaults_match_stock_layout(self):
        config = ProvisionConfig()
        assert config.manifest == "Brewfile"
        assert config.shell.additions_source == "zshrc_additions"
        assert config.shell.rc_file == "~/.zshrc"
        assert config.git.defaults["init.defaultBranch"] == "main"
        assert config.git.defaults["pull.rebase"] == "false"
        assert config.git.defaults["core.autocrlf"] == "input"
        assert config.git.defaults["core.excludesfile"] == "~/.gitignore_global"
        assert config.ssh.key_path == "~/.ssh/id_ed25519"
        assert config.verify.tools == ["git", "node", "python3", "go", "terraform"]
        assert "~/Development/opensource" in config.directories


class TestLoadConfig:
    def test_no_file_gives_defaults(self, tmp_path: Path):
        config = load_config(start_dir=tmp_path)
        assert config == ProvisionConfig()

    def test_load_custom(self, custom_yml: Path):
        config = load_config(custom_yml)
        assert config.manifest == "Brewfile.work"
        assert config.shell.additions_source == "dotfiles/zshrc_additions"
        assert config.shell.rc_file == "~/.zshrc"  # untouched default
        assert config.git.prompt_identity is False
        assert config.git.defaults == {"init.defaultBranch": "trunk"}
        assert config.directories == ["~/Code"]
        assert config.verify.tools == ["git", "kubectl"]
        assert config.preferences.enabled is False

    def test_found_by_search(self, custom_yml: Path):
        nested = custom_yml.parent / "a" / "b"
        nested.mkdir(parents=True)
        config = load_config(start_dir=nested)
        assert config.manifest == "Brewfile.work"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("")
        assert load_config(path) == ProvisionConfig()

    def test_explicit_missing_path(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("manifest: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_invalid_types(self, tmp_path: Path):
        path = tmp_path / "provision.yml"
        path.write_text("verify:\n  tools: 42\n")
        with pytest.raises(ConfigError, match="Invalid provisioning configuration"):
            load_config(path)


class TestFindConfigFile:
    def test_not_found(self, tmp_path: Path):
        assert find_config_file(tmp_path) is None

    def test_found_in_start_dir(self, custom_yml: Path):
        assert find_config_file(custom_yml.parent) == custom_yml
