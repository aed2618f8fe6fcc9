"""
NamingSettings Tests
"""

import pytest

from codegraph_naming.config import CollisionPolicy, NamingSettings, RunMode, get_settings
from codegraph_naming.errors import ConfigurationError


class TestDefaults:
    def test_defaults(self):
        settings = NamingSettings()

        assert settings.mode == RunMode.APPLY
        assert settings.dry_run is False
        assert settings.collision_policy == CollisionPolicy.FIRST_WINS
        assert settings.discovery.extensions == [".php"]
        assert "vendor" in settings.discovery.exclude_dirs
        assert settings.arguments.min_named_arguments == 2
        assert settings.policies.repository_prefix == "Eloquent"

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestEnvironment:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CODEGRAPH_NAMING_MODE", "dry-run")
        monkeypatch.setenv("CODEGRAPH_NAMING_COLLISION_POLICY", "error")
        monkeypatch.setenv("CODEGRAPH_NAMING_ARGUMENTS__ENFORCE_NAMED", "false")

        settings = NamingSettings()

        assert settings.dry_run is True
        assert settings.collision_policy == CollisionPolicy.ERROR
        assert settings.arguments.enforce_named is False


class TestYaml:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "naming.yaml"
        path.write_text(
            "mode: dry-run\n"
            "collision_policy: last-wins\n"
            "policies:\n"
            "  disabled: [query]\n"
            "  repository_prefix: Doctrine\n"
            "arguments:\n"
            "  min_multiline_arguments: 4\n"
        )

        settings = NamingSettings.from_yaml(path)

        assert settings.mode == RunMode.DRY_RUN
        assert settings.collision_policy == CollisionPolicy.LAST_WINS
        assert settings.policies.disabled == ["query"]
        assert settings.policies.repository_prefix == "Doctrine"
        assert settings.arguments.min_multiline_arguments == 4

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "naming.yaml"
        path.write_text("")

        assert NamingSettings.from_yaml(path).mode == RunMode.APPLY

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            NamingSettings.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "naming.yaml"
        path.write_text("mode: [unclosed\n")

        with pytest.raises(ConfigurationError):
            NamingSettings.from_yaml(path)

    def test_root_must_be_mapping(self, tmp_path):
        path = tmp_path / "naming.yaml"
        path.write_text("- apply\n")

        with pytest.raises(ConfigurationError):
            NamingSettings.from_yaml(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "naming.yaml"
        path.write_text("mode: sometimes\n")

        with pytest.raises(ConfigurationError) as exc_info:
            NamingSettings.from_yaml(path)

        assert exc_info.value.code == "CONFIGURATION_ERROR"
