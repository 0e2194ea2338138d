"""Unit tests for settings validation and project config loading."""

import logging
from pathlib import Path

import pytest

from sapling.core.errors import ConfigError, InvalidSettingsError
from sapling.core.settings import apply_setting, is_valid, load_project_settings, settings_problems
from sapling.core.types import Settings


class TestValidation:
    def test_app_root_required(self):
        assert settings_problems(Settings()) == ["appRoot is not set"]

    def test_plain_settings_are_valid(self, settings):
        assert is_valid(settings)

    def test_alias_requires_a_config(self, settings):
        settings.use_alias = True
        assert settings_problems(settings) == ["useAlias requires tsConfig or webpackConfig"]

    def test_alias_config_must_parse(self, write_project):
        root = write_project({"tsconfig.json": "{ not json"})
        settings = Settings(app_root=str(root), use_alias=True, ts_config="tsconfig.json")
        assert settings_problems(settings) == ["no configured alias source could be parsed"]

    def test_missing_alias_config(self, tmp_path):
        settings = Settings(app_root=str(tmp_path), use_alias=True, ts_config="missing.json")
        assert not is_valid(settings)

    def test_one_parseable_source_is_enough(self, write_project):
        root = write_project({
            "tsconfig.json": '{"compilerOptions": {"paths": {"@/*": ["src/*"]}}}',
            "webpack.config.js": "module.exports = {",
        })
        settings = Settings(
            app_root=str(root),
            use_alias=True,
            ts_config="tsconfig.json",
            webpack_config="webpack.config.js",
        )
        assert is_valid(settings)


class TestApplySetting:
    def test_camel_case_key(self):
        updated = apply_setting(Settings(), "useAlias", True)
        assert updated.use_alias is True

    def test_original_untouched(self):
        original = Settings()
        apply_setting(original, "appRoot", "/app")
        assert original.app_root == ""

    def test_unknown_key(self):
        with pytest.raises(InvalidSettingsError, match="unknown setting 'colour'"):
            apply_setting(Settings(), "colour", "green")

    def test_bad_value(self):
        with pytest.raises(InvalidSettingsError):
            apply_setting(Settings(), "useAlias", "sometimes")


class TestProjectSettings:
    def test_missing_file_returns_base(self, tmp_path):
        base = Settings(app_root="/app")
        assert load_project_settings(tmp_path / "sapling.toml", base=base) == base

    def test_paths_relative_to_file(self, write_project):
        root = write_project({
            "sapling.toml": """
                [sapling]
                app_root = "web"
                use_alias = true
                tsConfig = "web/tsconfig.json"
            """,
        })
        settings = load_project_settings(root / "sapling.toml")
        assert settings.app_root == str((root / "web").resolve())
        assert settings.ts_config == str((root / "web" / "tsconfig.json").resolve())
        assert settings.use_alias is True

    def test_unknown_keys_are_ignored(self, write_project, caplog):
        root = write_project({
            "sapling.toml": """
                [sapling]
                theme = "dark"
                include_non_components = false
            """,
        })
        with caplog.at_level(logging.WARNING):
            settings = load_project_settings(root / "sapling.toml")
        assert settings.include_non_components is False
        assert "Ignoring unknown key 'theme'" in caplog.text

    def test_invalid_toml(self, write_project):
        root = write_project({"sapling.toml": "[sapling\n"})
        with pytest.raises(ConfigError):
            load_project_settings(root / "sapling.toml")
