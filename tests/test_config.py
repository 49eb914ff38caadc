"""Tests for config.py - defaults, TOML files, environment and overrides."""

import os

import pytest

from kinetix_tools.config import AnalysisConfig, ConventionConfig, load_config
from kinetix_tools.exceptions import InvalidConfigError, InvalidPathError, KinetixToolsError


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and project config files and KINETIX_* variables out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr("pathlib.Path.home", lambda: home)
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("KINETIX_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestDefaults:
    def test_default_values(self):
        config = load_config()
        assert config.strategy == "semantic"
        assert config.min_severity == "info"
        assert config.dal_file_filter is True
        assert config.conventions.low_level_accessors == ("GetSqlCommand", "GetBroker")
        assert config.conventions.test_project_suffix == ".Test"

    def test_worker_count(self):
        assert AnalysisConfig(workers=3).worker_count == 3
        assert 1 <= AnalysisConfig().worker_count <= 8

    def test_max_file_size_bytes(self):
        assert AnalysisConfig(max_file_size_mb=2).max_file_size_bytes == 2 * 1024 * 1024


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"workers": 0},
            {"max_file_size_mb": 0},
            {"strategy": "random"},
            {"min_severity": "fatal"},
            {"verbosity": "loud"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            AnalysisConfig(**kwargs)

    def test_empty_accessors(self):
        with pytest.raises(InvalidConfigError, match="low_level_accessors"):
            ConventionConfig(low_level_accessors=())

    def test_test_folder_must_stay_inside_project(self):
        with pytest.raises(InvalidConfigError):
            ConventionConfig(test_folder="../Elsewhere")


class TestFiles:
    def test_project_config(self, isolated_config):
        (isolated_config / "kinetix-tools.toml").write_text(
            'strategy = "syntax"\ndisabled_rules = ["KTA1103"]\n'
        )
        config = load_config()
        assert config.strategy == "syntax"
        assert config.disabled_rules == ("KTA1103",)

    def test_conventions_table(self, isolated_config):
        path = isolated_config / "custom.toml"
        path.write_text('[conventions]\ndal_prefix = "Repo"\nlow_level_accessors = ["OpenReader"]\n')
        conventions = load_config(config_file=path).conventions
        assert conventions.dal_prefix == "Repo"
        assert conventions.low_level_accessors == ("OpenReader",)
        assert conventions.dal_base_name == "AbstractDal"

    def test_conventions_merge_across_files(self, isolated_config):
        (isolated_config / "home" / ".kinetix-tools.toml").write_text('[conventions]\ndal_prefix = "Repo"\n')
        explicit = isolated_config / "explicit.toml"
        explicit.write_text('[conventions]\ntest_folder = "Generated"\n')
        conventions = load_config(config_file=explicit).conventions
        assert conventions.dal_prefix == "Repo"
        assert conventions.test_folder == "Generated"

    def test_missing_explicit_file(self, isolated_config):
        with pytest.raises(InvalidPathError):
            load_config(config_file=isolated_config / "missing.toml")

    def test_invalid_toml(self, isolated_config):
        path = isolated_config / "broken.toml"
        path.write_text("strategy = \n")
        with pytest.raises(KinetixToolsError, match="Invalid config file"):
            load_config(config_file=path)

    def test_unknown_key(self, isolated_config):
        path = isolated_config / "unknown.toml"
        path.write_text("colour = true\n")
        with pytest.raises(KinetixToolsError, match="Invalid configuration"):
            load_config(config_file=path)


class TestEnvironmentAndOverrides:
    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("KINETIX_WORKERS", "2")
        monkeypatch.setenv("KINETIX_DISABLED_RULES", "KTA1103, KTA1300")
        monkeypatch.setenv("KINETIX_DAL_FILE_FILTER", "off")
        config = load_config()
        assert config.workers == 2
        assert config.disabled_rules == ("KTA1103", "KTA1300")
        assert config.dal_file_filter is False

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("KINETIX_WORKERS", "many")
        with pytest.raises(KinetixToolsError, match="KINETIX_WORKERS"):
            load_config()

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("KINETIX_STRATEGY", "syntax")
        assert load_config(strategy="semantic").strategy == "semantic"

    def test_none_overrides_ignored(self, monkeypatch):
        monkeypatch.setenv("KINETIX_STRATEGY", "syntax")
        assert load_config(strategy=None).strategy == "syntax"

    def test_verbose_flag(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
