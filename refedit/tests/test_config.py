"""Tests for configuration detection"""

import pytest

from refedit.core import config


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch, tmp_path):
    monkeypatch.delenv(config.ENV_HOME, raising=False)
    monkeypatch.setenv('XDG_DATA_HOME', str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)
    config.reset_cache()
    yield
    config.reset_cache()


class TestConfig:

    def test_defaults(self, tmp_path):
        assert config.get_base_dir() == tmp_path / "xdg" / "refedit"
        assert config.get_work_dir() == tmp_path / "xdg" / "refedit" / "work"
        assert config.get_repository_dir() == tmp_path / "xdg" / "refedit" / "repository"
        assert config.get_catalog_url() == config.DEFAULT_CATALOG_URL

    def test_env_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv(config.ENV_HOME, str(tmp_path / "home"))
        assert config.get_cache_dir() == tmp_path / "home" / "cache"

    def test_local_file(self, tmp_path):
        (tmp_path / config.LOCAL_CONFIG_FILE).write_text(
            "# local settings\n"
            f"base_dir={tmp_path / 'custom'}\n"
            "metadata_url = https://mirror.example.com/{id}.cva\n"
            f"repository_dir={tmp_path / 'softpaqs'}\n"
        )
        assert config.get_base_dir() == tmp_path / "custom"
        assert config.get_metadata_url() == "https://mirror.example.com/{id}.cva"
        assert config.get_repository_dir() == tmp_path / "softpaqs"
        assert config.get_setting('missing', 'x') == 'x'

    def test_env_overrides_local_base_dir(self, monkeypatch, tmp_path):
        (tmp_path / config.LOCAL_CONFIG_FILE).write_text(f"base_dir={tmp_path / 'custom'}\n")
        monkeypatch.setenv(config.ENV_HOME, str(tmp_path / "home"))
        assert config.get_base_dir() == tmp_path / "home"
