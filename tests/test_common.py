"""Tests for shared common modules: config and logging."""

import logging

import pytest

from src.common.config import CMSSettings, Settings, normalize_base_url
from src.common.logging import resolve_level, setup_logging

_CMS_ENV = (
    "STRAPI_BASE_URL",
    "NEXT_PUBLIC_STRAPI_BASE_URL",
    "STRAPI_API_TOKEN",
    "NEXT_PUBLIC_STRAPI_API_TOKEN",
    "ADMIN_EMAIL",
    "ADMIN_PASSWORD",
    "REQUEST_TIMEOUT",
    "POSTS_MANAGER_SESSION_FILE",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _CMS_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestNormalizeBaseUrl:
    def test_keeps_http(self):
        assert normalize_base_url("http://localhost:1337") == "http://localhost:1337"

    def test_adds_https(self):
        assert normalize_base_url("cms.example.com") == "https://cms.example.com"

    def test_strips_trailing_slash(self):
        assert normalize_base_url("https://cms.example.com/") == "https://cms.example.com"

    def test_empty_uses_default(self):
        assert normalize_base_url("") == "http://localhost:1337"


class TestSettings:
    def test_defaults(self, clean_env, tmp_path):
        settings = Settings.load(tmp_path / "missing.yaml")
        assert settings.cms.base_url == "http://localhost:1337"
        assert settings.cms.page_size == 10
        assert settings.cms.search_debounce_seconds == 0.5
        assert settings.cms.request_timeout is None
        assert settings.logging.level == "INFO"

    def test_yaml_file(self, clean_env, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "cms:\n  base_url: cms.example.com\n  page_size: 25\nlogging:\n  level: DEBUG\n",
            encoding="utf-8",
        )
        settings = Settings.load(path)
        assert settings.cms.base_url == "https://cms.example.com"
        assert settings.cms.page_size == 25
        assert settings.logging.level == "DEBUG"

    def test_env_overrides_yaml(self, clean_env, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("cms:\n  base_url: http://yaml.test\n", encoding="utf-8")
        clean_env.setenv("STRAPI_BASE_URL", "http://env.test")
        clean_env.setenv("STRAPI_API_TOKEN", "static")
        clean_env.setenv("ADMIN_EMAIL", "admin@example.com")
        clean_env.setenv("REQUEST_TIMEOUT", "12.5")

        settings = Settings.load(path)
        assert settings.cms.base_url == "http://env.test"
        assert settings.cms.api_token == "static"
        assert settings.cms.admin_email == "admin@example.com"
        assert settings.cms.request_timeout == 12.5

    def test_public_env_names(self, clean_env, tmp_path):
        clean_env.setenv("NEXT_PUBLIC_STRAPI_BASE_URL", "cms.public.test")
        clean_env.setenv("NEXT_PUBLIC_STRAPI_API_TOKEN", "public-token")
        settings = Settings.load(tmp_path / "missing.yaml")
        assert settings.cms.base_url == "https://cms.public.test"
        assert settings.cms.api_token == "public-token"

    def test_page_size_must_be_positive(self):
        with pytest.raises(Exception):
            CMSSettings(page_size=0)


class TestSetupLogging:
    def test_configures_once(self):
        logger = setup_logging(module_name="posts_manager.test_once")
        again = setup_logging(module_name="posts_manager.test_once")
        assert logger is again
        assert len(logger.handlers) == 1

    def test_level_by_name(self):
        logger = setup_logging("DEBUG", module_name="posts_manager.test_debug")
        assert logger.level == logging.DEBUG

    def test_unknown_level_name_falls_back(self):
        logger = setup_logging("LOUD", module_name="posts_manager.test_loud")
        assert logger.level == logging.INFO

    def test_resolve_level_accepts_names_and_numbers(self):
        assert resolve_level("warning") == logging.WARNING
        assert resolve_level(" debug ") == logging.DEBUG
        assert resolve_level(logging.ERROR) == logging.ERROR
