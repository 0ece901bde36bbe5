"""Tests for environment configuration"""
import pytest

from cartkit.config import Settings, load_settings, validate_storefront_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "STOREFRONT_API_VERSION",
        "STOREFRONT_COUNTRY",
        "STOREFRONT_LANGUAGE",
        "STOREFRONT_TIMEOUT",
        "CART_COOKIE_MAX_AGE",
        "CART_COOKIE_DOMAIN",
        "CART_COOKIE_PATH",
        "CART_COOKIE_SAMESITE",
        "CART_COOKIE_SECURE",
        "CART_COOKIE_HTTPONLY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    """Test unset variables fall back to defaults"""
    settings = load_settings()

    assert settings.storefront_api_version == "2023-04"
    assert settings.country == "US"
    assert settings.language == "EN"
    assert settings.timeout == 10.0
    assert settings.cookie_options() == {}


def test_cookie_options_from_env(clean_env):
    """Test only configured cookie attributes are kept"""
    clean_env.setenv("CART_COOKIE_MAX_AGE", "3600")
    clean_env.setenv("CART_COOKIE_PATH", "/")
    clean_env.setenv("CART_COOKIE_SECURE", "true")
    clean_env.setenv("CART_COOKIE_HTTPONLY", "0")

    options = load_settings().cookie_options()

    assert options == {"max_age": 3600, "path": "/", "secure": True, "http_only": False}


def test_bad_integer_ignored(clean_env):
    """Test a non-integer max age is ignored"""
    clean_env.setenv("CART_COOKIE_MAX_AGE", "forever")

    assert load_settings().cookie_max_age is None


def test_i18n_upper_cased(clean_env):
    clean_env.setenv("STOREFRONT_COUNTRY", "ca")
    clean_env.setenv("STOREFRONT_LANGUAGE", "fr")

    settings = load_settings()

    assert (settings.country, settings.language) == ("CA", "FR")


def test_api_url_keeps_scheme():
    settings = Settings(storefront_domain="http://localhost:8080/", storefront_api_version="2024-01")

    assert settings.storefront_api_url == "http://localhost:8080/api/2024-01/graphql.json"


def test_validate_storefront_config():
    """Test missing credentials are reported by name"""
    with pytest.raises(ValueError, match="STOREFRONT_API_TOKEN"):
        validate_storefront_config(Settings(storefront_domain="shop.example.com"))

    settings = Settings(storefront_domain="shop.example.com", storefront_api_token="t")
    assert validate_storefront_config(settings) is settings
