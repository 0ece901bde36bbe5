"""Storefront and cart cookie configuration from the environment."""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional

from dotenv import load_dotenv

from cartkit.logging import get_logger

logger = get_logger(__name__)

DEFAULT_API_VERSION = "2023-04"
DEFAULT_COUNTRY = "US"
DEFAULT_LANGUAGE = "EN"
DEFAULT_TIMEOUT = 10.0

STOREFRONT_ENV_REQUIREMENTS = ("STOREFRONT_DOMAIN", "STOREFRONT_API_TOKEN")


def _env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}")
        return None


@dataclass(frozen=True)
class Settings:
    """Runtime settings. Cookie attributes left as None are not rendered."""
    storefront_domain: str = ""
    storefront_api_token: str = ""
    storefront_api_version: str = DEFAULT_API_VERSION
    country: str = DEFAULT_COUNTRY
    language: str = DEFAULT_LANGUAGE
    timeout: float = DEFAULT_TIMEOUT

    cookie_max_age: Optional[int] = None
    cookie_domain: Optional[str] = None
    cookie_path: Optional[str] = None
    cookie_same_site: Optional[str] = None
    cookie_secure: Optional[bool] = None
    cookie_http_only: Optional[bool] = None

    @property
    def storefront_api_url(self) -> str:
        domain = self.storefront_domain.rstrip("/")
        if not domain.startswith(("http://", "https://")):
            domain = f"https://{domain}"
        return f"{domain}/api/{self.storefront_api_version}/graphql.json"

    def cookie_options(self) -> Dict[str, object]:
        """Cookie attributes that were explicitly configured."""
        options = {
            "max_age": self.cookie_max_age,
            "domain": self.cookie_domain,
            "path": self.cookie_path,
            "same_site": self.cookie_same_site,
            "secure": self.cookie_secure,
            "http_only": self.cookie_http_only,
        }
        return {key: value for key, value in options.items() if value is not None}


def load_settings() -> Settings:
    """Build settings from environment variables (and a .env file if present)."""
    load_dotenv()
    timeout = os.environ.get("STOREFRONT_TIMEOUT")
    return Settings(
        storefront_domain=os.environ.get("STOREFRONT_DOMAIN", ""),
        storefront_api_token=os.environ.get("STOREFRONT_API_TOKEN", ""),
        storefront_api_version=os.environ.get("STOREFRONT_API_VERSION", DEFAULT_API_VERSION),
        country=os.environ.get("STOREFRONT_COUNTRY", DEFAULT_COUNTRY).upper(),
        language=os.environ.get("STOREFRONT_LANGUAGE", DEFAULT_LANGUAGE).upper(),
        timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        cookie_max_age=_env_int("CART_COOKIE_MAX_AGE"),
        cookie_domain=os.environ.get("CART_COOKIE_DOMAIN") or None,
        cookie_path=os.environ.get("CART_COOKIE_PATH") or None,
        cookie_same_site=os.environ.get("CART_COOKIE_SAMESITE") or None,
        cookie_secure=_env_bool("CART_COOKIE_SECURE"),
        cookie_http_only=_env_bool("CART_COOKIE_HTTPONLY"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get settings (cached for the process lifetime)."""
    return load_settings()


def validate_storefront_config(settings: Settings) -> Settings:
    """
    Validate that the Storefront API is configured.

    Raises:
        ValueError: If a required variable is missing
    """
    missing = [
        env_name
        for env_name, value in zip(
            STOREFRONT_ENV_REQUIREMENTS,
            (settings.storefront_domain, settings.storefront_api_token),
        )
        if not value
    ]
    if missing:
        logger.error(f"Storefront API not configured. Missing: {missing}")
        raise ValueError(f"{' and '.join(missing)} must be set")
    return settings
