"""Storefront API client package."""
from .client import CACHE_NONE, I18nConfig, StorefrontClient

__all__ = [
    "CACHE_NONE",
    "I18nConfig",
    "StorefrontClient",
]
