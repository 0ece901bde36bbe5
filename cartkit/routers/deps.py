"""
Shared Dependencies for Routers

Lazy-loaded singletons so importing the app never touches the network.
"""

from typing import Optional

from fastapi import Depends, Request

from cartkit.cart import CartHandler, create_cart_handler
from cartkit.config import Settings, get_settings
from cartkit.storefront import StorefrontClient

_storefront: Optional[StorefrontClient] = None


def get_storefront(settings: Settings = Depends(get_settings)) -> StorefrontClient:
    """Get or create the StorefrontClient singleton."""
    global _storefront
    if _storefront is None:
        _storefront = StorefrontClient.from_settings(settings)
    return _storefront


def get_cart_handler(
    request: Request,
    storefront: StorefrontClient = Depends(get_storefront),
    settings: Settings = Depends(get_settings),
) -> CartHandler:
    """Cart handler bound to the current request's cart cookie."""
    return create_cart_handler(
        storefront,
        request.headers,
        cookie_options=settings.cookie_options(),
    )


async def shutdown_services() -> None:
    """Close the shared storefront http client."""
    global _storefront
    if _storefront is not None:
        await _storefront.aclose()
        _storefront = None
